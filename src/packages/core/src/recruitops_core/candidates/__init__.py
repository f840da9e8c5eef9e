"""Candidate records touched by bulk actions."""
from recruitops_core.candidates.repo import Candidate, CandidateRepository

__all__ = ["Candidate", "CandidateRepository"]
