"""Shared fixtures for core tests."""
import httpx
import pytest

from recruitops_core.candidates import CandidateRepository
from recruitops_core.generation import GenerationClient
from recruitops_core.jobs import JobStore
from recruitops_core.templates import TemplateRepository


@pytest.fixture
def sqlite_path(tmp_path) -> str:
    return str(tmp_path / "recruitops.db")


@pytest.fixture
def store(sqlite_path) -> JobStore:
    return JobStore(sqlite_path)


@pytest.fixture
def candidates(sqlite_path) -> CandidateRepository:
    return CandidateRepository(sqlite_path)


@pytest.fixture
def templates(sqlite_path) -> TemplateRepository:
    return TemplateRepository(sqlite_path)


@pytest.fixture
def seeded_candidates(candidates) -> list[str]:
    """Ten candidates; the first one is already tagged bulk_contacted."""
    ids = []
    for i in range(10):
        c = candidates.create(
            full_name=f"Person{i} Example",
            email=f"p{i}@example.com",
            title="Engineer",
            company=f"Company {i}",
            candidate_id=f"cand-{i}",
        )
        ids.append(c.id)
    candidates.add_tag(ids[0], "bulk_contacted")
    return ids


def failing_generation() -> GenerationClient:
    """Generation client whose provider errors on every call."""
    transport = httpx.MockTransport(lambda request: httpx.Response(500, json={"error": "down"}))
    return GenerationClient(provider="openai", api_key="test-key", transport=transport)


def echo_generation(text: str = "Generated message") -> GenerationClient:
    """Generation client whose provider always answers ``text``."""
    transport = httpx.MockTransport(
        lambda request: httpx.Response(200, json={"choices": [{"message": {"content": text}}]})
    )
    return GenerationClient(provider="openai", api_key="test-key", transport=transport)


@pytest.fixture
def broken_generation() -> GenerationClient:
    return failing_generation()


@pytest.fixture
def working_generation() -> GenerationClient:
    return echo_generation()
