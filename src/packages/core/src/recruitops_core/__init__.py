"""Recruiting operations core: bulk action jobs and their executors."""
