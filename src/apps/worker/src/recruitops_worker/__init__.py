"""RQ worker for bulk action jobs."""
