"""Process-wide services for request handlers."""
from functools import lru_cache

from recruitops_api.settings import get_settings
from recruitops_core.bulk import BulkServices, build_services


@lru_cache
def get_services() -> BulkServices:
    """Build the bulk action services once per API process."""
    return build_services(get_settings().bulk_config())
