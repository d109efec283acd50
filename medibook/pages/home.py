"""Landing page stats."""
from typing import List

from medibook.errors import ApiError
from medibook.logging_config import get_logger

logger = get_logger(__name__)

FEATURED_SPECIALIZATIONS = 8


class HomePage:
    """Public landing page: doctor and specialization counts."""

    def __init__(self, api):
        self.api = api
        self.total_doctors = 0
        self.specializations: List[str] = []
        self.loading = True

    def load(self):
        try:
            self.total_doctors = len(self.api.list_doctors())
            self.specializations = self.api.list_specializations()
        except ApiError as e:
            logger.error("fetch_home_stats_failed", error=str(e))
        finally:
            self.loading = False

    @property
    def featured_specializations(self) -> List[str]:
        return self.specializations[:FEATURED_SPECIALIZATIONS]

    @property
    def more_link(self) -> str:
        """'View all' label, empty when every specialization is already shown."""
        if len(self.specializations) <= FEATURED_SPECIALIZATIONS:
            return ""
        return f"View all {len(self.specializations)} specializations →"
