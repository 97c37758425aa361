"""
Base Aggregator Class

All domain aggregators inherit from this class. It owns the repository
handle and turns any query failure into an UpstreamFailureError so callers
never see a partial snapshot.
"""
from abc import ABC, abstractmethod

from backoffice.config import get_settings
from backoffice.schemas.analytics import Domain, DomainSnapshot
from backoffice.services.analytics_repository import AnalyticsRepository
from backoffice.services.errors import AnalyticsError, UpstreamFailureError
from backoffice.utils.logger import log
from backoffice.utils.periods import Period


class BaseAggregator(ABC):
    """
    Computes one domain's overview and breakdowns for a period.

    Subclasses set ``domain`` and implement ``_aggregate``.
    """

    domain: Domain

    def __init__(self, repository: AnalyticsRepository, top_n: int = None):
        self.repository = repository
        self.top_n = top_n or get_settings().top_n_limit

    def aggregate(self, period: Period) -> DomainSnapshot:
        """
        Build a fresh snapshot for the period.

        Raises:
            UpstreamFailureError: if any underlying query fails
        """
        try:
            snapshot = self._aggregate(period)
        except AnalyticsError:
            raise
        except Exception as e:
            log.error(f"{self.domain.value} aggregation failed for {period.token}: {e}")
            raise UpstreamFailureError(f"Failed to fetch {self.domain.value} analytics") from e

        log.debug(f"{self.domain.value} snapshot built for {period.token} ({period.start:%Y-%m-%d} to {period.end:%Y-%m-%d})")
        return snapshot

    @abstractmethod
    def _aggregate(self, period: Period) -> DomainSnapshot:
        pass
