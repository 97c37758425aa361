"""
Analytics Service

Entry point for domain snapshots. Resolves the period, opens a session per
domain and runs the matching aggregator. The combined dashboard fans the five
domains out over a thread pool and only returns once every domain succeeded.
"""
from concurrent.futures import ThreadPoolExecutor, as_completed, TimeoutError as FuturesTimeout
from typing import Callable, Dict, Iterable, Optional

from sqlalchemy.orm import Session

from backoffice.config import get_settings
from backoffice.schemas.analytics import Domain, DomainSnapshot
from backoffice.services.analytics_repository import AnalyticsRepository, SqlAnalyticsRepository
from backoffice.services.base_aggregator import BaseAggregator
from backoffice.services.customer_analytics import CustomerAggregator
from backoffice.services.errors import InvalidInputError, UpstreamFailureError
from backoffice.services.financial_analytics import FinancialAggregator
from backoffice.services.inventory_analytics import InventoryAggregator
from backoffice.services.marketing_analytics import MarketingAggregator
from backoffice.services.sales_analytics import SalesAggregator
from backoffice.utils.logger import log
from backoffice.utils.periods import Period, resolve_period

AGGREGATORS = {
    Domain.SALES: SalesAggregator,
    Domain.CUSTOMER: CustomerAggregator,
    Domain.INVENTORY: InventoryAggregator,
    Domain.MARKETING: MarketingAggregator,
    Domain.FINANCIAL: FinancialAggregator,
}

# URL segments used by the dashboard routes
DOMAIN_ALIASES = {
    "customers": Domain.CUSTOMER,
    "finance": Domain.FINANCIAL,
}


def parse_domain(value) -> Domain:
    """Map a domain name or route alias to a Domain."""
    if isinstance(value, Domain):
        return value
    key = (value or "").strip().lower()
    if key in DOMAIN_ALIASES:
        return DOMAIN_ALIASES[key]
    try:
        return Domain(key)
    except ValueError:
        raise InvalidInputError(f"Unknown analytics domain: {value}")


def build_aggregator(domain: Domain, repository: AnalyticsRepository) -> BaseAggregator:
    return AGGREGATORS[domain](repository)


class AnalyticsService:
    def __init__(
        self,
        session_factory: Callable[[], Session],
        repository_factory: Callable[[Session], AnalyticsRepository] = SqlAnalyticsRepository,
        max_workers: Optional[int] = None,
        timeout: Optional[float] = None,
    ):
        settings = get_settings()
        self.session_factory = session_factory
        self.repository_factory = repository_factory
        self.max_workers = max_workers or settings.dashboard_max_workers
        self.timeout = timeout if timeout is not None else settings.dashboard_timeout_seconds

    def snapshot(self, domain, period_token: Optional[str] = None) -> DomainSnapshot:
        """Fresh snapshot for one domain."""
        return self.snapshot_for_period(parse_domain(domain), resolve_period(period_token))

    def snapshot_for_period(self, domain: Domain, period: Period) -> DomainSnapshot:
        db = self.session_factory()
        try:
            return build_aggregator(domain, self.repository_factory(db)).aggregate(period)
        finally:
            db.close()

    def dashboard(self, period_token: Optional[str] = None, domains: Optional[Iterable] = None) -> Dict[Domain, DomainSnapshot]:
        """
        Snapshots for several domains over one period, computed concurrently.

        Args:
            period_token: week / month / year (anything else: last 30 days)
            domains: Domains to include. Defaults to all five.

        Returns:
            Dict of Domain -> DomainSnapshot, in the requested order

        Raises:
            UpstreamFailureError: if any domain fails or the wait exceeds the
                configured timeout. No partial result is returned.
        """
        period = resolve_period(period_token)
        requested = list(dict.fromkeys(parse_domain(d) for d in (domains or list(Domain))))

        log.info(f"Building dashboard for {period.token}: {', '.join(d.value for d in requested)}")

        results: Dict[Domain, DomainSnapshot] = {}
        executor = ThreadPoolExecutor(
            max_workers=min(self.max_workers, len(requested)) or 1,
            thread_name_prefix="analytics",
        )
        futures = {
            executor.submit(self.snapshot_for_period, domain, period): domain
            for domain in requested
        }
        try:
            for future in as_completed(futures, timeout=self.timeout):
                results[futures[future]] = future.result()
        except FuturesTimeout as e:
            executor.shutdown(wait=False, cancel_futures=True)
            log.error(f"Dashboard aggregation timed out after {self.timeout}s")
            raise UpstreamFailureError("Failed to fetch dashboard analytics") from e
        except Exception:
            # Started domains finish and close their sessions before the error propagates
            executor.shutdown(wait=True, cancel_futures=True)
            raise

        executor.shutdown(wait=True)
        return {domain: results[domain] for domain in requested}
