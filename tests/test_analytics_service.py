"""
Dashboard fan-out: all domains concurrently, all or nothing.
"""
import threading
from datetime import datetime

import pytest

from backoffice.schemas.analytics import Domain
from backoffice.services.analytics_service import AnalyticsService, parse_domain
from backoffice.services.errors import InvalidInputError, UpstreamFailureError

from fakes import FakeRepository, FakeSession


class SessionTracker:
    """Session factory that records every session it hands out."""

    def __init__(self):
        self.sessions = []
        self._lock = threading.Lock()

    def __call__(self):
        session = FakeSession()
        with self._lock:
            self.sessions.append(session)
        return session


def _service(repo_factory, **kwargs):
    tracker = SessionTracker()
    return AnalyticsService(tracker, repository_factory=repo_factory, **kwargs), tracker


class TestParseDomain:

    @pytest.mark.parametrize("value,domain", [
        ("sales", Domain.SALES),
        ("Customer", Domain.CUSTOMER),
        ("customers", Domain.CUSTOMER),
        ("finance", Domain.FINANCIAL),
        (" inventory ", Domain.INVENTORY),
        (Domain.MARKETING, Domain.MARKETING),
    ])
    def test_known_names(self, value, domain):
        assert parse_domain(value) == domain

    @pytest.mark.parametrize("value", ["orders", "", None])
    def test_unknown_names(self, value):
        with pytest.raises(InvalidInputError):
            parse_domain(value)


class TestDashboard:

    def test_all_domains_in_order(self):
        service, tracker = _service(lambda db: FakeRepository(order_totals=(150.0, 3, 50.0)))
        result = service.dashboard("week")

        assert list(result) == list(Domain)
        assert result[Domain.SALES].overview.total_sales == 150.0
        assert all(snapshot.period.token == "week" for snapshot in result.values())

    def test_domains_share_one_period(self):
        service, _ = _service(lambda db: FakeRepository())
        result = service.dashboard("month")

        periods = {snapshot.period for snapshot in result.values()}
        assert len(periods) == 1

    def test_one_session_per_domain(self):
        service, tracker = _service(lambda db: FakeRepository())
        service.dashboard("week")

        assert len(tracker.sessions) == len(Domain)
        assert len({id(s) for s in tracker.sessions}) == len(Domain)
        assert all(s.closed for s in tracker.sessions)

    def test_subset_of_domains(self):
        service, tracker = _service(lambda db: FakeRepository())
        result = service.dashboard("week", ["finance", "sales", "sales"])

        assert list(result) == [Domain.FINANCIAL, Domain.SALES]
        assert len(tracker.sessions) == 2

    def test_unknown_domain_is_rejected_before_any_work(self):
        service, tracker = _service(lambda db: FakeRepository())
        with pytest.raises(InvalidInputError):
            service.dashboard("week", ["sales", "weather"])
        assert tracker.sessions == []

    def test_one_failing_domain_fails_the_dashboard(self):
        # Only the financial aggregator touches sum_expenses
        service, tracker = _service(lambda db: FakeRepository(fail_on={"sum_expenses"}))
        with pytest.raises(UpstreamFailureError) as exc:
            service.dashboard("week")

        assert exc.value.message == "Failed to fetch financial analytics"
        assert len(tracker.sessions) == len(Domain)
        assert all(s.closed for s in tracker.sessions)

    def test_failure_waits_for_slower_domains(self):
        # Financial fails on its second query; the others are still querying
        service, tracker = _service(lambda db: FakeRepository(fail_on={"sum_expenses"}, delay=0.3))
        with pytest.raises(UpstreamFailureError):
            service.dashboard("week")

        assert len(tracker.sessions) == len(Domain)
        assert all(s.closed for s in tracker.sessions)

    def test_timeout(self):
        service, _ = _service(lambda db: FakeRepository(delay=0.5), timeout=0.05)
        with pytest.raises(UpstreamFailureError) as exc:
            service.dashboard("week", ["sales"])

        assert exc.value.message == "Failed to fetch dashboard analytics"

    def test_runs_concurrently(self):
        barrier = threading.Barrier(len(Domain), timeout=5)

        class BarrierRepository(FakeRepository):
            # Every domain's first query waits until all five are in flight
            def _get(self, name, *args):
                if not self.calls:
                    barrier.wait()
                return super()._get(name, *args)

        service, _ = _service(lambda db: BarrierRepository(), max_workers=5)
        result = service.dashboard("week")
        assert len(result) == len(Domain)


class TestSnapshot:

    def test_single_domain(self):
        service, tracker = _service(lambda db: FakeRepository(count_products=4))
        snapshot = service.snapshot("inventory", "year")

        assert snapshot.domain == Domain.INVENTORY
        assert snapshot.period.token == "year"
        assert snapshot.overview.total_products == 4
        assert tracker.sessions[0].closed

    def test_session_closed_on_failure(self):
        service, tracker = _service(lambda db: FakeRepository(fail_on={"*"}))
        with pytest.raises(UpstreamFailureError):
            service.snapshot("sales", "week")
        assert tracker.sessions[0].closed

    def test_sql_dashboard(self, session_factory, seed_store):
        seed_store(datetime.utcnow())
        result = AnalyticsService(session_factory).dashboard("week")

        assert result[Domain.INVENTORY].overview.total_products == 3
        assert result[Domain.CUSTOMER].overview.total_customers == 3
        assert result[Domain.SALES].overview.total_sales == 150.0
