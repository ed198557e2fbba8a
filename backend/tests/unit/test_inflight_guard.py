# backend/tests/unit/test_inflight_guard.py
"""
Unit tests for in-flight call deduplication.
"""
import pytest

from stockwatch.services.guard import InFlightGuard, InFlightKind


class TestInFlightGuard:
    def test_second_acquire_is_refused(self):
        guard = InFlightGuard()
        assert guard.try_acquire(InFlightKind.NEWS_ANALYSIS, "AAPL") is True
        assert guard.try_acquire(InFlightKind.NEWS_ANALYSIS, "aapl") is False

    def test_kinds_are_independent(self):
        guard = InFlightGuard()
        assert guard.try_acquire(InFlightKind.NEWS_ANALYSIS, "AAPL")
        assert guard.try_acquire(InFlightKind.FINANCIAL_EVENTS, "AAPL")
        assert guard.in_flight(InFlightKind.NEWS_ANALYSIS) == {"AAPL"}

    def test_release_allows_reacquire(self):
        guard = InFlightGuard()
        guard.try_acquire(InFlightKind.NEWS_ANALYSIS, "AAPL")
        guard.release(InFlightKind.NEWS_ANALYSIS, "AAPL")
        assert guard.is_in_flight(InFlightKind.NEWS_ANALYSIS, "AAPL") is False
        assert guard.try_acquire(InFlightKind.NEWS_ANALYSIS, "AAPL") is True

    def test_release_of_unheld_key_is_noop(self):
        guard = InFlightGuard()
        guard.release(InFlightKind.FINANCIAL_EVENTS, "AAPL")
        assert guard.in_flight(InFlightKind.FINANCIAL_EVENTS) == set()

    def test_claim_releases_after_exception(self):
        guard = InFlightGuard()
        with pytest.raises(RuntimeError):
            with guard.claim(InFlightKind.NEWS_ANALYSIS, "AAPL") as acquired:
                assert acquired is True
                assert guard.is_in_flight(InFlightKind.NEWS_ANALYSIS, "AAPL")
                raise RuntimeError("upstream failed")
        assert guard.is_in_flight(InFlightKind.NEWS_ANALYSIS, "AAPL") is False

    def test_refused_claim_keeps_holder(self):
        guard = InFlightGuard()
        with guard.claim(InFlightKind.NEWS_ANALYSIS, "AAPL") as first:
            with guard.claim(InFlightKind.NEWS_ANALYSIS, "AAPL") as second:
                assert first is True
                assert second is False
            assert guard.is_in_flight(InFlightKind.NEWS_ANALYSIS, "AAPL")
        assert guard.is_in_flight(InFlightKind.NEWS_ANALYSIS, "AAPL") is False
