"""
Unit tests for shipments/store.py and shipments/statistics.py.

Covers:
  - count_all / count_created_on / count_completed_on with fixed days
  - gather_statistics() joins the four counts
  - Any failing count -> AggregationFailed, no partial result
"""

import asyncio
from datetime import date

import pytest

from auth.models import ROLE_ADMIN, STATUS_INACTIVE
from conftest import make_user
from core.errors import AggregationFailed
from shipments.models import STATUS_CANCELLED, STATUS_DELIVERED, STATUS_IN_TRANSIT, STATUS_PENDING, Shipment
from shipments.statistics import gather_statistics

DAY = date(2026, 3, 15)
TODAY_MORNING = "2026-03-15T08:00:00+00:00"
TODAY_EVENING = "2026-03-15T19:30:00+00:00"
YESTERDAY = "2026-03-14T12:00:00+00:00"


def _shipment(n: int, status: str = STATUS_PENDING, created_at: str = "", updated_at: str = "") -> Shipment:
    return Shipment(
        tracking_number=f"TRK{n:06d}",
        sender="Warehouse A",
        recipient=f"Customer {n}",
        recipient_address=f"{n} Main Street",
        recipient_phone="0800-000",
        status=status,
        weight=1.5,
        created_at=created_at,
        updated_at=updated_at,
    )


@pytest.fixture
def loaded(shipment_store):
    rows = [
        _shipment(1, STATUS_PENDING, TODAY_MORNING),
        _shipment(2, STATUS_IN_TRANSIT, TODAY_MORNING, TODAY_EVENING),
        _shipment(3, STATUS_DELIVERED, YESTERDAY, TODAY_EVENING),
        _shipment(4, STATUS_DELIVERED, YESTERDAY, YESTERDAY),
        _shipment(5, STATUS_DELIVERED, TODAY_MORNING, TODAY_EVENING),
        _shipment(6, STATUS_CANCELLED, YESTERDAY, TODAY_EVENING),
    ]
    for row in rows:
        shipment_store.create_shipment(row)
    return shipment_store


class TestShipmentStore:
    def test_count_all(self, loaded):
        assert loaded.count_all() == 6

    def test_count_created_on(self, loaded):
        assert loaded.count_created_on(DAY) == 3
        assert loaded.count_created_on(date(2026, 3, 14)) == 3
        assert loaded.count_created_on(date(2026, 1, 1)) == 0

    def test_count_completed_on_only_counts_delivered(self, loaded):
        assert loaded.count_completed_on(DAY) == 2
        assert loaded.count_completed_on(date(2026, 3, 14)) == 1

    def test_default_day_is_today(self, shipment_store):
        shipment_store.create_shipment(_shipment(1, STATUS_DELIVERED))
        assert shipment_store.count_created_on() == 1
        assert shipment_store.count_completed_on() == 1

    def test_updated_at_defaults_to_created_at(self, shipment_store):
        sid = shipment_store.create_shipment(_shipment(1, created_at=YESTERDAY))
        stored = shipment_store.get_shipment(sid)
        assert stored.created_at == stored.updated_at == YESTERDAY
        assert stored.tracking_number == "TRK000001"

    def test_unknown_status_rejected(self, shipment_store):
        with pytest.raises(ValueError):
            shipment_store.create_shipment(_shipment(1, status="lost"))

    def test_empty_store_counts_zero(self, shipment_store):
        assert shipment_store.count_all() == 0
        assert shipment_store.count_created_on(DAY) == 0
        assert shipment_store.count_completed_on(DAY) == 0


class TestGatherStatistics:
    def test_all_four_counts(self, loaded, user_store):
        user_store.create_user(make_user("admin", role=ROLE_ADMIN))
        user_store.create_user(make_user("c1"))
        user_store.create_user(make_user("c2"))
        user_store.create_user(make_user("c3", status=STATUS_INACTIVE))

        stats = asyncio.run(gather_statistics(user_store, loaded, today=DAY))

        assert stats.total_shipments == 6
        assert stats.active_couriers == 2
        assert stats.shipments_today == 3
        assert stats.completed_today == 2

    def test_empty_stores(self, shipment_store, user_store):
        stats = asyncio.run(gather_statistics(user_store, shipment_store))
        assert (stats.total_shipments, stats.active_couriers, stats.shipments_today, stats.completed_today) == (
            0,
            0,
            0,
            0,
        )

    def test_one_failing_count_fails_the_whole_call(self, loaded, user_store, monkeypatch, caplog):
        def boom(*args, **kwargs):
            raise RuntimeError("database is locked")

        monkeypatch.setattr(loaded, "count_completed_on", boom)
        with pytest.raises(AggregationFailed) as excinfo:
            asyncio.run(gather_statistics(user_store, loaded, today=DAY))
        assert "locked" not in excinfo.value.message
        assert "Statistics query failed" in caplog.text
