"""
shipments/statistics.py -- Dashboard counts over shipments and couriers.

The four counts have no ordering dependency on one another, so they are
issued concurrently -- each blocking store call runs in a worker thread via
asyncio.to_thread -- and joined with asyncio.gather before a result is built.

All-or-nothing: if any single count fails, the whole call raises
AggregationFailed and the caller gets no partial numbers. The underlying
exception is logged here and never reaches the client.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime, timezone
from typing import TYPE_CHECKING, Optional

from core.errors import AggregationFailed
from shipments.models import ShipmentStatistics

if TYPE_CHECKING:
    from auth.store import UserStore
    from shipments.store import ShipmentStore

logger = logging.getLogger("courierdesk.shipments")


async def gather_statistics(
    user_store: "UserStore",
    shipment_store: "ShipmentStore",
    today: Optional[date] = None,
) -> ShipmentStatistics:
    """Compute total shipments, active couriers, created today and completed today.

    today defaults to the current UTC date and is resolved once, so all
    day-scoped counts agree on the same day even across midnight.
    """
    day = today or datetime.now(timezone.utc).date()
    results = await asyncio.gather(
        asyncio.to_thread(shipment_store.count_all),
        asyncio.to_thread(user_store.count_active_couriers),
        asyncio.to_thread(shipment_store.count_created_on, day),
        asyncio.to_thread(shipment_store.count_completed_on, day),
        return_exceptions=True,
    )
    failures = [r for r in results if isinstance(r, BaseException)]
    if failures:
        for exc in failures:
            logger.error("Statistics query failed", exc_info=exc)
        raise AggregationFailed()

    total, couriers, created_today, completed_today = results
    return ShipmentStatistics(
        total_shipments=total,
        active_couriers=couriers,
        shipments_today=created_today,
        completed_today=completed_today,
    )
