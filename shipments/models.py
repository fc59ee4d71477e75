"""
shipments/models.py -- Domain dataclasses for shipments and their aggregates.

These are pure data containers with zero logic. Persistence lives in
shipments/store.py; the dashboard counts are computed in
shipments/statistics.py.
"""

from dataclasses import dataclass
from typing import Optional

STATUS_PENDING = "pending"
STATUS_PROCESSING = "processing"
STATUS_IN_TRANSIT = "in_transit"
STATUS_DELIVERED = "delivered"
STATUS_CANCELLED = "cancelled"

SHIPMENT_STATUSES: tuple[str, ...] = (
    STATUS_PENDING,
    STATUS_PROCESSING,
    STATUS_IN_TRANSIT,
    STATUS_DELIVERED,
    STATUS_CANCELLED,
)

# The status that counts as "completed" for the daily statistics.
COMPLETED_STATUS = STATUS_DELIVERED


@dataclass
class Shipment:
    """A parcel handed to the operation for delivery.

    courier_id references users.id of the courier assigned to it, or None
    while unassigned. id is None before the record is written to the database.
    """

    tracking_number: str
    sender: str
    recipient: str
    recipient_address: str
    recipient_phone: str
    courier_id: Optional[int] = None
    status: str = STATUS_PENDING
    weight: Optional[float] = None  # kilograms
    notes: Optional[str] = None
    id: Optional[int] = None
    created_at: str = ""  # ISO 8601, set by store on insert unless given
    updated_at: str = ""  # ISO 8601


@dataclass(frozen=True)
class ShipmentStatistics:
    """The four dashboard counts. All values are non-negative."""

    total_shipments: int
    active_couriers: int
    shipments_today: int
    completed_today: int
