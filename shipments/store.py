"""
shipments/store.py -- SQLAlchemy-backed persistence layer for shipments.

Uses SQLAlchemy Core (not ORM) so the dataclasses in shipments/models.py
remain the authoritative domain representation. Swapping SQLite for
PostgreSQL is a connection string change, not a rewrite.

Pattern: Repository + Data Mapper. ShipmentStore is the repository; the
_row_to_shipment function is the mapper.

The HTTP API only reads aggregate counts from this store. create_shipment()
and get_shipment() exist for seeding and tests; the shipment workflow itself
(assignment, status transitions) is handled elsewhere.

"Today" is a UTC calendar day. Timestamps are stored as ISO 8601 UTC strings,
so a day match is a prefix match on the first ten characters (YYYY-MM-DD).

Security: all queries use bound parameters. No f-strings in SQL.
"""

from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    Column,
    Float,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    func,
    select,
)
from sqlalchemy.engine import Engine

from core.config import get_settings
from core.db import make_engine
from shipments.models import COMPLETED_STATUS, SHIPMENT_STATUSES, STATUS_PENDING, Shipment

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_shipments = Table(
    "shipments",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("tracking_number", String(64), nullable=False, unique=True),
    Column("sender", String(255), nullable=False),
    Column("recipient", String(255), nullable=False),
    Column("recipient_address", Text, nullable=False),
    Column("recipient_phone", String(50), nullable=False),
    Column("courier_id", Integer),  # users.id; lives in the user store's table
    Column("status", String(20), nullable=False, server_default=STATUS_PENDING),
    Column("weight", Float),
    Column("notes", Text),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
    CheckConstraint(
        "status IN ('pending', 'processing', 'in_transit', 'delivered', 'cancelled')",
        name="ck_shipments_status",
    ),
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _today_utc() -> date:
    return datetime.now(timezone.utc).date()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class ShipmentStore:
    """Repository for Shipment entities.

    Usage:
        store = ShipmentStore()                               # default DATABASE_URL
        store = ShipmentStore("postgresql://user:pw@host/db")
        store.create_shipment(shipment)
        store.count_created_on(date.today())
        store.close()
    """

    def __init__(self, db_url: Optional[str] = None) -> None:
        self.engine: Engine = make_engine(db_url or get_settings().database_url)
        metadata.create_all(self.engine)

    def create_shipment(self, shipment: Shipment) -> int:
        """Insert a shipment and return its ID.

        created_at / updated_at are taken from the dataclass when set (used to
        load historical data) and default to now otherwise.
        """
        if shipment.status not in SHIPMENT_STATUSES:
            raise ValueError(f"Unknown shipment status: {shipment.status!r}")
        now = _now_iso()
        created_at = shipment.created_at or now
        with self.engine.connect() as conn:
            result = conn.execute(
                _shipments.insert().values(
                    tracking_number=shipment.tracking_number,
                    sender=shipment.sender,
                    recipient=shipment.recipient,
                    recipient_address=shipment.recipient_address,
                    recipient_phone=shipment.recipient_phone,
                    courier_id=shipment.courier_id,
                    status=shipment.status,
                    weight=shipment.weight,
                    notes=shipment.notes,
                    created_at=created_at,
                    updated_at=shipment.updated_at or created_at,
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def get_shipment(self, shipment_id: int) -> Optional[Shipment]:
        with self.engine.connect() as conn:
            row = conn.execute(_shipments.select().where(_shipments.c.id == shipment_id)).fetchone()
        return _row_to_shipment(row) if row is not None else None

    # ------------------------------------------------------------------
    # Aggregates
    # ------------------------------------------------------------------

    def count_all(self) -> int:
        """Return the total number of shipments ever recorded."""
        with self.engine.connect() as conn:
            result = conn.execute(select(func.count()).select_from(_shipments)).scalar()
        return result or 0

    def count_created_on(self, day: Optional[date] = None) -> int:
        """Return how many shipments were created on the given UTC day (default today)."""
        prefix = (day or _today_utc()).isoformat()
        with self.engine.connect() as conn:
            result = conn.execute(
                select(func.count()).select_from(_shipments).where(func.substr(_shipments.c.created_at, 1, 10) == prefix)
            ).scalar()
        return result or 0

    def count_completed_on(self, day: Optional[date] = None) -> int:
        """Return how many shipments reached the completed status on the given UTC day.

        The completion day is the day of the row's last update while in the
        completed status.
        """
        prefix = (day or _today_utc()).isoformat()
        with self.engine.connect() as conn:
            result = conn.execute(
                select(func.count())
                .select_from(_shipments)
                .where(
                    (_shipments.c.status == COMPLETED_STATUS)
                    & (func.substr(_shipments.c.updated_at, 1, 10) == prefix)
                )
            ).scalar()
        return result or 0

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_shipment(row) -> Shipment:
    return Shipment(
        id=row.id,
        tracking_number=row.tracking_number,
        sender=row.sender,
        recipient=row.recipient,
        recipient_address=row.recipient_address,
        recipient_phone=row.recipient_phone,
        courier_id=row.courier_id,
        status=row.status,
        weight=row.weight,
        notes=row.notes,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
