"""
api/routes/statistics.py -- Aggregated shipment metrics for the dashboard.

Read-only. Any authenticated principal may call it -- couriers see the same
numbers as administrators.
"""

from fastapi import APIRouter, Depends, Request

from api.models import StatisticsOut, StatisticsResponse
from auth.dependencies import get_principal
from shipments.statistics import gather_statistics

# Auth policy:
# - GET /api/statistics: requires auth -- router-level dependency, no role check
router = APIRouter(dependencies=[Depends(get_principal)])


@router.get("/statistics", response_model=StatisticsResponse)
async def get_statistics(request: Request) -> StatisticsResponse:
    """Return the four dashboard counts.

    Response data:
      totalShipments  -- every shipment on record
      activeCouriers  -- courier accounts with status active
      shipmentsToday  -- shipments created today (UTC)
      completedToday  -- shipments delivered today (UTC)
    """
    stats = await gather_statistics(request.app.state.user_store, request.app.state.shipment_store)
    return StatisticsResponse(data=StatisticsOut.from_statistics(stats))
