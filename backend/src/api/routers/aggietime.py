"""AggieTime endpoints: user info, clocking in/out and status summaries."""
from typing import Any

from fastapi import APIRouter, Body, Depends, Query

from api.dependencies import get_aggietime_client
from schemas.aggietime import ClockRequest, PositionId, Shift, StatusLine, UserInfo
from services.aggietime import AggieTimeClient

router = APIRouter(tags=["aggietime"])


@router.get("/user", response_model=UserInfo)
async def get_user(
    client: AggieTimeClient = Depends(get_aggietime_client),
) -> UserInfo:
    """Get the logged in user and their positions."""
    return await client.get_user_info()


@router.post("/clock-in")
async def clock_in(
    data: ClockRequest | None = Body(default=None),
    client: AggieTimeClient = Depends(get_aggietime_client),
) -> Any:
    """
    Clock in to a position.

    `position_id` may be omitted when the user holds exactly one position.
    """
    return await client.clock_in(data.position_id if data else None)


@router.post("/clock-out")
async def clock_out(
    data: ClockRequest | None = Body(default=None),
    client: AggieTimeClient = Depends(get_aggietime_client),
) -> Any:
    """Clock out of a position."""
    return await client.clock_out(data.position_id if data else None)


@router.get("/shift", response_model=Shift | None)
async def get_current_shift(
    client: AggieTimeClient = Depends(get_aggietime_client),
) -> Shift | None:
    """Get the open shift, or null when the user is not clocked in."""
    return await client.current_shift()


@router.get("/status", response_model=StatusLine)
async def get_status(
    client: AggieTimeClient = Depends(get_aggietime_client),
) -> StatusLine:
    """Get the status line, e.g. `A01234567 - 1.25 hours`."""
    return await client.get_status_line()


@router.get("/last-week", response_model=StatusLine)
async def get_last_week(
    position_id: PositionId | None = Query(default=None, description="Position to summarize"),
    client: AggieTimeClient = Depends(get_aggietime_client),
) -> StatusLine:
    """Get hours worked since Monday of the current week."""
    return await client.last_week(position_id)
