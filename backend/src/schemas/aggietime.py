"""Pydantic schemas for AggieTime payloads."""
from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, field_validator

# Positions are opaque identifiers; the remote service uses integers.
PositionId = int | str


class UserInfo(BaseModel):
    """User record returned by the user info endpoint."""

    # Keep every remote field; the open shift path template may reference any of them
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    anumber: str
    positions: list[PositionId] = []


class Shift(BaseModel):
    """An open (not yet clocked out) work session."""

    model_config = ConfigDict(extra="allow")

    start: datetime | None = None

    @field_validator("start")
    @classmethod
    def assume_utc(cls, v: datetime | None) -> datetime | None:
        """Treat naive timestamps as UTC."""
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v


class WeeklySummary(BaseModel):
    """Hours summary for a position over a date range."""

    model_config = ConfigDict(extra="allow")

    undisputed_hours: int | float


class StatusLine(BaseModel):
    """Human readable status, e.g. `A01234567 - 1.50 hours`."""

    status: str


class ClockRequest(BaseModel):
    """Body for clock in/out requests."""

    position_id: PositionId | None = None
