"""FastAPI dependencies for injection."""
from fastapi import HTTPException, status

from services.aggietime import AggieTimeClient


class _ClientState:
    """Container for the application's AggieTime client."""

    client: AggieTimeClient | None = None


_state = _ClientState()


def set_aggietime_client(client: AggieTimeClient | None) -> None:
    """Set the AggieTime client used by request handlers."""
    _state.client = client


def get_aggietime_client() -> AggieTimeClient:
    """Dependency returning the AggieTime client, 503 until the app has started."""
    if _state.client is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="AggieTime client not initialized",
        )
    return _state.client


__all__ = [
    "get_aggietime_client",
    "set_aggietime_client",
]
