"""
Client facade for the AggieTime time-tracking service.

All business rules live in the remote service. This module shapes requests,
replays the CSRF token issued at login, and caches a few short-lived values.
"""
import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import httpx

from core.cache import Cache, MemoryCache
from core.config import Settings
from core.exceptions import AmbiguousPositionError, CsrfTokenNotFoundError
from core.paths import PathTemplate
from core.retry import with_exponential_retry
from schemas.aggietime import PositionId, Shift, StatusLine, UserInfo, WeeklySummary

logger = logging.getLogger(__name__)

CSRF_COOKIE_NAME = "XSRF-TOKEN"
CSRF_HEADER_NAME = "X-XSRF-TOKEN"

# Cache keys
USER_KEY = "user"
CSRF_KEY = "aggietime-csrf"
STATUS_LINE_KEY = "status_line"
# Not scoped by position or week: a cached summary is reused for any
# position until it expires.
PAST_WEEK_KEY = "past_week"
CACHE_KEYS = (USER_KEY, STATUS_LINE_KEY, PAST_WEEK_KEY)


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def build_http_client(settings: Settings) -> httpx.AsyncClient:
    """Create an HTTP client for the configured service, seeded with session cookies."""
    cookies = httpx.Cookies()
    for name, value in settings.aggietime_cookies.items():
        cookies.set(name, value, domain=settings.aggietime_domain)
    return httpx.AsyncClient(
        base_url=settings.aggietime_uri,
        cookies=cookies,
        timeout=settings.request_timeout_seconds,
    )


class AggieTimeClient:
    """
    Async facade over the AggieTime HTTP API.

    Each instance owns its cache, so separate clients never share state unless
    they are given the same (e.g. Redis backed) cache.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        http_client: httpx.AsyncClient | None = None,
        cache: Cache | None = None,
        clock: Callable[[], datetime] = utc_now,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._settings = settings
        self._owns_http = http_client is None
        self._http = http_client if http_client is not None else build_http_client(settings)
        self._cache: Cache = cache if cache is not None else MemoryCache()
        # Per instance: the token is only valid with the cookie in this jar
        self._csrf_cache = MemoryCache()
        self._clock = clock
        self._sleep = sleep

        self._user_path = PathTemplate(settings.user_path)
        self._clockin_path = PathTemplate(settings.clockin_path)
        self._clockout_path = PathTemplate(settings.clockout_path)
        self._open_shift_path = PathTemplate(settings.open_shift_path)
        self._summary_path = PathTemplate(settings.summary_path)

    async def __aenter__(self) -> "AggieTimeClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_http:
            await self._http.aclose()

    async def clear_cache(self) -> None:
        """Forget every cached value, including the CSRF token."""
        for key in CACHE_KEYS:
            await self._cache.remove(key)
        await self._csrf_cache.remove(CSRF_KEY)

    # ------------------------------------------------------------------
    # User info / CSRF
    # ------------------------------------------------------------------

    async def get_user_info(self) -> UserInfo:
        """
        Return the current user, fetching it (with retries) when not cached.

        A fresh fetch also captures the CSRF token from the cookie jar.

        Raises:
            The last error once every attempt failed, e.g. `httpx.HTTPError`,
            `CsrfTokenNotFoundError` or a `pydantic.ValidationError`.
        """
        cached = await self._cache.get(USER_KEY)
        if cached is not None:
            return UserInfo.model_validate(cached)

        user = await with_exponential_retry(
            self._fetch_user_info,
            attempts=self._settings.retry_attempts,
            base_delay=self._settings.retry_base_delay_seconds,
            max_delay=self._settings.retry_max_delay_seconds,
            sleep=self._sleep,
        )
        await self._cache.set(
            USER_KEY,
            user.model_dump(mode="json"),
            ttl=self._settings.user_cache_ttl_seconds,
        )
        logger.info(
            "aggietime_user_fetched",
            extra={"anumber": user.anumber, "positions": len(user.positions)},
        )
        return user

    async def _fetch_user_info(self) -> UserInfo:
        response = await self._http.get(self._user_path.render())
        response.raise_for_status()
        user = UserInfo.model_validate(response.json())
        await self._csrf_cache.set(CSRF_KEY, self._read_csrf_cookie())
        return user

    def _read_csrf_cookie(self) -> str:
        """Find the XSRF-TOKEN cookie for the service domain in the cookie jar."""
        domain = self._settings.aggietime_domain.lstrip(".")
        for cookie in self._http.cookies.jar:
            if cookie.name == CSRF_COOKIE_NAME and cookie.domain.lstrip(".") == domain:
                return cookie.value or ""
        raise CsrfTokenNotFoundError(self._settings.aggietime_domain, CSRF_COOKIE_NAME)

    async def _csrf_token(self) -> str:
        token = await self._csrf_cache.get(CSRF_KEY)
        if token is None:
            # Token only arrives with a fresh user info fetch; a user cached by
            # another process does not put the cookie in this jar
            await self._cache.remove(USER_KEY)
            await self.get_user_info()
            token = await self._csrf_cache.get(CSRF_KEY)
        if token is None:
            raise CsrfTokenNotFoundError(self._settings.aggietime_domain, CSRF_COOKIE_NAME)
        return token

    async def resolve_position(self, position_id: PositionId | None = None) -> PositionId:
        """
        Return `position_id` if given, else the user's only position.

        Explicit ids are not checked against the user's positions.

        Raises:
            AmbiguousPositionError: If no id is given and the user does not hold
                exactly one position.
        """
        if position_id is not None:
            return position_id
        user = await self.get_user_info()
        if len(user.positions) != 1:
            raise AmbiguousPositionError(len(user.positions))
        return user.positions[0]

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    async def clock_in(self, position_id: PositionId | None = None) -> Any:
        """Clock in to a position and return the service's response body."""
        return await self._clock_mutation("clock_in", self._clockin_path, position_id)

    async def clock_out(self, position_id: PositionId | None = None) -> Any:
        """Clock out of a position and return the service's response body."""
        return await self._clock_mutation("clock_out", self._clockout_path, position_id)

    async def _clock_mutation(
        self, action: str, path: PathTemplate, position_id: PositionId | None,
    ) -> Any:
        position_id = await self.resolve_position(position_id)
        csrf_token = await self._csrf_token()

        response = await self._http.post(
            path.render(position_id=position_id),
            json={"comment": ""},
            headers={CSRF_HEADER_NAME: csrf_token},
        )
        response.raise_for_status()

        # Shift state changed
        await self._cache.remove(STATUS_LINE_KEY)
        logger.info(
            "aggietime_clock_mutation",
            extra={"action": action, "position_id": position_id},
        )
        return response.json() if response.content else None

    async def current_shift(self) -> Shift | None:
        """
        Return the user's open shift, or None when the service answers 404.

        Any other error status is raised as `httpx.HTTPStatusError`.
        """
        user = await self.get_user_info()
        response = await self._http.get(self._open_shift_path.render(user.model_dump()))
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            if e.response.status_code == httpx.codes.NOT_FOUND:
                return None
            raise
        return Shift.model_validate(response.json())

    async def get_status_line(self) -> StatusLine:
        """Return `<anumber> - <hours> hours` for an open shift, else `<anumber> - No Shift`."""
        status = await self._cache.get(STATUS_LINE_KEY)
        if status is None:
            user = await self.get_user_info()
            shift = await self.current_shift()

            shift_status = "No Shift"
            if shift is not None and shift.start is not None:
                elapsed = self._clock() - shift.start
                shift_status = f"{elapsed / timedelta(hours=1):.2f} hours"

            status = f"{user.anumber} - {shift_status}"
            await self._cache.set(
                STATUS_LINE_KEY, status, ttl=self._settings.open_shift_ttl_seconds,
            )
        return StatusLine(status=status)

    async def last_week(self, position_id: PositionId | None = None) -> StatusLine:
        """
        Return `<anumber> - <hours> hours` worked from this week's Monday to today.

        Raises:
            AmbiguousPositionError: Even when a summary is cached, if no position
                can be resolved.
        """
        position_id = await self.resolve_position(position_id)
        end = self._clock().date()
        # Sunday belongs to the week that started the Monday before
        start = end - timedelta(days=end.weekday())

        status = await self._cache.get(PAST_WEEK_KEY)
        if status is None:
            user = await self.get_user_info()
            response = await self._http.get(
                self._summary_path.render(
                    position_id=position_id,
                    start=start.isoformat(),
                    end=end.isoformat(),
                ),
            )
            response.raise_for_status()
            summary = WeeklySummary.model_validate(response.json())

            status = f"{user.anumber} - {summary.undisputed_hours} hours"
            await self._cache.set(
                PAST_WEEK_KEY, status, ttl=self._settings.past_week_ttl_seconds,
            )
        return StatusLine(status=status)
