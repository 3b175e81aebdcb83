"""Errors raised by the AggieTime client."""
from collections.abc import Iterable
from enum import Enum


class ErrorKind(Enum):
    """Discriminates the failures raised locally by the client."""

    AMBIGUOUS_POSITION = "ambiguous_position"
    MISSING_PATH_PARAMETER = "missing_path_parameter"
    NOT_FOUND = "not_found"


class AggieTimeError(Exception):
    """Base class for locally raised client errors."""

    kind: ErrorKind


class AmbiguousPositionError(AggieTimeError):
    """Raised when a position is required but cannot be inferred from the user."""

    kind = ErrorKind.AMBIGUOUS_POSITION

    def __init__(self, position_count: int) -> None:
        self.position_count = position_count
        super().__init__(
            "Must specify a position when there isn't exactly one to choose from "
            f"(user has {position_count})",
        )


class MissingPathParameterError(AggieTimeError):
    """Raised when a path template is rendered without all of its placeholders."""

    kind = ErrorKind.MISSING_PATH_PARAMETER

    def __init__(self, template: str, missing: Iterable[str]) -> None:
        self.template = template
        self.missing = sorted(missing)
        super().__init__(
            f"Missing path parameter(s) {', '.join(self.missing)} for {template!r}",
        )


class NotFoundError(AggieTimeError):
    """Raised when an expected value is absent."""

    kind = ErrorKind.NOT_FOUND


class CsrfTokenNotFoundError(NotFoundError):
    """Raised when the login response did not set the XSRF-TOKEN cookie."""

    def __init__(self, domain: str, cookie_name: str) -> None:
        self.domain = domain
        self.cookie_name = cookie_name
        super().__init__(f"No {cookie_name} cookie set for domain {domain}")
