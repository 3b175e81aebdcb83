"""Endpoint path templates with `:name` placeholders."""
import re
from typing import Any
from urllib.parse import quote

from core.exceptions import MissingPathParameterError

PLACEHOLDER_PATTERN = re.compile(r":([a-zA-Z0-9_]+)")


class PathTemplate:
    """
    Path template such as `/positions/:position_id/clock_in`.

    Every placeholder must be supplied when rendering. Extra parameters are
    ignored, so a whole record (e.g. the user info payload) can be passed in.
    """

    def __init__(self, template: str) -> None:
        self.template = template
        self.parameters = frozenset(PLACEHOLDER_PATTERN.findall(template))

    def __repr__(self) -> str:
        return f"PathTemplate({self.template!r})"

    def render(self, params: dict[str, Any] | None = None, **kwargs: Any) -> str:
        """
        Substitute each placeholder with its URL-quoted value.

        Args:
            params:
                Mapping of placeholder names to values.
            **kwargs:
                Additional values, taking precedence over `params`.

        Raises:
            MissingPathParameterError: If any placeholder has no value (or None).
        """
        values = {**(params or {}), **kwargs}
        missing = {name for name in self.parameters if values.get(name) is None}
        if missing:
            raise MissingPathParameterError(self.template, missing)
        return PLACEHOLDER_PATTERN.sub(
            lambda match: quote(str(values[match.group(1)]), safe=""),
            self.template,
        )
