"""Query arguments for Harvest API requests."""

from __future__ import annotations

from datetime import date
from typing import Any, Mapping, Optional
from urllib.parse import urlencode


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    # datetime is a subclass of date
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


class Arguments(dict):
    """A mapping of query parameter names to values.

    Values may be any type; they are converted to strings when the
    arguments are encoded.  Entries whose value is ``None`` are left
    out of the query string entirely.

    >>> Arguments(to="2024-01-31", page=2, is_running=False).to_query_string()
    'is_running=false&page=2&to=2024-01-31'
    """

    def to_params(self) -> dict:
        """Return the arguments as a sorted ``{name: str}`` dict."""
        return {
            str(key): _stringify(value)
            for key, value in sorted(self.items(), key=lambda item: str(item[0]))
            if value is not None
        }

    def to_query_string(self) -> str:
        """Encode the arguments as a deterministic URL query string."""
        return urlencode(self.to_params())


def as_arguments(args: Optional[Mapping[str, Any]]) -> Arguments:
    """Return ``args`` as an :class:`Arguments`, copying plain mappings.

    An existing :class:`Arguments` instance is returned unchanged so that
    callers sharing one argument set see the same object.
    """
    if args is None:
        return Arguments()
    if isinstance(args, Arguments):
        return args
    return Arguments(args)
