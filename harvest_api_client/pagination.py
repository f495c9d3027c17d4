"""
Page-by-page retrieval of Harvest collection resources.

Harvest answers list endpoints with a page envelope::

    {
        "time_entries": [...],
        "per_page": 2000,
        "total_pages": 3,
        "total_entries": 5012,
        "next_page": 2,
        "previous_page": null,
        "page": 1,
        "links": {"first": "...", "next": "...", "previous": null, "last": "..."}
    }

The paginator never looks inside a page.  It decodes each page into
the same caller-supplied target, asks the target whether another page
exists, and leaves accumulating the results to the ``after_fetch``
callback.  Because every page overwrites the previous one, anything
the caller wants to keep must be copied out inside that callback.
"""

from __future__ import annotations

import logging
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Dict,
    Iterator,
    List,
    Mapping,
    Optional,
    Protocol,
    runtime_checkable,
)

from .arguments import Arguments

if TYPE_CHECKING:
    from .client import HarvestClient

logger = logging.getLogger(__name__)


@runtime_checkable
class Pageable(Protocol):
    """A decodable destination that knows whether another page follows."""

    def decode(self, data: Any) -> None:
        ...

    def has_next_page(self) -> bool:
        ...


class PageEnvelope:
    """Harvest's standard page envelope.

    Parameters
    ----------
    collection : str, optional
        The key holding the page's records, e.g. ``"time_entries"`` or
        ``"projects"``.  Defaults to ``"items"``.
    """

    def __init__(self, collection: str = "items") -> None:
        self.collection = collection
        self.items: List[Any] = []
        self.page: Optional[int] = None
        self.per_page: Optional[int] = None
        self.total_pages: Optional[int] = None
        self.total_entries: Optional[int] = None
        self.next_page: Optional[int] = None
        self.previous_page: Optional[int] = None
        self.links: Dict[str, Optional[str]] = {}

    def decode(self, data: Any) -> None:
        if not isinstance(data, dict):
            raise TypeError(f"expected a JSON object, got {type(data).__name__}")
        items = data.get(self.collection, [])
        if not isinstance(items, list):
            raise TypeError(f"{self.collection!r} is not a JSON array")
        self.items = items
        self.page = data.get("page")
        self.per_page = data.get("per_page")
        self.total_pages = data.get("total_pages")
        self.total_entries = data.get("total_entries")
        self.next_page = data.get("next_page")
        self.previous_page = data.get("previous_page")
        self.links = data.get("links") or {}

    def has_next_page(self) -> bool:
        return self.next_page is not None

    def __repr__(self) -> str:
        return (
            f"PageEnvelope(collection={self.collection!r}, page={self.page!r}, "
            f"items={len(self.items)}, next_page={self.next_page!r})"
        )


def iter_pages(
    client: "HarvestClient",
    path: str,
    args: Optional[Mapping[str, Any]],
    target: Pageable,
) -> Iterator[Pageable]:
    """Yield ``target`` once after each page has been decoded into it.

    Pages are requested lazily, starting at page 1, and stop after the
    first page whose ``has_next_page()`` is false.  A failing request
    raises out of the iteration; pages already yielded stay with the
    caller.  The caller's ``args`` are copied, never modified.
    """
    page_args = Arguments(args or {})
    page = 1
    while True:
        page_args["page"] = str(page)
        client.get(path, page_args, target)
        logger.debug("Fetched page %d of %s", page, path)
        yield target
        if not target.has_next_page():
            return
        page += 1


def fetch_all_pages(
    client: "HarvestClient",
    path: str,
    args: Optional[Mapping[str, Any]],
    target: Pageable,
    after_fetch: Callable[[], None],
) -> int:
    """Fetch every page of ``path`` in order, calling ``after_fetch`` after each.

    Parameters
    ----------
    client : HarvestClient
        The client used to GET each page.
    path : str
        The collection path, e.g. ``"/time_entries"``.
    args : mapping, optional
        Query arguments sent with every page.  The ``page`` argument is
        set to ``"1"``, ``"2"``, ... on a copy.
    target : Pageable
        Decoded into on every page, overwriting the previous page.
    after_fetch : callable
        Called with no arguments once per successfully decoded page.

    Returns
    -------
    int
        The number of pages fetched.

    Raises
    ------
    HarvestError
        The first failure of any page, unwrapped.  No callback runs for
        the failed page and none of the earlier callbacks are undone.
    """
    pages = 0
    for _ in iter_pages(client, path, args, target):
        pages += 1
        after_fetch()
    return pages
