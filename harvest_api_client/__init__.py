"""
Python client for interacting with the Harvest v2 REST API.

This package provides a small `HarvestClient` class that attaches the
Harvest account and bearer token headers to every request, sends JSON
bodies, checks response statuses and decodes JSON responses.  List
endpoints can be walked page by page with `HarvestClient.get_paginated`.

Examples
--------

```python
from harvest_api_client import HarvestClient, PageEnvelope

client = HarvestClient("123456", "YOUR_ACCESS_TOKEN")

projects = []
page = PageEnvelope("projects")
client.get_paginated(
    "/projects", {"is_active": True}, page, lambda: projects.extend(page.items)
)

client.post(
    "/time_entries",
    payload={"project_id": 1, "task_id": 2, "spent_date": "2024-01-15", "hours": 1.5},
)
```

Token acquisition and refresh are left to the caller; the client only
consumes a ready access token and account identifier.
"""

from .arguments import Arguments
from .client import CLIENT_VERSION, HARVEST_API_VERSION, HARVEST_DOMAIN, HarvestClient
from .exceptions import DecodeError, HarvestError, HTTPStatusError, RequestBuildError, TransportError
from .pagination import PageEnvelope, Pageable, fetch_all_pages, iter_pages

__version__ = CLIENT_VERSION

__all__ = [
    "Arguments",
    "HarvestClient",
    "HARVEST_DOMAIN",
    "HARVEST_API_VERSION",
    "PageEnvelope",
    "Pageable",
    "fetch_all_pages",
    "iter_pages",
    "HarvestError",
    "RequestBuildError",
    "TransportError",
    "HTTPStatusError",
    "DecodeError",
]
