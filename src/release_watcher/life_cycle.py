"""Supported minor-version discovery from the product life-cycle API."""

from __future__ import annotations

import logging
from typing import Any, Optional, Tuple

import requests

from .errors import DecodeError
from .release_client import get_json

logger = logging.getLogger(__name__)

LIFE_CYCLE_URL = (
    "https://access.redhat.com/product-life-cycles/api/v1/products"
    "?name=Openshift%20Container%20Platform%204"
)
END_OF_LIFE = "End of life"


def _parse_supported_minor(name: Any) -> Optional[int]:
    """Return the minor of a ``4.<minor>`` version name, or ``None`` if it has another shape."""
    if not isinstance(name, str):
        return None

    entries = name.split(".")
    if len(entries) != 2:
        logger.debug("Expected one period for parsing a minor version", extra={"version": name})
        return None
    if entries[0] != "4":
        logger.debug("Expected major version 4", extra={"version": name})
        return None

    try:
        return int(entries[1])
    except ValueError:
        logger.debug("Expected an integer minor version", extra={"version": name})
        return None


class LifeCycleClient:
    """Resolves the supported minor-version range of the product."""

    def __init__(self, url: str = LIFE_CYCLE_URL, timeout_seconds: int = 30) -> None:
        self.url = url
        self._timeout_seconds = timeout_seconds

        self._session = requests.Session()
        self._session.headers.update({"Accept": "application/json"})

    def resolve_supported_minor_range(self) -> Tuple[int, int]:
        """Return the oldest and newest minor versions that are not end of life.

        Raises:
            FetchError: If the life-cycle request fails.
            DecodeError: If the document does not describe exactly one product
                or that product has no supported ``4.<minor>`` versions.
        """
        payload = get_json(self._session, self.url, self._timeout_seconds)
        products = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(products, list):
            raise DecodeError(f"Error decoding life-cycle data from {self.url}: missing 'data' list")
        if len(products) != 1:
            raise DecodeError(
                f"Life-cycle data from {self.url} contains {len(products)} products, but should only contain 1"
            )

        product = products[0] if isinstance(products[0], dict) else {}
        supported = []
        for version in product.get("versions") or []:
            if not isinstance(version, dict) or version.get("type") == END_OF_LIFE:
                continue
            minor = _parse_supported_minor(version.get("name"))
            if minor is not None:
                supported.append(minor)

        if not supported:
            raise DecodeError(
                f"Life-cycle data from {self.url} contains no supported releases for {product.get('name')}"
            )

        oldest, newest = min(supported), max(supported)
        logger.info(
            "Resolved supported releases",
            extra={"oldest_minor": oldest, "newest_minor": newest},
        )
        return oldest, newest
