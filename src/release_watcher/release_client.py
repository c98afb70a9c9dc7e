"""Release-controller REST API client for release streams and upgrade graphs."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from .errors import DecodeError, FetchError
from .upgrades import UpgradeGraph, build_upgrade_graph

logger = logging.getLogger(__name__)

ReleaseMap = Dict[str, List[str]]

RELEASE_STREAM_KINDS = ("accepted", "all")


def get_json(
    session: requests.Session,
    url: str,
    timeout_seconds: int,
    params: Optional[Dict[str, Any]] = None,
) -> Any:
    """Execute a GET request and decode its JSON body.

    There is no retry: any failure aborts the caller.

    Raises:
        FetchError: If the request fails or returns a non-200 status.
        DecodeError: If the response body is not valid JSON.
    """
    try:
        response = session.get(url, params=params, timeout=timeout_seconds)
    except requests.RequestException as exc:
        raise FetchError(f"Error fetching {url}: {exc}") from exc

    if response.status_code != 200:
        raise FetchError(f"Non-OK http response code from {url}: {response.status_code}")

    try:
        return response.json()
    except ValueError as exc:
        raise DecodeError(f"Error decoding response from {url}: {exc}") from exc


class ReleaseClient:
    """Small, typed client for the release-controller APIs of one architecture."""

    _ACCEPTED_RELEASE_PATH = "/api/v1/releasestreams/accepted"
    _ALL_RELEASE_PATH = "/api/v1/releasestreams/all"
    _GRAPH_PATH = "/graph"

    def __init__(self, release_api_url: str, timeout_seconds: int = 30) -> None:
        """Initialize a release-controller client.

        Args:
            release_api_url: Base URL such as ``https://amd64.ocp.releases.ci.openshift.org``.
            timeout_seconds: Per-request timeout in seconds.
        """
        self.release_api_url = release_api_url.rstrip("/")
        self._timeout_seconds = timeout_seconds

        self._session = requests.Session()
        self._session.headers.update({"Accept": "application/json"})

    def _build_url(self, path: str) -> str:
        return f"{self.release_api_url}/{path.lstrip('/')}"

    def fetch_release_map(self, kind: str) -> ReleaseMap:
        """Fetch the stream-to-payloads mapping for accepted or all payloads.

        Args:
            kind: ``"accepted"`` for payloads promoted to the stable set or
                ``"all"`` for every built payload.

        Raises:
            ValueError: If ``kind`` is not a known release stream kind.
            FetchError: If the request fails.
            DecodeError: If the document is not a mapping of names to name lists.
        """
        if kind == "accepted":
            path = self._ACCEPTED_RELEASE_PATH
        elif kind == "all":
            path = self._ALL_RELEASE_PATH
        else:
            raise ValueError(f"Unknown release stream kind {kind!r}; expected one of {RELEASE_STREAM_KINDS}.")

        url = self._build_url(path)
        payload = get_json(self._session, url, self._timeout_seconds)
        if not isinstance(payload, dict):
            raise DecodeError(f"Error decoding releases from {url}: expected an object")

        releases: ReleaseMap = {}
        for stream, payloads in payload.items():
            if payloads is None:
                payloads = []
            if not isinstance(payloads, list) or not all(isinstance(name, str) for name in payloads):
                raise DecodeError(
                    f"Error decoding releases from {url}: stream {stream!r} is not a list of payload names"
                )
            releases[str(stream)] = payloads

        logger.info(
            "Fetched release streams",
            extra={"kind": kind, "url": url, "streams": len(releases)},
        )
        return releases

    def fetch_upgrade_graph(self, channel: str) -> UpgradeGraph:
        """Fetch the upgrade graph for ``channel`` as a target-to-sources mapping.

        The ``stable`` channel only includes successful edges; other channels
        include every attempted upgrade regardless of outcome.

        Raises:
            FetchError: If the request fails.
            DecodeError: If the graph document is malformed.
        """
        url = self._build_url(self._GRAPH_PATH)
        payload = get_json(self._session, url, self._timeout_seconds, params={"channel": channel})
        if not isinstance(payload, dict):
            raise DecodeError(f"Error decoding upgrade graph from {url}: expected an object")

        nodes = payload.get("nodes") or []
        edges = payload.get("edges") or []
        if not isinstance(nodes, list) or not isinstance(edges, list):
            raise DecodeError(f"Error decoding upgrade graph from {url}: nodes and edges must be lists")

        graph = build_upgrade_graph(nodes, edges)
        logger.info(
            "Fetched upgrade graph",
            extra={"channel": channel, "nodes": len(nodes), "edges": len(edges)},
        )
        return graph
