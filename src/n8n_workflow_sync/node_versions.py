"""Latest node type versions from the n8n source tree on GitHub.

Saved next to each workflow as ``node-versions.json`` so that a workflow's
``typeVersion`` values can be compared against what the current n8n ships.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, Optional

import requests

from .errors import NodeVersionFetchError
from .http_utils import DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)

TREE_URL = "https://api.github.com/repos/n8n-io/n8n/git/trees/master?recursive=1"
RAW_URL = "https://raw.githubusercontent.com/n8n-io/n8n/master/{path}"

NODE_FILE_RE = re.compile(r"^packages/nodes-base/nodes/([^/]+)/.*\.node\.[jt]s$")
VERSION_RE = re.compile(r"version:\s*(\d+)")


class NodeVersionFetcher:
    """Scrapes ``version: N`` from every node source file."""

    def __init__(self, session: Optional[Any] = None, timeout=DEFAULT_TIMEOUT):
        """Initialize fetcher.

        Args:
            session: Anything with ``get(url, **kwargs)`` (requests.Session or
                http_cache.CachedSession); default is a plain requests.Session
            timeout: (connect, read) timeout per request
        """
        self.session = session or requests.Session()
        self.timeout = timeout
        self.headers = {"User-Agent": "n8n-workflow-sync"}

    def close(self) -> None:
        self.session.close()

    def fetch(self) -> Dict[str, int]:
        """Fetch the highest version per node directory.

        Returns:
            Mapping of node name (e.g. 'Slack') to version

        Raises:
            NodeVersionFetchError: On any network or parse failure
        """
        tree = self._get_json(TREE_URL)
        entries = tree.get("tree") if isinstance(tree, dict) else None
        if not isinstance(entries, list):
            raise NodeVersionFetchError(f"Unexpected response from {TREE_URL}: missing 'tree' list")

        versions: Dict[str, int] = {}
        for entry in entries:
            if not isinstance(entry, dict) or entry.get("type") != "blob":
                continue
            match = NODE_FILE_RE.match(entry.get("path", ""))
            if not match:
                continue

            node_name = match.group(1)
            text = self._get(RAW_URL.format(path=entry["path"])).text
            version_match = VERSION_RE.search(text)
            if not version_match:
                logger.debug(f"No version found in {entry['path']}")
                continue

            version = int(version_match.group(1))
            versions[node_name] = max(version, versions.get(node_name, version))

        logger.info(f"Fetched versions for {len(versions)} node types")
        return versions

    def _get(self, url: str):
        try:
            response = self.session.get(url, headers=self.headers, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise NodeVersionFetchError(f"Failed to fetch node versions from {url}: {e}") from e
        return response

    def _get_json(self, url: str) -> Any:
        response = self._get(url)
        try:
            return response.json()
        except ValueError as e:
            raise NodeVersionFetchError(f"Failed to parse node versions response from {url}") from e


def render_node_versions(versions: Dict[str, int]) -> bytes:
    """Serialize a node version mapping as pretty-printed JSON."""
    return json.dumps(versions, indent=2, sort_keys=True).encode("utf-8")
