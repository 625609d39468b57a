"""n8n public API client (workflows only)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from .config import N8nConfig
from .errors import AuthenticationError, NotFoundError, TransportError
from .http_utils import API_TIMEOUT, retry_on_transient

logger = logging.getLogger(__name__)


@dataclass
class WorkflowSummary:
    """Id and name of a workflow on the server."""
    id: str
    name: str

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "WorkflowSummary":
        try:
            return cls(id=str(data["id"]), name=str(data.get("name") or ""))
        except (KeyError, TypeError) as e:
            raise TransportError(f"Unexpected workflow payload: {data!r}") from e


class N8nClient:
    """Client for the n8n public REST API (``/api/v1``)."""

    API_KEY_HEADER = "X-N8N-API-KEY"

    def __init__(
        self,
        config: N8nConfig,
        session: Optional[requests.Session] = None,
        timeout=API_TIMEOUT,
    ):
        """Initialize n8n client.

        Args:
            config: Host and API key
            session: Optional requests session (default: new session)
            timeout: (connect, read) timeout for every request
        """
        self.config = config
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            self.API_KEY_HEADER: config.api_key,
            "Accept": "application/json",
            "User-Agent": "n8n-workflow-sync",
        })

    def list_workflows(self) -> List[WorkflowSummary]:
        """List all workflows, following cursor pagination.

        Returns:
            Workflow summaries in server order
        """
        url = self.config.endpoint("workflows")
        workflows: List[WorkflowSummary] = []
        cursor: Optional[str] = None

        while True:
            params = {"cursor": cursor} if cursor else None
            data = self._request("GET", url, what="list workflows", params=params)
            items = data.get("data") if isinstance(data, dict) else None
            if not isinstance(items, list):
                raise TransportError(f"Unexpected response from {url}: missing 'data' list")

            workflows.extend(WorkflowSummary.from_api(item) for item in items)
            cursor = data.get("nextCursor")
            if not cursor:
                break
            logger.debug(f"Fetched {len(workflows)} workflows so far, next cursor {cursor}")

        logger.debug(f"Listed {len(workflows)} workflows")
        return workflows

    def create_workflow(self, name: str) -> WorkflowSummary:
        """Create an empty workflow.

        Args:
            name: Display name

        Returns:
            Summary with the server-assigned id
        """
        body = {
            "name": name,
            "nodes": [],
            "connections": {},
            "settings": {},
        }
        data = self._request(
            "POST", self.config.endpoint("workflows"), what=f'create workflow "{name}"', json=body
        )
        workflow = WorkflowSummary.from_api(data)
        logger.info(f"Created workflow {workflow.id} ({workflow.name})")
        return workflow

    def get_workflow(self, workflow_id: str) -> Dict[str, Any]:
        """Download the full workflow document.

        Args:
            workflow_id: Workflow id

        Returns:
            Workflow JSON as a dict
        """
        data = self._request(
            "GET", self.config.endpoint(f"workflows/{workflow_id}"), what=f"get workflow {workflow_id}"
        )
        if not isinstance(data, dict):
            raise TransportError(f"Workflow {workflow_id} is not a JSON object")
        return data

    def update_workflow(self, workflow_id: str, body: Dict[str, Any]) -> WorkflowSummary:
        """Replace a workflow with ``body`` (already sanitized).

        Args:
            workflow_id: Workflow id
            body: Update payload

        Returns:
            Summary of the updated workflow
        """
        data = self._request(
            "PUT",
            self.config.endpoint(f"workflows/{workflow_id}"),
            what=f"update workflow {workflow_id}",
            json=body,
        )
        return WorkflowSummary.from_api(data)

    def _request(self, method: str, url: str, what: str, **kwargs: Any) -> Any:
        """Send a request and decode the JSON response.

        Raises:
            AuthenticationError: On 401/403
            NotFoundError: On 404
            TransportError: On connection failure, other error status or bad JSON
        """
        logger.debug(f"{method} {url}")
        try:
            if method == "GET":
                response = retry_on_transient(
                    self.session.get, 2, 1.0, url, timeout=self.timeout, **kwargs
                )
            else:
                response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise TransportError(f"Failed to {what}: {e}") from e

        status = response.status_code
        if status in (401, 403):
            raise AuthenticationError(
                f"Failed to {what}: authentication failed (HTTP {status}). "
                f"Please check N8N_API_KEY",
                status_code=status,
            )
        if status == 404:
            raise NotFoundError(f"Failed to {what}: not found (HTTP 404)", status_code=status)
        if status >= 400:
            raise TransportError(
                f"Failed to {what}: HTTP {status} {_error_detail(response)}".rstrip(),
                status_code=status,
            )

        try:
            return response.json()
        except ValueError as e:
            raise TransportError(f"Failed to {what}: response is not valid JSON", status_code=status) from e


def _error_detail(response: requests.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(payload, dict) and payload.get("message"):
        return str(payload["message"])
    return ""
