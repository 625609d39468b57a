"""Workflow Sync - orchestrates list/new/pull/push.

Flow for every command:
  1. Talk to the network (n8n API, then GitHub for node versions)
  2. Only then touch the local directory (write + one commit)

so a network failure never leaves a half-written workflow directory.
Push reads the local file, strips server-only fields and uploads it; the
local file itself is never rewritten.

Implements the Command/Orchestrator pattern.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Protocol

from ..errors import AmbiguousInputError, InputError, IoError
from ..git_history import commit_message
from ..n8n_client import WorkflowSummary
from ..node_versions import render_node_versions
from ..paths import NODE_VERSIONS_FILE, WORKFLOW_FILE, find_default_json, resolve_paths, slugify
from ..repository import SyncResult, WorkflowRepository
from ..sanitize import sanitize_for_update

logger = logging.getLogger(__name__)


class WorkflowClientProtocol(Protocol):
    """What we need from the n8n client."""

    def list_workflows(self) -> List[WorkflowSummary]: ...
    def create_workflow(self, name: str) -> WorkflowSummary: ...
    def get_workflow(self, workflow_id: str) -> Dict[str, Any]: ...
    def update_workflow(self, workflow_id: str, body: Dict[str, Any]) -> WorkflowSummary: ...


class NodeVersionSource(Protocol):
    def fetch(self) -> Dict[str, int]: ...


@dataclass
class PushResult:
    """Result of a push."""
    workflow: WorkflowSummary
    source_path: Path
    uploaded_fields: List[str]


def render_workflow(document: Dict[str, Any]) -> bytes:
    """Serialize a workflow document as pretty-printed UTF-8 JSON."""
    return json.dumps(document, indent=2, ensure_ascii=False).encode("utf-8")


class WorkflowSync:
    """Orchestrates workflow commands.

    Coordinates between:
    - WorkflowClientProtocol: n8n public API
    - NodeVersionSource: optional GitHub node version scraper
    - WorkflowRepository: local files and git history
    """

    def __init__(
        self,
        client: WorkflowClientProtocol,
        repository: Optional[WorkflowRepository] = None,
        node_versions: Optional[NodeVersionSource] = None,
        progress_callback: Optional[Callable[[str], None]] = None,
        base_dir: Path = Path("."),
    ):
        """Initialize workflow.

        Args:
            client: n8n API client
            repository: Local repository (default: new instance with console prompt)
            node_versions: Node version fetcher; None skips node-versions.json
            progress_callback: Optional callback for progress updates
            base_dir: Directory that slug directories and relative paths resolve against
        """
        self.client = client
        self.repo = repository or WorkflowRepository()
        self.node_versions = node_versions
        self.progress_callback = progress_callback
        self.base_dir = Path(base_dir)

    def _progress(self, msg: str) -> None:
        logger.info(msg)
        if self.progress_callback:
            self.progress_callback(msg)

    def list(self) -> List[WorkflowSummary]:
        """List workflows on the server."""
        return self.client.list_workflows()

    def new(self, name: str) -> SyncResult:
        """Create a workflow remotely and a fresh local directory for it.

        Raises:
            InputError: Blank name
            IoError: Target file already exists (checked before any remote call)
        """
        if not name or not name.strip():
            raise InputError("Workflow name cannot be empty")

        slug = slugify(name)
        existing = self.base_dir / slug / WORKFLOW_FILE
        if slug and existing.exists():
            raise IoError(
                f"{existing} already exists; use 'pull' to update an existing workflow",
                path=existing,
            )

        self._progress(f'Creating new workflow: "{name}"')
        workflow = self.client.create_workflow(name)
        self._progress(f"Created workflow with ID: {workflow.id}")

        document = self.client.get_workflow(workflow.id)
        artifacts = self._fetch_artifacts()

        # Server may normalize the name; the directory follows what it returned.
        directory, json_path = resolve_paths(workflow.name or name, fallback_id=workflow.id)
        directory = self.base_dir / directory
        return self.repo.create(
            directory,
            json_path.name,
            render_workflow(document),
            commit_message(workflow.id),
            artifacts=artifacts,
        )

    def pull(self, workflow_id: str, path: Optional[Path] = None) -> SyncResult:
        """Download a workflow and commit it into its local directory.

        Args:
            workflow_id: Workflow id
            path: Optional directory or file path override

        Returns:
            SyncResult (outcome ABORTED if the overwrite was declined)
        """
        document = self.client.get_workflow(workflow_id)
        artifacts = self._fetch_artifacts()

        name = document.get("name")
        name_or_id = name if isinstance(name, str) and name else workflow_id
        if path is not None:
            path = self.base_dir / path
        directory, json_path = resolve_paths(name_or_id, path, fallback_id=workflow_id)
        if path is None:
            directory = self.base_dir / directory
            json_path = directory / json_path.name
        logger.debug(f"Resolved workflow {workflow_id} to {json_path}")

        return self.repo.sync(
            directory,
            json_path.name,
            render_workflow(document),
            commit_message(workflow_id),
            artifacts=artifacts,
        )

    def push(self, workflow_id: Optional[str] = None, path: Optional[Path] = None) -> PushResult:
        """Upload a local workflow file.

        Args:
            workflow_id: Workflow id; read from the file's ``id`` when omitted
            path: Workflow file; discovered in ``base_dir`` when omitted

        Raises:
            AmbiguousInputError: No unique file, or no id anywhere
            IoError: File unreadable
            InputError: File is not a JSON object
        """
        if path is None:
            path = find_default_json(self.base_dir)
        else:
            path = self.base_dir / path
            if path.is_dir():
                path = find_default_json(path)

        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise IoError(f"Failed to read {path}: {e}", path=path) from e

        try:
            document = json.loads(text)
        except ValueError as e:
            raise InputError(f"Failed to parse JSON in {path}: {e}") from e
        if not isinstance(document, dict):
            raise InputError(f"{path} does not contain a workflow object")

        if workflow_id is None:
            file_id = document.get("id")
            if isinstance(file_id, (str, int)) and not isinstance(file_id, bool) and str(file_id):
                workflow_id = str(file_id)
            else:
                raise AmbiguousInputError(
                    f"Workflow ID not provided and not found in {path}"
                )

        body = sanitize_for_update(document)
        self._progress(f"Uploading {path} to workflow {workflow_id}...")
        workflow = self.client.update_workflow(workflow_id, body)
        return PushResult(workflow=workflow, source_path=path, uploaded_fields=sorted(body))

    def close(self) -> None:
        """Release the node version fetcher's HTTP session, if it has one."""
        close = getattr(self.node_versions, "close", None)
        if close is not None:
            close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def _fetch_artifacts(self) -> Optional[Dict[str, bytes]]:
        if self.node_versions is None:
            return None
        self._progress("Fetching node versions...")
        versions = self.node_versions.fetch()
        return {NODE_VERSIONS_FILE: render_node_versions(versions)}


__all__ = ["WorkflowSync", "PushResult", "render_workflow"]
