"""Local repository - persistence and history for one workflow directory.

Each successful ``create``/``sync`` writes the workflow file (plus any
artifacts such as ``node-versions.json``) and appends exactly one commit.

Overwrite gate for ``sync``::

    checking exists -> writing            file absent
    checking exists -> prompting          file present
    prompting       -> writing | aborted  confirm | decline
    writing         -> committing         (IoError otherwise)
    committing      -> done               (VersionControlError otherwise)

Artifacts are written before the workflow file, so a failed write never
leaves a replaced ``workflow.json`` behind an ordinary ``IoError``. A failed
commit leaves the written files on disk; it is reported, never rolled back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional

from git import Repo

from .confirmation import ClickConfirmation, ConfirmationProvider
from .errors import IoError, VersionControlError
from .git_history import GitHistory

logger = logging.getLogger(__name__)


class SyncOutcome(Enum):
    """Terminal outcome of a local write. Declining is not an error."""
    DONE = "done"
    ABORTED = "aborted"


@dataclass
class SyncResult:
    """Result of a local create/sync."""
    outcome: SyncOutcome
    directory: Path
    file_path: Path
    commit_sha: Optional[str] = None
    repository_initialized: bool = False
    written_files: List[Path] = field(default_factory=list)

    @property
    def aborted(self) -> bool:
        return self.outcome is SyncOutcome.ABORTED


class WorkflowRepository:
    """Owns local writes and git history for workflow directories."""

    def __init__(
        self,
        confirmation: Optional[ConfirmationProvider] = None,
        history: Optional[GitHistory] = None,
    ):
        """Initialize repository manager.

        Args:
            confirmation: Answers the overwrite prompt (default: console prompt)
            history: Git wrapper (default: new instance)
        """
        self.confirmation = confirmation or ClickConfirmation()
        self.history = history or GitHistory()

    def create(
        self,
        directory: Path,
        file_name: str,
        data: bytes,
        commit_message: str,
        artifacts: Optional[Dict[str, bytes]] = None,
    ) -> SyncResult:
        """Write a brand-new workflow directory and make its first commit.

        The workflow file must not exist yet; an existing file is an
        ``IoError`` rather than a silent overwrite.

        Raises:
            IoError: Directory creation or a write failed
            VersionControlError: Init, staging or commit failed
        """
        directory = Path(directory)
        file_path = directory / file_name
        if file_path.exists():
            raise IoError(f"Refusing to overwrite existing {file_path}", path=file_path)

        written = self._write(directory, file_name, data, artifacts, exclusive=True)

        try:
            repo = self.history.init(directory)
        except VersionControlError as e:
            raise self._not_committed(file_path, directory, e) from e

        sha = self._commit(repo, directory, file_path, written, commit_message)
        return SyncResult(
            outcome=SyncOutcome.DONE,
            directory=directory,
            file_path=file_path,
            commit_sha=sha,
            repository_initialized=True,
            written_files=written,
        )

    def sync(
        self,
        directory: Path,
        file_name: str,
        data: bytes,
        commit_message: str,
        artifacts: Optional[Dict[str, bytes]] = None,
    ) -> SyncResult:
        """Write a workflow snapshot, asking before overwriting, then commit.

        Args:
            directory: Workflow directory (created if missing)
            file_name: Workflow file name inside ``directory``
            data: Serialized workflow document
            commit_message: Message for the new commit
            artifacts: Extra files (name -> bytes) written and committed alongside

        Returns:
            SyncResult with outcome DONE, or ABORTED if the operator declined

        Raises:
            IoError: Directory creation or a write failed
            VersionControlError: Open/init, staging or commit failed
        """
        directory = Path(directory)
        file_path = directory / file_name

        if file_path.exists():
            if not self.confirmation.confirm(f"Overwrite {file_path}?"):
                logger.info(f"Declined to overwrite {file_path}")
                return SyncResult(outcome=SyncOutcome.ABORTED, directory=directory, file_path=file_path)

        written = self._write(directory, file_name, data, artifacts)

        initialized = not (directory / ".git").exists()
        try:
            repo = self.history.open_or_init(directory)
        except VersionControlError as e:
            raise self._not_committed(file_path, directory, e) from e

        sha = self._commit(repo, directory, file_path, written, commit_message)
        return SyncResult(
            outcome=SyncOutcome.DONE,
            directory=directory,
            file_path=file_path,
            commit_sha=sha,
            repository_initialized=initialized,
            written_files=written,
        )

    def _write(
        self,
        directory: Path,
        file_name: str,
        data: bytes,
        artifacts: Optional[Dict[str, bytes]],
        exclusive: bool = False,
    ) -> List[Path]:
        """Create ``directory`` and write the artifacts, then the workflow file.

        The workflow file goes last: if any write fails, an existing
        workflow file still holds its previous bytes.

        Returns:
            Paths relative to ``directory`` that were written
        """
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise IoError(f"Failed to create directory {directory}: {e}", path=directory) from e

        written = []
        files = {**(artifacts or {}), file_name: data}
        for name, content in files.items():
            path = directory / name
            mode = "xb" if exclusive and name == file_name else "wb"
            try:
                with open(path, mode) as f:
                    f.write(content)
            except FileExistsError as e:
                raise IoError(f"Refusing to overwrite existing {path}", path=path) from e
            except OSError as e:
                raise IoError(f"Failed to write to {path}: {e}", path=path) from e
            logger.debug(f"Wrote {len(content)} bytes to {path}")
            written.append(Path(name))
        return written

    def _commit(
        self,
        repo: Repo,
        directory: Path,
        file_path: Path,
        written: List[Path],
        message: str,
    ) -> str:
        try:
            return self.history.stage_and_commit(repo, written, message)
        except VersionControlError as e:
            raise self._not_committed(file_path, directory, e) from e

    @staticmethod
    def _not_committed(file_path: Path, directory: Path, cause: VersionControlError) -> VersionControlError:
        return VersionControlError(
            f"{file_path} was written but not committed: {cause}",
            directory=directory,
            file_written=True,
        )
