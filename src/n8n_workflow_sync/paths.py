"""Where workflows live on disk.

A workflow directory is named after the slug of the workflow's display
name and holds ``workflow.json`` plus ``node-versions.json``. A user may
override the location with an explicit directory or file path.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Tuple

from .errors import AmbiguousInputError, InputError, IoError

logger = logging.getLogger(__name__)

WORKFLOW_FILE = "workflow.json"
NODE_VERSIONS_FILE = "node-versions.json"
SLUG_SEPARATOR = "-"


def slugify(name: str) -> str:
    """Convert a workflow name into a filesystem-friendly slug.

    Lowercases, maps every character that is not an ASCII letter or digit to
    ``-``, collapses runs of separators and trims them from both ends.
    An input with no ASCII alphanumerics yields ``""``.

    Args:
        name: Display name (or id) of the workflow

    Returns:
        Slug string, possibly empty
    """
    chars = []
    for c in name.lower():
        if c.isascii() and c.isalnum():
            chars.append(c)
        elif not chars or chars[-1] != SLUG_SEPARATOR:
            chars.append(SLUG_SEPARATOR)
    return "".join(chars).strip(SLUG_SEPARATOR)


def resolve_paths(
    name_or_id: str,
    user_path: Optional[Path] = None,
    fallback_id: Optional[str] = None,
) -> Tuple[Path, Path]:
    """Compute the workflow directory and JSON file path.

    Precedence:
      1. No ``user_path``: directory is ``slugify(name_or_id)``.
      2. ``user_path`` is an existing directory or has no extension: it is
         the directory.
      3. Otherwise ``user_path`` is the file; its parent is the directory.

    Args:
        name_or_id: Workflow display name, or its id when no name is known
        user_path: Optional directory or file given on the command line
        fallback_id: Workflow id to slug when the name slugs to nothing

    Returns:
        (directory, json_file_path)

    Raises:
        InputError: If no directory name can be derived at all
    """
    if user_path is None:
        slug = slugify(name_or_id)
        if not slug and fallback_id:
            slug = slugify(fallback_id) or fallback_id
        if not slug:
            raise InputError(f"Cannot derive a directory name from {name_or_id!r}; please specify a path")
        directory = Path(slug)
        return directory, directory / WORKFLOW_FILE

    user_path = Path(user_path)
    if user_path.is_dir() or not user_path.suffix:
        return user_path, user_path / WORKFLOW_FILE

    # Path("x.json").parent is Path(".")
    return user_path.parent, user_path


def find_default_json(directory: Path = Path(".")) -> Path:
    """Locate the workflow JSON file to push when no path was given.

    ``workflow.json`` wins. Otherwise exactly one other ``*.json`` file must
    exist; ``node-versions.json`` is never a candidate.

    Args:
        directory: Directory to search

    Returns:
        Path to the JSON file

    Raises:
        AmbiguousInputError: If zero or several candidates exist
        IoError: If the directory cannot be listed
    """
    preferred = directory / WORKFLOW_FILE
    if preferred.is_file():
        return preferred

    try:
        candidates: List[Path] = sorted(
            p for p in directory.iterdir()
            if p.is_file() and p.suffix == ".json" and p.name != NODE_VERSIONS_FILE
        )
    except OSError as e:
        raise IoError(f"Failed to list {directory}: {e}", path=directory) from e

    logger.debug(f"JSON candidates in {directory}: {[p.name for p in candidates]}")

    if not candidates:
        raise AmbiguousInputError(f"No JSON files found in {directory}")
    if len(candidates) > 1:
        names = ", ".join(p.name for p in candidates)
        raise AmbiguousInputError(
            f"Multiple JSON files found ({names}). Please specify which one to push"
        )
    return candidates[0]


__all__ = [
    "WORKFLOW_FILE",
    "NODE_VERSIONS_FILE",
    "slugify",
    "resolve_paths",
    "find_default_json",
]
