"""Reduce a workflow document to what the public update API accepts."""

import copy
from typing import Any, Dict

# Fields accepted by PUT /api/v1/workflows/{id}; everything else the server
# returns (id, createdAt, updatedAt, versionId, shared, ...) is rejected.
UPDATE_FIELDS = (
    "name",
    "nodes",
    "connections",
    "settings",
    "staticData",
    "tags",
    "active",
)


def sanitize_for_update(document: Any) -> Dict[str, Any]:
    """Project a workflow document onto the update allow-list.

    Values are deep-copied so the caller's document is never shared with
    the payload. A non-dict input yields an empty payload.

    Args:
        document: Full workflow document as returned by the server

    Returns:
        New dict holding only allowed keys present in ``document``
    """
    if not isinstance(document, dict):
        return {}
    return {key: copy.deepcopy(document[key]) for key in UPDATE_FIELDS if key in document}
