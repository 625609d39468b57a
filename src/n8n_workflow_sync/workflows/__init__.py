"""Workflows package - orchestrators for multi-step operations.

Implements the Command/Orchestrator pattern: each operation coordinates the
n8n client, the node version fetcher and the local repository.
"""

from .sync import PushResult, WorkflowSync

__all__ = ['PushResult', 'WorkflowSync']
