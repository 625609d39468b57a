"""Shared test fixtures for dependency injection testing."""

from typing import Dict, List

import pytest

from n8n_workflow_sync.config import N8nConfig
from n8n_workflow_sync.config_provider import MockConfigProvider
from n8n_workflow_sync.n8n_client import WorkflowSummary


class ScriptedConfirmation:
    """Answers prompts from a fixed list and records what was asked."""

    def __init__(self, answers: List[bool]):
        self.answers = list(answers)
        self.prompts: List[str] = []

    def confirm(self, prompt: str) -> bool:
        self.prompts.append(prompt)
        return self.answers.pop(0)


class FakeClient:
    """In-memory stand-in for N8nClient."""

    def __init__(self, documents: Dict[str, dict] = None):
        self.documents = documents or {}
        self.updates = []
        self.created = []

    def list_workflows(self):
        return [WorkflowSummary(id=i, name=d.get("name", "")) for i, d in self.documents.items()]

    def create_workflow(self, name):
        workflow_id = f"new{len(self.created) + 1}"
        self.created.append(name)
        self.documents[workflow_id] = {
            "id": workflow_id,
            "name": name,
            "nodes": [],
            "connections": {},
            "settings": {},
            "active": False,
        }
        return WorkflowSummary(id=workflow_id, name=name)

    def get_workflow(self, workflow_id):
        return self.documents[workflow_id]

    def update_workflow(self, workflow_id, body):
        self.updates.append((workflow_id, body))
        return WorkflowSummary(id=workflow_id, name=body.get("name", ""))


class FakeNodeVersions:
    def __init__(self, versions=None):
        self.versions = versions or {"Slack": 2, "HttpRequest": 4}
        self.calls = 0

    def fetch(self):
        self.calls += 1
        return dict(self.versions)


@pytest.fixture
def mock_config_provider():
    """Provide a mock configuration provider with test n8n credentials."""
    return MockConfigProvider(data={
        "n8n": {
            "host": "http://localhost:5678",
            "api_key": "test-key",
        }
    })


@pytest.fixture
def n8n_config():
    return N8nConfig(host="http://n8n.test/", api_key="test-key")


@pytest.fixture
def fake_client():
    return FakeClient({
        "abc123": {
            "id": "abc123",
            "name": "My Workflow",
            "nodes": [{"name": "Start", "type": "n8n-nodes-base.start", "typeVersion": 1}],
            "connections": {},
            "settings": {"executionOrder": "v1"},
            "active": False,
            "createdAt": "2024-01-01T00:00:00.000Z",
            "updatedAt": "2024-01-02T00:00:00.000Z",
            "versionId": "v-1",
        }
    })


@pytest.fixture
def fake_node_versions():
    return FakeNodeVersions()


@pytest.fixture
def confirm_no():
    return ScriptedConfirmation([False] * 10)


@pytest.fixture
def scripted():
    """Factory for confirmation providers with fixed answers."""
    return ScriptedConfirmation
