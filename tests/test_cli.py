"""End-to-end CLI tests with click's CliRunner and requests-mock."""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner
from git import Repo

from n8n_workflow_sync.cli import main
from n8n_workflow_sync.errors import VersionControlError
from n8n_workflow_sync.git_history import GitHistory

BASE = "http://n8n.test/api/v1"

DOCUMENT = {
    "id": "abc123",
    "name": "Invoice Reminder",
    "nodes": [{"name": "Cron", "type": "n8n-nodes-base.cron", "typeVersion": 1}],
    "connections": {},
    "settings": {},
    "active": False,
    "versionId": "v-9",
}


@pytest.fixture
def env(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
    monkeypatch.delenv("N8N_WORKFLOW_SYNC_CONFIG", raising=False)
    return {
        "N8N_HOST": "http://n8n.test",
        "N8N_API_KEY": "test-key",
        "N8N_SYNC_SKIP_NODE_VERSIONS": "1",
    }


@pytest.fixture
def runner():
    return CliRunner()


def test_list(runner, env, requests_mock):
    requests_mock.get(f"{BASE}/workflows", json={"data": [{"id": "1", "name": "Alpha"}, {"id": "2", "name": "Beta"}]})

    result = runner.invoke(main, ["list"], env=env)

    assert result.exit_code == 0, result.output
    assert "Found 2 workflows:" in result.output
    assert "  1: Alpha" in result.output


def test_list_empty(runner, env, requests_mock):
    requests_mock.get(f"{BASE}/workflows", json={"data": []})

    result = runner.invoke(main, ["list"], env=env)

    assert result.exit_code == 0
    assert "No workflows found on the server." in result.output


def test_missing_configuration(runner, env):
    env = {"N8N_HOST": None, "N8N_API_KEY": None}
    result = runner.invoke(main, ["list"], env=env)

    assert result.exit_code == 1
    assert "Configuration error" in result.output


def test_authentication_failure(runner, env, requests_mock):
    requests_mock.get(f"{BASE}/workflows", status_code=401, json={"message": "unauthorized"})

    result = runner.invoke(main, ["list"], env=env)

    assert result.exit_code == 1
    assert "authentication failed" in result.output


def test_new(runner, env, requests_mock):
    requests_mock.post(f"{BASE}/workflows", json={"id": "abc123", "name": "Invoice Reminder"})
    requests_mock.get(f"{BASE}/workflows/abc123", json=DOCUMENT)

    result = runner.invoke(main, ["new", "Invoice Reminder"], env=env)

    assert result.exit_code == 0, result.output
    assert "Created workflow with ID: abc123" in result.output
    assert json.loads(Path("invoice-reminder/workflow.json").read_text()) == DOCUMENT
    assert not Path("invoice-reminder/node-versions.json").exists()
    assert len(list(Repo("invoice-reminder").iter_commits())) == 1


def test_pull_then_decline_then_confirm(runner, env, requests_mock):
    requests_mock.get(f"{BASE}/workflows/abc123", json=DOCUMENT)

    first = runner.invoke(main, ["pull", "abc123"], env=env)
    assert first.exit_code == 0, first.output
    assert "Initialized git repository in invoice-reminder" in first.output
    assert "Downloaded workflow abc123 to invoice-reminder/workflow.json" in first.output

    declined = runner.invoke(main, ["pull", "abc123"], env=env, input="n\n")
    assert declined.exit_code == 0
    assert "Overwrite invoice-reminder/workflow.json?" in declined.output
    assert "Aborted" in declined.output
    assert len(list(Repo("invoice-reminder").iter_commits())) == 1

    confirmed = runner.invoke(main, ["pull", "abc123"], env=env, input="y\n")
    assert confirmed.exit_code == 0
    assert len(list(Repo("invoice-reminder").iter_commits())) == 2


def test_pull_assume_yes(runner, env, requests_mock):
    requests_mock.get(f"{BASE}/workflows/abc123", json=DOCUMENT)
    runner.invoke(main, ["pull", "abc123", "out"], env=env)

    result = runner.invoke(main, ["pull", "abc123", "out", "--yes"], env=env)

    assert result.exit_code == 0, result.output
    assert "Overwrite" not in result.output
    assert len(list(Repo("out").iter_commits())) == 2


def test_pull_commit_failure_reports_uncommitted_file(runner, env, requests_mock, monkeypatch):
    def broken_commit(self, repo, relative_paths, message):
        raise VersionControlError("Failed to create commit in invoice-reminder: disk full")

    monkeypatch.setattr(GitHistory, "stage_and_commit", broken_commit)
    requests_mock.get(f"{BASE}/workflows/abc123", json=DOCUMENT)

    result = runner.invoke(main, ["pull", "abc123"], env=env)

    assert result.exit_code == 1
    assert "Pulling workflow abc123 failed" in result.output
    assert "The workflow file was written but NOT committed." in result.output
    assert json.loads(Path("invoice-reminder/workflow.json").read_text())["id"] == "abc123"


def test_invalid_cache_hours(runner, env):
    env = {**env, "N8N_SYNC_SKIP_NODE_VERSIONS": "", "N8N_NODE_VERSIONS_CACHE_HOURS": "daily"}

    result = runner.invoke(main, ["pull", "abc123"], env=env)

    assert result.exit_code == 1
    assert "N8N_NODE_VERSIONS_CACHE_HOURS must be a number" in result.output


def test_pull_not_found(runner, env, requests_mock):
    requests_mock.get(f"{BASE}/workflows/nope", status_code=404)

    result = runner.invoke(main, ["pull", "nope"], env=env)

    assert result.exit_code == 1
    assert "Pulling workflow nope failed" in result.output


def test_push(runner, env, requests_mock):
    Path("workflow.json").write_text(json.dumps(DOCUMENT))
    requests_mock.put(f"{BASE}/workflows/abc123", json={"id": "abc123", "name": "Invoice Reminder"})

    result = runner.invoke(main, ["push"], env=env)

    assert result.exit_code == 0, result.output
    assert "Updated workflow abc123: Invoice Reminder" in result.output
    assert "versionId" not in requests_mock.last_request.json()
    assert "id" not in requests_mock.last_request.json()


def test_push_ambiguous(runner, env):
    Path("a.json").write_text("{}")
    Path("b.json").write_text("{}")

    result = runner.invoke(main, ["push"], env=env)

    assert result.exit_code == 1
    assert "Multiple JSON files" in result.output


def test_config_command(runner, env):
    result = runner.invoke(main, ["config"], env=env)

    assert result.exit_code == 0, result.output
    assert "Settings file: (none)" in result.output
    assert "http://n8n.test/api/v1/" in result.output
    assert "test-key" not in result.output
