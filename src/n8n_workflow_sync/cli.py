"""Command-line interface for n8n-workflow-sync."""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from dotenv import load_dotenv

from . import __version__
from .config import N8nConfig
from .config_provider import get_default_config_provider
from .confirmation import ClickConfirmation, StaticConfirmation
from .errors import ConfigError, VersionControlError, WorkflowSyncError
from .n8n_client import N8nClient
from .repository import WorkflowRepository
from .workflows import WorkflowSync

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


@click.group(
    epilog=(
        "ENVIRONMENT VARIABLES:\n\n"
        "  N8N_HOST     Base URL of the n8n instance (e.g., https://your-n8n.example.com)\n\n"
        "  N8N_API_KEY  API key for authentication"
    )
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.version_option(__version__, prog_name="n8n-workflow-sync")
def main(verbose: bool):
    """
    Pull, edit and push n8n workflows using git.

    Set N8N_HOST and N8N_API_KEY (or a .env file) to authenticate with your
    n8n instance.

    \b
    Examples:
      n8n-workflow-sync list
      n8n-workflow-sync new "My New Workflow"
      n8n-workflow-sync pull 123 workflow.json
      n8n-workflow-sync push 123 workflow.json
    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _load_config() -> N8nConfig:
    try:
        return N8nConfig.load(provider=get_default_config_provider())
    except ConfigError as e:
        click.echo(f"✗ Configuration error: {e}", err=True)
        sys.exit(1)


def _build_sync(config: N8nConfig, assume_yes: bool = False, node_versions: bool = True) -> WorkflowSync:
    """Wire the client, fetcher and local repository for one invocation.

    Raises:
        ConfigError: If the node version cache settings are invalid
    """
    fetcher = None
    if node_versions:
        from .http_cache import get_node_versions_session
        from .node_versions import NodeVersionFetcher

        fetcher = NodeVersionFetcher(session=get_node_versions_session())

    confirmation = StaticConfirmation(True) if assume_yes else ClickConfirmation()
    return WorkflowSync(
        client=N8nClient(config),
        repository=WorkflowRepository(confirmation=confirmation),
        node_versions=fetcher,
        progress_callback=lambda msg: click.echo(msg),
    )


def _fail(error: WorkflowSyncError, action: str) -> None:
    """Report a failed command and exit non-zero."""
    logger.debug(f"{action} failed", exc_info=error)
    click.echo(f"✗ {action} failed: {error}", err=True)
    if isinstance(error, VersionControlError) and error.file_written:
        click.echo("  The workflow file was written but NOT committed.", err=True)
    sys.exit(1)


node_versions_option = click.option(
    "--no-node-versions",
    "skip_node_versions",
    is_flag=True,
    envvar="N8N_SYNC_SKIP_NODE_VERSIONS",
    help="Do not fetch node versions (no node-versions.json)",
)


@main.command("list")
def list_workflows():
    """List all workflows from the n8n server."""
    config = _load_config()
    click.echo(f"Fetching workflows from {config.host}...")
    try:
        with _build_sync(config, node_versions=False) as sync:
            workflows = sync.list()
    except WorkflowSyncError as e:
        _fail(e, "Listing workflows")

    if not workflows:
        click.echo("No workflows found on the server.")
        return

    click.echo(f"Found {len(workflows)} workflows:")
    for wf in workflows:
        click.echo(f"  {wf.id}: {wf.name}")


@main.command()
@click.argument("name")
@node_versions_option
def new(name: str, skip_node_versions: bool):
    """Create a new workflow and download it into a git-tracked directory.

    NAME is the display name, e.g. "My New Workflow". The directory is named
    after its slug (my-new-workflow).
    """
    config = _load_config()
    try:
        with _build_sync(config, node_versions=not skip_node_versions) as sync:
            result = sync.new(name)
    except WorkflowSyncError as e:
        _fail(e, f'Creating workflow "{name}"')

    click.echo(f"✓ Created workflow in directory: {result.directory}")
    click.echo("✓ Initialized git repository with initial commit")


@main.command()
@click.argument("workflow_id", metavar="ID")
@click.argument("path", required=False, type=click.Path(path_type=Path))
@click.option(
    "--yes", "-y",
    "assume_yes",
    is_flag=True,
    envvar="N8N_SYNC_ASSUME_YES",
    help="Overwrite an existing workflow file without asking",
)
@node_versions_option
def pull(workflow_id: str, path: Optional[Path], assume_yes: bool, skip_node_versions: bool):
    """Download a workflow JSON file from the server and commit it.

    PATH may be a directory or a file. Defaults to a directory named after
    the workflow.
    """
    config = _load_config()
    try:
        with _build_sync(config, assume_yes=assume_yes, node_versions=not skip_node_versions) as sync:
            result = sync.pull(workflow_id, path)
    except WorkflowSyncError as e:
        _fail(e, f"Pulling workflow {workflow_id}")

    if result.aborted:
        click.echo("Aborted")
        return

    if result.repository_initialized:
        click.echo(f"✓ Initialized git repository in {result.directory}")
    click.echo(f"✓ Downloaded workflow {workflow_id} to {result.file_path}")


@main.command()
@click.argument("workflow_id", metavar="[ID]", required=False)
@click.argument("path", required=False, type=click.Path(path_type=Path))
def push(workflow_id: Optional[str], path: Optional[Path]):
    """Upload a modified workflow JSON file to the server.

    Without ID, the id is read from the JSON file. Without PATH, uses
    workflow.json or the only JSON file in the current directory.
    """
    config = _load_config()
    try:
        with _build_sync(config, node_versions=False) as sync:
            result = sync.push(workflow_id, path)
    except WorkflowSyncError as e:
        _fail(e, "Pushing workflow")

    click.echo(f"✓ Updated workflow {result.workflow.id}: {result.workflow.name}")


@main.command("config")
def show_config():
    """Show the effective connection settings."""
    try:
        provider = get_default_config_provider()
    except ConfigError as e:
        click.echo(f"✗ Configuration error: {e}", err=True)
        sys.exit(1)
    source = getattr(provider, "source", None)
    click.echo(f"Settings file: {source or '(none)'}")

    config = _load_config()
    for key, value in config.describe().items():
        click.echo(f"  {key}: {value}")


if __name__ == "__main__":
    main()
