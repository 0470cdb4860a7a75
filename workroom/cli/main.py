"""Main CLI interface for Workroom."""

import click
import json
import logging
from pathlib import Path
from typing import List, Optional
from rich.console import Console
from rich.table import Table
from rich.tree import Tree
from ..core.session import Workspace
from ..core.models import TaskTreeNode, WorkFile
from ..core.workfiles import decode
from ..core.clients import load_clients, add_client, remove_client
from ..core.launcher import open_path, reveal_path
from ..core.exceptions import (
    WorkroomError, FileSystemError, PathNotFoundError, PermissionDeniedError,
    AlreadyExistsError, TemplateMissingError, ParseError, ValidationError,
    SelectionError, ConfigurationError
)

# Initialize Rich console
console = Console()


@click.group()
@click.version_option(version="0.1.0")
@click.option('--config', '-c', type=click.Path(path_type=Path),
              help='Configuration file path (default: $WORKROOM_CONFIG or ~/.workroom/config.ini)')
@click.option('--log-level', type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR']),
              help='Set logging level (overrides config)')
@click.option('--log-file', type=click.Path(path_type=Path),
              help='Log file path (overrides config)')
@click.pass_context
def cli(ctx, config, log_level, log_file):
    """Workroom - organize production projects, tasks and versioned workfiles."""
    from ..core.config import setup_config, LoggingConfig
    from ..core.logging_config import setup_logging

    try:
        config_manager = setup_config(config)
    except ConfigurationError as e:
        handle_cli_error(e, "configuration")
        raise click.Abort()
    app_config = config_manager.get_config()

    # Override logging config if command line options provided
    if log_level or log_file:
        logging_config = LoggingConfig(
            level=log_level or app_config.logging.level,
            file_path=log_file or app_config.logging.file_path,
            file_enabled=app_config.logging.file_enabled or log_file is not None,
            console_enabled=app_config.logging.console_enabled,
            format=app_config.logging.format,
            file_max_size_mb=app_config.logging.file_max_size_mb,
            file_backup_count=app_config.logging.file_backup_count,
            audit_enabled=app_config.logging.audit_enabled,
        )
    else:
        logging_config = app_config.logging

    logging_manager = setup_logging(logging_config)
    if logging_config.level.upper() == 'DEBUG':
        logging_manager.enable_debug_logging()
        logging_manager.log_system_info()

    # Store config in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj['config'] = app_config
    ctx.obj['config_manager'] = config_manager
    ctx.obj['workspace'] = Workspace(app_config)


def _open_project(workspace: Workspace, project: str) -> None:
    workspace.refresh_projects()
    workspace.select_project(project)


@cli.command()
@click.option("--filter", "-f", "filter_text", default="", help="Only show projects whose name contains this text")
@click.option("--format", type=click.Choice(["table", "json"]), default="table", help="Output format")
@click.pass_context
def projects(ctx, filter_text: str, format: str):
    """List the projects in the projects directory."""
    workspace = ctx.obj['workspace']
    try:
        workspace.refresh_projects()
        workspace.project_filter = filter_text
        results = workspace.filtered_projects
    except WorkroomError as e:
        handle_cli_error(e, "project discovery")
        raise click.Abort()

    if format == "json":
        click.echo(json.dumps([p.to_dict() for p in results], indent=2))
        return

    if not results:
        console.print("[yellow]No projects found.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Name", style="cyan")
    table.add_column("Folder", style="green")
    table.add_column("Path", style="dim", no_wrap=False, max_width=60)
    for project in results:
        table.add_row(project.name, project.name_sanitized, str(project.root))
    console.print(table)
    console.print(f"\n[bold green]Found {len(results)} project(s)[/bold green]")


@cli.command("create-project")
@click.argument("name")
@click.option("--client", help="Registered client whose short name prefixes the project name")
@click.pass_context
def create_project_command(ctx, name: str, client: Optional[str]):
    """Create a new project folder from the configured layout."""
    workspace = ctx.obj['workspace']
    app_config = ctx.obj['config']
    try:
        selected_client = None
        if client:
            clients_file = app_config.paths.clients_file
            registered = load_clients(clients_file) if clients_file else []
            matches = [c for c in registered if c.name == client or c.short_name == client]
            if not matches:
                raise ValidationError(f"No client named '{client}'")
            selected_client = matches[0]

        project = workspace.create_project(name, selected_client)
    except WorkroomError as e:
        handle_cli_error(e, "project creation")
        raise click.Abort()

    console.print(f"[green]✓[/green] Created project [bold]{project.name}[/bold] in {project.root}")


def _add_tree_nodes(branch: Tree, node: TaskTreeNode) -> None:
    for child in node.children:
        if child.is_task:
            branch.add(f"[cyan]{child.name}[/cyan]")
        else:
            _add_tree_nodes(branch.add(f"[bold]{child.name}/[/bold]"), child)


@cli.command()
@click.argument("project")
@click.option("--format", type=click.Choice(["tree", "json"]), default="tree", help="Output format")
@click.pass_context
def tree(ctx, project: str, format: str):
    """Show the task tree of a project."""
    workspace = ctx.obj['workspace']
    try:
        _open_project(workspace, project)
    except WorkroomError as e:
        handle_cli_error(e, "task tree")
        raise click.Abort()

    task_tree = workspace.task_tree
    if format == "json":
        click.echo(json.dumps(task_tree.to_dict(task_tree.path), indent=2))
        return

    root = Tree(f"[bold blue]{workspace.current_project.name}[/bold blue] ({task_tree.path})")
    _add_tree_nodes(root, task_tree)
    console.print(root)


@cli.command()
@click.argument("project")
@click.argument("task")
@click.option("--format", type=click.Choice(["table", "json"]), default="table", help="Output format")
@click.pass_context
def files(ctx, project: str, task: str, format: str):
    """List the workfiles of TASK (a path relative to the work folder), latest first."""
    workspace = ctx.obj['workspace']
    try:
        _open_project(workspace, project)
        results = workspace.select_task(task)
    except WorkroomError as e:
        handle_cli_error(e, "file listing")
        raise click.Abort()

    _display_workfiles(results, format)


@cli.command("version-up")
@click.argument("path", type=click.Path(path_type=Path))
@click.pass_context
def version_up_command(ctx, path: Path):
    """Copy a workfile to the next version."""
    workspace = ctx.obj['workspace']
    try:
        new_file = workspace.version_up(decode(path))
    except WorkroomError as e:
        handle_cli_error(e, "version up")
        raise click.Abort()

    console.print(f"[green]✓[/green] Created {new_file.fmt_version()}: {new_file.path}")


@cli.command("new-file")
@click.argument("project")
@click.argument("task")
@click.option("--dcc", "-d", "dcc_name", required=True, help="Template (application) name")
@click.option("--name", "-n", "logical_name", default="", help="Optional descriptive part of the filename")
@click.pass_context
def new_file(ctx, project: str, task: str, dcc_name: str, logical_name: str):
    """Create the first version of a workfile in TASK from a template."""
    workspace = ctx.obj['workspace']
    try:
        workspace.refresh_dccs()
        _open_project(workspace, project)
        workspace.select_task(task)
        path = workspace.create_file(logical_name, dcc_name)
    except WorkroomError as e:
        handle_cli_error(e, "file creation")
        raise click.Abort()

    console.print(f"[green]✓[/green] Created {path}")


@cli.command("new-task")
@click.argument("project")
@click.argument("name")
@click.option("--parent", "-p", default="", help="Group folder, relative to the work folder")
@click.pass_context
def new_task(ctx, project: str, name: str, parent: str):
    """Create a task folder with its work subdirectories."""
    workspace = ctx.obj['workspace']
    try:
        _open_project(workspace, project)
        path = workspace.create_task(parent, name)
    except WorkroomError as e:
        handle_cli_error(e, "task creation")
        raise click.Abort()

    console.print(f"[green]✓[/green] Created task {path}")


@cli.command("new-group")
@click.argument("project")
@click.argument("name")
@click.option("--parent", "-p", default="", help="Group folder, relative to the work folder")
@click.pass_context
def new_group(ctx, project: str, name: str, parent: str):
    """Create a group folder for nesting tasks."""
    workspace = ctx.obj['workspace']
    try:
        _open_project(workspace, project)
        path = workspace.create_group(parent, name)
    except WorkroomError as e:
        handle_cli_error(e, "folder creation")
        raise click.Abort()

    console.print(f"[green]✓[/green] Created folder {path}")


@cli.command()
@click.pass_context
def dccs(ctx):
    """List the workfile templates."""
    workspace = ctx.obj['workspace']
    try:
        results = workspace.refresh_dccs()
    except WorkroomError as e:
        handle_cli_error(e, "template discovery")
        raise click.Abort()

    if not results:
        console.print("[yellow]No templates found.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Name", style="cyan")
    table.add_column("Extension", style="green", justify="center")
    table.add_column("Template", style="dim", no_wrap=False, max_width=60)
    for dcc in results:
        table.add_row(dcc.name, dcc.extension, str(dcc.template_path))
    console.print(table)


@cli.command("open")
@click.argument("path", type=click.Path(exists=True, path_type=Path))
def open_command(path: Path):
    """Open a file or folder with its default application."""
    if not open_path(path):
        console.print(f"[bold red]Error:[/bold red] could not open {path}")
        raise click.Abort()


@cli.command()
@click.argument("path", type=click.Path(exists=True, path_type=Path))
def reveal(path: Path):
    """Show a file or folder in the file manager."""
    if not reveal_path(path):
        console.print(f"[bold red]Error:[/bold red] could not reveal {path}")
        raise click.Abort()


@cli.group()
def client():
    """Client list management commands."""
    pass


def _clients_file(ctx) -> Path:
    clients_file = ctx.obj['config'].paths.clients_file
    if clients_file is None:
        handle_cli_error(ConfigurationError("No client list configured (paths.clients_file)"), "clients")
        raise click.Abort()
    return clients_file


@client.command('list')
@click.pass_context
def list_clients(ctx):
    """Show the registered clients."""
    try:
        clients = load_clients(_clients_file(ctx))
    except WorkroomError as e:
        handle_cli_error(e, "client list")
        raise click.Abort()

    if not clients:
        console.print("[yellow]No clients registered.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Name", style="cyan")
    table.add_column("Short name", style="green")
    for c in clients:
        table.add_row(c.name, c.short_name)
    console.print(table)


@client.command('add')
@click.argument('name')
@click.argument('short_name')
@click.pass_context
def add_client_command(ctx, name, short_name):
    """Register a client."""
    try:
        added = add_client(_clients_file(ctx), name, short_name)
    except WorkroomError as e:
        handle_cli_error(e, "client add")
        raise click.Abort()
    console.print(f"[green]✓[/green] Added client {added.name} ({added.short_name})")


@client.command('remove')
@click.argument('name')
@click.pass_context
def remove_client_command(ctx, name):
    """Remove a client."""
    try:
        remove_client(_clients_file(ctx), name)
    except WorkroomError as e:
        handle_cli_error(e, "client remove")
        raise click.Abort()
    console.print(f"[green]✓[/green] Removed client {name}")


@cli.command()
@click.option("--port", "-p", type=int, help="Port to run the web server on (default from config)")
@click.option("--host", "-h", help="Host to bind the web server to (default from config)")
@click.option("--debug", is_flag=True, help="Enable debug mode")
@click.pass_context
def web(ctx, port: Optional[int], host: Optional[str], debug: bool):
    """Start the JSON API server."""
    from ..web.app import create_app

    app_config = ctx.obj['config']
    host = host or app_config.web.host
    port = port or app_config.web.port
    debug = debug or app_config.web.debug

    console.print(f"[bold blue]Starting Workroom API...[/bold blue]")
    console.print(f"Server: http://{host}:{port}/api")
    console.print(f"Debug mode: {'enabled' if debug else 'disabled'}")
    console.print("\n[bold green]Press Ctrl+C to stop the server[/bold green]\n")

    try:
        app = create_app(app_config, {'DEBUG': debug})
        app.run(host=host, port=port, debug=debug)
    except KeyboardInterrupt:
        console.print("\n[bold yellow]Server stopped by user[/bold yellow]")
    except OSError as e:
        console.print(f"[bold red]Error starting web server: {e}[/bold red]")
        raise click.Abort()


@cli.group()
def config():
    """Configuration management commands."""
    pass


@config.command('show')
@click.pass_context
def show_config(ctx):
    """Show current configuration."""
    config_manager = ctx.obj['config_manager']

    console.print(f"[bold blue]Current Configuration[/bold blue] ({config_manager.config_file})\n")
    for section, values in config_manager.to_dict().items():
        if not isinstance(values, dict):
            continue
        console.print(f"[bold]{section.capitalize()}:[/bold]")
        for key, value in values.items():
            console.print(f"  {key}: {value}")
        console.print()


@config.command('set')
@click.argument('key')
@click.argument('value')
@click.pass_context
def set_config(ctx, key, value):
    """Set a configuration value. Use dot notation (e.g., paths.projects_dir)."""
    config_manager = ctx.obj['config_manager']

    try:
        converted_value = config_manager.set_value(key, value)
    except ConfigurationError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise click.Abort()

    console.print(f"[green]✓[/green] Set {key} = {converted_value}")


@config.command('reset')
@click.confirmation_option(prompt='Are you sure you want to reset all configuration to defaults?')
@click.pass_context
def reset_config(ctx):
    """Reset configuration to default values."""
    ctx.obj['config_manager'].reset_to_defaults()
    console.print("[green]✓ Configuration reset to defaults[/green]")


@config.command('export')
@click.argument('file_path', type=click.Path(path_type=Path))
@click.pass_context
def export_config(ctx, file_path):
    """Export configuration to JSON file."""
    try:
        ctx.obj['config_manager'].export_to_json(file_path)
    except OSError as e:
        console.print(f"[red]Error exporting configuration:[/red] {e}")
        raise click.Abort()
    console.print(f"[green]✓ Configuration exported to {file_path}[/green]")


def _display_workfiles(results: List[WorkFile], format: str):
    """Display workfiles in the specified format."""
    if format == "json":
        click.echo(json.dumps([f.to_dict() for f in results], indent=2))
        return

    if not results:
        console.print("[yellow]No workfiles found.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Name", style="cyan", no_wrap=False, max_width=40)
    table.add_column("Version", style="green", justify="center")
    table.add_column("Type", justify="center")
    table.add_column("Path", style="dim", no_wrap=False, max_width=50)

    for workfile in results:
        table.add_row(workfile.name, workfile.fmt_version(), workfile.extension, str(workfile.path))

    console.print(table)


def handle_cli_error(error: Exception, operation: str = "operation") -> None:
    """
    Handle CLI errors with appropriate user feedback.

    Args:
        error: The exception that occurred
        operation: Description of the operation that failed
    """
    if isinstance(error, PathNotFoundError):
        console.print(f"[bold red]Error:[/bold red] {error}")
        console.print("[yellow]Please check that the path exists and is accessible.[/yellow]")
    elif isinstance(error, PermissionDeniedError):
        console.print(f"[bold red]Permission Error:[/bold red] {error}")
        console.print("[yellow]Please check file/directory permissions.[/yellow]")
    elif isinstance(error, AlreadyExistsError):
        console.print(f"[bold red]Already Exists:[/bold red] {error}")
        console.print("[yellow]Nothing was overwritten. Refresh to see the current files.[/yellow]")
    elif isinstance(error, TemplateMissingError):
        console.print(f"[bold red]Template Missing:[/bold red] {error}")
        console.print("[yellow]Check the templates directory (paths.templates_dir).[/yellow]")
    elif isinstance(error, FileSystemError):
        console.print(f"[bold red]File System Error:[/bold red] {error}")
    elif isinstance(error, ParseError):
        console.print(f"[bold red]Parse Error:[/bold red] {error}")
    elif isinstance(error, SelectionError):
        console.print(f"[bold red]Not Found:[/bold red] {error}")
    elif isinstance(error, ConfigurationError):
        console.print(f"[bold red]Configuration Error:[/bold red] {error}")
        console.print("[yellow]Run 'workroom config show' to inspect the configuration.[/yellow]")
    elif isinstance(error, WorkroomError):
        console.print(f"[bold red]Error:[/bold red] {error}")
    else:
        console.print(f"[bold red]Unexpected Error:[/bold red] {error}")
        console.print("[yellow]An unexpected error occurred. Please check the logs for more details.[/yellow]")

    # Log the full error for debugging
    logging.getLogger(__name__).error(f"CLI error in {operation}: {error}", exc_info=True)


if __name__ == "__main__":
    cli()
