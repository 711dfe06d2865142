"""CLI entry point for taskboard-permissions.

Invoked as::

    taskboard-perms [OPTIONS] COMMAND [ARGS]...

or during development::

    python -m taskboard_permissions.cli.main

Commands
--------
- matrix   Show the role × permission grant table
- check    Check one permission for a user against a YAML fixture
- explain  Show every permission a user holds on a project or team
- version  Show version information
"""
from __future__ import annotations

import sys
from pathlib import Path

import click
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from taskboard_permissions.config import ConfigLoader, PermissionsConfig
from taskboard_permissions.engine import PermissionEngine
from taskboard_permissions.errors import ConfigError, NotFoundError, StorageError
from taskboard_permissions.roles.enums import (
    ProjectPermission,
    ProjectTeamRole,
    TeamPermission,
    TeamRole,
)
from taskboard_permissions.roles.table import permissions_for
from taskboard_permissions.storage.memory import InMemoryRepository

console = Console()
err_console = Console(stderr=True)

_EXIT_DENIED = 1
_EXIT_NOT_FOUND = 2
_EXIT_ERROR = 3


# ---------------------------------------------------------------------------
# Root command group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="taskboard-permissions")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(),
    default=None,
    help="Permissions config YAML (cache TTL and sizing).",
)
@click.pass_context
def cli(ctx: click.Context, config_path: str | None) -> None:
    """Taskboard permission tools: role matrix and access checks."""
    loader = ConfigLoader()
    if config_path is None:
        ctx.obj = loader.defaults()
        return
    try:
        ctx.obj = loader.load(Path(config_path))
    except ConfigError as exc:
        err_console.print(f"[red]Config error:[/red] {escape(str(exc))}")
        sys.exit(_EXIT_ERROR)


# ---------------------------------------------------------------------------
# version
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from taskboard_permissions import __version__

    console.print(
        Panel(
            f"[bold]taskboard-permissions[/bold]  v[cyan]{__version__}[/cyan]\n"
            "Permission resolution and caching for team/project boards.",
            title="Version",
            border_style="blue",
        )
    )


# ---------------------------------------------------------------------------
# matrix
# ---------------------------------------------------------------------------


@cli.command(name="matrix")
@click.option(
    "--scope",
    type=click.Choice(["project", "team"]),
    default="project",
    show_default=True,
    help="Which role hierarchy to display.",
)
def matrix_command(scope: str) -> None:
    """Show which permissions each role is granted."""
    roles: list[ProjectTeamRole] | list[TeamRole]
    permissions: list[ProjectPermission] | list[TeamPermission]
    if scope == "project":
        roles, permissions, override = list(ProjectTeamRole), list(ProjectPermission), "owner"
    else:
        roles, permissions, override = list(TeamRole), list(TeamPermission), "creator"

    table = Table(title=f"{scope.capitalize()} permissions", box=box.SIMPLE_HEAVY)
    table.add_column("Permission", style="bold")
    for role in roles:
        table.add_column(role.value, justify="center")
    table.add_column(override, justify="center", style="dim")

    grants = {role: permissions_for(role) for role in roles}
    for permission in permissions:
        cells = ["[green]✓[/green]" if permission in grants[role] else "·" for role in roles]
        table.add_row(permission.name, *cells, "[green]✓[/green]")
    console.print(table)


# ---------------------------------------------------------------------------
# check
# ---------------------------------------------------------------------------


@cli.command(name="check")
@click.argument("fixture", type=click.Path(exists=True, dir_okay=False))
@click.option("--user", "-u", "user_id", required=True, help="User identifier.")
@click.option("--project", "-p", "project_id", default=None, help="Project identifier.")
@click.option("--team", "-t", "team_id", default=None, help="Team identifier.")
@click.option(
    "--permission",
    "-P",
    "permission_name",
    required=True,
    help="Permission name, e.g. CARD_CREATE or card:create.",
)
@click.pass_obj
def check_command(
    config: PermissionsConfig,
    fixture: str,
    user_id: str,
    project_id: str | None,
    team_id: str | None,
    permission_name: str,
) -> None:
    """Check one permission.  Exit 0 = allowed, 1 = denied, 2 = not found."""
    scope, resource_id = _resolve_scope(project_id, team_id)
    permission = _parse_permission(scope, permission_name)
    engine = _engine_from_fixture(fixture, config)

    checker = engine.project_checker() if scope == "project" else engine.team_checker()
    try:
        checker.load_context(user_id, resource_id)
        allowed = checker.has_permission(permission)  # type: ignore[arg-type]
    except NotFoundError as exc:
        err_console.print(f"[yellow]{escape(str(exc))}[/yellow]")
        sys.exit(_EXIT_NOT_FOUND)
    except StorageError as exc:
        err_console.print(f"[red]Denied (storage failure):[/red] {escape(str(exc))}")
        sys.exit(_EXIT_DENIED)

    verdict = "[green]ALLOWED[/green]" if allowed else "[red]DENIED[/red]"
    console.print(f"{verdict}  {permission.name}  user={user_id}  {scope}={resource_id}")
    sys.exit(0 if allowed else _EXIT_DENIED)


# ---------------------------------------------------------------------------
# explain
# ---------------------------------------------------------------------------


@cli.command(name="explain")
@click.argument("fixture", type=click.Path(exists=True, dir_okay=False))
@click.option("--user", "-u", "user_id", required=True, help="User identifier.")
@click.option("--project", "-p", "project_id", default=None, help="Project identifier.")
@click.option("--team", "-t", "team_id", default=None, help="Team identifier.")
@click.pass_obj
def explain_command(
    config: PermissionsConfig,
    fixture: str,
    user_id: str,
    project_id: str | None,
    team_id: str | None,
) -> None:
    """Show every permission a user holds on a project or team."""
    scope, resource_id = _resolve_scope(project_id, team_id)
    engine = _engine_from_fixture(fixture, config)

    try:
        if scope == "project":
            project_checker = engine.project_checker()
            context = project_checker.load_context(user_id, resource_id)
            role = project_checker.display_role()
            flags = project_checker.get_all_permissions().to_dict()
            special = "owner" if context.is_project_owner else None
            via = ", ".join(
                f"{m.team_id} ({m.project_role.value})" for m in context.team_memberships
            ) or "none"
        else:
            team_checker = engine.team_checker()
            team_context = team_checker.load_context(user_id, resource_id)
            role = team_checker.display_role()
            flags = team_checker.get_all_permissions().to_dict()
            special = "creator" if team_context.is_team_creator else None
            via = "none"
    except NotFoundError as exc:
        err_console.print(f"[yellow]{escape(str(exc))}[/yellow]")
        sys.exit(_EXIT_NOT_FOUND)
    except StorageError as exc:
        err_console.print(f"[red]Storage failure:[/red] {escape(str(exc))}")
        sys.exit(_EXIT_ERROR)

    console.print(
        Panel(
            f"User:  [bold]{user_id}[/bold]\n"
            f"{scope.capitalize()}: [bold]{resource_id}[/bold]\n"
            f"Role:  [cyan]{role.value if role else 'none'}[/cyan]"
            + (f"  [magenta]({special})[/magenta]" if special else "")
            + (f"\nVia teams: {via}" if scope == "project" else ""),
            title="Access",
            border_style="blue",
        )
    )
    table = Table(box=box.SIMPLE)
    table.add_column("Flag")
    table.add_column("Value", justify="center")
    for name, value in flags.items():
        table.add_row(name, "[green]yes[/green]" if value else "[red]no[/red]")
    console.print(table)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _resolve_scope(project_id: str | None, team_id: str | None) -> tuple[str, str]:
    if (project_id is None) == (team_id is None):
        raise click.UsageError("Pass exactly one of --project or --team.")
    if project_id is not None:
        return "project", project_id
    return "team", team_id  # type: ignore[return-value]


def _parse_permission(scope: str, name: str) -> ProjectPermission | TeamPermission:
    enum_type = ProjectPermission if scope == "project" else TeamPermission
    key = name.strip()
    if key.upper() in enum_type.__members__:
        return enum_type[key.upper()]
    try:
        return enum_type(key.lower())
    except ValueError:
        valid = ", ".join(enum_type.__members__)
        raise click.BadParameter(
            f"Unknown {scope} permission '{name}'. Valid: {valid}",
            param_hint="--permission",
        ) from None


def _engine_from_fixture(fixture: str, config: PermissionsConfig) -> PermissionEngine:
    try:
        repository = InMemoryRepository.from_yaml(Path(fixture))
    except ConfigError as exc:
        err_console.print(f"[red]Fixture error:[/red] {escape(str(exc))}")
        sys.exit(_EXIT_ERROR)
    engine = PermissionEngine(repository, config=config)
    repository.attach(engine.invalidation)
    return engine


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    cli()
