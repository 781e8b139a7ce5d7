"""Main CLI implementation."""

from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Optional

import click
import structlog
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from .. import __version__
from ..audit import EventType, audit_event, setup_logging
from ..config import StoreSettings
from ..permissions import format_permissions, parse_permissions
from ..store import DEFAULT_PERMISSIONS, UserRecord, UserStore, open_store

# Initialize logger
logger = structlog.get_logger()
console = Console()

MENU = """
--- Credential Store Menu ---
1. Insert User
2. Print Users
3. Authenticate User
4. Authorize Action
5. Remove User
6. Clear List
7. Show Size
8. Update Permissions
0. Exit"""

PERMISSIONS_PROMPT = "Enter permissions (comma-separated, e.g., view,edit)"


def print_table(title: str, rows: list[dict], columns: list[tuple[str, str]]) -> None:
    """Print data in a formatted table.

    Args:
        title: Table title
        rows: List of row dictionaries
        columns: List of (key, header) tuples defining columns
    """
    table = Table(title=title)
    for key, header in columns:
        table.add_column(header, style="cyan")

    for row in rows:
        values = [str(row.get(key, "")) for key, _ in columns]
        table.add_row(*values)

    console.print(table)


def render_chain(records: Sequence[UserRecord]) -> str:
    """Render usernames as ``alice -> bob -> NULL``."""
    return "".join(f"{record.username} -> " for record in records) + "NULL"


def prompt_permissions(settings: StoreSettings) -> list[str]:
    raw = click.prompt(PERMISSIONS_PROMPT, default="", show_default=False)
    return parse_permissions(raw, settings.default_permissions)


def insert_user(store: UserStore, settings: StoreSettings) -> None:
    username = click.prompt("Enter username")
    password = click.prompt("Enter password", default="", show_default=False, hide_input=True)
    permissions = prompt_permissions(settings)

    if store.insert(username, password, permissions):
        audit_event(
            event_type=EventType.USER_CREATE,
            user=username,
            success=True,
            details={"permissions": permissions},
        )
        click.echo("User inserted.")
    else:
        audit_event(
            event_type=EventType.USER_CREATE,
            user=username,
            success=False,
            details={"reason": "duplicate_username"},
        )
        click.echo("Username already exists.")


def print_users(store: UserStore, settings: StoreSettings) -> None:
    records = list(store.iterate())
    audit_event(
        event_type=EventType.USER_LIST, user="cli", success=True, details={"count": len(records)}
    )

    if not records:
        click.echo("List is empty.")
        return

    if settings.list_format == "chain":
        click.echo(render_chain(records))
        return

    rows = [
        {
            "position": str(position),
            "username": record.username,
            "permissions": format_permissions(record.permissions),
        }
        for position, record in enumerate(records, start=1)
    ]
    columns = [
        ("position", "#"),
        ("username", "Username"),
        ("permissions", "Permissions"),
    ]
    print_table("Users", rows, columns)


def authenticate_user(store: UserStore, settings: StoreSettings) -> None:
    username = click.prompt("Enter username")
    password = click.prompt("Enter password", default="", show_default=False, hide_input=True)

    success = store.authenticate(username, password)
    audit_event(event_type=EventType.AUTH_LOGIN, user=username, success=success)
    click.echo("Authentication successful." if success else "Authentication failed.")


def authorize_action(store: UserStore, settings: StoreSettings) -> None:
    username = click.prompt("Enter username")
    action = click.prompt("Enter action to authorize (e.g., view, edit, create)")

    success = store.authorize(username, action)
    audit_event(
        event_type=EventType.AUTH_AUTHORIZE,
        user=username,
        success=success,
        details={"action": action},
    )
    click.echo("Action authorized." if success else "Action denied.")


def remove_user(store: UserStore, settings: StoreSettings) -> None:
    username = click.prompt("Enter username to remove")

    success = store.remove(username)
    audit_event(event_type=EventType.USER_DELETE, user=username, success=success)
    click.echo("User removed." if success else "User not found.")


def clear_users(store: UserStore, settings: StoreSettings) -> None:
    count = store.size()
    store.clear()
    audit_event(
        event_type=EventType.STORE_CLEAR, user="cli", success=True, details={"removed": count}
    )
    click.echo("List cleared.")


def show_size(store: UserStore, settings: StoreSettings) -> None:
    click.echo(f"Size of list: {store.size()}")


def update_permissions(store: UserStore, settings: StoreSettings) -> None:
    username = click.prompt("Enter username")
    permissions = prompt_permissions(settings)

    success = store.update_permissions(username, permissions)
    audit_event(
        event_type=EventType.USER_UPDATE,
        user=username,
        success=success,
        details={"permissions": permissions},
    )
    click.echo("Permissions updated." if success else "User not found.")


MenuAction = Callable[[UserStore, StoreSettings], None]

ACTIONS: dict[int, MenuAction] = {
    1: insert_user,
    2: print_users,
    3: authenticate_user,
    4: authorize_action,
    5: remove_user,
    6: clear_users,
    7: show_size,
    8: update_permissions,
}


def run_menu(store: UserStore, settings: StoreSettings) -> None:
    """Read menu selections and dispatch them until 0 is chosen."""
    while True:
        click.echo(MENU)
        choice = click.prompt("Choose an option", type=int)

        if choice == 0:
            click.echo("Exiting program.")
            return

        logger.debug("menu_choice", choice=choice)
        action = ACTIONS.get(choice)
        if action is None:
            click.echo("Invalid option. Try again.")
            continue

        action(store, settings)


@click.group()
@click.version_option(version=__version__, prog_name="credstore")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    default="INFO",
    envvar="CREDSTORE_LOG_LEVEL",
    help="Set logging level",
)
@click.option(
    "--log-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    envvar="CREDSTORE_LOG_DIR",
    help="Directory for the log file (default: ~/.local/log)",
)
@click.pass_context
def cli(ctx: click.Context, log_level: str, log_dir: Optional[Path]) -> None:
    """Credential store CLI.

    Keeps user records in memory for the length of one session.
    """
    settings = StoreSettings(log_level=log_level, log_dir=log_dir)
    setup_logging(log_level=settings.log_level, base_dir=settings.log_dir)
    ctx.obj = settings


@cli.command()
@click.option(
    "--default-permission",
    "default_permissions",
    multiple=True,
    help="Permission given when none is typed (can be specified multiple times)",
)
@click.option(
    "--format",
    "list_format",
    type=click.Choice(["table", "chain"]),
    default="table",
    envvar="CREDSTORE_FORMAT",
    help="How Print Users renders the list",
)
@click.pass_context
def menu(ctx: click.Context, default_permissions: tuple[str, ...], list_format: str) -> None:
    """Run the interactive credential store menu."""
    try:
        settings = StoreSettings(
            **{
                **ctx.obj.model_dump(),
                "default_permissions": list(default_permissions or DEFAULT_PERMISSIONS),
                "list_format": list_format,
            }
        )
    except ValidationError as e:
        raise click.BadParameter(str(e), param_hint="'--default-permission'")

    audit_event(
        event_type=EventType.SYS_STARTUP,
        user="cli",
        success=True,
        details={"default_permissions": settings.default_permissions},
    )
    try:
        with open_store() as store:
            run_menu(store, settings)
    finally:
        audit_event(event_type=EventType.SYS_SHUTDOWN, user="cli", success=True)


def main() -> None:
    """CLI entry point."""
    cli()
