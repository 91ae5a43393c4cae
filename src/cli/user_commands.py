"""User record CLI commands."""

import typer
from rich.console import Console
from rich.table import Table

from src.user_service.core.errors import UserServiceError
from src.user_service.core.security import PasswordHasher
from src.user_service.core.services import (
    DbManageService,
    DbSessionService,
    UserManagementService,
)

console = Console()

# Create the users subcommand app
users_app = typer.Typer(help="Inspect stored users")


@users_app.command("list")
def list_users() -> None:
    """List all stored users (password hashes are not shown)."""
    database_service = DbSessionService()
    DbManageService(database_service.engine).create_all()

    try:
        with database_service.session_scope() as session:
            users = UserManagementService(session, PasswordHasher()).list_users()
    except UserServiceError as e:
        console.print(f"[red]❌ Failed to list users: {e}[/red]")
        raise typer.Exit(code=1) from e
    finally:
        database_service.dispose()

    if not users:
        console.print("[yellow]No users found[/yellow]")
        return

    table = Table(title="Users")
    table.add_column("ID", style="cyan")
    table.add_column("Username", style="green")
    table.add_column("Email", style="blue")
    table.add_column("Phone", style="blue")
    table.add_column("First Name", style="magenta")
    table.add_column("Last Name", style="magenta")
    table.add_column("Birthday")
    table.add_column("Active", style="yellow")

    for user in users:
        table.add_row(
            str(user.user_id),
            user.username,
            user.email,
            user.phone,
            user.first_name,
            user.last_name,
            user.birthday.isoformat() if user.birthday else "",
            "✅" if user.is_active else "❌",
        )

    console.print(table)
    console.print(f"\n[green]Found {len(users)} users[/green]")
