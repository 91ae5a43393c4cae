"""Main CLI application module."""

import typer
from rich.console import Console
from rich.panel import Panel

from .user_commands import users_app

console = Console()

# Create the main CLI application
app = typer.Typer(
    help="User service CLI",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Register command groups
app.add_typer(users_app, name="users")


@app.command(name="serve")
def serve(
    host: str | None = typer.Option(None, help="Host to bind to (default from config)"),
    port: int | None = typer.Option(None, help="Port to bind to (default from config)"),
    reload: bool = typer.Option(False, help="Enable auto-reload on code changes"),
) -> None:
    """Start the HTTP server."""
    import uvicorn

    from src.user_service.runtime.context import get_config

    config = get_config()
    bind_host = host or config.app.host
    bind_port = port or config.app.port

    console.print(
        Panel.fit(
            f"[bold green]Starting user service on {bind_host}:{bind_port}[/bold green]",
            border_style="green",
        )
    )
    uvicorn.run(
        "src.user_service.api.http.app:app",
        host=bind_host,
        port=bind_port,
        reload=reload,
        access_log=False,  # We handle access logging in middleware
    )


@app.command(name="init-db")
def init_db() -> None:
    """Create the database tables."""
    from src.user_service.runtime.init_db import init_db as run_init_db

    run_init_db()
    console.print("[green]✅ Database tables created[/green]")


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
