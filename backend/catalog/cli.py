"""Command line entry point: migrations, fixtures, users and the dev server."""
from __future__ import annotations

from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from catalog import migrations
from catalog.core.auth import hash_password
from catalog.core.config import settings
from catalog.core.database import SessionLocal, engine, transaction
from catalog.core.logging import configure_logging
from catalog.fixtures import load_fixtures
from catalog.models import User
from catalog.repositories import UserRepository
from catalog.security.roles import ASSIGNABLE_ROLES


console = Console()

app = typer.Typer(
    help="Book catalog administration",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


@app.callback()
def _setup() -> None:
    configure_logging(settings.log_level)


@app.command("migrate")
def migrate(
    target: Optional[str] = typer.Option(None, "--target", "-t", help="Stop after this version"),
) -> None:
    """Apply pending migrations."""
    applied = migrations.upgrade(engine, target=target)
    if not applied:
        console.print("[green]Database is up to date.[/green]")
        return
    for version in applied:
        console.print(f"[green]Applied {version}[/green]")


@app.command("rollback")
def rollback(
    steps: int = typer.Option(1, "--steps", "-s", min=1, help="Number of migrations to revert"),
    target: Optional[str] = typer.Option(None, "--target", "-t", help="Revert everything newer than this version ('0' for all)"),
) -> None:
    """Revert applied migrations."""
    try:
        reverted = migrations.downgrade(engine, target=target, steps=steps)
    except RuntimeError as e:
        console.print(f"[red]❌ {e}[/red]")
        raise typer.Exit(code=1) from e
    if not reverted:
        console.print("[yellow]Nothing to revert.[/yellow]")
    for version in reverted:
        console.print(f"[yellow]Reverted {version}[/yellow]")


@app.command("migrations")
def show_migrations() -> None:
    """List known migrations and whether they ran."""
    table = Table(title="Migrations")
    table.add_column("Version", style="cyan")
    table.add_column("Description", style="green")
    table.add_column("Executed at", style="magenta")
    for migration, executed_at in migrations.status(engine):
        table.add_row(
            migration.version,
            migration.description,
            executed_at.isoformat(sep=" ", timespec="seconds") if executed_at else "[red]pending[/red]",
        )
    console.print(table)


@app.command("load-fixtures")
def load_fixtures_command(
    seed: Optional[int] = typer.Option(None, "--seed", help="Random seed for reproducible data"),
) -> None:
    """Fill the database with random authors, editors, users and books."""
    db = SessionLocal()
    try:
        counts = load_fixtures(db, seed=seed)
    finally:
        db.close()
    console.print(
        f"[green]✅ Loaded {counts.authors} authors, {counts.editors} editors, "
        f"{counts.users} users and {counts.books} books[/green]"
    )


@app.command("create-user")
def create_user(
    email: str = typer.Argument(..., help="Login email"),
    password: str = typer.Option(..., "--password", "-p", prompt=True, hide_input=True, help="Password"),
    roles: List[str] = typer.Option([], "--role", "-r", help="Role to grant, repeatable"),
) -> None:
    """Create a user account."""
    unknown = [role for role in roles if role not in ASSIGNABLE_ROLES]
    if unknown:
        console.print(f"[red]❌ Unknown role(s): {', '.join(unknown)}[/red]")
        raise typer.Exit(code=1)
    db = SessionLocal()
    try:
        users = UserRepository(db)
        if users.find_by_email(email) is not None:
            console.print(f"[red]❌ User '{email}' already exists[/red]")
            raise typer.Exit(code=1)
        with transaction(db):
            user = users.add(User(email=email, roles=sorted(set(roles)), password=hash_password(password)))
        console.print(f"[green]✅ Created user '{user.email}' (id {user.id})[/green]")
    finally:
        db.close()


@app.command("serve")
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(8000, "--port", help="Bind port"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
) -> None:
    """Run the API with uvicorn."""
    import uvicorn

    uvicorn.run("catalog.main:app", host=host, port=port, reload=reload)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
