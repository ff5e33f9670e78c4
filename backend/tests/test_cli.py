from __future__ import annotations

from sqlalchemy import inspect
from typer.testing import CliRunner

from catalog.cli import app
from catalog.core.database import engine


runner = CliRunner()


def test_migrate_load_and_rollback():
    result = runner.invoke(app, ["migrate"])
    assert result.exit_code == 0, result.output
    assert "Applied 20250407115757" in result.output
    assert "up to date" in runner.invoke(app, ["migrate"]).output

    listing = runner.invoke(app, ["migrations"])
    assert listing.exit_code == 0
    assert "20250301093015" in listing.output

    result = runner.invoke(app, ["load-fixtures", "--seed", "7"])
    assert result.exit_code == 0, result.output
    assert "100 books" in result.output

    result = runner.invoke(app, ["create-user", "cli@example.com", "--password", "secret", "--role", "ROLE_ADMIN"])
    assert result.exit_code == 0, result.output
    duplicate = runner.invoke(app, ["create-user", "cli@example.com", "--password", "secret"])
    assert duplicate.exit_code == 1

    result = runner.invoke(app, ["rollback", "--target", "0"])
    assert result.exit_code == 0, result.output
    assert set(inspect(engine).get_table_names()) == {"migration_versions"}


def test_create_user_rejects_unknown_roles():
    result = runner.invoke(app, ["create-user", "x@example.com", "--password", "secret", "--role", "ROLE_GOD"])
    assert result.exit_code == 1
    assert "Unknown role" in result.output
