"""CLI tests — run against the database named by BRICKBASE_DATABASE_URL."""

from click.testing import CliRunner

from brickbase.cli.main import cli


def test_init_db_then_grant_role():
    runner = CliRunner()

    result = runner.invoke(cli, ["init-db"])
    assert result.exit_code == 0, result.output
    assert "Database initialised." in result.output

    result = runner.invoke(cli, ["grant-role", "first-admin@example.com", "admin"])
    assert result.exit_code == 0, result.output
    assert "first-admin@example.com is now admin" in result.output

    # Granting again just overwrites the role
    result = runner.invoke(cli, ["grant-role", "first-admin@example.com", "member"])
    assert result.exit_code == 0, result.output
    assert "is now member" in result.output


def test_grant_role_rejects_unknown_role():
    result = CliRunner().invoke(cli, ["grant-role", "x@example.com", "owner"])
    assert result.exit_code == 2
    assert "Invalid value" in result.output
