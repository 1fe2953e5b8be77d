"""End-to-end tests for the CLI with the local backend."""

import re
from pathlib import Path

import pytest
from typer.testing import CliRunner

from custos.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    for name in ("CUSTOS_BACKEND", "CUSTOS_LOG_LEVEL", "SUPABASE_URL", "SUPABASE_ANON_KEY"):
        monkeypatch.delenv(name, raising=False)
    return tmp_path


def added_id(output: str) -> str:
    match = re.search(r"Despesa adicionada \(([0-9a-f]+)\)", output)
    assert match, output
    return match.group(1)


class TestInit:
    """Tests for the init command."""

    def test_init_creates_files(self, isolated_home: Path) -> None:
        """Should create the database and config."""
        result = runner.invoke(app, ["init"])
        assert result.exit_code == 0, result.output
        assert (isolated_home / "data" / "custos" / "custos.db").exists()
        assert (isolated_home / "config" / "custos" / "config.toml").exists()

    def test_init_refuses_to_overwrite(self) -> None:
        """Should require --force the second time."""
        runner.invoke(app, ["init"])
        result = runner.invoke(app, ["init"])
        assert result.exit_code == 1
        assert "--force" in result.output


class TestExpenseCommands:
    """Tests for add, list, toggle and delete."""

    def test_first_run_dashboard_shows_seeds(self) -> None:
        """Should show the seed total for the current month."""
        result = runner.invoke(app, ["dashboard"])
        assert result.exit_code == 0, result.output
        assert "R$ 848,00" in result.output
        assert "R$ 450,00" in result.output

    def test_add_then_list(self) -> None:
        """Should add an expense and show it in its month."""
        result = runner.invoke(
            app,
            [
                "add",
                "--date", "05/03/2024",
                "--description", "Passagem aérea",
                "--amount", "1.250,90",
                "--category", "Viagens",
                "--method", "Cartão",
                "--pending",
            ],
        )
        assert result.exit_code == 0, result.output
        assert "Data: 2024-03-05" in result.output
        assert "R$ 1.250,90" in result.output

        result = runner.invoke(app, ["list", "--month", "2024-03", "--status", "pending"])
        assert result.exit_code == 0, result.output
        assert "Total (após filtros): R$ 1.250,90" in result.output

    def test_add_invalid_amount(self) -> None:
        """Should refuse the expense and exit with an error."""
        result = runner.invoke(
            app,
            ["add", "-d", "2024-03-05", "-m", "X", "-a", "abc", "-c", "Outros", "--method", "PIX"],
        )
        assert result.exit_code == 1
        assert "Valor inválido" in result.output

    def test_toggle_and_delete(self) -> None:
        """Should flip status and remove the expense."""
        result = runner.invoke(
            app,
            ["add", "-d", "2024-01-10", "-m", "Curso", "-a", "100", "-c", "Treinamento", "--method", "PIX"],
        )
        expense_id = added_id(result.output)

        result = runner.invoke(app, ["toggle", expense_id])
        assert result.exit_code == 0, result.output
        assert "Pendente" in result.output

        result = runner.invoke(app, ["list", "--month", "2024-01", "--status", "pending"])
        assert "Total (após filtros): R$ 100,00" in result.output

        result = runner.invoke(app, ["delete", expense_id])
        assert result.exit_code == 0, result.output

        result = runner.invoke(app, ["list", "--month", "2024-01"])
        assert "Total (após filtros): R$ 0,00" in result.output

    def test_toggle_unknown_id(self) -> None:
        """Should report the missing expense."""
        result = runner.invoke(app, ["toggle", "missing"])
        assert result.exit_code == 1
        assert "não encontrada" in result.output

    def test_delete_unknown_id(self) -> None:
        """Should be a harmless no-op."""
        result = runner.invoke(app, ["delete", "missing"])
        assert result.exit_code == 0
        assert "nada a excluir" in result.output

    def test_invalid_filter(self) -> None:
        """Should reject unknown filter values."""
        result = runner.invoke(app, ["list", "--status", "late"])
        assert result.exit_code == 1

    def test_months(self) -> None:
        """Should list at least the trailing 12 months."""
        result = runner.invoke(app, ["months"])
        assert result.exit_code == 0, result.output
        assert len(re.findall(r"\d{4}-\d{2}", result.output)) >= 12


class TestRemoteBackend:
    """Tests for commands that need the remote backend."""

    def test_login_requires_remote_backend(self) -> None:
        """Should explain that login is for the remote backend."""
        result = runner.invoke(app, ["login", "--email", "ana@example.com"])
        assert result.exit_code == 1

    def test_remote_without_credentials(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Should ask for Supabase settings."""
        monkeypatch.setenv("CUSTOS_BACKEND", "remote")
        result = runner.invoke(app, ["dashboard"])
        assert result.exit_code == 1
        assert "SUPABASE_URL" in result.output

    def test_remote_without_session(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Should send the user to the login command."""
        monkeypatch.setenv("CUSTOS_BACKEND", "remote")
        monkeypatch.setenv("SUPABASE_URL", "https://demo.supabase.co")
        monkeypatch.setenv("SUPABASE_ANON_KEY", "anon-key")
        result = runner.invoke(app, ["list"])
        assert result.exit_code == 1
        assert "custos login" in result.output

    def test_whoami_with_unreadable_database(self, isolated_home: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Should print the database error instead of crashing."""
        monkeypatch.setenv("CUSTOS_BACKEND", "remote")
        monkeypatch.setenv("SUPABASE_URL", "https://demo.supabase.co")
        monkeypatch.setenv("SUPABASE_ANON_KEY", "anon-key")
        db_path = isolated_home / "data" / "custos" / "custos.db"
        db_path.parent.mkdir(parents=True)
        db_path.write_text("not a database")

        result = runner.invoke(app, ["whoami"])

        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert "Database error" in result.output

    def test_watch_requires_remote_backend(self) -> None:
        """Should refuse to watch the local backend."""
        result = runner.invoke(app, ["watch"])
        assert result.exit_code == 1


class TestSettings:
    """Tests for configuration errors."""

    def test_unknown_log_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Should report the bad level instead of crashing."""
        monkeypatch.setenv("CUSTOS_LOG_LEVEL", "verbose")
        result = runner.invoke(app, ["months"])
        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert "log level" in result.output
