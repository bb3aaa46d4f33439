from pathlib import Path

import pytest

import main
from main import _parse_args


def test_default_command_invokes_serve() -> None:
    args = _parse_args([])
    assert args.command == "serve"


def test_default_command_accepts_options_without_subcommand() -> None:
    args = _parse_args(["--host", "127.0.0.1", "--port", "8081"])
    assert args.command == "serve"
    assert args.host == "127.0.0.1"
    assert args.port == 8081


def test_create_user_subcommand_takes_name_and_email() -> None:
    args = _parse_args(["create-user", "Ana", "ana@x.com"])
    assert args.command == "create-user"
    assert (args.name, args.email) == ("Ana", "ana@x.com")


@pytest.fixture()
def cli_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    db_path = tmp_path / "cli.sqlite3"
    monkeypatch.setenv("AUTH_DB_PATH", str(db_path))
    monkeypatch.setenv("AUTH_TOKEN_SECRET", "cli-secret")
    monkeypatch.setenv("AUTH_BCRYPT_ROUNDS", "4")
    monkeypatch.delenv("AUTH_CONFIG_PATH", raising=False)
    return db_path


def test_init_db_creates_database(cli_env: Path) -> None:
    assert main.main(["init-db"]) == 0
    assert cli_env.exists()


def test_create_and_list_users(cli_env: Path, monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    monkeypatch.setattr(main, "getpass", lambda prompt="": "secret123")

    assert main.main(["create-user", "Ana", "ana@x.com"]) == 0
    assert "Created user #1: Ana <ana@x.com>" in capsys.readouterr().out

    assert main.main(["create-user", "Ana", "ana@x.com"]) == 1
    assert "User already exists with email: ana@x.com" in capsys.readouterr().err

    assert main.main(["list-users"]) == 0
    listing = capsys.readouterr().out
    assert "1 user(s) found" in listing
    assert "ana@x.com" in listing


def test_create_user_rejects_invalid_email(cli_env: Path, monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    monkeypatch.setattr(main, "getpass", lambda prompt="": "secret123")

    assert main.main(["create-user", "Ana", "not-an-email"]) == 1
    assert "email must be a well-formed email address" in capsys.readouterr().err


def test_invalid_configuration_exits_with_error(cli_env: Path, monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    monkeypatch.setenv("AUTH_BCRYPT_ROUNDS", "two")
    assert main.main(["init-db"]) == 2
    assert "Configuration error" in capsys.readouterr().err
