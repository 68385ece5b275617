import pytest

from main import _parse_args, main


def test_default_command_invokes_serve() -> None:
    args = _parse_args([])
    assert args.command == "serve"
    assert args.port == 3000


def test_default_command_accepts_options_without_subcommand() -> None:
    args = _parse_args(["--host", "127.0.0.1", "--port", "8080"])
    assert args.command == "serve"
    assert args.host == "127.0.0.1"
    assert args.port == 8080


def test_config_option_precedes_subcommand() -> None:
    args = _parse_args(["--config", "bandboard.yaml", "load-catalog", "catalog.yaml"])
    assert args.command == "load-catalog"
    assert args.config == "bandboard.yaml"
    assert args.path == "catalog.yaml"


def test_init_db_subcommand_available() -> None:
    args = _parse_args(["init-db"])
    assert args.command == "init-db"


def test_malformed_catalogue_exits_with_message(tmp_path, monkeypatch) -> None:
    monkeypatch.delenv("BANDBOARD_DB_PATH", raising=False)
    config = tmp_path / "bandboard.yaml"
    config.write_text(f"database:\n  path: {tmp_path / 'bandboard.sqlite3'}\n", encoding="utf-8")
    catalog = tmp_path / "catalog.yaml"
    catalog.write_text("bands:\n  - name: Broken\n    channels: https://youtube.com/@broken\n", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        main(["--config", str(config), "load-catalog", str(catalog)])

    assert "Channels for band 'Broken'" in str(excinfo.value)
