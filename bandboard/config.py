"""Configuration management for the Bandboard web application."""
from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, Mapping, Optional

import yaml

DEFAULT_SESSION_MAX_AGE = 3600
DEFAULT_BCRYPT_ROUNDS = 12

_PROJECT_ROOT = Path(__file__).resolve().parent.parent


@dataclass(frozen=True)
class RegistrationFields:
    """Which of the optional profile fields registration insists on."""

    require_first_name: bool = True
    require_last_name: bool = True


@dataclass(frozen=True)
class Settings:
    """Process-wide settings passed explicitly into the application factory."""

    database_path: Path
    session_secret: Optional[str] = None
    session_cookie: str = "session"
    session_max_age: int = DEFAULT_SESSION_MAX_AGE
    session_https_only: bool = False
    bcrypt_rounds: int = DEFAULT_BCRYPT_ROUNDS
    registration: RegistrationFields = field(default_factory=RegistrationFields)
    static_dir: Path = Path(__file__).resolve().parent / "static"
    picture_dir: Path = _PROJECT_ROOT / "pic"


def _env_flag(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _section(raw: Mapping[str, object], name: str) -> Dict[str, object]:
    value = raw.get(name)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"Configuration section '{name}' must be a mapping")
    return value


def _resolve_path(value: object, base_path: Optional[Path]) -> Path:
    raw_path = Path(str(value)).expanduser()
    if not raw_path.is_absolute() and base_path is not None:
        raw_path = base_path / raw_path
    return raw_path.resolve(strict=False)


def resolve_database_path(env_value: Optional[str]) -> Path:
    """Resolve the on-disk path for the application database."""

    if env_value:
        return Path(env_value).expanduser().resolve(strict=False)
    return (_PROJECT_ROOT / "data" / "bandboard.sqlite3").resolve(strict=False)


def resolve_config_path(env_value: Optional[str]) -> Path:
    """Resolve the path to the optional YAML configuration file."""
    if env_value:
        return Path(env_value).expanduser().resolve(strict=False)
    return (_PROJECT_ROOT / "config" / "bandboard.yaml").resolve(strict=False)


def _apply_file(settings: Settings, config_path: Path) -> Settings:
    with config_path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}
    if not isinstance(raw, dict):
        raise ValueError("Configuration file must contain a mapping at the top level")

    base_path = config_path.parent
    database = _section(raw, "database")
    session = _section(raw, "session")
    passwords = _section(raw, "passwords")
    registration = _section(raw, "registration")
    static = _section(raw, "static")

    changes: Dict[str, object] = {}
    if database.get("path"):
        changes["database_path"] = _resolve_path(database["path"], base_path)
    if session.get("cookie_name"):
        changes["session_cookie"] = str(session["cookie_name"])
    if session.get("max_age") is not None:
        changes["session_max_age"] = int(session["max_age"])
    if session.get("https_only") is not None:
        changes["session_https_only"] = bool(session["https_only"])
    if passwords.get("rounds") is not None:
        changes["bcrypt_rounds"] = int(passwords["rounds"])
    if registration:
        changes["registration"] = RegistrationFields(
            require_first_name=bool(registration.get("require_first_name", True)),
            require_last_name=bool(registration.get("require_last_name", True)),
        )
    if static.get("directory"):
        changes["static_dir"] = _resolve_path(static["directory"], base_path)
    if static.get("pictures"):
        changes["picture_dir"] = _resolve_path(static["pictures"], base_path)
    return replace(settings, **changes)


def _apply_environment(settings: Settings, environ: Mapping[str, str]) -> Settings:
    changes: Dict[str, object] = {}
    if environ.get("BANDBOARD_DB_PATH"):
        changes["database_path"] = resolve_database_path(environ["BANDBOARD_DB_PATH"])
    if environ.get("BANDBOARD_SESSION_SECRET"):
        changes["session_secret"] = environ["BANDBOARD_SESSION_SECRET"]
    if environ.get("BANDBOARD_SESSION_MAX_AGE"):
        changes["session_max_age"] = int(environ["BANDBOARD_SESSION_MAX_AGE"])
    if environ.get("BANDBOARD_SESSION_SECURE") is not None:
        changes["session_https_only"] = _env_flag(environ["BANDBOARD_SESSION_SECURE"])
    if environ.get("BANDBOARD_BCRYPT_ROUNDS"):
        changes["bcrypt_rounds"] = int(environ["BANDBOARD_BCRYPT_ROUNDS"])
    if environ.get("BANDBOARD_STATIC_DIR"):
        changes["static_dir"] = Path(environ["BANDBOARD_STATIC_DIR"]).expanduser().resolve(strict=False)
    if environ.get("BANDBOARD_PICTURE_DIR"):
        changes["picture_dir"] = Path(environ["BANDBOARD_PICTURE_DIR"]).expanduser().resolve(strict=False)
    return replace(settings, **changes)


def load_settings(
    config_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """Build :class:`Settings` from defaults, an optional YAML file and the environment.

    Environment variables win over the file, which wins over the defaults. When
    ``config_path`` is not given the ``BANDBOARD_CONFIG`` variable is consulted
    and the file is only read if it exists.
    """

    if environ is None:
        environ = os.environ

    settings = Settings(database_path=resolve_database_path(None))

    explicit = config_path is not None or bool(environ.get("BANDBOARD_CONFIG"))
    path = config_path if config_path is not None else resolve_config_path(environ.get("BANDBOARD_CONFIG"))
    if path.exists():
        settings = _apply_file(settings, path)
    elif explicit:
        raise FileNotFoundError(f"Configuration file not found: {path}")

    return _apply_environment(settings, environ)


__all__ = [
    "DEFAULT_BCRYPT_ROUNDS",
    "DEFAULT_SESSION_MAX_AGE",
    "RegistrationFields",
    "Settings",
    "load_settings",
    "resolve_config_path",
    "resolve_database_path",
]
