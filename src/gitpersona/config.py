from __future__ import annotations

from dataclasses import dataclass, replace
import logging
import os
from pathlib import Path
from typing import Any, cast

import yaml

from .path_utils import ensure_under_root, resolve_data_path, resolve_log_path

MAX_LOG_FILES = 5

CURRENT_CONFIG_VERSION = 1

CONFIG_FILE_NAME = "config.local.yaml"

LOGGER = logging.getLogger(__name__)

_DEFAULT_CONFIG_VALUES: dict[str, Any] = {
    "store_file": "identities.txt",
    "hooks_dir": "hooks",
    "git_executable": "git",
    "log_file": "logs/gitpersona.log",
    "log_level": "INFO",
    "log_console_level": "WARNING",
    "log_console_enabled": True,
    "log_max_bytes": 1_000_000,
    "log_backup_count": 3,
    "log_run_files_keep": 3,
    "config_version": CURRENT_CONFIG_VERSION,
}


@dataclass(frozen=True)
class AppConfig:
    store_file: str
    hooks_dir: str
    git_executable: str
    log_file: str
    log_level: str
    log_console_level: str
    log_console_enabled: bool
    log_max_bytes: int
    log_backup_count: int
    log_run_files_keep: int
    config_version: int = CURRENT_CONFIG_VERSION


def _check_config_version(data: dict[str, Any]) -> dict[str, Any]:
    version_raw = data.get("config_version", CURRENT_CONFIG_VERSION)
    try:
        version = int(version_raw)
    except (TypeError, ValueError) as exc:
        raise ValueError("config_version must be an integer") from exc
    if version > CURRENT_CONFIG_VERSION:
        raise ValueError(
            "config_version is newer than supported: "
            f"{version} > {CURRENT_CONFIG_VERSION}"
        )
    if version < 1:
        raise ValueError("config_version must be >= 1")
    checked = dict(data)
    checked["config_version"] = version
    return checked


def _apply_config_defaults(data: dict[str, Any]) -> dict[str, Any]:
    missing: list[str] = []
    updated = dict(data)
    for key, value in _DEFAULT_CONFIG_VALUES.items():
        if key not in updated:
            updated[key] = value
            missing.append(key)
    if missing and data:
        LOGGER.debug(
            "Applied defaults for missing config keys: %s",
            ", ".join(sorted(missing)),
            extra={"category": "config"},
        )
    return updated


def _get_project_root_from_file() -> Path:
    return Path(__file__).resolve().parents[2]


def get_project_root() -> Path:
    override = os.environ.get("GITPERSONA_ROOT")
    if override:
        return Path(override)
    return _get_project_root_from_file()


def _get_default_user_data_dir() -> Path:
    local_appdata = os.environ.get("LOCALAPPDATA")
    if local_appdata:
        return Path(local_appdata) / "gitpersona"

    user_root = os.environ.get("USERPROFILE")
    if user_root:
        return Path(user_root) / "AppData" / "Local" / "gitpersona"

    return Path.home() / ".gitpersona"


def get_user_data_dir() -> Path:
    override = os.environ.get("GITPERSONA_DATA_DIR")
    if override:
        return Path(override)
    return _get_default_user_data_dir()


def get_user_log_dir() -> Path:
    return get_user_data_dir() / "logs"


def get_config_path() -> Path:
    return get_user_data_dir() / CONFIG_FILE_NAME


def get_template_path() -> Path:
    return get_project_root() / "templates" / CONFIG_FILE_NAME


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    raw: object = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ValueError("Config must be a mapping")
    return cast(dict[str, Any], raw)


def _get_required(data: dict[str, Any], key: str) -> Any:
    if key not in data:
        raise ValueError(f"Missing required config key: {key}")
    return data[key]


def _as_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in {"true", "yes", "1"}:
        return True
    if isinstance(value, str) and value.strip().lower() in {"false", "no", "0"}:
        return False
    raise ValueError(f"{key} must be a boolean")


def _build_config(data: dict[str, Any]) -> AppConfig:
    data = _apply_config_defaults(_check_config_version(data))

    log_backup_count = int(_get_required(data, "log_backup_count"))
    log_run_files_keep = int(_get_required(data, "log_run_files_keep"))
    if log_backup_count > MAX_LOG_FILES:
        LOGGER.warning(
            "log_backup_count capped at %s (requested %s)",
            MAX_LOG_FILES,
            log_backup_count,
            extra={"category": "config"},
        )
        log_backup_count = MAX_LOG_FILES
    if log_run_files_keep > MAX_LOG_FILES:
        LOGGER.warning(
            "log_run_files_keep capped at %s (requested %s)",
            MAX_LOG_FILES,
            log_run_files_keep,
            extra={"category": "config"},
        )
        log_run_files_keep = MAX_LOG_FILES

    config = AppConfig(
        store_file=str(_get_required(data, "store_file")).strip(),
        hooks_dir=str(_get_required(data, "hooks_dir")).strip(),
        git_executable=str(_get_required(data, "git_executable")).strip(),
        log_file=str(_get_required(data, "log_file")).strip(),
        log_level=str(_get_required(data, "log_level")),
        log_console_level=str(_get_required(data, "log_console_level")),
        log_console_enabled=_as_bool(
            _get_required(data, "log_console_enabled"), "log_console_enabled"
        ),
        log_max_bytes=int(_get_required(data, "log_max_bytes")),
        log_backup_count=log_backup_count,
        log_run_files_keep=log_run_files_keep,
        config_version=int(data.get("config_version", CURRENT_CONFIG_VERSION)),
    )
    _validate_config(config)
    return _apply_path_policy(config)


def _apply_path_policy(config: AppConfig) -> AppConfig:
    base = get_user_data_dir()
    log_root = get_user_log_dir()
    store_file = os.environ.get("GITPERSONA_STORE_FILE") or config.store_file
    resolved = replace(
        config,
        store_file=resolve_data_path(base, store_file),
        hooks_dir=resolve_data_path(base, config.hooks_dir),
        log_file=resolve_log_path(base, log_root, config.log_file),
    )
    ensure_under_root(log_root, resolved.log_file, "log_file")
    return resolved


def _is_valid_log_level(level: str) -> bool:
    level_name = str(level).upper()
    return level_name in logging.getLevelNamesMapping()


def _validate_config(config: AppConfig) -> None:
    if not config.store_file:
        raise ValueError("store_file is required")
    if not config.hooks_dir:
        raise ValueError("hooks_dir is required")
    if not config.git_executable:
        raise ValueError("git_executable is required")
    if not config.log_file:
        raise ValueError("log_file is required")
    if config.log_max_bytes < 1024:
        raise ValueError("log_max_bytes must be >= 1024")
    if config.log_backup_count < 0:
        raise ValueError("log_backup_count must be >= 0")
    if config.log_run_files_keep < 1:
        raise ValueError("log_run_files_keep must be >= 1")
    if not _is_valid_log_level(config.log_level):
        raise ValueError("log_level must be a valid logging level")
    if not _is_valid_log_level(config.log_console_level):
        raise ValueError("log_console_level must be a valid logging level")


def default_config_values() -> dict[str, Any]:
    return dict(_DEFAULT_CONFIG_VALUES)


def default_config() -> AppConfig:
    return _build_config({})


def load_config(path: str) -> AppConfig:
    data = _load_yaml(Path(path))
    return _build_config(data)


def load_app_config(path: Path | None = None) -> AppConfig:
    """Load the per-user config; a missing or empty file means all defaults."""
    config_path = path or get_config_path()
    if not config_path.exists():
        return default_config()
    return load_config(str(config_path))


def ensure_local_config_from_template(
    config_path: Path,
    *,
    template_text: str | None = None,
    logger: logging.Logger | None = None,
) -> bool:
    if config_path.exists():
        try:
            if config_path.read_text(encoding="utf-8").strip():
                return False
        except OSError:
            return False
    if template_text is None:
        template_path = get_template_path()
        if not template_path.exists():
            return False
        template_text = template_path.read_text(encoding="utf-8")
    if not template_text:
        return False
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(template_text, encoding="utf-8")
    (logger or LOGGER).info(
        "Local config created from template",
        extra={"category": "config", "config_path": str(config_path)},
    )
    return True
