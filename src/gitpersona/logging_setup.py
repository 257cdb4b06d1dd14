from __future__ import annotations

import json
import logging
import os
import platform
import re
import sys
import time
import warnings
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path, PureWindowsPath
from uuid import uuid4

MAX_LOG_FILES = 5

EMAIL_RE = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")
WINDOWS_PATH_RE = re.compile(r"[A-Za-z]:\\[^\s]+")
TOKEN_RE = re.compile(
    r"(?i)\b(bearer|token|apikey|api_key|secret|password)\s*[:=]\s*[^\s,;]+"
)

TEXT_FORMAT = (
    "%(asctime)s %(levelname)s %(category)s %(name)s %(filename)s:%(lineno)d "
    "%(funcName)s %(process)d %(message)s"
)


class CategoryFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "category"):
            record.category = "general"
        return True


class ContextFilter(logging.Filter):
    def __init__(self, *, session_id: str, app_version: str, repository: str) -> None:
        super().__init__()
        self._session_id = session_id
        self._app_version = app_version
        self._repository = repository
        self._hostname = platform.node()
        self._python = platform.python_version()
        self._process_start = time.time()

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "session_id"):
            record.session_id = self._session_id
        if not hasattr(record, "app_version"):
            record.app_version = self._app_version
        if not hasattr(record, "repository"):
            record.repository = self._repository
        if not hasattr(record, "hostname"):
            record.hostname = self._hostname
        if not hasattr(record, "python_version"):
            record.python_version = self._python
        if not hasattr(record, "uptime_seconds"):
            record.uptime_seconds = max(0.0, time.time() - self._process_start)
        return True


def _redact_windows_path(match: re.Match[str]) -> str:
    raw = match.group(0)
    tail = PureWindowsPath(raw).name
    drive = raw[:2]
    if tail:
        return f"{drive}\\...\\{tail}"
    return f"{drive}\\..."


def sanitize_text(value: str) -> str:
    if not value:
        return value
    sanitized = EMAIL_RE.sub("<email>", value)
    sanitized = WINDOWS_PATH_RE.sub(_redact_windows_path, sanitized)
    sanitized = TOKEN_RE.sub(r"\1=<redacted>", sanitized)
    return sanitized


class RedactionFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = sanitize_text(record.getMessage())
        record.args = ()
        return True


class SanitizingFormatter(logging.Formatter):
    def formatException(self, ei) -> str:
        return sanitize_text(super().formatException(ei))


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()
        payload = {
            "timestamp": timestamp,
            "level": record.levelname,
            "category": getattr(record, "category", "general"),
            "logger": record.name,
            "message": sanitize_text(record.getMessage()),
            "file": record.filename,
            "line": record.lineno,
            "function": record.funcName,
            "pid": record.process,
            "session_id": getattr(record, "session_id", ""),
            "app_version": getattr(record, "app_version", ""),
            "repository": sanitize_text(str(getattr(record, "repository", ""))),
            "hostname": getattr(record, "hostname", ""),
            "python_version": getattr(record, "python_version", ""),
            "uptime_seconds": round(getattr(record, "uptime_seconds", 0.0), 3),
        }
        if record.exc_info:
            payload["exception"] = sanitize_text(self.formatException(record.exc_info))
        return json.dumps(payload, ensure_ascii=False)


def _install_exception_hook() -> None:
    logger = logging.getLogger(__name__)
    previous = sys.excepthook

    def handle_exception(exc_type, exc, tb) -> None:
        if issubclass(exc_type, KeyboardInterrupt):
            logger.info("Interrupted by user", extra={"category": "shutdown"})
        else:
            logger.critical(
                "Unhandled exception",
                exc_info=(exc_type, exc, tb),
                extra={"category": "fatal"},
            )
        previous(exc_type, exc, tb)

    sys.excepthook = handle_exception


def _build_run_log_path(base_path: Path, *, suffix: str | None = None) -> Path:
    if suffix:
        base_path = base_path.with_suffix(suffix)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    filename = f"{base_path.stem}_{timestamp}_{os.getpid()}{base_path.suffix}"
    return base_path.parent / filename


def _cleanup_old_logs(log_dir: Path, stem: str, suffix: str, keep: int) -> None:
    candidates = sorted(
        log_dir.glob(f"{stem}_*{suffix}"),
        key=lambda path: path.stat().st_mtime,
    )
    if len(candidates) <= keep:
        return
    for path in candidates[: len(candidates) - keep]:
        try:
            path.unlink()
        except OSError:
            continue


def _resolve_level(level: str, default: int) -> int:
    return logging.getLevelNamesMapping().get(str(level).upper(), default)


def _decorate(
    handler: logging.Handler,
    formatter: logging.Formatter,
    level: int,
    context_filter: ContextFilter,
) -> logging.Handler:
    handler.setFormatter(formatter)
    handler.setLevel(level)
    handler.addFilter(CategoryFilter())
    handler.addFilter(RedactionFilter())
    handler.addFilter(context_filter)
    return handler


def setup_logging(
    log_file: str,
    *,
    log_level: str = "INFO",
    log_console_level: str = "WARNING",
    log_console_enabled: bool = True,
    log_max_bytes: int = 1_000_000,
    log_backup_count: int = 3,
    log_run_files_keep: int = 3,
    app_version: str | None = None,
    repository: str | None = None,
) -> None:
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        try:
            handler.close()
        finally:
            root_logger.removeHandler(handler)

    base_path = Path(log_file)
    if not base_path.suffix:
        base_path = base_path.with_suffix(".log")
    run_path = _build_run_log_path(base_path)
    json_base_path = base_path.with_suffix(".jsonl")

    session_id = uuid4().hex
    context_filter = ContextFilter(
        session_id=session_id,
        app_version=str(app_version or ""),
        repository=str(repository or ""),
    )
    formatter = SanitizingFormatter(TEXT_FORMAT)
    json_formatter = JsonFormatter()

    resolved_level = _resolve_level(log_level, logging.INFO)
    resolved_console_level = _resolve_level(log_console_level, logging.WARNING)
    effective_backup_count = min(MAX_LOG_FILES, max(0, log_backup_count))
    effective_run_files_keep = min(MAX_LOG_FILES, max(1, log_run_files_keep))

    handlers: list[logging.Handler] = []
    try:
        base_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            _decorate(
                RotatingFileHandler(
                    base_path,
                    maxBytes=log_max_bytes,
                    backupCount=effective_backup_count,
                    encoding="utf-8",
                ),
                formatter,
                resolved_level,
                context_filter,
            )
        )
        handlers.append(
            _decorate(
                logging.FileHandler(run_path, encoding="utf-8"),
                formatter,
                resolved_level,
                context_filter,
            )
        )
        handlers.append(
            _decorate(
                RotatingFileHandler(
                    json_base_path,
                    maxBytes=log_max_bytes,
                    backupCount=effective_backup_count,
                    encoding="utf-8",
                ),
                json_formatter,
                resolved_level,
                context_filter,
            )
        )
    except OSError as exc:
        for handler in handlers:
            handler.close()
        handlers = []
        sys.stderr.write(f"Warning: file logging unavailable: {exc}\n")

    if log_console_enabled:
        handlers.append(
            _decorate(
                logging.StreamHandler(sys.stderr),
                formatter,
                resolved_console_level,
                context_filter,
            )
        )

    root_logger.setLevel(resolved_level)
    for handler in handlers:
        root_logger.addHandler(handler)

    warnings.simplefilter("default")
    logging.captureWarnings(True)
    _install_exception_hook()

    logger = logging.getLogger(__name__)
    logger.debug(
        "Logging initialized",
        extra={
            "category": "startup",
            "log_file": str(base_path),
            "run_log_file": str(run_path),
            "json_log_file": str(json_base_path),
            "session_id": session_id,
        },
    )
    if effective_backup_count != log_backup_count:
        logger.warning(
            "log_backup_count capped at %s (requested %s)",
            MAX_LOG_FILES,
            log_backup_count,
            extra={"category": "startup"},
        )
    if effective_run_files_keep != log_run_files_keep:
        logger.warning(
            "log_run_files_keep capped at %s (requested %s)",
            MAX_LOG_FILES,
            log_run_files_keep,
            extra={"category": "startup"},
        )

    if run_path.parent.exists():
        _cleanup_old_logs(
            run_path.parent,
            base_path.stem,
            base_path.suffix,
            keep=effective_run_files_keep,
        )
