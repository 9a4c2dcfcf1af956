"""Shared logging utilities."""

import json
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from uuid import uuid4

LOG_ROOT = Path.cwd() / "logs"
CLI_LOG_FILE = LOG_ROOT / "proxy.log"

# Single writer thread for file logs.
_LOG_EXECUTOR = ThreadPoolExecutor(max_workers=1, thread_name_prefix="relay-log")


def submit_log(fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Future:
    """Queue a log write on the background writer thread."""
    return _LOG_EXECUTOR.submit(fn, *args, **kwargs)


def shutdown_log_executor() -> None:
    """Flush pending log writes and stop the writer thread."""
    _LOG_EXECUTOR.shutdown(wait=True)


def write_relay_log(
    method: str,
    target: str,
    status: int,
    *,
    elapsed_ms: float,
    headers: dict[str, str] | None = None,
    log_root: Path = LOG_ROOT,
) -> Path:
    """Write a single relayed request log entry."""
    payload = {
        "timestamp": _utc_now(),
        "method": method,
        "target": target,
        "status": status,
        "elapsed_ms": round(elapsed_ms, 1),
        "headers": redact_headers(headers or {}),
    }
    return _write_json(log_root / "relay", payload)


def write_cli_log(
    level: str,
    message: str,
    *,
    log_file: Path | None = None,
    **extra: Any,
) -> None:
    """Append a line to the rolling CLI log file."""
    log_file = log_file or CLI_LOG_FILE
    log_file.parent.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now(UTC).strftime("%Y-%m-%d %H:%M:%S")
    extra_str = " ".join(f"{k}={v}" for k, v in extra.items()) if extra else ""
    line = f"[{timestamp}] {level}: {message}"
    if extra_str:
        line += f" {extra_str}"
    line += "\n"
    with log_file.open("a") as f:
        f.write(line)


def clear_logs(log_root: Path = LOG_ROOT) -> int:
    """Remove relay logs left over from a previous run."""
    folder = log_root / "relay"
    if not folder.exists():
        return 0

    deleted = 0
    for old_file in folder.glob("*.json"):
        try:
            old_file.unlink()
            deleted += 1
        except OSError:
            pass
    return deleted


def _write_json(folder: Path, payload: dict[str, Any]) -> Path:
    """Write payload to a unique JSON file in the given folder."""
    folder.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%S.%fZ")
    file_path = folder / f"{timestamp}_{uuid4().hex}.json"
    file_path.write_text(json.dumps(payload, indent=2, default=str))
    return file_path


def redact_headers(headers: dict[str, str]) -> dict[str, str]:
    """Redact sensitive headers."""
    redacted = {}
    for key, value in headers.items():
        if "key" in key.lower() or "authorization" in key.lower() or "cookie" in key.lower():
            redacted[key] = mask(value)
        else:
            redacted[key] = value
    return redacted


def mask(value: str) -> str:
    if len(value) <= 10:
        return "***"
    return value[:6] + "..." + value[-4:]


def _utc_now() -> str:
    return datetime.now(UTC).isoformat()
