"""Decision audit log: daily JSONL files per project, with automatic retention cleanup."""

from __future__ import annotations

import contextlib
import json
import os
from datetime import UTC, datetime, timedelta
from pathlib import Path

from tenantguard.decisions import Decision, Parameterize, Reject, RewriteQuery
from tenantguard.identity import Identity
from tenantguard.intents import LiteralQuery, NamedFunctionCall, NamedTableRead, RequestIntent

DEFAULT_RETENTION_DAYS = 30
_LOG_ROOT = Path.home() / ".tenantguard" / "logs"


def _project_slug() -> str:
    """Encode cwd into a directory-safe slug."""
    cwd = os.getcwd()
    return cwd.replace("/", "-").lstrip("-")


def _log_dir() -> Path:
    return _LOG_ROOT / _project_slug()


def _today_file() -> Path:
    today = datetime.now(UTC).strftime("%Y-%m-%d")
    return _log_dir() / f"{today}.jsonl"


def _describe_intent(intent: RequestIntent) -> tuple[str, str]:
    if isinstance(intent, NamedFunctionCall):
        return "function", intent.name
    if isinstance(intent, NamedTableRead):
        return "table", intent.table
    if isinstance(intent, LiteralQuery):
        return "literal_query", intent.source
    raise TypeError(f"unknown intent: {intent!r}")


def log_decision(identity: Identity, intent: RequestIntent, decision: Decision) -> None:
    """Append a decision log entry to today's JSONL file."""
    intent_kind, target = _describe_intent(intent)
    entry = {
        "ts": datetime.now(UTC).isoformat(),
        "identity": identity.id,
        "role": identity.role.value,
        "intent": intent_kind,
        "target": target,
        "decision": decision.decision_type,
        "function_name": decision.function_name if isinstance(decision, Parameterize) else None,
        "sql": decision.sql if isinstance(decision, RewriteQuery) else None,
        "kind": decision.kind.value if isinstance(decision, Reject) else None,
        "reason": decision.reason if isinstance(decision, Reject) else None,
    }

    log_file = _today_file()
    log_file.parent.mkdir(parents=True, exist_ok=True)
    with open(log_file, "a") as f:
        f.write(json.dumps(entry, default=str) + "\n")


def cleanup_old_logs(*, retention_days: int = DEFAULT_RETENTION_DAYS) -> int:
    """Delete log files older than retention_days. Returns count of deleted files."""
    cutoff = datetime.now(UTC) - timedelta(days=retention_days)
    deleted = 0

    log_dir = _log_dir()
    if not log_dir.exists():
        return 0

    for log_file in log_dir.glob("*.jsonl"):
        # Parse date from filename (YYYY-MM-DD.jsonl)
        try:
            file_date = datetime.strptime(log_file.stem, "%Y-%m-%d").replace(tzinfo=UTC)
        except ValueError:
            continue
        if file_date < cutoff:
            log_file.unlink()
            deleted += 1

    # Remove empty project directories
    with contextlib.suppress(OSError):
        log_dir.rmdir()

    return deleted
