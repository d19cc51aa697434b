"""
Analytics Event Log

Append-only, day-partitioned JSON-lines log of operational events:

    <log_dir>/2026-10-18.log
    {"timestamp": "2026-10-18T09:12:03.512Z", "event": "tool_call_success", ...}

Writers append one complete line per event with a single write() so entries
from concurrent calls never interleave mid-line. Readers skip lines they
cannot parse. File I/O runs in worker threads to keep the event loop free.
"""

import asyncio
import os
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

from ..logging_config import get_logger
from .events import EventKind, LogEntry, utc_now

logger = get_logger(__name__)


class EventLog:
    """Day-partitioned append-only event log stored on disk."""

    def __init__(self, log_dir: str | os.PathLike):
        """
        Initialize event log.

        Args:
            log_dir: Directory holding one <YYYY-MM-DD>.log file per UTC day
        """
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, moment: datetime) -> Path:
        """Return the partition file for the UTC day containing ``moment``."""
        return self.log_dir / f"{moment.date().isoformat()}.log"

    # ============================================================================
    # Writing
    # ============================================================================

    async def record(
        self, event: str | EventKind, payload: dict[str, Any] | None = None
    ) -> LogEntry:
        """
        Append an event stamped with the current UTC time.

        Append failures are logged, never raised: analytics must not break
        the request that produced them.

        Args:
            event: Event name or kind
            payload: Event-specific fields

        Returns:
            The recorded entry
        """
        name = event.value if isinstance(event, EventKind) else event
        entry = LogEntry(timestamp=utc_now(), event=name, payload=dict(payload or {}))
        line = entry.to_json_line()

        logger.info(line)

        try:
            await asyncio.to_thread(self._append_line, self.path_for(entry.timestamp), line)
        except OSError as e:
            logger.warning(f"Failed to append analytics event {name}: {e}")

        return entry

    @staticmethod
    def _append_line(path: Path, line: str) -> None:
        with open(path, "a", encoding="utf-8") as f:
            f.write(line + "\n")

    # ============================================================================
    # Reading
    # ============================================================================

    async def read_recent(self, days: int = 7, now: datetime | None = None) -> list[LogEntry]:
        """
        Read entries stamped within ``days`` days before ``now``.

        A rolling window of N days spans N + 1 UTC day partitions, so the
        oldest partition is read and then cut at the window start.

        Args:
            days: Window length in days
            now: Reference time (defaults to current UTC time)

        Returns:
            Entries sorted newest first
        """
        now = now or utc_now()
        since = now - timedelta(days=days)
        paths = [self.path_for(now - timedelta(days=offset)) for offset in range(days + 1)]
        entries = await asyncio.to_thread(self._read_paths, paths)
        return [entry for entry in entries if entry.timestamp >= since]

    @staticmethod
    def _read_paths(paths: list[Path]) -> list[LogEntry]:
        entries: list[LogEntry] = []
        for path in paths:
            if not path.exists():
                continue

            with open(path, encoding="utf-8", errors="replace") as f:
                for line_number, line in enumerate(f, start=1):
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        entries.append(LogEntry.from_json_line(line))
                    except ValueError as e:
                        logger.debug(f"Skipping malformed line {path.name}:{line_number}: {e}")

        entries.sort(key=lambda entry: entry.timestamp, reverse=True)
        return entries
