"""Structured audit logger for JSONL event logging.

Provides append-only structured event logging to JSONL files with
a persistent file handle. Decode and output runs report stage boundaries,
per-record events, progress and errors through it.
"""

import json
from dataclasses import asdict
from pathlib import Path
from typing import Any

from endnote_xml.audit.helpers import generate_run_id
from endnote_xml.audit.models import LEVELS, LogEvent
from endnote_xml.utils import get_iso_timestamp

__all__ = ["AuditLogger"]


class AuditLogger:
    """JSONL audit logger with persistent file handle.

    Writes structured log events to a JSONL file (one JSON object per line).
    Events are append-only and flushed after each write.

    Attributes
    ----------
    run_id : str
        Unique run identifier.
    log_path : Path
        Path to JSONL log file.
    current_stage : str | None
        Current stage name for context.
    """

    def __init__(self, log_path: Path, run_id: str | None = None) -> None:
        """Initialize audit logger and open file handle.

        Parameters
        ----------
        log_path : Path
            Path to JSONL log file.
        run_id : str | None, optional
            Unique run identifier, generated if None.
        """
        self.run_id = run_id or generate_run_id()
        self.log_path = Path(log_path)
        self.current_stage: str | None = None

        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        self._file = self.log_path.open("a", encoding="utf-8")

    def __enter__(self) -> "AuditLogger":
        """Enter context manager."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Exit context manager and close file."""
        self.close()

    def close(self) -> None:
        """Flush and close the log file handle."""
        if not self._file.closed:
            self._file.flush()
            self._file.close()

    def set_stage(self, stage: str | None) -> None:
        """Set current stage context.

        Parameters
        ----------
        stage : str | None
            Stage name or None to clear.
        """
        self.current_stage = stage

    def event(
        self,
        event_type: str,
        data: dict[str, Any] | None = None,
        level: str = "INFO",
        stage: str | None = None,
        rid: str | None = None,
    ) -> None:
        """Write structured event to log.

        Parameters
        ----------
        event_type : str
            Event type identifier (e.g., "stage_started").
        data : dict[str, Any] | None, optional
            Event-specific data payload.
        level : str, optional
            Log level ("DEBUG", "INFO", "WARN", "ERROR").
        stage : str | None, optional
            Stage identifier, uses current_stage if not provided.
        rid : str | None, optional
            Record number if event is record-specific.

        Raises
        ------
        ValueError
            If level is not one of LEVELS.
        """
        if level not in LEVELS:
            raise ValueError(f"Unknown log level: {level!r}")

        log_event = LogEvent(
            ts=get_iso_timestamp(),
            run_id=self.run_id,
            level=level,
            event=event_type,
            data=data or {},
            stage=stage if stage is not None else self.current_stage,
            rid=rid,
        )
        self._write_event(log_event)

    def _write_event(self, event: LogEvent) -> None:
        json.dump(asdict(event), self._file, ensure_ascii=False, separators=(",", ":"))
        self._file.write("\n")
        self._file.flush()

    def run_started(self, command: list[str], parameters: dict[str, Any]) -> None:
        """Log run_started event.

        Parameters
        ----------
        command : list[str]
            Command-line arguments.
        parameters : dict[str, Any]
            Configuration parameters.
        """
        self.event("run_started", data={"command": command, "parameters": parameters})

    def run_finished(
        self,
        status: str,
        duration_seconds: float,
        records_processed: int | None = None,
    ) -> None:
        """Log run_finished event.

        Parameters
        ----------
        status : str
            Run status ("success", "failed").
        duration_seconds : float
            Total execution time in seconds.
        records_processed : int | None, optional
            Total records processed.
        """
        data: dict[str, Any] = {
            "status": status,
            "duration_seconds": duration_seconds,
        }
        if records_processed is not None:
            data["records_processed"] = records_processed

        self.event("run_finished", data=data)

    def stage_started(self, stage: str, total_bytes: int | None = None) -> None:
        """Log stage_started event and make it the current stage.

        Parameters
        ----------
        stage : str
            Stage identifier ("decode" or "encode").
        total_bytes : int | None, optional
            Input size when known.
        """
        self.set_stage(stage)

        data: dict[str, Any] = {}
        if total_bytes is not None:
            data["total_bytes"] = total_bytes

        self.event("stage_started", data=data, stage=stage)

    def stage_finished(self, stage: str, counters: dict[str, int] | None = None) -> None:
        """Log stage_finished event and clear the current stage.

        Parameters
        ----------
        stage : str
            Stage identifier.
        counters : dict[str, int] | None, optional
            Stage-specific counters.
        """
        data: dict[str, Any] = {}
        if counters:
            data["counters"] = counters

        self.event("stage_finished", data=data, stage=stage)
        self.set_stage(None)

    def progress(self, offset: int, total: int | None) -> None:
        """Log progress event.

        Parameters
        ----------
        offset : int
            Bytes consumed so far.
        total : int | None
            Total input size, None when unknown.
        """
        self.event("progress", data={"offset": offset, "total": total}, level="DEBUG")

    def record_decoded(self, rid: str | None, ref_type: str | None) -> None:
        """Log record_decoded event.

        Parameters
        ----------
        rid : str | None
            Record number of the decoded reference.
        ref_type : str | None
            Canonical type of the decoded reference.
        """
        self.event("record_decoded", data={"type": ref_type}, level="DEBUG", rid=rid)

    def record_encoded(self, rid: str, ref_type: str) -> None:
        """Log record_encoded event.

        Parameters
        ----------
        rid : str
            Record number written to ``<rec-number>``.
        ref_type : str
            Canonical type written to ``<ref-type>``.
        """
        self.event("record_encoded", data={"type": ref_type}, level="DEBUG", rid=rid)

    def error(
        self,
        exception_class: str,
        message: str,
        stage: str | None = None,
        rid: str | None = None,
    ) -> None:
        """Log error event.

        Parameters
        ----------
        exception_class : str
            Exception class name.
        message : str
            Error message.
        stage : str | None, optional
            Stage where error occurred.
        rid : str | None, optional
            Record number if error is record-specific.
        """
        data: dict[str, Any] = {
            "exception_class": exception_class,
            "message": message,
        }
        self.event("error", data=data, stage=stage, level="ERROR", rid=rid)
