"""Audit logging subsystem for endnote_xml.

Main Components
---------------
- AuditLogger: JSONL event logger
- LogEvent: Event envelope
"""

from endnote_xml.audit.helpers import generate_run_id
from endnote_xml.audit.logger import AuditLogger
from endnote_xml.audit.models import LogEvent

__all__ = [
    "AuditLogger",
    "LogEvent",
    "generate_run_id",
]
