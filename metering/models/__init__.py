"""
Database models
"""
from metering.models.user import User
from metering.models.usage_ledger import UsageLedgerEntry
from metering.models.audit_record import AuditRecord, AuditEvent
from metering.models.app_setting import AppSetting

__all__ = [
    "User",
    "UsageLedgerEntry",
    "AuditRecord",
    "AuditEvent",
    "AppSetting",
]
