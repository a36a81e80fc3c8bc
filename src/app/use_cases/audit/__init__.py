"""
Audit Use Cases

Admin audit trail browsing.
"""

from .get_audit_logs_use_case import CSV_COLUMNS, EXPORT_LIMIT, GetAuditLogsUseCase

__all__ = ["CSV_COLUMNS", "EXPORT_LIMIT", "GetAuditLogsUseCase"]
