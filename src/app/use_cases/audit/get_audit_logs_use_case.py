"""
Get Audit Logs Use Case

Read-only access to the admin audit trail: filtered listing, single entry,
entries targeting one user, and CSV export.
"""

import csv
import io
import json
from typing import Any, Dict, Optional
from uuid import UUID

from src.app.repositories.audit_log_repository import AuditLogFilter
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.serializers import audit_log_dict, iso, pagination
from src.libs.result import Error, Result, Return

EXPORT_LIMIT = 10000

CSV_COLUMNS = [
    "id",
    "created_at",
    "admin_id",
    "admin_email",
    "action",
    "target_type",
    "target_id",
    "changes",
    "ip_address",
    "user_agent",
]

FORMULA_PREFIXES = ("=", "+", "-", "@", "\t", "\r")


def csv_cell(value: Optional[str]) -> str:
    """Text a spreadsheet will not evaluate as a formula"""
    if not value:
        return ""
    return "'" + value if value.startswith(FORMULA_PREFIXES) else value


class GetAuditLogsUseCase:
    """
    Business Rules:
    - Entries are newest first unless another sort is requested
    - The admin email is resolved for display; entries of deleted admins keep
      their admin_id
    - Export is capped at EXPORT_LIMIT rows
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def _admin_emails(self, entries) -> Dict[UUID, Optional[str]]:
        emails: Dict[UUID, Optional[str]] = {}
        for entry in entries:
            if entry.admin_id not in emails:
                admin = await self.uow.users.get_by_id(entry.admin_id)
                emails[entry.admin_id] = admin.email if admin else None
        return emails

    async def list_logs(
        self,
        filters: AuditLogFilter,
        page: int = 1,
        limit: int = 50,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> Result[Dict[str, Any]]:
        async with self.uow:
            entries, total = await self.uow.audit_logs.list_paginated(
                filters,
                sort_by=sort_by,
                sort_order=sort_order,
                limit=limit,
                offset=(page - 1) * limit,
            )
            emails = await self._admin_emails(entries)

            logs = []
            for entry in entries:
                data = audit_log_dict(entry)
                data["admin_email"] = emails.get(entry.admin_id)
                logs.append(data)

            return Return.ok({"logs": logs, "pagination": pagination(page, limit, total)})

    async def get_log(self, entry_id: UUID) -> Result[Dict[str, Any]]:
        async with self.uow:
            entry = await self.uow.audit_logs.get_by_id(entry_id)
            if entry is None:
                return Return.err(Error("AUDIT_LOG_NOT_FOUND", "Audit log not found"))

            data = audit_log_dict(entry)
            data["admin_email"] = (await self._admin_emails([entry])).get(entry.admin_id)
            return Return.ok({"log": data})

    async def list_for_user(
        self, user_id: UUID, page: int = 1, limit: int = 50
    ) -> Result[Dict[str, Any]]:
        """Entries whose target is the given user"""
        return await self.list_logs(
            AuditLogFilter(target_type="user", target_id=str(user_id)), page=page, limit=limit
        )

    async def export_csv(self, filters: AuditLogFilter) -> Result[Dict[str, Any]]:
        """Rendered CSV text plus the number of entries it holds"""
        async with self.uow:
            entries = await self.uow.audit_logs.list_all(filters, limit=EXPORT_LIMIT)
            emails = await self._admin_emails(entries)

            buffer = io.StringIO()
            writer = csv.writer(buffer)
            writer.writerow(CSV_COLUMNS)
            for entry in entries:
                writer.writerow(
                    [
                        str(entry.id),
                        iso(entry.created_at),
                        str(entry.admin_id),
                        csv_cell(emails.get(entry.admin_id)),
                        csv_cell(entry.action),
                        csv_cell(entry.target_type),
                        csv_cell(entry.target_id),
                        json.dumps(entry.changes) if entry.changes else "",
                        csv_cell(entry.ip_address),
                        csv_cell(entry.user_agent),
                    ]
                )
            return Return.ok({"csv": buffer.getvalue(), "rows": len(entries)})
