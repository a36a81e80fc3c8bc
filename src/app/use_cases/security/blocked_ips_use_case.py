"""
Blocked IPs Use Case

Maintains the block list read by the IP block gate. Expired entries stay
until cleanup deletes them; there is no soft "inactive" state.
"""

import ipaddress
import logging
from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID

from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.serializers import blocked_ip_dict, pagination
from src.domain.base import as_naive_utc, utcnow
from src.domain.entities import BlockedIP
from src.libs.result import Error, Result, Return

logger = logging.getLogger(__name__)

BLOCK_STATES = ("active", "expired", "all")


def normalize_ip(value: str) -> Optional[str]:
    """Canonical text form of an address, or None when it is not one"""
    try:
        return str(ipaddress.ip_address(value.strip()))
    except ValueError:
        return None


class BlockedIPsUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def list_blocked(
        self, state: str = "active", page: int = 1, limit: int = 20
    ) -> Result[Dict[str, Any]]:
        if state not in BLOCK_STATES:
            return Return.err(Error("INVALID_STATE", f"state must be one of {', '.join(BLOCK_STATES)}"))

        now = utcnow()
        async with self.uow:
            entries, total = await self.uow.blocked_ips.list_paginated(
                state, now, limit=limit, offset=(page - 1) * limit
            )
            return Return.ok(
                {
                    "blocked_ips": [blocked_ip_dict(entry, now) for entry in entries],
                    "pagination": pagination(page, limit, total),
                }
            )

    async def block(
        self,
        ip_address: str,
        reason: str,
        admin_id: UUID,
        expires_at: Optional[datetime] = None,
    ) -> Result[Dict[str, Any]]:
        """
        Business Rules:
        - ip_address must parse as IPv4 or IPv6
        - expires_at, when given, lies in the future; None blocks indefinitely
        - An address with an active block cannot be blocked twice
        """
        normalized = normalize_ip(ip_address)
        if normalized is None:
            return Return.err(Error("INVALID_IP_ADDRESS", "Invalid IP address"))

        now = utcnow()
        expires_at = as_naive_utc(expires_at)
        if expires_at is not None and expires_at <= now:
            return Return.err(Error("INVALID_EXPIRY", "expires_at must be in the future"))

        async with self.uow:
            if await self.uow.blocked_ips.get_active_by_ip(normalized, now) is not None:
                return Return.err(Error("IP_ALREADY_BLOCKED", "IP address is already blocked"))

            blocked = BlockedIP(
                ip_address=normalized,
                reason=reason,
                blocked_by=admin_id,
                expires_at=expires_at,
            )
            await self.uow.blocked_ips.create(blocked)
            await self.uow.commit()

            logger.warning(f"[SECURITY] IP {normalized} blocked by {admin_id}: {reason}")
            return Return.ok({"blocked_ip": blocked_ip_dict(blocked, now)})

    async def update(
        self,
        blocked_id: UUID,
        reason: Optional[str] = None,
        expires_at: Optional[datetime] = None,
        clear_expiry: bool = False,
    ) -> Result[Dict[str, Any]]:
        """clear_expiry makes the block indefinite"""
        if reason is None and expires_at is None and not clear_expiry:
            return Return.err(Error("NO_FIELDS_TO_UPDATE", "No fields to update"))

        now = utcnow()
        async with self.uow:
            blocked = await self.uow.blocked_ips.get_by_id(blocked_id)
            if blocked is None:
                return Return.err(Error("BLOCKED_IP_NOT_FOUND", "Blocked IP not found"))

            if reason is not None:
                blocked.reason = reason
            if clear_expiry:
                blocked.expires_at = None
            elif expires_at is not None:
                blocked.expires_at = as_naive_utc(expires_at)

            await self.uow.blocked_ips.update(blocked)
            await self.uow.commit()
            return Return.ok({"blocked_ip": blocked_ip_dict(blocked, now)})

    async def unblock(self, blocked_id: UUID) -> Result[Dict[str, Any]]:
        async with self.uow:
            blocked = await self.uow.blocked_ips.get_by_id(blocked_id)
            if blocked is None:
                return Return.err(Error("BLOCKED_IP_NOT_FOUND", "Blocked IP not found"))

            ip_address = blocked.ip_address
            await self.uow.blocked_ips.delete(blocked)
            await self.uow.commit()

            logger.info(f"IP {ip_address} unblocked")
            return Return.ok({"id": str(blocked_id), "ip_address": ip_address})

    async def cleanup(self) -> Result[Dict[str, Any]]:
        async with self.uow:
            deleted = await self.uow.blocked_ips.delete_expired(utcnow())
            await self.uow.commit()
            return Return.ok({"deleted_count": deleted})
