"""
Security Management Use Cases
"""

from .blocked_ips_use_case import BLOCK_STATES, BlockedIPsUseCase, normalize_ip
from .security_alerts_use_case import SecurityAlertsUseCase

__all__ = ["BLOCK_STATES", "BlockedIPsUseCase", "SecurityAlertsUseCase", "normalize_ip"]
