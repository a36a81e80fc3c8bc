import json
import logging
from typing import Any, Dict, Optional

from fastapi import Request

from config import ApplicationConfig
from src.app.use_cases.security import normalize_ip

logger = logging.getLogger(__name__)


def client_ip(request: Request) -> Optional[str]:
    """
    Address the request came from.

    Behind trusted proxies each one appends the address it received the
    request from, so the client is TRUSTED_PROXY_COUNT hops from the right.
    Hops further left are written by the client and are ignored.
    """
    peer = request.client.host if request.client else None
    if ApplicationConfig.TRUST_FORWARDED_FOR:
        forwarded = request.headers.get("X-Forwarded-For", "")
        hops = [hop.strip() for hop in forwarded.split(",") if hop.strip()]
        depth = max(ApplicationConfig.TRUSTED_PROXY_COUNT, 1)
        if len(hops) >= depth:
            address = normalize_ip(hops[-depth])
            if address:
                return address
    if peer is None:
        return None
    return normalize_ip(peer) or peer


def user_agent(request: Request) -> Optional[str]:
    return request.headers.get("User-Agent")


async def json_body(request: Request) -> Dict[str, Any]:
    """Parsed JSON object body, or {} for anything else"""
    if "application/json" not in request.headers.get("Content-Type", ""):
        return {}
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.debug("Ignoring unparsable request body")
        return {}
    return body if isinstance(body, dict) else {}
