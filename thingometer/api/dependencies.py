"""Request authentication dependencies"""

import secrets
from typing import Optional

from fastapi import Cookie, Depends, Header, Query
from loguru import logger

from thingometer.config import MAX_DB_INT, get_settings
from thingometer.errors import UnauthorizedError, ValidationError


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return token.strip()


async def is_admin(
    authorization: Optional[str] = Header(None),
    password: Optional[str] = Query(None),
) -> bool:
    """
    Whether the request carries the shared admin / coordinator password.

    The password comes from ``Authorization: Bearer <pw>`` or the ``password``
    query parameter. An unset password locks everyone out.
    """
    expected = get_settings().admin_password
    supplied = _bearer_token(authorization) or password
    if not expected or not supplied:
        return False
    return secrets.compare_digest(supplied.encode("utf-8"), expected.encode("utf-8"))


async def require_admin(allowed: bool = Depends(is_admin)):
    """Admin / coordinator gate"""
    if not allowed:
        logger.warning("Rejected admin request: bad or missing password")
        raise UnauthorizedError()


async def get_judge_id(
    x_judge_id: Optional[str] = Header(None),
    judge_id: Optional[str] = Cookie(None, alias="judgeId"),
) -> int:
    """Judge identity from the ``X-Judge-Id`` header or ``judgeId`` cookie"""
    raw = x_judge_id or judge_id
    if not raw:
        raise UnauthorizedError()
    try:
        value = int(raw)
    except ValueError:
        raise ValidationError("Judge ID must be a number")
    if not 0 < value <= MAX_DB_INT:
        raise ValidationError("Judge ID is out of range")
    return value
