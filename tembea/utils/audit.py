"""
Audit logging utilities.

Every change to pricing rules or tier assignments is recorded, so a
disputed commission can be traced to the admin and rule behind it.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from tembea.models.audit import AuditAction, AuditLog


def _jsonable(value: Any) -> Any:
    """Make Decimal / datetime / enum values storable in the JSON column."""
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value


async def log_action(
    db: AsyncSession,
    user_id: int,
    action: AuditAction,
    target_type: Optional[str] = None,
    target_id: Optional[int] = None,
    action_metadata: Optional[dict[str, Any]] = None,
    ip_address: Optional[str] = None,
) -> AuditLog:
    """
    Log an auditable action.

    Args:
        db: Database session
        user_id: ID of the admin performing the action
        action: Type of action being performed
        target_type: Type of entity affected ("tier", "override", "vendor", "booking")
        target_id: ID of the affected entity
        action_metadata: Changed fields or job summary
        ip_address: Client IP address

    Returns:
        Created AuditLog entry
    """
    log_entry = AuditLog(
        user_id=user_id,
        action=action,
        target_type=target_type,
        target_id=target_id,
        action_metadata=_jsonable(action_metadata) if action_metadata else None,
        ip_address=ip_address,
    )
    db.add(log_entry)
    # Committed together with the change it describes
    return log_entry


def get_client_ip(request) -> Optional[str]:
    """
    Extract client IP from request.

    Handles X-Forwarded-For header for reverse proxy setups.
    """
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    if request.client:
        return request.client.host

    return None
