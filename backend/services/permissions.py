"""
Sales Tracker - Role scope
Two roles: manager sees everything, salesperson only what is assigned to them.
FastAPI dependencies + Mongo filter helpers.
"""

import logging
from typing import Optional
from fastapi import Depends, HTTPException

logger = logging.getLogger("permissions")

MANAGER = "manager"


def is_manager(user: dict) -> bool:
    return user.get("role") == MANAGER


def build_owner_filter(user: dict, field: str = "assignedUserId") -> dict:
    """
    Mongo filter restricting documents to the user.
    manager -> no filter
    salesperson -> {field: user.email}
    """
    if is_manager(user):
        return {}
    return {field: user.get("email")}


def ensure_can_access(user: dict, doc: dict, field: str = "assignedUserId", action: str = "view"):
    """403 unless the user is a manager or owns the document."""
    if is_manager(user):
        return
    if doc.get(field) != user.get("email"):
        logger.warning(
            f"[ACCESS_DENIED] user={user.get('email')} action={action} "
            f"doc={doc.get('id')} owner={doc.get(field)}"
        )
        raise HTTPException(status_code=403, detail=f"Not authorized to {action} this record")


def resolve_target_user(user: dict, target_user_id: Optional[str]) -> str:
    """
    Whose data a request reads. Managers may pick another user,
    everybody else always reads their own.
    """
    own = user.get("email")
    if is_manager(user) and target_user_id and target_user_id != own:
        logger.info(f"[SCOPE] manager={own} reading data for {target_user_id}")
        return target_user_id
    return own


# ════════════════════════════════════════════════════════════════════════
# FASTAPI DEPENDENCIES
# ════════════════════════════════════════════════════════════════════════

def require_manager():
    """
    FastAPI dependency factory.
    Usage: user: dict = Depends(require_manager())
    """
    from routes.auth import get_current_user

    async def _check(user: dict = Depends(get_current_user)):
        if not is_manager(user):
            logger.warning(f"[PERMISSION_DENIED] user={user.get('email')} role={user.get('role')}")
            raise HTTPException(status_code=403, detail="Manager access required")
        return user

    return _check
