"""
Sales Tracker - Routes Auth
Session lookup / current user / logout.
Sessions are created by the identity-provider callback; this API only
reads them (Bearer token) and deletes them on logout.
"""

from fastapi import APIRouter, HTTPException, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import logging

from config import db, now_iso, parse_datetime, resolve_role
from services.activity_logger import log_activity, get_activity_logs as fetch_activity_logs
from services.permissions import require_manager

router = APIRouter(prefix="/auth", tags=["Auth"])
security = HTTPBearer(auto_error=False)
logger = logging.getLogger("auth")


# ==================== HELPERS ====================

async def _load_session_user(credentials: HTTPAuthorizationCredentials):
    if not credentials:
        return None

    session = await db.sessions.find_one({
        "token": credentials.credentials,
        "expiresAt": {"$gt": now_iso()}
    }, {"_id": 0})

    if not session or not session.get("user"):
        return None

    user = dict(session["user"])
    user["role"] = resolve_role(user.get("email"))
    return user


async def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(security)):
    """Récupère l'utilisateur connecté depuis le token."""
    if not credentials:
        raise HTTPException(status_code=401, detail="Not authenticated")

    user = await _load_session_user(credentials)
    if not user:
        raise HTTPException(status_code=401, detail="Session expired")

    if not user.get("email"):
        raise HTTPException(status_code=401, detail="User email not found in session")

    return user


# ==================== SESSION ====================

@router.get("/user")
async def get_session_user(credentials: HTTPAuthorizationCredentials = Depends(security)):
    """Current user, or loggedIn=false. Never 401."""
    user = await _load_session_user(credentials)
    if not user:
        return {"loggedIn": False, "user": None}

    return {
        "loggedIn": True,
        "user": {
            "id": user.get("id"),
            "displayName": user.get("displayName"),
            "email": user.get("email"),
            "photo": user.get("photo"),
            "role": user["role"],
        }
    }


@router.post("/logout")
async def logout(
    user: dict = Depends(get_current_user),
    credentials: HTTPAuthorizationCredentials = Depends(security)
):
    await db.sessions.delete_one({"token": credentials.credentials})
    await log_activity(user=user, action="logout", entity_type="session")
    logger.info(f"[LOGOUT] user={user.get('email')}")
    return {"message": "Logged out successfully."}


# ==================== ACTIVITY LOG ====================

@router.get("/activity-logs")
async def get_activity_logs(
    user_id: str = None,
    entity_type: str = None,
    action: str = None,
    since: str = None,
    limit: int = 100,
    skip: int = 0,
    user: dict = Depends(require_manager())
):
    """Journal d'activité (manager). since = ISO date/datetime lower bound."""
    if since and parse_datetime(since) is None:
        raise HTTPException(status_code=400, detail="since must be an ISO date")
    since_iso = parse_datetime(since).isoformat() if since else None

    return await fetch_activity_logs(user_id, entity_type, action, since_iso, min(limit, 500), skip)
