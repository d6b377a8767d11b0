"""
Routes KPI journaliers
Daily activity entries per salesperson, summed over a date range.
"""

from fastapi import APIRouter, HTTPException, Depends
from typing import Optional
from datetime import date
import logging
import uuid

from models import KpiEntryCreate
from config import db, now_iso
from routes.auth import get_current_user
from services.activity_logger import log_activity
from services.kpi_metrics import compute_kpi_summary
from services.permissions import require_manager, resolve_target_user

router = APIRouter(tags=["KPI"])
logger = logging.getLogger("kpi")


def _validate_day(value: Optional[str], name: str) -> str:
    try:
        return date.fromisoformat(value).isoformat()
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail=f"{name} must be YYYY-MM-DD")


@router.post("/kpi", status_code=201)
async def save_kpi(data: KpiEntryCreate, user: dict = Depends(get_current_user)):
    user_id = user["email"].lower()

    entry = data.model_dump()
    entry.update({
        "id": str(uuid.uuid4()),
        "userId": user_id,
        "createdAt": now_iso(),
    })

    await db.kpi_entries.insert_one(entry)
    entry.pop("_id", None)

    await log_activity(user=user, action="create", entity_type="kpi", entity_id=entry["id"], entity_name=data.entryDate)
    logger.info(f"[KPI_SAVE] user={user_id} date={data.entryDate}")

    return {"message": "KPI data saved successfully!", "data": entry}


@router.get("/kpi")
async def get_kpi(
    startDate: Optional[str] = None,
    endDate: Optional[str] = None,
    targetUserId: Optional[str] = None,
    user: dict = Depends(get_current_user)
):
    """
    Totals + rates for one user between startDate and endDate (inclusive).
    Managers may read another user's data with targetUserId.
    """
    if not startDate or not endDate:
        raise HTTPException(status_code=400, detail="startDate and endDate query parameters are required.")
    start = _validate_day(startDate, "startDate")
    end = _validate_day(endDate, "endDate")

    user_id = resolve_target_user(user, targetUserId).lower()

    entries = await db.kpi_entries.find(
        {"userId": user_id, "entryDate": {"$gte": start, "$lte": end}},
        {"_id": 0}
    ).to_list(5000)
    logger.info(f"[KPI] user={user_id} range={start}..{end} rows={len(entries)}")

    summary = compute_kpi_summary(entries)
    message = "KPI data fetched successfully!" if entries else "No data found for the period."

    return {
        "message": message,
        "data": {
            "startDate": start,
            "endDate": end,
            "userId": user_id,
            "rowCount": len(entries),
            **summary,
        }
    }


@router.get("/users")
async def list_kpi_users(user: dict = Depends(require_manager())):
    """Distinct emails that have logged KPI entries."""
    user_ids = await db.kpi_entries.distinct("userId")
    emails = sorted({u.lower() for u in user_ids if isinstance(u, str) and "@" in u})
    return {"users": emails}
