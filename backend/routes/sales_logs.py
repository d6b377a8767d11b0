"""
Routes pour les Sales Logs
One document per sales opportunity, feeding the YTD stats and next steps.
"""

from fastapi import APIRouter, HTTPException, Depends
from datetime import datetime, timezone, timedelta
import logging
import uuid

from models import (
    SalesLogCreate,
    SalesLogUpdate,
    SalesProcess,
    SaleResults,
    AppointmentSchedule,
    AppointmentConfirmed,
    FollowUp,
)
from config import db, now_iso, parse_datetime, DEFAULT_FOLLOW_UP_DAYS
from routes.auth import get_current_user
from services.activity_logger import log_activity
from services.permissions import build_owner_filter, ensure_can_access

router = APIRouter(prefix="/sales-logs", tags=["Sales Logs"])
logger = logging.getLogger("sales_logs")

NESTED_DEFAULTS = {
    "appointmentSchedule": AppointmentSchedule,
    "appointmentConfirmed": AppointmentConfirmed,
    "salesProcess": SalesProcess,
    "results": SaleResults,
    "followup": FollowUp,
}


async def next_lead_number() -> int:
    """Dernier leadNumber + 1 (1 si aucun)."""
    last = await db.sales_logs.find_one(
        {"leadNumber": {"$exists": True}},
        {"_id": 0, "leadNumber": 1},
        sort=[("leadNumber", -1)]
    )
    if last and isinstance(last.get("leadNumber"), int):
        return last["leadNumber"] + 1
    return 1


async def _get_log_or_404(log_id: str) -> dict:
    log = await db.sales_logs.find_one({"id": log_id}, {"_id": 0})
    if not log:
        raise HTTPException(status_code=404, detail="Sales log not found")
    return log


def _flatten_update(update_data: dict) -> dict:
    """
    Nested objects become dotted $set keys so a partial
    results / salesProcess update keeps the stored siblings.
    """
    flat = {}
    for key, value in update_data.items():
        if key in NESTED_DEFAULTS:
            for sub_key, sub_value in (value or {}).items():
                flat[f"{key}.{sub_key}"] = sub_value
        else:
            flat[key] = value
    return flat


def _follow_up_iso(value) -> str:
    dt = parse_datetime(value)
    if dt is None:
        dt = datetime.now(timezone.utc) + timedelta(days=DEFAULT_FOLLOW_UP_DAYS)
    return dt.isoformat()


@router.post("", status_code=201)
async def create_sales_log(data: SalesLogCreate, user: dict = Depends(get_current_user)):
    """
    Crée un sales log.
    Par défaut: SelfGen, PM = current user, funnel flags off,
    Pending with 0 amounts, follow-up in DEFAULT_FOLLOW_UP_DAYS days.
    """
    now = now_iso()
    doc = data.model_dump(mode="json")

    for field, model in NESTED_DEFAULTS.items():
        if doc.get(field) is None:
            doc[field] = model().model_dump(mode="json")

    doc.update({
        "id": str(uuid.uuid4()),
        "leadNumber": data.leadNumber or await next_lead_number(),
        "pmName": data.pmName or user.get("displayName") or user.get("email"),
        "assignedUserId": user.get("email"),
        "nextFollowUpDate": _follow_up_iso(data.nextFollowUpDate),
        "notes": [],
        "createdAt": now,
        "updatedAt": now,
    })

    await db.sales_logs.insert_one(doc)
    doc.pop("_id", None)

    await log_activity(user=user, action="create", entity_type="sales_log", entity_id=doc["id"], entity_name=doc["clientName"])
    logger.info(f"[SALES_LOG_CREATE] id={doc['id']} number={doc['leadNumber']} pm={doc['pmName']}")

    return doc


@router.get("")
async def list_sales_logs(status: str = None, user: dict = Depends(get_current_user)):
    query = build_owner_filter(user)
    if status:
        query["results.status"] = status

    logs = await db.sales_logs.find(query, {"_id": 0}).sort("createdAt", -1).to_list(2000)
    return {"logs": logs, "count": len(logs)}


@router.get("/{log_id}")
async def get_sales_log(log_id: str, user: dict = Depends(get_current_user)):
    log = await _get_log_or_404(log_id)
    ensure_can_access(user, log, action="view")
    return log


@router.put("/{log_id}")
async def update_sales_log(log_id: str, data: SalesLogUpdate, user: dict = Depends(get_current_user)):
    """Partial update: only fields sent in the body are written."""
    log = await _get_log_or_404(log_id)
    ensure_can_access(user, log, action="update")

    update_data = data.model_dump(mode="json", exclude_unset=True)
    if "nextFollowUpDate" in update_data:
        dt = parse_datetime(update_data["nextFollowUpDate"])
        update_data["nextFollowUpDate"] = dt.isoformat() if dt else None

    update_data = _flatten_update(update_data)
    if not update_data:
        raise HTTPException(status_code=400, detail="Nothing to update")

    update_data["updatedAt"] = now_iso()
    await db.sales_logs.update_one({"id": log_id}, {"$set": update_data})

    await log_activity(
        user=user,
        action="update",
        entity_type="sales_log",
        entity_id=log_id,
        entity_name=log.get("clientName"),
        details={"fields": sorted(k for k in update_data if k != "updatedAt")}
    )
    logger.info(f"[SALES_LOG_UPDATE] id={log_id} by={user.get('email')}")

    return await db.sales_logs.find_one({"id": log_id}, {"_id": 0})
