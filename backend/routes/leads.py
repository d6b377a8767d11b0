"""
Routes pour les Leads (prospects)
Salespeople see and edit their own leads, managers see everything.
"""

from fastapi import APIRouter, HTTPException, Depends
import logging
import uuid

from models import LeadCreate, LeadUpdate
from config import db, now_iso, parse_datetime
from routes.auth import get_current_user
from services.activity_logger import log_activity
from services.permissions import build_owner_filter, ensure_can_access

router = APIRouter(prefix="/leads", tags=["Leads"])
logger = logging.getLogger("leads")


def _iso_or_none(value):
    dt = parse_datetime(value)
    return dt.isoformat() if dt else None


async def _get_lead_or_404(lead_id: str) -> dict:
    lead = await db.leads.find_one({"id": lead_id}, {"_id": 0})
    if not lead:
        logger.info(f"[LEAD] not found id={lead_id}")
        raise HTTPException(status_code=404, detail="Lead not found")
    return lead


@router.post("", status_code=201)
async def create_lead(data: LeadCreate, user: dict = Depends(get_current_user)):
    """Crée un lead assigné à l'utilisateur connecté."""
    now = now_iso()
    user_email = user.get("email")

    lead = {
        "id": str(uuid.uuid4()),
        "name": data.name,
        "email": data.email,
        "phone": data.phone or "",
        "address": data.address or "",
        "source": data.source or "",
        "status": data.status.value,
        "projectValue": data.projectValue or "",
        "assignedUserId": user_email,
        "createdBy": user_email,
        "lastContactDate": None,
        "nextFollowUpDate": _iso_or_none(data.nextFollowUpDate),
        "followUpNotes": [],
        "createdAt": now,
        "updatedAt": now,
    }

    if data.initialNote and data.initialNote.strip():
        lead["followUpNotes"].append({
            "note": data.initialNote.strip(),
            "userId": user_email,
            "date": now,
        })

    await db.leads.insert_one(lead)
    lead.pop("_id", None)

    await log_activity(user=user, action="create", entity_type="lead", entity_id=lead["id"], entity_name=lead["name"])
    logger.info(f"[LEAD_CREATE] id={lead['id']} by={user_email}")

    return {"message": "Lead created successfully!", "lead": lead}


@router.get("")
async def list_leads(user: dict = Depends(get_current_user)):
    """Leads de l'utilisateur (tous pour un manager), plus récents d'abord."""
    query = build_owner_filter(user)
    leads = await db.leads.find(query, {"_id": 0}).sort("createdAt", -1).to_list(1000)
    logger.info(f"[LEADS] user={user.get('email')} count={len(leads)}")

    return {
        "message": "Leads fetched successfully",
        "count": len(leads),
        "data": leads,
    }


@router.get("/{lead_id}")
async def get_lead(lead_id: str, user: dict = Depends(get_current_user)):
    lead = await _get_lead_or_404(lead_id)
    ensure_can_access(user, lead, action="view")
    return {"message": "Lead fetched successfully", "data": lead}


@router.put("/{lead_id}")
async def update_lead(lead_id: str, data: LeadUpdate, user: dict = Depends(get_current_user)):
    """
    Mise à jour partielle. Les champs vides sont ignorés;
    addNote ajoute une note de suivi.
    """
    lead = await _get_lead_or_404(lead_id)
    ensure_can_access(user, lead, action="update")

    update_data = {}
    for field in ("name", "email", "phone", "address", "source", "projectValue"):
        value = getattr(data, field)
        if value:
            update_data[field] = value.strip().lower() if field == "email" else value
    if data.status:
        update_data["status"] = data.status.value
    if data.nextFollowUpDate:
        update_data["nextFollowUpDate"] = _iso_or_none(data.nextFollowUpDate)
    if data.lastContactDate:
        update_data["lastContactDate"] = _iso_or_none(data.lastContactDate)

    now = now_iso()
    update_data["updatedAt"] = now
    operation = {"$set": update_data}

    if data.addNote and data.addNote.strip():
        operation["$push"] = {"followUpNotes": {
            "note": data.addNote.strip(),
            "userId": user.get("email"),
            "date": now,
        }}

    await db.leads.update_one({"id": lead_id}, operation)

    await log_activity(
        user=user,
        action="update",
        entity_type="lead",
        entity_id=lead_id,
        entity_name=lead.get("name"),
        details={k: v for k, v in update_data.items() if k != "updatedAt"}
    )
    logger.info(f"[LEAD_UPDATE] id={lead_id} fields={sorted(update_data)} note={'$push' in operation}")

    updated = await db.leads.find_one({"id": lead_id}, {"_id": 0})
    return {"message": "Lead updated successfully", "data": updated}


@router.delete("/{lead_id}")
async def delete_lead(lead_id: str, user: dict = Depends(get_current_user)):
    lead = await _get_lead_or_404(lead_id)
    ensure_can_access(user, lead, action="delete")

    await db.leads.delete_one({"id": lead_id})

    await log_activity(user=user, action="delete", entity_type="lead", entity_id=lead_id, entity_name=lead.get("name"))
    logger.info(f"[LEAD_DELETE] id={lead_id} by={user.get('email')}")

    return {"message": "Lead deleted successfully"}
