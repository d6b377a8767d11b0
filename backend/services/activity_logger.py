"""
Service de journalisation des activités
Audit trail for lead / sales-log writes and logouts, read by managers.
"""

import logging
import uuid

from config import db, now_iso

logger = logging.getLogger("activity")

ACTIONS = ["create", "update", "delete", "logout"]
ENTITY_TYPES = ["lead", "sales_log", "kpi", "session"]


async def log_activity(
    user: dict,
    action: str,
    entity_type: str,
    entity_id: str = None,
    entity_name: str = None,
    details: dict = None
) -> dict:
    """Enregistre une activité. The actor is identified by email."""
    if action not in ACTIONS or entity_type not in ENTITY_TYPES:
        logger.warning(f"[ACTIVITY] unexpected action={action} entity={entity_type}")

    entry = {
        "id": str(uuid.uuid4()),
        "userId": user.get("email", "system"),
        "userName": user.get("displayName") or user.get("email", "System"),
        "action": action,
        "entityType": entity_type,
        "entityId": entity_id,
        "entityName": entity_name,
        "details": details or {},
        "createdAt": now_iso(),
    }

    await db.activity_logs.insert_one(entry)
    entry.pop("_id", None)
    return entry


def build_activity_query(user_id=None, entity_type=None, action=None, since=None) -> dict:
    query = {}
    if user_id:
        query["userId"] = user_id.lower()
    if entity_type:
        query["entityType"] = entity_type
    if action:
        query["action"] = action
    if since:
        query["createdAt"] = {"$gte": since}
    return query


async def get_activity_logs(
    user_id: str = None,
    entity_type: str = None,
    action: str = None,
    since: str = None,
    limit: int = 100,
    skip: int = 0
) -> dict:
    """Most recent first, paginated."""
    query = build_activity_query(user_id, entity_type, action, since)

    cursor = db.activity_logs.find(query, {"_id": 0}).sort("createdAt", -1).skip(skip).limit(limit)
    logs = await cursor.to_list(limit)
    total = await db.activity_logs.count_documents(query)

    return {"logs": logs, "total": total, "limit": limit, "skip": skip}
