"""
Routes pour les statistiques YTD
Year-to-date rollups (manager) and next steps on active leads.
"""

from fastapi import APIRouter, Depends
import logging

from config import db, start_of_year_iso
from models import CLOSED_STATUSES
from routes.auth import get_current_user
from services.next_steps import prioritize_leads
from services.permissions import require_manager, build_owner_filter
from services.ytd_stats import compute_ytd_stats

router = APIRouter(prefix="/ytd", tags=["YTD"])
logger = logging.getLogger("ytd")


def year_query() -> dict:
    return {"createdAt": {"$gte": start_of_year_iso()}}


@router.get("/stats")
async def get_ytd_stats(user: dict = Depends(require_manager())):
    """
    Statistiques de l'année en cours, recalculées à chaque appel.
    """
    logs = await db.sales_logs.find(year_query(), {"_id": 0}).to_list(None)
    stats = compute_ytd_stats(logs)

    logger.info(
        f"[YTD] logs={len(logs)} pms={len(stats['pmPerformance'])} "
        f"months={len(stats['monthlyTrends'])} by={user.get('email')}"
    )
    return stats


@router.get("/leads-with-next-steps")
async def get_leads_with_next_steps(user: dict = Depends(get_current_user)):
    """
    Active leads of the current year (not Lost/Sold), highest priority first.
    Salespeople only get the leads assigned to them.
    """
    query = {
        **year_query(),
        **build_owner_filter(user),
        "results.status": {"$nin": CLOSED_STATUSES},
    }

    active_leads = await db.sales_logs.find(query, {"_id": 0}) \
        .sort("nextFollowUpDate", 1) \
        .to_list(None)

    leads = prioritize_leads(active_leads)
    logger.info(f"[NEXT_STEPS] user={user.get('email')} active={len(leads)}")

    return {"leads": leads, "total": len(leads)}
