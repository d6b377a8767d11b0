"""
Routes AI
Sales coaching text from aggregated KPI metrics, plus a rule-based
lead priority list.
"""

from fastapi import APIRouter, HTTPException, Depends
from openai import AsyncOpenAI, OpenAIError
import logging

from models import SalesCoachRequest, PerformanceInsightsRequest
from routes.auth import get_current_user
from routes.ytd import get_leads_with_next_steps
from services.next_steps import to_priority_summary
from services.sales_coach import (
    COACH_SYSTEM_PROMPT,
    ANALYST_SYSTEM_PROMPT,
    build_sales_coach_prompt,
    build_performance_prompt,
    sales_coach_fallback,
    performance_fallback,
    request_insights,
    get_openai_client,
)

router = APIRouter(prefix="/ai", tags=["AI"])
logger = logging.getLogger("ai")


def _require_totals(user_data):
    if not user_data or user_data.get("totals") is None:
        raise HTTPException(status_code=400, detail="Invalid or missing user data")


@router.post("/sales-coach")
async def sales_coach(
    data: SalesCoachRequest,
    user: dict = Depends(get_current_user),
    client: AsyncOpenAI = Depends(get_openai_client)
):
    _require_totals(data.userData)
    prompt = build_sales_coach_prompt(data.userData, data.timeRange)

    try:
        return await request_insights(client, COACH_SYSTEM_PROMPT, prompt, sales_coach_fallback)
    except OpenAIError as e:
        logger.error(f"[AI_COACH] sales-coach failed user={user.get('email')}: {e}")
        raise HTTPException(status_code=502, detail="Error generating sales insights")


@router.post("/performance-insights")
async def performance_insights(
    data: PerformanceInsightsRequest,
    user: dict = Depends(get_current_user),
    client: AsyncOpenAI = Depends(get_openai_client)
):
    _require_totals(data.userData)
    prompt = build_performance_prompt(data.userData, data.previousPeriodData, data.timeRange)

    try:
        return await request_insights(client, ANALYST_SYSTEM_PROMPT, prompt, performance_fallback)
    except OpenAIError as e:
        logger.error(f"[AI_COACH] performance-insights failed user={user.get('email')}: {e}")
        raise HTTPException(status_code=502, detail="Error generating performance insights")


@router.post("/leads/prioritize")
async def prioritize(user: dict = Depends(get_current_user)):
    """Next-step priorities as a compact list (no model call)."""
    result = await get_leads_with_next_steps(user)
    leads = [to_priority_summary(lead) for lead in result["leads"]]
    return {"leads": leads, "totalCount": len(leads)}
