"""
Sales Tracker - AI sales coach

Builds coaching prompts from aggregated KPI metrics and asks the
language model for a JSON answer. If the answer does not parse, a fixed
fallback payload is returned instead.
"""

import json
import logging
from typing import Optional

from fastapi import HTTPException
from openai import AsyncOpenAI

from config import OPENAI_API_KEY, OPENAI_MODEL, OPENAI_MAX_TOKENS, OPENAI_TEMPERATURE

logger = logging.getLogger("sales_coach")

COACH_SYSTEM_PROMPT = "You are an expert sales coach for a roofing company sales team."
ANALYST_SYSTEM_PROMPT = "You are an expert sales performance analyst."

_client: Optional[AsyncOpenAI] = None


def get_openai_client() -> AsyncOpenAI:
    """
    FastAPI dependency: one AsyncOpenAI client for the whole process.
    """
    global _client
    if not OPENAI_API_KEY:
        raise HTTPException(status_code=503, detail="AI insights are not configured")
    if _client is None:
        _client = AsyncOpenAI(api_key=OPENAI_API_KEY)
    return _client


# ==================== PROMPTS ====================

def _pct(value) -> str:
    return f"{(value or 0) * 100:.1f}%"


def _metrics_block(user_data: dict) -> str:
    totals = user_data.get("totals") or {}
    rates = user_data.get("rates") or {}
    self_gen = totals.get("selfGenTotals") or {}
    warm = totals.get("warmLeadTotals") or {}
    self_gen_rates = rates.get("selfGenRates") or {}
    warm_rates = rates.get("warmLeadRates") or {}

    lines = [
        "SELF-GENERATED LEADS:",
        f"- Doors Knocked: {self_gen.get('doorsKnocked') or 0}",
        f"- Interactions: {self_gen.get('interactions') or 0}",
        f"- Inspections: {self_gen.get('inspections') or 0}",
        f"- Deals Signed: {self_gen.get('deals') or 0}",
        "",
        "WARM LEADS:",
        f"- Leads Assigned: {warm.get('leadsAssigned') or 0}",
        f"- Initial Calls: {warm.get('initialCalls') or 0}",
        f"- Inspections: {warm.get('inspections') or 0}",
        f"- Presentations: {warm.get('presentations') or 0}",
        f"- Deals Signed: {warm.get('deals') or 0}",
        "",
        "CONVERSION RATES:",
        f"- Self-Generated Interaction Rate: {_pct(self_gen_rates.get('interactionRate'))}",
        f"- Self-Generated Inspection Rate: {_pct(self_gen_rates.get('inspectionRate'))}",
        f"- Self-Generated Deal Rate: {_pct(self_gen_rates.get('dealRate'))}",
        f"- Warm Lead Call Rate: {_pct(warm_rates.get('callRate'))}",
        f"- Warm Lead Inspection Rate: {_pct(warm_rates.get('inspectionRate'))}",
        f"- Warm Lead Deal Rate: {_pct(warm_rates.get('dealRate'))}",
    ]
    return "\n".join(lines) + "\n"


def build_sales_coach_prompt(user_data: dict, time_range: str) -> str:
    prompt = (
        f"You are an expert sales coach. Analyze the following sales performance data "
        f"for the last {time_range} and provide specific feedback and recommendations:\n\n"
    )
    prompt += _metrics_block(user_data)
    prompt += """
Provide the following in JSON format:
1. "overallAssessment": A brief overall assessment (2-3 sentences)
2. "strengths": An array of 2-3 specific strengths based on the metrics
3. "areasForImprovement": An array of 2-3 specific areas that need improvement
4. "recommendedActions": An array of 3-4 specific, actionable recommendations to improve sales performance
"""
    return prompt


def build_performance_prompt(user_data: dict, previous_period_data: Optional[dict], time_range: str) -> str:
    prompt = (
        f"You are an expert sales analyst. Analyze the following sales performance data "
        f"for the last {time_range} and provide detailed insights:\n\n"
    )
    prompt += "CURRENT PERIOD DATA:\n"
    prompt += _metrics_block(user_data)

    if previous_period_data and previous_period_data.get("totals"):
        prompt += "\nPREVIOUS PERIOD DATA:\n"
        prompt += _metrics_block(previous_period_data)

    prompt += """
Provide the following in JSON format:
1. "keyInsights": An array of 3-4 key insights from the data
2. "trends": An array of trend objects with "text" (description) and "direction" (positive/negative/neutral)
3. "conversionInsights": An array of 2-3 insights specifically about conversion rates
"""
    return prompt


# ==================== FALLBACKS ====================

def sales_coach_fallback(raw_text: str) -> dict:
    return {
        "overallAssessment": (raw_text or "")[:200],
        "strengths": ["Strong communication skills", "Good follow-up rate"],
        "areasForImprovement": ["Conversion rate could be improved", "More doors should be knocked"],
        "recommendedActions": [
            "Increase daily door knocking target",
            "Practice objection handling techniques",
            "Follow up more consistently with warm leads",
            "Improve presentation skills",
        ],
    }


def performance_fallback(raw_text: str) -> dict:
    return {
        "keyInsights": [
            "Your door-to-interaction rate is above average",
            "Warm lead conversion could be improved",
            "Overall performance shows positive trajectory",
        ],
        "trends": [
            {"text": "Door knocking volume is up from previous period", "direction": "positive"},
            {"text": "Deal closure rate remains consistent", "direction": "neutral"},
        ],
        "conversionInsights": [
            "Your self-generated leads convert better than warm leads",
            "Initial call-to-inspection conversion needs improvement",
        ],
    }


def parse_model_json(raw_text: str, fallback) -> dict:
    """JSON object from the model output, fallback(raw_text) otherwise."""
    try:
        parsed = json.loads(raw_text or "")
    except (TypeError, ValueError) as e:
        logger.error(f"[AI_COACH] model output is not JSON: {e}")
        return fallback(raw_text)
    if not isinstance(parsed, dict):
        logger.error("[AI_COACH] model output is JSON but not an object")
        return fallback(raw_text)
    return parsed


# ==================== MODEL CALL ====================

async def request_insights(client: AsyncOpenAI, system_prompt: str, prompt: str, fallback) -> dict:
    """
    One chat completion. API errors propagate to the caller.
    """
    logger.info(f"[AI_COACH] model={OPENAI_MODEL} prompt_chars={len(prompt)}")
    completion = await client.chat.completions.create(
        model=OPENAI_MODEL,
        messages=[
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": prompt},
        ],
        max_tokens=OPENAI_MAX_TOKENS,
        temperature=OPENAI_TEMPERATURE,
    )
    raw_text = completion.choices[0].message.content
    return parse_model_json(raw_text, fallback)
