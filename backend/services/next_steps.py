"""
Sales Tracker - Next steps for active leads

Each active lead (status not Lost/Sold) gets:
  - nextStep: where it stands in the funnel
  - priority: funnel base + follow-up recency boost
  - daysUntilFollowUp / isOverdue

Funnel (first match wins):
  no MC, no demo            -> Schedule Measurement Call   5
  MC only                   -> Schedule Demo               4
  MC + demo, no proposal    -> Email Proposal              3
  proposal, no status       -> Follow-up on Proposal       2
  anything else             -> General Follow-up           1

Boost: follow-up today or past +3, within 2 days +2.
"""

import math
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from config import parse_datetime

SECONDS_PER_DAY = 24 * 60 * 60

OVERDUE_BOOST = 3
SOON_BOOST = 2
SOON_DAYS = 2


def funnel_step(lead: dict) -> tuple:
    """Returns (nextStep, base priority)."""
    sp = lead.get("salesProcess") or {}
    results = lead.get("results") or {}

    if not sp.get("mcOnly") and not sp.get("mcAndDemo"):
        return "Schedule Measurement Call", 5
    if sp.get("mcOnly") and not sp.get("mcAndDemo"):
        return "Schedule Demo", 4
    if sp.get("mcAndDemo") and not sp.get("emailedProposal"):
        return "Email Proposal", 3
    # Falsy check on purpose: an unset status, not "Pending"
    if sp.get("emailedProposal") and not results.get("status"):
        return "Follow-up on Proposal", 2
    return "General Follow-up", 1


def days_until(follow_up, now: datetime) -> Optional[int]:
    """ceil((follow_up - now) / 1 day), None without a date."""
    follow_up = parse_datetime(follow_up)
    if follow_up is None:
        return None
    return math.ceil((follow_up - now).total_seconds() / SECONDS_PER_DAY)


def recency_boost(days_until_follow_up: Optional[int]) -> int:
    if days_until_follow_up is None:
        return 0
    if days_until_follow_up <= 0:
        return OVERDUE_BOOST
    if days_until_follow_up <= SOON_DAYS:
        return SOON_BOOST
    return 0


def prioritize_leads(leads: Iterable[dict], now: datetime = None) -> List[dict]:
    """
    Annotate active leads with next step and priority, highest first.
    Ties keep the input order (callers pass leads sorted by follow-up date).
    """
    now = parse_datetime(now) or datetime.now(timezone.utc)

    prioritized = []
    for lead in leads:
        next_step, priority = funnel_step(lead)
        days = days_until(lead.get("nextFollowUpDate"), now)
        priority += recency_boost(days)

        prioritized.append({
            **lead,
            "nextStep": next_step,
            "priority": priority,
            "daysUntilFollowUp": days,
            "isOverdue": days is not None and days < 0,
        })

    prioritized.sort(key=lambda l: l["priority"], reverse=True)
    return prioritized


def to_priority_summary(lead: dict) -> dict:
    """Compact view used by /ai/leads/prioritize."""
    days = lead.get("daysUntilFollowUp")
    if days is None:
        timing = "no follow-up scheduled"
    elif days < 0:
        timing = f"follow-up overdue by {-days} day(s)"
    elif days == 0:
        timing = "follow-up due today"
    else:
        timing = f"follow-up in {days} day(s)"

    name = lead.get("clientName") or lead.get("name") or "Lead"
    return {
        "leadId": lead.get("id"),
        "priorityScore": lead.get("priority", 0),
        "explanation": f"{name}: {timing}",
        "suggestedAction": lead.get("nextStep"),
    }
