"""
Sales Tracker - YTD aggregation

Single pass over the year's sales logs:
  - lead / status / sales totals and rates
  - sales-process funnel counters (independent flags, not exclusive)
  - per-PM rollups, ordered by sold revenue
  - month buckets, ordered chronologically

Pure function: the caller fetches the records (createdAt >= Jan 1st).
Missing amounts count as 0, missing flags as False. A record without a
usable createdAt is still counted but left out of the month buckets.
"""

import logging
from typing import Dict, Iterable, List

from config import parse_datetime, safe_divide

logger = logging.getLogger("ytd_stats")

SOLD = "Sold"

# salesProcess flag -> output counter
FUNNEL_COUNTERS = {
    "isGhosted": "ghosted",
    "mcOnly": "mcOnly",
    "mcAndDemo": "mcAndDemo",
    "sepMcAndDemo": "separateMcAndDemo",
    "emailedProposal": "emailedProposal",
}

STATUS_COUNTERS = {
    "Lost": "lost",
    "Pending": "pending",
    "Sold": "sold",
}


def _amount(results: dict, key: str) -> float:
    return results.get(key) or 0


def _rates(sold_count: int, total_leads: int, total_sold: float, total_bid: float) -> dict:
    return {
        "closingRate": safe_divide(sold_count, total_leads) * 100,
        "avgSoldAmount": safe_divide(total_sold, sold_count),
        "dollarClosingRate": safe_divide(total_sold, total_bid) * 100,
    }


def _new_pm_group(pm_name) -> dict:
    return {
        "pmName": pm_name,
        "totalLeads": 0,
        "warmLeads": 0,
        "selfGenLeads": 0,
        "soldCount": 0,
        "totalSold": 0,
        "totalBid": 0,
    }


def compute_ytd_stats(records: Iterable[dict]) -> dict:
    """
    Build the YtdStats payload from a year's worth of sales-log documents.

    Returns a JSON-serialisable dict:
        leads, status, sales, salesProcess, pmPerformance, monthlyTrends
    """
    stats = {
        "leads": {"warm": 0, "selfGen": 0, "total": 0},
        "status": {"lost": 0, "pending": 0, "sold": 0},
        "sales": {
            "totalBidAmount": 0,
            "totalSoldAmount": 0,
            "avgSoldAmount": 0,
            "closingRate": 0,
            "dollarClosingRate": 0,
        },
        "salesProcess": {counter: 0 for counter in FUNNEL_COUNTERS.values()},
        "pmPerformance": [],
        "monthlyTrends": [],
    }

    # dicts keep insertion order -> stable tie order for the PM sort
    pm_groups: Dict[object, dict] = {}
    months: Dict[tuple, dict] = {}

    for log in records:
        lead_type = log.get("leadType")
        results = log.get("results") or {}
        sales_process = log.get("salesProcess") or {}
        status = results.get("status")
        is_sold = status == SOLD

        bid = _amount(results, "bidAmount")
        sold_amount = _amount(results, "soldAmount") if is_sold else 0

        # Lead type
        if lead_type == "Warm":
            stats["leads"]["warm"] += 1
        elif lead_type == "SelfGen":
            stats["leads"]["selfGen"] += 1

        # Status
        if status in STATUS_COUNTERS:
            stats["status"][STATUS_COUNTERS[status]] += 1

        # Sales totals (soldAmount only counts on Sold)
        stats["sales"]["totalBidAmount"] += bid
        stats["sales"]["totalSoldAmount"] += sold_amount

        # Funnel
        for flag, counter in FUNNEL_COUNTERS.items():
            if sales_process.get(flag):
                stats["salesProcess"][counter] += 1

        # Per PM
        pm_name = log.get("pmName")
        group = pm_groups.get(pm_name)
        if group is None:
            group = pm_groups[pm_name] = _new_pm_group(pm_name)
        group["totalLeads"] += 1
        if lead_type == "Warm":
            group["warmLeads"] += 1
        elif lead_type == "SelfGen":
            group["selfGenLeads"] += 1
        if is_sold:
            group["soldCount"] += 1
        group["totalSold"] += sold_amount
        group["totalBid"] += bid

        # Per month
        created_at = parse_datetime(log.get("createdAt"))
        if created_at is None:
            logger.warning(f"[YTD] log {log.get('id')} has no usable createdAt, skipped from monthly trends")
            continue
        key = (created_at.year, created_at.month)
        bucket = months.get(key)
        if bucket is None:
            bucket = months[key] = {
                "_id": {"month": created_at.month, "year": created_at.year},
                "leads": 0,
                "sold": 0,
                "revenue": 0,
            }
        bucket["leads"] += 1
        if is_sold:
            bucket["sold"] += 1
        bucket["revenue"] += sold_amount

    # Derived totals
    leads = stats["leads"]
    leads["total"] = leads["warm"] + leads["selfGen"]
    stats["sales"].update(_rates(
        stats["status"]["sold"],
        leads["total"],
        stats["sales"]["totalSoldAmount"],
        stats["sales"]["totalBidAmount"],
    ))

    pm_performance: List[dict] = []
    for group in pm_groups.values():
        group.update(_rates(group["soldCount"], group["totalLeads"], group["totalSold"], group["totalBid"]))
        pm_performance.append(group)
    pm_performance.sort(key=lambda g: g["totalSold"], reverse=True)
    stats["pmPerformance"] = pm_performance

    stats["monthlyTrends"] = [months[key] for key in sorted(months)]

    return stats
