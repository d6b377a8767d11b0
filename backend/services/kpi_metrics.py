"""
Sales Tracker - Daily KPI totals and conversion rates
"""

from typing import Iterable

from config import safe_divide

# entry field -> total key
SELF_GEN_FIELDS = {
    "doorsKnocked": "doorsKnocked",
    "flyersLeftBehind": "flyersLeftBehind",
    "interactionsSelfGen": "interactions",
    "inspectionsRanSelfGen": "inspections",
    "dealsSignedSelfGen": "deals",
}

WARM_LEAD_FIELDS = {
    "leadsAssigned": "leadsAssigned",
    "initialCallsMade": "initialCalls",
    "inspectionsRanWarmLead": "inspections",
    "presentationsMadeWarmLead": "presentations",
    "followUpsPostPresentation": "followUps",
    "dealsSignedWarmLead": "deals",
}


def parse_count(value) -> int:
    """Integer counter, 0 for anything unparsable."""
    try:
        return int(value)
    except (TypeError, ValueError):
        try:
            return int(float(value))
        except (TypeError, ValueError):
            return 0


def compute_kpi_summary(entries: Iterable[dict]) -> dict:
    """
    Sum daily KPI entries and derive funnel rates.
    Rates are fractions (0.25 = 25%), 0 when the denominator is 0.
    """
    self_gen = {key: 0 for key in SELF_GEN_FIELDS.values()}
    warm = {key: 0 for key in WARM_LEAD_FIELDS.values()}

    for entry in entries:
        for field, key in SELF_GEN_FIELDS.items():
            self_gen[key] += parse_count(entry.get(field))
        for field, key in WARM_LEAD_FIELDS.items():
            warm[key] += parse_count(entry.get(field))

    self_gen_rates = {
        "interactionRate": safe_divide(self_gen["interactions"], self_gen["doorsKnocked"]),
        "inspectionRate": safe_divide(self_gen["inspections"], self_gen["interactions"]),
        "dealRate": safe_divide(self_gen["deals"], self_gen["inspections"]),
        "overallDoorsPerDeal": safe_divide(self_gen["doorsKnocked"], self_gen["deals"]),
    }
    warm_rates = {
        "callRate": safe_divide(warm["initialCalls"], warm["leadsAssigned"]),
        "inspectionRate": safe_divide(warm["inspections"], warm["initialCalls"]),
        "presentationRate": safe_divide(warm["presentations"], warm["inspections"]),
        "dealRate": safe_divide(warm["deals"], warm["presentations"]),
        "overallLeadsPerDeal": safe_divide(warm["leadsAssigned"], warm["deals"]),
    }

    return {
        "totals": {"selfGenTotals": self_gen, "warmLeadTotals": warm},
        "rates": {"selfGenRates": self_gen_rates, "warmLeadRates": warm_rates},
    }
