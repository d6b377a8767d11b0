"""
Sales Tracker - Models Package

Exports tous les modèles pour import facile
from models import LeadCreate, SalesLogCreate, KpiEntryCreate, etc.
"""

# Prospects
from .lead import (
    LeadStatus,
    VALID_LEAD_STATUSES,
    LeadCreate,
    LeadUpdate,
)

# Sales logs
from .sales_log import (
    LeadType,
    SaleStatus,
    CLOSED_STATUSES,
    AppointmentSchedule,
    AppointmentConfirmed,
    SalesProcess,
    SaleResults,
    FollowUp,
    SalesLogCreate,
    SalesLogUpdate,
)

# KPI
from .kpi import KpiEntryCreate

# AI
from .ai import SalesCoachRequest, PerformanceInsightsRequest

__all__ = [
    # Leads
    "LeadStatus",
    "VALID_LEAD_STATUSES",
    "LeadCreate",
    "LeadUpdate",
    # Sales logs
    "LeadType",
    "SaleStatus",
    "CLOSED_STATUSES",
    "AppointmentSchedule",
    "AppointmentConfirmed",
    "SalesProcess",
    "SaleResults",
    "FollowUp",
    "SalesLogCreate",
    "SalesLogUpdate",
    # KPI
    "KpiEntryCreate",
    # AI
    "SalesCoachRequest",
    "PerformanceInsightsRequest",
]
