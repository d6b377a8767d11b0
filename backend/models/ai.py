"""
Sales Tracker - AI request bodies
userData is the payload returned by GET /api/kpi (totals + rates).
"""

from typing import Optional, Dict, Any
from pydantic import BaseModel


class SalesCoachRequest(BaseModel):
    userData: Optional[Dict[str, Any]] = None
    timeRange: str = "week"


class PerformanceInsightsRequest(BaseModel):
    userData: Optional[Dict[str, Any]] = None
    previousPeriodData: Optional[Dict[str, Any]] = None
    timeRange: str = "week"
