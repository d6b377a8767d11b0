"""
Sales Tracker - Daily KPI entry
"""

from typing import Optional
from pydantic import BaseModel, Field, validator
from datetime import date


class KpiEntryCreate(BaseModel):
    entryDate: str  # YYYY-MM-DD

    # Self-generated
    doorsKnocked: int = Field(0, ge=0)
    flyersLeftBehind: int = Field(0, ge=0)
    interactionsSelfGen: int = Field(0, ge=0)
    inspectionsRanSelfGen: int = Field(0, ge=0)
    dealsSignedSelfGen: int = Field(0, ge=0)

    # Warm leads
    leadsAssigned: int = Field(0, ge=0)
    initialCallsMade: int = Field(0, ge=0)
    inspectionsRanWarmLead: int = Field(0, ge=0)
    presentationsMadeWarmLead: int = Field(0, ge=0)
    followUpsPostPresentation: int = Field(0, ge=0)
    dealsSignedWarmLead: int = Field(0, ge=0)

    notes: Optional[str] = ""

    @validator("entryDate")
    def validate_entry_date(cls, v):
        try:
            return date.fromisoformat(v.strip()).isoformat()
        except (AttributeError, ValueError):
            raise ValueError("entryDate must be YYYY-MM-DD")
