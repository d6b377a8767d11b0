"""
Sales Tracker - Modèle Sales Log

One sales opportunity owned by a PM.
  - leadType: Warm | SelfGen
  - salesProcess: funnel flags, independent booleans
  - results: status Lost | Pending | Sold, bid / sold amounts (>= 0)
Dates are stored as ISO-8601 UTC strings.
"""

from typing import Optional
from pydantic import BaseModel, Field, validator
from enum import Enum


class LeadType(str, Enum):
    WARM = "Warm"
    SELF_GEN = "SelfGen"


class SaleStatus(str, Enum):
    LOST = "Lost"
    PENDING = "Pending"
    SOLD = "Sold"


# Statuses excluded from "active" leads
CLOSED_STATUSES = [SaleStatus.LOST.value, SaleStatus.SOLD.value]


class AppointmentSchedule(BaseModel):
    date: Optional[str] = None
    scheduledBy: str = "Bailey"


class AppointmentConfirmed(BaseModel):
    date: Optional[str] = None
    confirmedBy: str = "PM"


class SalesProcess(BaseModel):
    isGhosted: bool = False
    mcOnly: bool = False
    mcAndDemo: bool = False
    demoReschedule: Optional[str] = None
    sepMcAndDemo: bool = False
    emailedProposal: bool = False


class SaleResults(BaseModel):
    status: SaleStatus = SaleStatus.PENDING
    bidAmount: float = Field(0, ge=0)
    soldAmount: float = Field(0, ge=0)


class FollowUp(BaseModel):
    scheduledDate: Optional[str] = None
    call1: Optional[str] = None
    call2: Optional[str] = None
    call3: Optional[str] = None


class SalesLogCreate(BaseModel):
    """Création d'un sales log. Tout sauf clientName a une valeur par défaut."""
    clientName: str
    pmName: Optional[str] = None
    leadType: LeadType = LeadType.SELF_GEN
    leadNumber: Optional[int] = None
    email: Optional[str] = ""
    phone: Optional[str] = ""
    address: Optional[str] = ""
    source: Optional[str] = ""
    appointmentSchedule: Optional[AppointmentSchedule] = None
    appointmentConfirmed: Optional[AppointmentConfirmed] = None
    salesProcess: Optional[SalesProcess] = None
    results: Optional[SaleResults] = None
    followup: Optional[FollowUp] = None
    nextFollowUpDate: Optional[str] = None
    explanation: Optional[str] = ""
    additionalNotes: Optional[str] = ""

    @validator("clientName")
    def validate_client_name(cls, v):
        if not v or not v.strip():
            raise ValueError("clientName is required")
        return v.strip()


class SalesLogUpdate(BaseModel):
    """Partial update. Nested objects are merged field by field."""
    clientName: Optional[str] = None
    pmName: Optional[str] = None
    leadType: Optional[LeadType] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    source: Optional[str] = None
    appointmentSchedule: Optional[AppointmentSchedule] = None
    appointmentConfirmed: Optional[AppointmentConfirmed] = None
    salesProcess: Optional[SalesProcess] = None
    results: Optional[SaleResults] = None
    followup: Optional[FollowUp] = None
    nextFollowUpDate: Optional[str] = None
    explanation: Optional[str] = None
    additionalNotes: Optional[str] = None
