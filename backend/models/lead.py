"""
Sales Tracker - Modèle Lead (prospect)

A prospect before it becomes a sales log.
Notes are appended, never edited.
"""

from typing import Optional
from pydantic import BaseModel, validator
from enum import Enum


class LeadStatus(str, Enum):
    NEW = "New"
    CONTACTED = "Contacted"
    ATTEMPTED_CONTACT = "Attempted Contact"
    QUALIFIED = "Qualified"
    PROPOSAL = "Proposal"
    WON = "Won"
    LOST = "Lost"


VALID_LEAD_STATUSES = [s.value for s in LeadStatus]


class LeadCreate(BaseModel):
    name: str
    email: Optional[str] = ""
    phone: Optional[str] = ""
    address: Optional[str] = ""
    source: Optional[str] = ""
    status: LeadStatus = LeadStatus.NEW
    nextFollowUpDate: Optional[str] = None
    projectValue: Optional[str] = ""
    initialNote: Optional[str] = None

    @validator("name")
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("Lead name is required")
        return v.strip()

    @validator("email")
    def normalize_email(cls, v):
        return v.strip().lower() if v else ""


class LeadUpdate(BaseModel):
    """Modification d'un lead. Les valeurs vides sont ignorées."""
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    source: Optional[str] = None
    status: Optional[LeadStatus] = None
    nextFollowUpDate: Optional[str] = None
    lastContactDate: Optional[str] = None
    projectValue: Optional[str] = None
    addNote: Optional[str] = None
