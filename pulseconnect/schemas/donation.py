from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime
from pulseconnect.models.donor import BloodGroup

class DonationCreate(BaseModel):
    donation_date: Optional[datetime] = None
    blood_group: Optional[BloodGroup] = None
    units_given: int = Field(1, gt=0)
    credits_earned: Optional[int] = Field(None, gt=0)
    hospital_name: Optional[str] = None
    notes: Optional[str] = None
    request_id: Optional[int] = None

class DonationVerify(BaseModel):
    donor_id: int
    donation_date: Optional[datetime] = None
    blood_group: Optional[BloodGroup] = None
    units_given: int = Field(1, gt=0)
    credits_earned: Optional[int] = Field(None, gt=0)
    hospital_name: Optional[str] = None
    notes: Optional[str] = None

class DonationResponse(BaseModel):
    id: int
    donor_id: int
    request_id: Optional[int] = None
    donation_date: datetime
    blood_group: BloodGroup
    units_given: int
    credits_earned: int
    hospital_name: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
