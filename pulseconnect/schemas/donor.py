from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime
from pulseconnect.models.donor import BloodGroup

class DonorBase(BaseModel):
    full_name: str = Field(..., min_length=1)
    age: int = Field(..., ge=18, le=65)
    blood_group: BloodGroup
    weight: float = Field(..., ge=30, le=200)
    whatsapp_number: str = Field(..., min_length=5)
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    address: str = Field(..., min_length=1)
    last_donation_date: Optional[datetime] = None
    is_available: bool = True

class DonorCreate(DonorBase):
    pass

class DonorUpdate(BaseModel):
    """Partial profile update. Credits and donation counters are not client-writable."""
    full_name: Optional[str] = Field(None, min_length=1)
    age: Optional[int] = Field(None, ge=18, le=65)
    blood_group: Optional[BloodGroup] = None
    weight: Optional[float] = Field(None, ge=30, le=200)
    whatsapp_number: Optional[str] = Field(None, min_length=5)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    address: Optional[str] = Field(None, min_length=1)
    last_donation_date: Optional[datetime] = None
    is_available: Optional[bool] = None

class DonorPublic(BaseModel):
    id: int
    full_name: str
    blood_group: BloodGroup
    whatsapp_number: str
    latitude: float
    longitude: float
    address: str
    is_available: bool
    total_donations: int

    model_config = ConfigDict(from_attributes=True)

class DonorResponse(DonorBase):
    id: int
    user_id: int
    credits: int
    total_donations: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class DonorSearchResult(DonorPublic):
    distance_km: float

class EligibilityResponse(BaseModel):
    can_donate: bool
    next_eligible_date: Optional[datetime] = None
