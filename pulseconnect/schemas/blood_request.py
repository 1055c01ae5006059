from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime
from pulseconnect.models.donor import BloodGroup
from pulseconnect.models.blood_request import Urgency, RequestStatus
from pulseconnect.models.request_response import ResponseStatus

class BloodRequestCreate(BaseModel):
    blood_group: BloodGroup
    urgency: Urgency
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    address: str = Field(..., min_length=1)
    contact_number: str = Field(..., min_length=5)
    hospital_name: Optional[str] = None
    notes: Optional[str] = None
    radius_km: int = Field(5, gt=0)

class BloodRequestResponse(BloodRequestCreate):
    id: int
    requester_id: int
    status: RequestStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class BloodRequestStatusUpdate(BaseModel):
    status: RequestStatus

class RequestResponseCreate(BaseModel):
    status: ResponseStatus

class RequestResponseOut(BaseModel):
    id: int
    request_id: int
    donor_id: int
    status: ResponseStatus
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
