from sqlalchemy import Column, Integer, String, Text, Float, DateTime, ForeignKey, Enum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from pulseconnect.database.database import Base
from pulseconnect.models.donor import BloodGroup, enum_values
import enum

class Urgency(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

class RequestStatus(str, enum.Enum):
    ACTIVE = "active"
    FULFILLED = "fulfilled"
    CANCELLED = "cancelled"

# Allowed one-way transitions; fulfilled and cancelled are terminal
STATUS_TRANSITIONS = {
    RequestStatus.ACTIVE: {RequestStatus.FULFILLED, RequestStatus.CANCELLED},
    RequestStatus.FULFILLED: set(),
    RequestStatus.CANCELLED: set(),
}

class BloodRequest(Base):
    __tablename__ = "blood_requests"

    id = Column(Integer, primary_key=True, index=True)
    requester_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    blood_group = Column(Enum(BloodGroup, name="bloodgroup", values_callable=enum_values), nullable=False)
    urgency = Column(Enum(Urgency, name="urgency", values_callable=enum_values), nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    address = Column(Text, nullable=False)
    contact_number = Column(String, nullable=False)
    hospital_name = Column(String, nullable=True)
    notes = Column(Text, nullable=True)
    status = Column(
        Enum(RequestStatus, name="requeststatus", values_callable=enum_values),
        nullable=False,
        default=RequestStatus.ACTIVE,
        index=True,
    )
    radius_km = Column(Integer, nullable=False, default=5)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    requester = relationship("User", back_populates="blood_requests")
    donations = relationship("Donation", back_populates="request", lazy="dynamic")
    responses = relationship("RequestResponse", back_populates="request", lazy="dynamic")
