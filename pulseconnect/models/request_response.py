from sqlalchemy import Column, Integer, DateTime, ForeignKey, Enum, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from pulseconnect.database.database import Base
from pulseconnect.models.donor import enum_values
import enum

class ResponseStatus(str, enum.Enum):
    ACCEPTED = "accepted"
    REJECTED = "rejected"

class RequestResponse(Base):
    __tablename__ = "request_responses"
    __table_args__ = (
        UniqueConstraint("request_id", "donor_id", name="uq_request_responses_request_donor"),
    )

    id = Column(Integer, primary_key=True, index=True)
    request_id = Column(Integer, ForeignKey("blood_requests.id"), nullable=False, index=True)
    donor_id = Column(Integer, ForeignKey("donors.id"), nullable=False, index=True)
    status = Column(Enum(ResponseStatus, name="responsestatus", values_callable=enum_values), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    request = relationship("BloodRequest", back_populates="responses")
    donor = relationship("Donor")
