from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Enum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from pulseconnect.database.database import Base
from pulseconnect.models.donor import BloodGroup, enum_values

class Donation(Base):
    """A recorded donation. Rows are never updated once inserted."""
    __tablename__ = "donations"

    id = Column(Integer, primary_key=True, index=True)
    donor_id = Column(Integer, ForeignKey("donors.id"), nullable=False, index=True)
    request_id = Column(Integer, ForeignKey("blood_requests.id"), nullable=True)
    donation_date = Column(DateTime, nullable=False)
    blood_group = Column(Enum(BloodGroup, name="bloodgroup", values_callable=enum_values), nullable=False)
    units_given = Column(Integer, nullable=False, default=1)
    credits_earned = Column(Integer, nullable=False, default=5)
    hospital_name = Column(String, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    donor = relationship("Donor", back_populates="donations")
    request = relationship("BloodRequest", back_populates="donations")
