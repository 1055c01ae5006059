from sqlalchemy import Column, Integer, String, Text, Float, Boolean, DateTime, ForeignKey, Enum, CheckConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from pulseconnect.database.database import Base
import enum

class BloodGroup(str, enum.Enum):
    A_POS = "A+"
    A_NEG = "A-"
    B_POS = "B+"
    B_NEG = "B-"
    AB_POS = "AB+"
    AB_NEG = "AB-"
    O_POS = "O+"
    O_NEG = "O-"


def enum_values(enum_cls):
    """Persist enum values ("A+") rather than member names ("A_POS")."""
    return [member.value for member in enum_cls]


class Donor(Base):
    __tablename__ = "donors"
    __table_args__ = (
        CheckConstraint("credits >= 0", name="ck_donors_credits_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)
    full_name = Column(String, nullable=False)
    age = Column(Integer, nullable=False)
    blood_group = Column(Enum(BloodGroup, name="bloodgroup", values_callable=enum_values), nullable=False, index=True)
    weight = Column(Float, nullable=False)
    whatsapp_number = Column(String, nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    address = Column(Text, nullable=False)
    last_donation_date = Column(DateTime, nullable=True)
    is_available = Column(Boolean, nullable=False, default=True, index=True)
    # Cached aggregate of credit_transactions, only written by the ledger service
    credits = Column(Integer, nullable=False, default=0)
    total_donations = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="donor")
    donations = relationship("Donation", back_populates="donor", lazy="dynamic")
    credit_transactions = relationship("CreditTransaction", back_populates="donor", lazy="dynamic")
