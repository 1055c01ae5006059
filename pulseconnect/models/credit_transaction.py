from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey, Enum, CheckConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from pulseconnect.database.database import Base
from pulseconnect.models.donor import enum_values
import enum

class TransactionType(str, enum.Enum):
    EARNED = "earned"
    SPENT = "spent"

class CreditTransaction(Base):
    """Append-only credit ledger entry. ``amount`` is always positive; the type gives the sign."""
    __tablename__ = "credit_transactions"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_credit_transactions_amount_positive"),
    )

    id = Column(Integer, primary_key=True, index=True)
    donor_id = Column(Integer, ForeignKey("donors.id"), nullable=False, index=True)
    transaction_type = Column(Enum(TransactionType, name="transactiontype", values_callable=enum_values), nullable=False)
    amount = Column(Integer, nullable=False)
    description = Column(Text, nullable=False)
    related_donation_id = Column(Integer, ForeignKey("donations.id"), nullable=True)
    related_request_id = Column(Integer, ForeignKey("blood_requests.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    donor = relationship("Donor", back_populates="credit_transactions")
    donation = relationship("Donation")
    request = relationship("BloodRequest")
