from sqlalchemy import Column, DateTime, Float, String, func
from sqlalchemy import JSON

from database import Base


class LoanApplication(Base):
    __tablename__ = "loan_applications"

    id = Column(String(64), primary_key=True, index=True)
    user_id = Column(String(64), nullable=False, index=True)
    # Assigned once on first successful submission; drafts have none.
    application_number = Column(String(32), unique=True, nullable=True, index=True)
    status = Column(String(32), nullable=False, default="draft", index=True)
    loan_type = Column(String(32), nullable=False)
    amount_requested = Column(Float, nullable=True)

    first_name = Column(String(128), nullable=True)
    last_name = Column(String(128), nullable=True)
    phone = Column(String(32), nullable=True)
    business_name = Column(String(256), nullable=True)
    business_address = Column(String(256), nullable=True)
    business_city = Column(String(128), nullable=True)
    business_state = Column(String(64), nullable=True)
    business_zip = Column(String(16), nullable=True)
    years_in_business = Column(Float, nullable=True)

    # Type-specific fields plus risk_score / auto_approval_eligible / status_notes
    loan_details = Column(JSON, nullable=False, default=dict)

    application_started_date = Column(DateTime(timezone=True), nullable=True)
    application_submitted_date = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
