from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


ApplicationStatus = Literal[
    "draft",
    "submitted",
    "requires_review",
    "under_review",
    "approved",
    "rejected",
    "funded",
]

# Statuses offered by the admin status filter. "requires_review" is produced by
# the processor for high-risk submissions but is not part of this list.
ADMIN_STATUS_FILTER: tuple[str, ...] = (
    "draft",
    "submitted",
    "under_review",
    "approved",
    "rejected",
    "funded",
)

APPLICATION_FIELDS: tuple[str, ...] = (
    "loan_type",
    "amount_requested",
    "first_name",
    "last_name",
    "phone",
    "business_name",
    "business_address",
    "business_city",
    "business_state",
    "business_zip",
    "years_in_business",
)


class LoanApplicationData(BaseModel):
    """Applicant, business and loan fields as submitted by the borrower form."""

    loan_type: str = Field("other", alias="loanType")
    amount_requested: Optional[float] = Field(None, alias="amountRequested")
    first_name: Optional[str] = Field(None, alias="firstName")
    last_name: Optional[str] = Field(None, alias="lastName")
    phone: Optional[str] = None
    business_name: Optional[str] = Field(None, alias="businessName")
    business_address: Optional[str] = Field(None, alias="businessAddress")
    business_city: Optional[str] = Field(None, alias="businessCity")
    business_state: Optional[str] = Field(None, alias="businessState")
    business_zip: Optional[str] = Field(None, alias="businessZip")
    years_in_business: Optional[float] = Field(None, ge=0, alias="yearsInBusiness")
    loan_details: dict[str, Any] = Field(default_factory=dict, alias="loanDetails")

    model_config = {"populate_by_name": True}


class DraftCreate(LoanApplicationData):
    pass


class StatusUpdate(BaseModel):
    status: str
    notes: Optional[str] = None


class ProcessorRequest(BaseModel):
    """Action envelope accepted by the processor endpoint."""

    action: str
    application_data: Optional[dict[str, Any]] = Field(None, alias="applicationData")
    application_id: Optional[str] = Field(None, alias="applicationId")

    model_config = {"populate_by_name": True}


class ApplicationResponse(BaseModel):
    id: str
    user_id: str
    application_number: Optional[str] = None
    status: ApplicationStatus
    loan_type: str
    amount_requested: Optional[float] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    business_name: Optional[str] = None
    business_address: Optional[str] = None
    business_city: Optional[str] = None
    business_state: Optional[str] = None
    business_zip: Optional[str] = None
    years_in_business: Optional[float] = None
    loan_details: dict[str, Any] = Field(default_factory=dict)
    application_started_date: Optional[datetime] = None
    application_submitted_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ApplicationFilter(BaseModel):
    """Admin listing filters; every field is optional and filters combine with AND."""

    status: Optional[str] = None
    loan_type: Optional[str] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    amount_min: Optional[float] = None
    amount_max: Optional[float] = None
    search: Optional[str] = None


class ApplicationStats(BaseModel):
    total: int
    by_status: dict[str, int]
    by_loan_type: dict[str, int]
    total_amount: float
    average_amount: float
    this_month: int
    this_week: int

    model_config = {"alias_generator": to_camel, "populate_by_name": True}
