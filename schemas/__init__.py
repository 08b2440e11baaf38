from schemas.application import (
    ADMIN_STATUS_FILTER,
    APPLICATION_FIELDS,
    ApplicationResponse,
    ApplicationStatus,
    DraftCreate,
    LoanApplicationData,
    ApplicationFilter,
    ApplicationStats,
    ProcessorRequest,
    StatusUpdate,
)
from schemas.assessment import (
    EligibilityResultSchema,
    InterestRateRangeSchema,
    RiskAssessmentSchema,
    ValidationResultSchema,
)

__all__ = [
    "ADMIN_STATUS_FILTER",
    "APPLICATION_FIELDS",
    "ApplicationResponse",
    "ApplicationStatus",
    "DraftCreate",
    "LoanApplicationData",
    "ApplicationFilter",
    "ApplicationStats",
    "ProcessorRequest",
    "StatusUpdate",
    "EligibilityResultSchema",
    "InterestRateRangeSchema",
    "RiskAssessmentSchema",
    "ValidationResultSchema",
]
