from pydantic import BaseModel, Field


class ValidationResultSchema(BaseModel):
    is_valid: bool
    errors: list[str] = Field(default_factory=list)
    risk_score: int = 0
    auto_approval_eligible: bool = False


class RiskAssessmentSchema(BaseModel):
    risk_score: int
    auto_approval_eligible: bool


class InterestRateRangeSchema(BaseModel):
    min: float
    max: float


class EligibilityResultSchema(BaseModel):
    eligible: bool
    max_loan_amount: float
    interest_rate_range: InterestRateRangeSchema
    term_options: list[str] = Field(default_factory=list)
    requirements: list[str] = Field(default_factory=list)
    reasons: list[str] = Field(default_factory=list)
