"""Payout eligibility request/response schemas.

The request model is the validation boundary in front of the evaluator:
blank fields take their defaults, negative counts clamp to zero and
non-finite numbers are rejected, so evaluate() only sees sanitized input.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from payout_checker.services.eligibility import (
    AccountProfile,
    EvaluationInput,
    PAStatus,
    RuleName,
    Verdict,
)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class EligibilityRequest(BaseModel):
    """Inputs for one payout eligibility check."""

    model_config = ConfigDict(allow_inf_nan=False, str_strip_whitespace=True)

    account_size: str = Field(..., description="Account tier (e.g. 50k, 100K Static)")
    pa_status: PAStatus = Field(
        default=PAStatus.ACTIVE, description="Performance account status"
    )
    inactive_reason: Optional[str] = Field(
        None, description="Free-text reason shown when the account is not active"
    )
    payout_number: int = Field(
        default=1, description="1-based payout ordinal for this account"
    )
    is_live_program: bool = Field(
        default=False, description="Live program lifts the 30% rule and safety net"
    )
    current_balance: float = Field(default=0.0, description="Current balance ($)")
    highest_single_day_profit_since_reference: float = Field(
        default=0.0, description="Largest single-day profit since the reference point ($)"
    )
    trading_days_since_reference: int = Field(
        default=0, description="Trading days since the reference point"
    )
    profitable_days_over_50_since_reference: int = Field(
        default=0, description="Days with >= $50 profit since the reference point"
    )
    requested_payout_amount: float = Field(default=0.0, description="Requested payout ($)")
    reference_balance: Optional[float] = Field(
        None,
        description="Balance right after the last approved payout (defaults to starting balance)",
    )

    @field_validator("pa_status", mode="before")
    @classmethod
    def _normalize_status(cls, v: Any) -> Any:
        if _is_blank(v):
            return PAStatus.ACTIVE
        if isinstance(v, str):
            # Accept display forms like "Account Blown"
            return v.replace(" ", "")
        return v

    @field_validator("payout_number", mode="before")
    @classmethod
    def _default_payout_number(cls, v: Any) -> Any:
        return 1 if _is_blank(v) else v

    @field_validator("payout_number")
    @classmethod
    def _clamp_payout_number(cls, v: int) -> int:
        return max(v, 1)

    @field_validator(
        "current_balance",
        "highest_single_day_profit_since_reference",
        "requested_payout_amount",
        "trading_days_since_reference",
        "profitable_days_over_50_since_reference",
        mode="before",
    )
    @classmethod
    def _blank_to_zero(cls, v: Any) -> Any:
        return 0 if _is_blank(v) else v

    @field_validator(
        "trading_days_since_reference",
        "profitable_days_over_50_since_reference",
    )
    @classmethod
    def _clamp_counts(cls, v: int) -> int:
        return max(v, 0)

    @field_validator("reference_balance", "inactive_reason", mode="before")
    @classmethod
    def _blank_to_none(cls, v: Any) -> Any:
        return None if _is_blank(v) else v

    @model_validator(mode="after")
    def _default_inactive_reason(self) -> "EligibilityRequest":
        if self.pa_status != PAStatus.ACTIVE and not self.inactive_reason:
            self.inactive_reason = self.pa_status.label
        return self

    def to_input(self, profile: AccountProfile) -> EvaluationInput:
        return EvaluationInput(
            pa_status=self.pa_status,
            account=profile,
            payout_number=self.payout_number,
            is_live_program=self.is_live_program,
            current_balance=self.current_balance,
            highest_single_day_profit_since_reference=self.highest_single_day_profit_since_reference,
            trading_days_since_reference=self.trading_days_since_reference,
            profitable_days_over_50_since_reference=self.profitable_days_over_50_since_reference,
            requested_payout_amount=self.requested_payout_amount,
            reference_balance=self.reference_balance,
        )


class AccountProfileOut(BaseModel):
    """Account tier with its derived amounts."""

    size_id: str
    label: str
    starting_balance: float
    min_required_balance_first_three: float
    max_payout_cap_first_five: float
    drawdown_allowance: float
    safety_net_amount: float
    note: str = ""

    @classmethod
    def from_profile(cls, profile: AccountProfile) -> "AccountProfileOut":
        return cls(
            size_id=profile.size_id,
            label=profile.label,
            starting_balance=profile.starting_balance,
            min_required_balance_first_three=profile.min_required_balance_first_three,
            max_payout_cap_first_five=profile.max_payout_cap_first_five,
            drawdown_allowance=profile.drawdown_allowance,
            safety_net_amount=profile.safety_net_amount,
            note=profile.note,
        )


class RuleCheckOut(BaseModel):
    rule: RuleName
    passed: bool
    label: str
    detail: Optional[str] = None


class PayoutRangeOut(BaseModel):
    min: float
    max: float


class ComputedOut(BaseModel):
    safety_net_required: bool
    safety_net_amount: float
    min_balance_to_request: float
    min_payout: float
    max_payout_cap: Optional[float] = None
    allowed_payout_range: Optional[PayoutRangeOut] = None


class EligibilityResponse(BaseModel):
    """Verdict plus display helpers."""

    eligible: bool = Field(..., description="True iff every rule passed")
    reasons: list[RuleCheckOut] = Field(..., description="One entry per rule, fixed order")
    advice: list[str] = Field(default_factory=list, description="Remediation for failing rules")
    computed: ComputedOut
    account: AccountProfileOut
    guidance: str = Field("", description="What applies at this payout number")
    summary: list[str] = Field(default_factory=list, description="Decision lines")

    @classmethod
    def from_verdict(
        cls,
        verdict: Verdict,
        profile: AccountProfile,
        guidance: str,
        summary: list[str],
    ) -> "EligibilityResponse":
        computed = verdict.computed
        allowed = computed.allowed_payout_range
        return cls(
            eligible=verdict.eligible,
            reasons=[
                RuleCheckOut(
                    rule=check.rule,
                    passed=check.passed,
                    label=check.label,
                    detail=check.detail,
                )
                for check in verdict.reasons
            ],
            advice=list(verdict.advice),
            computed=ComputedOut(
                safety_net_required=computed.safety_net_required,
                safety_net_amount=computed.safety_net_amount,
                min_balance_to_request=computed.min_balance_to_request,
                min_payout=computed.min_payout,
                max_payout_cap=computed.max_payout_cap,
                allowed_payout_range=PayoutRangeOut(min=allowed.min, max=allowed.max)
                if allowed
                else None,
            ),
            account=AccountProfileOut.from_profile(profile),
            guidance=guidance,
            summary=summary,
        )


class AccountListResponse(BaseModel):
    accounts: list[AccountProfileOut]
