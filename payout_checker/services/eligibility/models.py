"""Data types for payout eligibility evaluation."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class PAStatus(str, Enum):
    """Performance account status as shown in the member system."""

    ACTIVE = "Active"
    ACCOUNT_BLOWN = "AccountBlown"
    FAILED_REBILL = "FailedRebill"
    USER_CANCELLED = "UserCancelled"

    @property
    def label(self) -> str:
        """Display form, e.g. "Account Blown"."""
        return _PA_STATUS_LABELS[self]


_PA_STATUS_LABELS = {
    PAStatus.ACTIVE: "Active",
    PAStatus.ACCOUNT_BLOWN: "Account Blown",
    PAStatus.FAILED_REBILL: "Failed Rebill",
    PAStatus.USER_CANCELLED: "User Cancelled",
}


class RuleName(str, Enum):
    """Payout rules, in the order they are reported."""

    ACCOUNT_ACTIVE = "account_active"
    MIN_TRADING_DAYS = "min_trading_days"
    MIN_PROFIT_DAYS = "min_profit_days"
    CONSISTENCY_30 = "consistency_30"
    MIN_BALANCE = "min_balance"
    MIN_REQUEST = "min_request"
    MAX_CAP = "max_cap"
    BALANCE_AFTER_PAYOUT = "balance_after_payout"


@dataclass(frozen=True)
class AccountProfile:
    """Static configuration for one account-size tier."""

    size_id: str
    label: str
    starting_balance: float
    min_required_balance_first_three: float
    max_payout_cap_first_five: float
    note: str = ""

    @property
    def drawdown_allowance(self) -> float:
        return self.min_required_balance_first_three - self.starting_balance - 100

    @property
    def safety_net_amount(self) -> float:
        """Drawdown allowance plus $100."""
        return self.min_required_balance_first_three - self.starting_balance


@dataclass(frozen=True)
class EvaluationInput:
    """
    One payout request, already sanitized by the caller.

    Counts must be non-negative integers and money fields finite numbers.
    reference_balance is the balance right after the last approved payout;
    None means the account's starting balance.
    """

    pa_status: PAStatus
    account: AccountProfile
    payout_number: int
    is_live_program: bool
    current_balance: float
    highest_single_day_profit_since_reference: float
    trading_days_since_reference: int
    profitable_days_over_50_since_reference: int
    requested_payout_amount: float
    reference_balance: Optional[float] = None


@dataclass(frozen=True)
class RuleCheck:
    """Outcome of a single rule."""

    rule: RuleName
    passed: bool
    label: str
    detail: Optional[str] = None


@dataclass(frozen=True)
class PayoutRange:
    min: float
    max: float


@dataclass(frozen=True)
class ComputedThresholds:
    """Thresholds derived for the request, reported alongside the checklist."""

    safety_net_required: bool
    safety_net_amount: float
    min_balance_to_request: float
    min_payout: float
    max_payout_cap: Optional[float]
    allowed_payout_range: Optional[PayoutRange]


@dataclass(frozen=True)
class Verdict:
    """Eligibility verdict: checklist, remediation advice and thresholds."""

    eligible: bool
    reasons: tuple[RuleCheck, ...]
    advice: tuple[str, ...]
    computed: ComputedThresholds

    @property
    def failed_rules(self) -> list[RuleName]:
        return [check.rule for check in self.reasons if not check.passed]
