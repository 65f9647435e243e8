"""Payout eligibility: account tiers and the rule evaluator."""

from payout_checker.services.eligibility.evaluator import (
    MIN_PAYOUT,
    evaluate,
    payout_guidance,
    summarize_verdict,
)
from payout_checker.services.eligibility.models import (
    AccountProfile,
    ComputedThresholds,
    EvaluationInput,
    PAStatus,
    PayoutRange,
    RuleCheck,
    RuleName,
    Verdict,
)
from payout_checker.services.eligibility.profiles import (
    ACCOUNT_PROFILES,
    UnknownAccountSizeError,
    get_account_profile,
    list_account_profiles,
)

__all__ = [
    "ACCOUNT_PROFILES",
    "AccountProfile",
    "ComputedThresholds",
    "EvaluationInput",
    "MIN_PAYOUT",
    "PAStatus",
    "PayoutRange",
    "RuleCheck",
    "RuleName",
    "UnknownAccountSizeError",
    "Verdict",
    "evaluate",
    "get_account_profile",
    "list_account_profiles",
    "payout_guidance",
    "summarize_verdict",
]
