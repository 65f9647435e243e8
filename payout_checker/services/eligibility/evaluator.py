"""
Payout eligibility evaluator.

Checks a payout request against the eight payout rules and returns a
Verdict with the full checklist, remediation advice and the thresholds used:

1. Account active
2. Minimum trading days since the reference point
3. Minimum profit days (>= $50) since the reference point
4. 30% consistency (payouts 1-5, waived for live program)
5. Minimum balance to request
6. Minimum request size
7. Maximum payout cap (payouts 1-5)
8. Balance after payout (safety net for payouts 1-3, trailing floor after)

Every rule is evaluated and reported; there is no short-circuit. The
evaluator is pure: no I/O, no logging, same input -> same Verdict.
"""

import math
from typing import Optional

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

MIN_PAYOUT = 500.0
MIN_TRADING_DAYS = 8
MIN_PROFIT_DAYS = 5
PROFIT_DAY_THRESHOLD = 50
CONSISTENCY_LIMIT = 0.30
TRAILING_FLOOR_BUFFER = 100
SAFETY_NET_PAYOUTS = 3
CAPPED_PAYOUTS = 5
MAX_PAYOUT_NUMBER = 99


def _money(amount: float) -> str:
    return f"${amount:,.2f}"


def _days(count: int) -> str:
    return f"{count} day" if count == 1 else f"{count} days"


def _check_active(inp: EvaluationInput) -> RuleCheck:
    passed = inp.pa_status == PAStatus.ACTIVE
    return RuleCheck(
        rule=RuleName.ACCOUNT_ACTIVE,
        passed=passed,
        label="Active PA(s) present",
        detail=None if passed else f"No active PAs (status: {inp.pa_status.value}).",
    )


def _check_trading_days(inp: EvaluationInput) -> RuleCheck:
    days = inp.trading_days_since_reference
    passed = days >= MIN_TRADING_DAYS
    return RuleCheck(
        rule=RuleName.MIN_TRADING_DAYS,
        passed=passed,
        label=f"At least {MIN_TRADING_DAYS} trading days",
        detail=None
        if passed
        else f"Only {_days(days)} traded since the reference point; {MIN_TRADING_DAYS} required.",
    )


def _check_profit_days(inp: EvaluationInput) -> RuleCheck:
    days = inp.profitable_days_over_50_since_reference
    passed = days >= MIN_PROFIT_DAYS
    return RuleCheck(
        rule=RuleName.MIN_PROFIT_DAYS,
        passed=passed,
        label=f"At least {MIN_PROFIT_DAYS} profit days over ${PROFIT_DAY_THRESHOLD}",
        detail=None
        if passed
        else f"Only {_days(days)} with profit of ${PROFIT_DAY_THRESHOLD} or more; {MIN_PROFIT_DAYS} required.",
    )


def _check_consistency(
    inp: EvaluationInput, applies: bool, total_profit: float
) -> RuleCheck:
    if not applies:
        return RuleCheck(
            rule=RuleName.CONSISTENCY_30,
            passed=True,
            label="30% rule not required",
            detail="Waived for the live program and from the 6th payout on.",
        )

    label = "30% consistency: no day above 30% of profit"
    highest = inp.highest_single_day_profit_since_reference
    if total_profit == 0:
        return RuleCheck(
            rule=RuleName.CONSISTENCY_30,
            passed=False,
            label=label,
            detail="No profit since the reference point, so the 30% rule cannot be met.",
        )

    ratio = highest / total_profit
    passed = ratio <= CONSISTENCY_LIMIT
    return RuleCheck(
        rule=RuleName.CONSISTENCY_30,
        passed=passed,
        label=label,
        detail=None
        if passed
        else (
            f"Best day {_money(highest)} is {ratio:.1%} of total profit "
            f"{_money(total_profit)}."
        ),
    )


def _check_min_balance(inp: EvaluationInput, min_balance: float) -> RuleCheck:
    passed = inp.current_balance >= min_balance
    return RuleCheck(
        rule=RuleName.MIN_BALANCE,
        passed=passed,
        label="Meets required minimum balance",
        detail=None
        if passed
        else f"Balance {_money(inp.current_balance)} is below {_money(min_balance)}.",
    )


def _check_min_request(inp: EvaluationInput) -> RuleCheck:
    passed = inp.requested_payout_amount >= MIN_PAYOUT
    return RuleCheck(
        rule=RuleName.MIN_REQUEST,
        passed=passed,
        label=f"Minimum request {_money(MIN_PAYOUT)}",
        detail=None
        if passed
        else f"Minimum payout request is {_money(MIN_PAYOUT)}.",
    )


def _check_max_cap(
    profile: AccountProfile, inp: EvaluationInput, cap: Optional[float]
) -> RuleCheck:
    if cap is None:
        return RuleCheck(
            rule=RuleName.MAX_CAP,
            passed=True,
            label="No payout cap (6th payout and later)",
        )

    passed = inp.requested_payout_amount <= cap
    return RuleCheck(
        rule=RuleName.MAX_CAP,
        passed=passed,
        label="Within payout cap",
        detail=None
        if passed
        else f"Max payout for {profile.label} (first five) is {_money(cap)}.",
    )


def _check_balance_after_payout(
    profile: AccountProfile,
    inp: EvaluationInput,
    safety_net_required: bool,
    min_balance: float,
) -> RuleCheck:
    requested = inp.requested_payout_amount

    if safety_net_required:
        # The $500 minimum may encroach the safety net; every dollar above it
        # needs matching headroom over the floor.
        overage = max(0.0, requested - MIN_PAYOUT)
        required = profile.min_required_balance_first_three + overage
        passed = inp.current_balance >= required
        return RuleCheck(
            rule=RuleName.BALANCE_AFTER_PAYOUT,
            passed=passed,
            label=f"Safety net satisfied (payouts 1-{SAFETY_NET_PAYOUTS})",
            detail=None
            if passed
            else (
                f"Requesting {_money(requested)} requires balance of at least "
                f"{_money(required)} (safety net + amount over {_money(MIN_PAYOUT)})."
            ),
        )

    post_balance = inp.current_balance - requested
    passed = post_balance >= min_balance
    return RuleCheck(
        rule=RuleName.BALANCE_AFTER_PAYOUT,
        passed=passed,
        label="Minimum balance remains after payout",
        detail=None
        if passed
        else (
            f"Balance after payout {_money(post_balance)} would fall below "
            f"{_money(min_balance)}."
        ),
    )


def _advice_for(
    check: RuleCheck,
    profile: AccountProfile,
    inp: EvaluationInput,
    total_profit: float,
    min_balance: float,
    cap: Optional[float],
) -> Optional[str]:
    if check.rule == RuleName.MIN_TRADING_DAYS:
        missing = MIN_TRADING_DAYS - inp.trading_days_since_reference
        return (
            f"Trade {_days(missing)} more to reach {MIN_TRADING_DAYS} trading days "
            "since the reference point."
        )
    if check.rule == RuleName.MIN_PROFIT_DAYS:
        missing = MIN_PROFIT_DAYS - inp.profitable_days_over_50_since_reference
        return (
            f"Log {_days(missing)} more with at least ${PROFIT_DAY_THRESHOLD} profit "
            f"({MIN_PROFIT_DAYS} required)."
        )
    if check.rule == RuleName.CONSISTENCY_30:
        highest = inp.highest_single_day_profit_since_reference
        if total_profit == 0:
            return (
                "Build positive profit since the reference point before requesting; "
                "the 30% rule cannot be met with no profit."
            )
        # highest / 0.30 written as highest * 10 / 3 to keep exact multiples exact
        needed = math.ceil(highest * 10 / 3)
        return (
            f"30% consistency: need at least ${needed:,} total profit given a "
            f"{_money(highest)} max day (currently {_money(total_profit)})."
        )
    if check.rule == RuleName.MIN_BALANCE:
        shortfall = min_balance - inp.current_balance
        return (
            f"Bring the balance up to {_money(min_balance)} "
            f"({_money(shortfall)} short)."
        )
    if check.rule == RuleName.MAX_CAP and cap is not None:
        return (
            f"Lower the request to {_money(cap)} or less, the {profile.label} "
            f"cap through payout {CAPPED_PAYOUTS}."
        )
    return None


def _allowed_range(
    inp: EvaluationInput,
    safety_net_required: bool,
    min_balance: float,
    cap: Optional[float],
) -> Optional[PayoutRange]:
    headroom = inp.current_balance - min_balance
    if safety_net_required:
        by_balance = max(MIN_PAYOUT, MIN_PAYOUT + max(0.0, headroom))
    else:
        by_balance = headroom

    upper = float(math.floor(by_balance))
    if cap is not None:
        upper = min(upper, cap)

    if upper < MIN_PAYOUT:
        return None
    return PayoutRange(min=MIN_PAYOUT, max=upper)


def evaluate(profile: AccountProfile, inp: EvaluationInput) -> Verdict:
    """
    Evaluate a payout request.

    Args:
        profile: Account tier the request is for; every tier constant comes
            from here, inp.account is not consulted
        inp: Sanitized request inputs

    Returns:
        Verdict with one RuleCheck per rule in fixed order, advice for the
        failing rules that have a remedy, and the computed thresholds.
    """
    payout_number = min(max(inp.payout_number, 1), MAX_PAYOUT_NUMBER)
    live = inp.is_live_program

    safety_net_required = not live and payout_number <= SAFETY_NET_PAYOUTS
    safety_net_amount = profile.safety_net_amount
    if safety_net_required:
        min_balance = profile.min_required_balance_first_three
    else:
        min_balance = profile.starting_balance + TRAILING_FLOOR_BUFFER
    windfall_rule_applies = not live and payout_number <= CAPPED_PAYOUTS
    baseline = (
        inp.reference_balance
        if inp.reference_balance is not None
        else profile.starting_balance
    )
    total_profit = max(0.0, inp.current_balance - baseline)
    cap = profile.max_payout_cap_first_five if payout_number <= CAPPED_PAYOUTS else None

    reasons = (
        _check_active(inp),
        _check_trading_days(inp),
        _check_profit_days(inp),
        _check_consistency(inp, windfall_rule_applies, total_profit),
        _check_min_balance(inp, min_balance),
        _check_min_request(inp),
        _check_max_cap(profile, inp, cap),
        _check_balance_after_payout(profile, inp, safety_net_required, min_balance),
    )
    eligible = all(check.passed for check in reasons)

    advice = []
    for check in reasons:
        if check.passed:
            continue
        text = _advice_for(check, profile, inp, total_profit, min_balance, cap)
        if text:
            advice.append(text)

    computed = ComputedThresholds(
        safety_net_required=safety_net_required,
        safety_net_amount=safety_net_amount,
        min_balance_to_request=min_balance,
        min_payout=MIN_PAYOUT,
        max_payout_cap=cap,
        allowed_payout_range=_allowed_range(inp, safety_net_required, min_balance, cap)
        if eligible
        else None,
    )

    return Verdict(
        eligible=eligible,
        reasons=reasons,
        advice=tuple(advice),
        computed=computed,
    )


def payout_guidance(payout_number: int) -> str:
    """Stage note for the payout number (what changes at each stage)."""
    if payout_number < 1:
        return ""
    if payout_number <= SAFETY_NET_PAYOUTS:
        return (
            "First three payouts: safety net applies (drawdown + $100). "
            "$500 min can encroach safety net by up to $500."
        )
    if payout_number <= CAPPED_PAYOUTS:
        return "4th-5th payouts: no safety net requirement, but caps still apply by account size."
    return (
        "6th payout and beyond: no cap; 100% of profits may be withdrawn as long "
        "as the minimum balance remains after payout."
    )


def summarize_verdict(verdict: Verdict, inactive_reason: Optional[str] = None) -> list[str]:
    """Decision lines for display: the answer, then what blocks it."""
    if verdict.eligible:
        return ["Should user get a payout? → YES"]

    lines = ["Should user get a payout? → NO"]
    if RuleName.ACCOUNT_ACTIVE in verdict.failed_rules:
        lines.append(f"Reason: {inactive_reason}" if inactive_reason else "Reason: Inactive PA(s)")
        return lines

    for check in verdict.reasons:
        if not check.passed:
            lines.append(f"• {check.detail or check.label}")
    return lines
