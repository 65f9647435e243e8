"""Unit tests for the payout eligibility evaluator."""

from dataclasses import replace

import pytest

from payout_checker.services.eligibility import (
    MIN_PAYOUT,
    EvaluationInput,
    PAStatus,
    RuleName,
    evaluate,
    get_account_profile,
    payout_guidance,
    summarize_verdict,
)

RULE_ORDER = [
    RuleName.ACCOUNT_ACTIVE,
    RuleName.MIN_TRADING_DAYS,
    RuleName.MIN_PROFIT_DAYS,
    RuleName.CONSISTENCY_30,
    RuleName.MIN_BALANCE,
    RuleName.MIN_REQUEST,
    RuleName.MAX_CAP,
    RuleName.BALANCE_AFTER_PAYOUT,
]


@pytest.fixture
def profile_50k():
    return get_account_profile("50k")


@pytest.fixture
def base_input(profile_50k) -> EvaluationInput:
    """Second payout on a 50K account that satisfies every rule."""
    return EvaluationInput(
        pa_status=PAStatus.ACTIVE,
        account=profile_50k,
        payout_number=2,
        is_live_program=False,
        current_balance=52_600,
        highest_single_day_profit_since_reference=600,
        trading_days_since_reference=8,
        profitable_days_over_50_since_reference=5,
        requested_payout_amount=500,
    )


def _check(verdict, rule: RuleName):
    return next(c for c in verdict.reasons if c.rule == rule)


# =============================================================================
# Structural invariants
# =============================================================================


class TestVerdictShape:
    def test_same_input_same_verdict(self, profile_50k, base_input):
        assert evaluate(profile_50k, base_input) == evaluate(profile_50k, base_input)

    @pytest.mark.parametrize(
        "overrides",
        [
            {},
            {"pa_status": PAStatus.ACCOUNT_BLOWN},
            {"trading_days_since_reference": 0, "requested_payout_amount": 0},
            {"current_balance": 0, "highest_single_day_profit_since_reference": 9_999},
            {"payout_number": 7, "is_live_program": True},
        ],
    )
    def test_always_eight_reasons_in_order(self, profile_50k, base_input, overrides):
        verdict = evaluate(profile_50k, replace(base_input, **overrides))

        assert [c.rule for c in verdict.reasons] == RULE_ORDER

    @pytest.mark.parametrize(
        "overrides",
        [
            {},
            {"pa_status": PAStatus.USER_CANCELLED},
            {"profitable_days_over_50_since_reference": 4},
            {"requested_payout_amount": 2_500},
        ],
    )
    def test_eligible_iff_all_rules_pass(self, profile_50k, base_input, overrides):
        verdict = evaluate(profile_50k, replace(base_input, **overrides))

        assert verdict.eligible == all(c.passed for c in verdict.reasons)

    def test_no_short_circuit_on_inactive_account(self, profile_50k, base_input):
        """Inactive account still reports every other rule."""
        inp = replace(
            base_input,
            pa_status=PAStatus.FAILED_REBILL,
            trading_days_since_reference=3,
        )
        verdict = evaluate(profile_50k, inp)

        assert verdict.failed_rules == [
            RuleName.ACCOUNT_ACTIVE,
            RuleName.MIN_TRADING_DAYS,
        ]
        assert "FailedRebill" in _check(verdict, RuleName.ACCOUNT_ACTIVE).detail


# =============================================================================
# Scenarios
# =============================================================================


class TestScenarios:
    def test_second_payout_at_floor_is_eligible(self, profile_50k, base_input):
        verdict = evaluate(profile_50k, base_input)

        assert verdict.eligible is True
        assert verdict.advice == ()
        assert verdict.computed.safety_net_required is True
        assert verdict.computed.min_balance_to_request == 52_600
        assert verdict.computed.max_payout_cap == 2_000

    def test_big_day_breaks_consistency(self, profile_50k, base_input):
        inp = replace(
            base_input,
            highest_single_day_profit_since_reference=1_600,
            current_balance=54_000,
        )
        verdict = evaluate(profile_50k, inp)

        assert verdict.eligible is False
        assert verdict.failed_rules == [RuleName.CONSISTENCY_30]
        assert "40.0%" in _check(verdict, RuleName.CONSISTENCY_30).detail

    def test_too_few_trading_days(self, profile_50k, base_input):
        verdict = evaluate(
            profile_50k, replace(base_input, trading_days_since_reference=6)
        )

        assert verdict.eligible is False
        assert verdict.failed_rules == [RuleName.MIN_TRADING_DAYS]
        assert verdict.advice == (
            "Trade 2 days more to reach 8 trading days since the reference point.",
        )

    def test_fourth_payout_uses_trailing_floor(self, profile_50k, base_input):
        inp = replace(
            base_input,
            payout_number=4,
            current_balance=53_100,
            requested_payout_amount=1_000,
        )
        verdict = evaluate(profile_50k, inp)

        assert verdict.eligible is True
        assert verdict.computed.safety_net_required is False
        assert verdict.computed.min_balance_to_request == 50_100
        assert _check(verdict, RuleName.BALANCE_AFTER_PAYOUT).label == (
            "Minimum balance remains after payout"
        )

    def test_sixth_payout_has_no_cap_or_consistency(self, profile_50k, base_input):
        inp = replace(
            base_input,
            payout_number=6,
            current_balance=60_000,
            highest_single_day_profit_since_reference=5_000,
            requested_payout_amount=8_000,
        )
        verdict = evaluate(profile_50k, inp)

        assert verdict.eligible is True
        assert verdict.computed.max_payout_cap is None
        assert _check(verdict, RuleName.CONSISTENCY_30).label == "30% rule not required"
        assert _check(verdict, RuleName.MAX_CAP).label == (
            "No payout cap (6th payout and later)"
        )


# =============================================================================
# Boundaries
# =============================================================================


class TestSafetyNet:
    def test_required_balance_grows_with_request(self, profile_50k, base_input):
        """Each dollar above $500 needs a dollar of headroom over the floor."""
        floor = profile_50k.min_required_balance_first_three

        for requested in (500, 750, 1_000, 1_999):
            required = floor + (requested - MIN_PAYOUT)
            at_required = replace(
                base_input,
                requested_payout_amount=requested,
                current_balance=required,
            )
            below_required = replace(at_required, current_balance=required - 0.01)

            assert _check(
                evaluate(profile_50k, at_required), RuleName.BALANCE_AFTER_PAYOUT
            ).passed
            assert not _check(
                evaluate(profile_50k, below_required), RuleName.BALANCE_AFTER_PAYOUT
            ).passed

    def test_minimum_request_may_encroach_safety_net(self, profile_50k, base_input):
        """At the floor, a $500 request passes even though it dips below it."""
        verdict = evaluate(profile_50k, base_input)

        assert _check(verdict, RuleName.BALANCE_AFTER_PAYOUT).passed

    def test_third_payout_still_requires_safety_net(self, profile_50k, base_input):
        verdict = evaluate(profile_50k, replace(base_input, payout_number=3))

        assert verdict.computed.safety_net_required is True

    def test_safety_net_amount_is_drawdown_plus_100(self, profile_50k, base_input):
        verdict = evaluate(profile_50k, base_input)

        assert verdict.computed.safety_net_amount == 2_600
        assert profile_50k.drawdown_allowance == 2_500


class TestPayoutCap:
    def test_request_at_cap_passes(self, profile_50k, base_input):
        inp = replace(
            base_input, requested_payout_amount=2_000, current_balance=60_000
        )

        assert _check(evaluate(profile_50k, inp), RuleName.MAX_CAP).passed

    def test_request_one_cent_over_cap_fails(self, profile_50k, base_input):
        inp = replace(
            base_input, requested_payout_amount=2_000.01, current_balance=60_000
        )
        verdict = evaluate(profile_50k, inp)

        assert not _check(verdict, RuleName.MAX_CAP).passed
        assert any("Lower the request to $2,000.00" in a for a in verdict.advice)

    def test_cap_still_applies_on_fifth_payout(self, profile_50k, base_input):
        inp = replace(
            base_input,
            payout_number=5,
            requested_payout_amount=2_500,
            current_balance=60_000,
        )

        assert not _check(evaluate(profile_50k, inp), RuleName.MAX_CAP).passed

    def test_static_account_cap(self, base_input):
        profile = get_account_profile("100kStatic")
        inp = replace(
            base_input,
            account=profile,
            current_balance=103_000,
            reference_balance=100_000,
            highest_single_day_profit_since_reference=500,
            requested_payout_amount=1_200,
        )
        verdict = evaluate(profile, inp)

        assert verdict.computed.max_payout_cap == 1_000
        assert RuleName.MAX_CAP in verdict.failed_rules


class TestConsistency:
    @pytest.mark.parametrize("highest, passed", [(300, True), (301, False)])
    def test_thirty_percent_boundary(self, profile_50k, base_input, highest, passed):
        inp = replace(
            base_input,
            reference_balance=52_000,
            current_balance=53_000,
            highest_single_day_profit_since_reference=highest,
        )

        assert _check(evaluate(profile_50k, inp), RuleName.CONSISTENCY_30).passed is passed

    def test_advice_gives_total_profit_needed(self, profile_50k, base_input):
        inp = replace(
            base_input,
            reference_balance=52_000,
            current_balance=53_000,
            highest_single_day_profit_since_reference=301,
        )
        verdict = evaluate(profile_50k, inp)

        assert verdict.advice == (
            "30% consistency: need at least $1,004 total profit given a $301.00 "
            "max day (currently $1,000.00).",
        )

    def test_zero_profit_fails_with_its_own_message(self, profile_50k, base_input):
        inp = replace(
            base_input,
            reference_balance=52_600,
            highest_single_day_profit_since_reference=0,
        )
        verdict = evaluate(profile_50k, inp)
        check = _check(verdict, RuleName.CONSISTENCY_30)

        assert not check.passed
        assert "No profit" in check.detail
        assert any("no profit" in a for a in verdict.advice)

    def test_reference_balance_defaults_to_starting_balance(self, profile_50k, base_input):
        """52,600 over a 50,000 start is 2,600 profit; 780 is the 30% line."""
        at_limit = replace(base_input, highest_single_day_profit_since_reference=780)
        over_limit = replace(base_input, highest_single_day_profit_since_reference=781)

        assert _check(evaluate(profile_50k, at_limit), RuleName.CONSISTENCY_30).passed
        assert not _check(
            evaluate(profile_50k, over_limit), RuleName.CONSISTENCY_30
        ).passed


class TestLiveProgram:
    @pytest.mark.parametrize("payout_number", [1, 2, 3, 4, 5, 6])
    def test_live_program_waives_consistency_and_safety_net(
        self, profile_50k, base_input, payout_number
    ):
        inp = replace(
            base_input,
            is_live_program=True,
            payout_number=payout_number,
            highest_single_day_profit_since_reference=2_600,
        )
        verdict = evaluate(profile_50k, inp)

        assert _check(verdict, RuleName.CONSISTENCY_30).passed
        assert verdict.computed.safety_net_required is False
        assert verdict.computed.min_balance_to_request == 50_100


# =============================================================================
# Advice and thresholds
# =============================================================================


class TestAdvice:
    def test_only_remediable_rules_get_advice(self, profile_50k, base_input):
        """Inactive account and tiny request fail without advice lines."""
        inp = replace(
            base_input,
            pa_status=PAStatus.ACCOUNT_BLOWN,
            requested_payout_amount=100,
        )
        verdict = evaluate(profile_50k, inp)

        assert RuleName.ACCOUNT_ACTIVE in verdict.failed_rules
        assert RuleName.MIN_REQUEST in verdict.failed_rules
        assert verdict.advice == ()

    def test_advice_follows_rule_order(self, profile_50k, base_input):
        inp = replace(
            base_input,
            trading_days_since_reference=7,
            profitable_days_over_50_since_reference=4,
            current_balance=52_000,
            reference_balance=51_000,
        )
        verdict = evaluate(profile_50k, inp)

        assert verdict.advice[0].startswith("Trade 1 day more")
        assert verdict.advice[1].startswith("Log 1 day more")
        assert verdict.advice[-1] == "Bring the balance up to $52,600.00 ($600.00 short)."


class TestAllowedRange:
    def test_range_only_when_eligible(self, profile_50k, base_input):
        ineligible = replace(base_input, trading_days_since_reference=0)

        assert evaluate(profile_50k, ineligible).computed.allowed_payout_range is None

    def test_range_during_safety_net(self, profile_50k, base_input):
        inp = replace(base_input, current_balance=53_100)
        allowed = evaluate(profile_50k, inp).computed.allowed_payout_range

        assert allowed.min == 500
        assert allowed.max == 1_000

    def test_range_clipped_by_cap(self, profile_50k, base_input):
        inp = replace(base_input, payout_number=4, current_balance=56_000)
        allowed = evaluate(profile_50k, inp).computed.allowed_payout_range

        assert allowed.max == 2_000

    def test_range_without_cap(self, profile_50k, base_input):
        inp = replace(
            base_input,
            payout_number=8,
            current_balance=60_000.75,
            highest_single_day_profit_since_reference=9_000,
        )
        allowed = evaluate(profile_50k, inp).computed.allowed_payout_range

        assert allowed.max == 9_900


class TestPayoutNumber:
    def test_out_of_range_payout_number_is_clamped(self, profile_50k, base_input):
        low = evaluate(profile_50k, replace(base_input, payout_number=0))
        first = evaluate(profile_50k, replace(base_input, payout_number=1))

        assert low == first

    def test_high_payout_number_is_clamped(self, profile_50k, base_input):
        high = evaluate(profile_50k, replace(base_input, payout_number=1000))
        last = evaluate(profile_50k, replace(base_input, payout_number=99))

        assert high == last
        assert _check(high, RuleName.MAX_CAP).label.startswith("No payout cap")


class TestProfileArgumentWins:
    """Tier constants come from the profile argument, not inp.account."""

    def test_safety_net_uses_profile_floor(self, profile_50k, base_input):
        profile_100k = get_account_profile("100k")
        inp = replace(
            base_input,
            account=profile_50k,
            current_balance=103_100,
            requested_payout_amount=1_000,
        )

        verdict = evaluate(profile_100k, inp)

        check = _check(verdict, RuleName.BALANCE_AFTER_PAYOUT)
        assert check.passed is False
        assert "$103,600.00" in check.detail
        assert _check(verdict, RuleName.MIN_BALANCE).passed is True
        assert _check(verdict, RuleName.MAX_CAP).passed is True

    def test_cap_detail_names_profile(self, profile_50k, base_input):
        profile_100k = get_account_profile("100k")
        inp = replace(
            base_input,
            account=profile_50k,
            current_balance=110_000,
            requested_payout_amount=3_000,
        )

        check = _check(evaluate(profile_100k, inp), RuleName.MAX_CAP)

        assert check.passed is False
        assert "100K" in check.detail
        assert "$2,500.00" in check.detail


class TestGuidanceAndSummary:
    def test_guidance_by_stage(self):
        assert "safety net applies" in payout_guidance(1)
        assert "caps still apply" in payout_guidance(4)
        assert "no cap" in payout_guidance(6)
        assert payout_guidance(0) == ""

    def test_summary_yes(self, profile_50k, base_input):
        verdict = evaluate(profile_50k, base_input)

        assert summarize_verdict(verdict) == ["Should user get a payout? → YES"]

    def test_summary_inactive_uses_reason(self, profile_50k, base_input):
        verdict = evaluate(
            profile_50k, replace(base_input, pa_status=PAStatus.ACCOUNT_BLOWN)
        )

        assert summarize_verdict(verdict, "Blown on 10/02") == [
            "Should user get a payout? → NO",
            "Reason: Blown on 10/02",
        ]
        assert summarize_verdict(verdict)[1] == "Reason: Inactive PA(s)"

    def test_summary_lists_failures(self, profile_50k, base_input):
        verdict = evaluate(
            profile_50k, replace(base_input, requested_payout_amount=100)
        )
        lines = summarize_verdict(verdict)

        assert lines[0] == "Should user get a payout? → NO"
        assert lines[1:] == ["• Minimum payout request is $500.00."]
