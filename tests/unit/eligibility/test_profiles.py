"""Unit tests for account-size tiers."""

import pytest

from payout_checker.services.eligibility import (
    ACCOUNT_PROFILES,
    UnknownAccountSizeError,
    get_account_profile,
    list_account_profiles,
)


class TestAccountProfiles:
    def test_tier_table(self):
        table = {
            p.size_id: (
                p.starting_balance,
                p.min_required_balance_first_three,
                p.max_payout_cap_first_five,
            )
            for p in ACCOUNT_PROFILES
        }

        assert table == {
            "25k": (25_000, 26_600, 1_500),
            "50k": (50_000, 52_600, 2_000),
            "100k": (100_000, 103_100, 2_500),
            "150k": (150_000, 155_100, 2_750),
            "250k": (250_000, 256_600, 3_000),
            "300k": (300_000, 307_600, 3_500),
            "100kStatic": (100_000, 102_600, 1_000),
        }

    @pytest.mark.parametrize(
        "size_id, drawdown",
        [("25k", 1_500), ("50k", 2_500), ("100k", 3_000), ("300k", 7_500)],
    )
    def test_drawdown_allowance(self, size_id, drawdown):
        profile = get_account_profile(size_id)

        assert profile.drawdown_allowance == drawdown
        assert profile.safety_net_amount == drawdown + 100

    @pytest.mark.parametrize("key", ["100kStatic", "100KSTATIC", "100K Static", " 100k static"])
    def test_lookup_is_forgiving(self, key):
        assert get_account_profile(key).size_id == "100kStatic"

    def test_unknown_size_raises(self):
        with pytest.raises(UnknownAccountSizeError) as exc_info:
            get_account_profile("75k")

        assert exc_info.value.size_id == "75k"
        assert "75k" in str(exc_info.value)

    def test_list_keeps_display_order(self):
        ids = [p.size_id for p in list_account_profiles()]

        assert ids[0] == "25k"
        assert ids[-1] == "100kStatic"
        assert len(ids) == 7
