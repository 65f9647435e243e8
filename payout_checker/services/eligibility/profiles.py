"""Account-size tiers and their payout constants.

Values come from the published minimum-balance and payout-cap tables.
Edit here when the tables change; the evaluator only consumes them.
"""

from payout_checker.services.eligibility.models import AccountProfile


class UnknownAccountSizeError(LookupError):
    """Raised when an account size is not one of the known tiers."""

    def __init__(self, size_id: str):
        self.size_id = size_id
        super().__init__(f"Unknown account size: {size_id}")


ACCOUNT_PROFILES: tuple[AccountProfile, ...] = (
    AccountProfile(
        size_id="25k",
        label="25K",
        starting_balance=25_000,
        min_required_balance_first_three=26_600,
        max_payout_cap_first_five=1_500,
        note="Min bal 26,600. DD 1,500. First three payouts require safety net.",
    ),
    AccountProfile(
        size_id="50k",
        label="50K",
        starting_balance=50_000,
        min_required_balance_first_three=52_600,
        max_payout_cap_first_five=2_000,
        note="Min bal 52,600. DD 2,500. 30% consistency until 6th payout.",
    ),
    AccountProfile(
        size_id="100k",
        label="100K",
        starting_balance=100_000,
        min_required_balance_first_three=103_100,
        max_payout_cap_first_five=2_500,
        note="Min bal 103,100. DD 3,000.",
    ),
    AccountProfile(
        size_id="150k",
        label="150K",
        starting_balance=150_000,
        min_required_balance_first_three=155_100,
        max_payout_cap_first_five=2_750,
        note="Min bal 155,100. DD 5,000.",
    ),
    AccountProfile(
        size_id="250k",
        label="250K",
        starting_balance=250_000,
        min_required_balance_first_three=256_600,
        max_payout_cap_first_five=3_000,
        note="Min bal 256,600. DD 6,500.",
    ),
    AccountProfile(
        size_id="300k",
        label="300K",
        starting_balance=300_000,
        min_required_balance_first_three=307_600,
        max_payout_cap_first_five=3_500,
        note="Min bal 307,600. DD 7,500.",
    ),
    AccountProfile(
        size_id="100kStatic",
        label="100K Static",
        starting_balance=100_000,
        min_required_balance_first_three=102_600,
        max_payout_cap_first_five=1_000,
        note="Min bal 102,600. DD 2,500. Max (first five) $1,000.",
    ),
)

# Keyed by normalized id and normalized label ("100k static" -> "100kstatic")
_BY_KEY = {}
for _profile in ACCOUNT_PROFILES:
    _BY_KEY[_profile.size_id.lower()] = _profile
    _BY_KEY[_profile.label.replace(" ", "").lower()] = _profile


def get_account_profile(size_id: str) -> AccountProfile:
    """
    Look up a tier by size id or display label, case-insensitively.

    Raises:
        UnknownAccountSizeError: if no tier matches.
    """
    key = (size_id or "").replace(" ", "").lower()
    try:
        return _BY_KEY[key]
    except KeyError:
        raise UnknownAccountSizeError(size_id) from None


def list_account_profiles() -> list[AccountProfile]:
    """All tiers in display order."""
    return list(ACCOUNT_PROFILES)
