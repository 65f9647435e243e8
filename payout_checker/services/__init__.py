"""Domain services for the payout checker."""
