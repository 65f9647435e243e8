"""Payout Checker - Payout Eligibility Service

Evaluates prop-account payout requests against the payout rule checklist and
serves the small analytics and trade-import endpoints around the checker page.
"""

__version__ = "0.1.0"
