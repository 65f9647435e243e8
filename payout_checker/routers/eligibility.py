"""Payout eligibility endpoints."""

import structlog
from fastapi import APIRouter, HTTPException, status

from payout_checker.routers import metrics
from payout_checker.schemas import (
    AccountListResponse,
    AccountProfileOut,
    EligibilityRequest,
    EligibilityResponse,
    ErrorResponse,
)
from payout_checker.services.eligibility import (
    UnknownAccountSizeError,
    evaluate,
    get_account_profile,
    list_account_profiles,
    payout_guidance,
    summarize_verdict,
)

router = APIRouter(prefix="/api/eligibility")
logger = structlog.get_logger(__name__)


def evaluate_request(req: EligibilityRequest) -> EligibilityResponse:
    """
    Resolve the account tier, run the evaluator and build the response.

    Raises:
        UnknownAccountSizeError: if account_size is not a known tier.
    """
    profile = get_account_profile(req.account_size)
    verdict = evaluate(profile, req.to_input(profile))

    failed = [rule.value for rule in verdict.failed_rules]
    metrics.record_evaluation(verdict.eligible, failed)
    logger.info(
        "Payout eligibility evaluated",
        account_size=profile.size_id,
        payout_number=req.payout_number,
        live_program=req.is_live_program,
        eligible=verdict.eligible,
        failed_rules=failed,
    )

    return EligibilityResponse.from_verdict(
        verdict,
        profile,
        guidance=payout_guidance(req.payout_number),
        summary=summarize_verdict(verdict, req.inactive_reason),
    )


@router.get("/accounts", response_model=AccountListResponse)
async def list_accounts() -> AccountListResponse:
    """List account tiers with their balances, caps and safety-net amounts."""
    return AccountListResponse(
        accounts=[AccountProfileOut.from_profile(p) for p in list_account_profiles()]
    )


@router.post(
    "/evaluate",
    response_model=EligibilityResponse,
    responses={404: {"model": ErrorResponse, "description": "Unknown account size"}},
)
async def evaluate_eligibility(req: EligibilityRequest) -> EligibilityResponse:
    """
    Check whether a payout request is eligible.

    Always returns the full eight-rule checklist; failing rules with a remedy
    also get an advice line. The allowed payout range is only filled in when
    the request is eligible.
    """
    try:
        return evaluate_request(req)
    except UnknownAccountSizeError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
