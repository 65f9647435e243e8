"""Payout eligibility checker page (server-rendered form)."""

from pathlib import Path
from typing import Any, Optional

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError

from payout_checker.routers.eligibility import evaluate_request
from payout_checker.schemas import EligibilityRequest, EligibilityResponse
from payout_checker.services.eligibility import (
    PAStatus,
    UnknownAccountSizeError,
    list_account_profiles,
)

router = APIRouter(tags=["Checker"])
logger = structlog.get_logger(__name__)

templates_dir = Path(__file__).resolve().parent.parent / "templates"
templates = Jinja2Templates(directory=str(templates_dir))

INACTIVE_STATUSES = [s for s in PAStatus if s != PAStatus.ACTIVE]


def _render(
    request: Request,
    form: dict[str, Any],
    result: Optional[EligibilityResponse] = None,
    errors: Optional[list[str]] = None,
) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "checker.html",
        {
            "accounts": list_account_profiles(),
            "inactive_statuses": INACTIVE_STATUSES,
            "form": form,
            "result": result,
            "errors": errors or [],
        },
    )


@router.get("/", response_class=HTMLResponse)
async def checker_page(request: Request):
    """Empty checker form."""
    return _render(request, form={})


@router.post("/", response_class=HTMLResponse)
async def checker_submit(request: Request):
    """Evaluate the submitted form and render the checklist next to it."""
    form = {key: value for key, value in (await request.form()).items()}

    try:
        req = EligibilityRequest.model_validate(form)
    except ValidationError as e:
        errors = [
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        ]
        logger.info("Checker form rejected", errors=errors)
        return _render(request, form=form, errors=errors)

    try:
        result = evaluate_request(req)
    except UnknownAccountSizeError as e:
        return _render(request, form=form, errors=[str(e)])

    return _render(request, form=form, result=result)
