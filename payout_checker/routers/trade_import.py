"""Broker CSV upload relay to TradesViz."""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from fastapi.responses import JSONResponse

from payout_checker.config import Settings, get_settings
from payout_checker.deps import get_import_relay, get_rate_limiter
from payout_checker.routers import metrics
from payout_checker.schemas import TradeImportErrorResponse, TradeImportResponse
from payout_checker.services.trade_import import ImportRelay, ImportState

router = APIRouter(prefix="/api")
logger = structlog.get_logger(__name__)

RATE_LIMIT_UPLOAD_PER_MIN = 5


async def _read_upload(file: UploadFile, max_bytes: int) -> bytes:
    """Stream-read the upload, refusing anything above max_bytes."""
    too_large = HTTPException(
        status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
        detail=f"File too large. Maximum size is {max_bytes // (1024 * 1024)}MB",
    )
    if file.size and file.size > max_bytes:
        raise too_large

    chunks = []
    total_size = 0
    while chunk := await file.read(64 * 1024):
        total_size += len(chunk)
        if total_size > max_bytes:
            raise too_large
        chunks.append(chunk)
    return b"".join(chunks)


@router.post(
    "/upload-tradovate",
    response_model=TradeImportResponse,
    responses={
        400: {"description": "CSV file missing"},
        413: {"description": "File too large"},
        429: {"description": "Rate limit exceeded"},
        502: {"model": TradeImportErrorResponse, "description": "TradesViz rejected the import"},
        503: {"description": "Trade import not configured"},
        504: {"model": TradeImportErrorResponse, "description": "TradesViz import timed out"},
    },
)
async def upload_tradovate(
    file: Optional[UploadFile] = File(None, description="Tradovate trades CSV"),
    _rate: None = Depends(
        get_rate_limiter().check("upload_tradovate", RATE_LIMIT_UPLOAD_PER_MIN)
    ),
    relay: ImportRelay = Depends(get_import_relay),
    settings: Settings = Depends(get_settings),
):
    """
    Relay a Tradovate CSV through TradesViz and return the enriched trades.

    Uploads the file, polls until the import completes, then downloads the
    detailed trade export (MAE/MFE, positions, risk, exits) as rows.
    """
    if file is None or not file.filename:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="CSV file missing"
        )

    content = await _read_upload(file, settings.upload_max_bytes)
    logger.info("Trade CSV received", filename=file.filename, size=len(content))

    outcome = await relay.run(file.filename, content)
    metrics.record_trade_import(outcome.state.value)

    if outcome.state == ImportState.COMPLETED:
        return TradeImportResponse(import_id=outcome.import_id, trades=outcome.trades)

    body = TradeImportErrorResponse(
        error=outcome.error or "TradesViz import failed",
        import_id=outcome.import_id,
        details=outcome.details,
    )
    status_code = (
        status.HTTP_504_GATEWAY_TIMEOUT
        if outcome.state == ImportState.TIMED_OUT
        else status.HTTP_502_BAD_GATEWAY
    )
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(by_alias=True, exclude_none=True),
    )
