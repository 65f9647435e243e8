"""
Trade import relay: upload a broker CSV, wait for processing, export trades.

State machine:
- SUBMITTED: CSV uploaded, TradesViz returned an import id
- POLLING: waiting for the import to finish (bounded number of polls)
- COMPLETED: import finished and the trade export was parsed
- TIMED_OUT: import still unfinished after max_polls polls
- FAILED: upload rejected, remote import failed, or an API call broke

Sleep is injectable so tests drive polling without real delays.
"""

import asyncio
import csv
import io
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

import structlog

from payout_checker.services.trade_import.client import TradeImportError, TradesVizClient

logger = structlog.get_logger(__name__)

REMOTE_FAILED_STATUSES = {"failed", "error"}
EXTRA_CELLS_KEY = "_extra"


class ImportState(str, Enum):
    SUBMITTED = "submitted"
    POLLING = "polling"
    COMPLETED = "completed"
    TIMED_OUT = "timed_out"
    FAILED = "failed"


@dataclass
class ImportOutcome:
    """Final state of one relay run."""

    state: ImportState
    import_id: Optional[str] = None
    trades: list[dict[str, Any]] = field(default_factory=list)
    polls: int = 0
    error: Optional[str] = None
    details: Any = None


def parse_trades_csv(text: str) -> list[dict[str, Any]]:
    """
    Parse the export CSV into one dict per trade, skipping blank lines.

    Cells beyond the header go under EXTRA_CELLS_KEY as a list; short rows
    get None for the missing columns.
    """
    lines = [line for line in text.splitlines() if line.strip()]
    if not lines:
        return []
    reader = csv.DictReader(io.StringIO("\n".join(lines)), restkey=EXTRA_CELLS_KEY)
    return [dict(row) for row in reader]


class ImportRelay:
    """Runs one upload -> poll -> export cycle against TradesViz."""

    def __init__(
        self,
        client: TradesVizClient,
        max_polls: int = 15,
        poll_interval: float = 1.5,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.client = client
        self.max_polls = max_polls
        self.poll_interval = poll_interval
        self._sleep = sleep

    async def run(self, filename: str, content: bytes) -> ImportOutcome:
        log = logger.bind(filename=filename, size=len(content))
        log.info("trade_import_uploading")

        try:
            upload = await self.client.upload_trades(filename, content)
        except TradeImportError as e:
            return ImportOutcome(state=ImportState.FAILED, error=str(e), details=e.raw)

        import_id = upload.get("import_id")
        if not upload.get("success") or not import_id:
            log.warning("trade_import_rejected", response=upload)
            return ImportOutcome(
                state=ImportState.FAILED,
                error="TradesViz upload failed",
                details=upload,
            )

        import_id = str(import_id)
        outcome = ImportOutcome(state=ImportState.SUBMITTED, import_id=import_id)
        log = log.bind(import_id=import_id)
        log.info("trade_import_submitted")

        outcome.state = ImportState.POLLING
        while outcome.polls < self.max_polls:
            await self._sleep(self.poll_interval)
            outcome.polls += 1

            try:
                status = await self.client.get_import_status(import_id)
            except TradeImportError as e:
                outcome.state = ImportState.FAILED
                outcome.error = str(e)
                return outcome

            remote_status = status.get("status")
            log.debug("trade_import_status", poll=outcome.polls, status=remote_status)

            if remote_status == "completed":
                return await self._export(outcome, log)
            if remote_status in REMOTE_FAILED_STATUSES:
                log.warning("trade_import_remote_failed", status=status)
                outcome.state = ImportState.FAILED
                outcome.error = "TradesViz import failed"
                outcome.details = status
                return outcome

        log.warning("trade_import_timed_out", polls=outcome.polls)
        outcome.state = ImportState.TIMED_OUT
        outcome.error = "TradesViz import timed out"
        return outcome

    async def _export(self, outcome: ImportOutcome, log) -> ImportOutcome:
        try:
            text = await self.client.export_trades_csv()
        except TradeImportError as e:
            outcome.state = ImportState.FAILED
            outcome.error = str(e)
            return outcome

        outcome.trades = parse_trades_csv(text)
        outcome.state = ImportState.COMPLETED
        log.info("trade_import_completed", trades=len(outcome.trades), polls=outcome.polls)
        return outcome
