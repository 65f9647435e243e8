"""TradesViz API client for broker trade imports."""

import json
from typing import Any, Optional

import httpx
import structlog

logger = structlog.get_logger(__name__)

UPLOAD_PATH = "/v1/import/trades/broker/"
STATUS_PATH = "/v1/import/trades/status/{import_id}/"
EXPORT_PATH = "/v1/export/trades/csv/"

EXPORT_OPTIONS = {
    "include_mae_mfe": True,
    "include_positions": True,
    "include_risk": True,
    "include_exits": True,
}


class TradeImportError(Exception):
    """TradesViz call failed or returned something unusable."""

    def __init__(self, message: str, raw: Optional[str] = None):
        super().__init__(message)
        self.raw = raw


class TradesVizClient:
    """
    Thin async wrapper over the TradesViz import/export endpoints.

    The underlying httpx.AsyncClient is injectable so tests can pass one
    built on httpx.MockTransport.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.tradesviz.com",
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            follow_redirects=False,
        )
        self._headers = {"Authorization": f"Token {api_key}"}

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self._client.request(
                method, path, headers=self._headers, **kwargs
            )
        except httpx.HTTPError as e:
            logger.warning("tradesviz_request_failed", path=path, error=str(e))
            raise TradeImportError(f"TradesViz request failed: {e}") from e

    @staticmethod
    def _json(response: httpx.Response) -> dict[str, Any]:
        try:
            data = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.error(
                "tradesviz_non_json_response",
                status=response.status_code,
                body=response.text[:200],
            )
            raise TradeImportError("TradesViz non-JSON response", raw=response.text)
        if not isinstance(data, dict):
            raise TradeImportError("TradesViz unexpected response", raw=response.text)
        return data

    async def upload_trades(
        self,
        filename: str,
        content: bytes,
        broker: str = "tradovate",
        import_type: str = "trades",
    ) -> dict[str, Any]:
        """Upload a broker CSV. Returns the JSON body ({success, import_id, ...})."""
        response = await self._request(
            "POST",
            UPLOAD_PATH,
            files={"file": (filename, content, "text/csv")},
            data={"broker": broker, "import_type": import_type},
        )
        return self._json(response)

    async def get_import_status(self, import_id: str) -> dict[str, Any]:
        response = await self._request(
            "GET", STATUS_PATH.format(import_id=import_id)
        )
        return self._json(response)

    async def export_trades_csv(self) -> str:
        """Download the detailed trade report as CSV text."""
        response = await self._request("POST", EXPORT_PATH, json=EXPORT_OPTIONS)
        return response.text
