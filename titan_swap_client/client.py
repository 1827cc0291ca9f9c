from __future__ import annotations

from typing import Any

import requests
from loguru import logger
from pydantic import ValidationError

from titan_swap_client.config import ClientSettings
from titan_swap_client.errors import ApiError, DecodeError, NoRoutesAvailable, TransportError
from titan_swap_client.quote import QuoteRequest, QuoteResponse, first_route
from titan_swap_client.swap import SwapResponse

TITAN_API_URL = "https://api.titan.exchange"
QUOTE_SWAP_PATH = "/api/v1/quote/swap"


class TitanClient:
    """
    Client for the Titan swap API.

    Configuration (token, base URL, timeout) is read-only after construction. The underlying
    requests.Session keeps a cookie jar and is not documented as thread-safe; for concurrent
    use give each thread its own client, or its own injected session.
    """

    def __init__(
        self,
        auth_token: str,
        base_url: str | None = None,
        *,
        timeout: float | None = 15.0,
        session: requests.Session | None = None,
    ):
        if not auth_token:
            raise ValueError("auth_token is required")
        self.base_url = (base_url or TITAN_API_URL).rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self._auth_header = f"Bearer {auth_token}"

    @classmethod
    def from_settings(cls, settings: ClientSettings) -> TitanClient:
        if not settings.auth_token:
            raise ValueError("TITAN_AUTH_TOKEN must be set")
        return cls(settings.auth_token, settings.base_url, timeout=settings.timeout_sec)

    def _headers(self) -> dict[str, str]:
        return {"Accept": "application/json", "Authorization": self._auth_header}

    def _fetch_swap_quotes(self, params: list[tuple[str, str]]) -> tuple[str, Any]:
        """Return the raw body text and its parsed JSON."""
        url = f"{self.base_url}{QUOTE_SWAP_PATH}"
        logger.debug("Titan GET {} params={}", url, params)
        try:
            r = self.session.get(url, params=params, headers=self._headers(), timeout=self.timeout)
        except requests.RequestException as e:
            raise TransportError(f"GET {url} failed: {e}") from e
        check_response(r)
        try:
            return r.text, r.json()
        except ValueError as e:
            logger.warning("Titan returned a non-JSON body: {}", e)
            raise DecodeError(f"Response body is not valid JSON: {e}", body=r.text) from e

    def quote(self, request: QuoteRequest) -> QuoteResponse:
        body, payload = self._fetch_swap_quotes(request.to_query_params())
        try:
            provider, route = first_route(payload)
            quote = QuoteResponse.from_route(request, route, provider)
        except ValidationError as e:
            logger.warning("Titan quote did not match the expected schema: {}", e)
            raise DecodeError(f"Unexpected quote response: {e}", body=body) from e
        logger.debug(
            "Titan quote {} -> {} via {}: in={} out={} steps={}",
            quote.input_mint,
            quote.output_mint,
            provider or "-",
            quote.in_amount,
            quote.out_amount,
            len(quote.route_plan),
        )
        return quote

    def swap(self, quote: QuoteResponse | QuoteRequest) -> SwapResponse:
        """
        Return the instructions that execute a quoted route.
        A QuoteResponse already carries its route, so no request is made; a QuoteRequest is quoted first.
        """
        if isinstance(quote, QuoteRequest):
            quote = self.quote(quote)
        if not isinstance(quote, QuoteResponse):
            raise TypeError(f"expected QuoteResponse or QuoteRequest, got {type(quote).__name__}")
        return SwapResponse.from_route(quote.raw_route)


def check_response(r: requests.Response) -> None:
    if 200 <= r.status_code < 300:
        return
    body = r.text or ""
    if r.status_code == 404 and "No routes" in body:
        raise NoRoutesAvailable(r.status_code, body)
    logger.warning("Titan request failed with status {}: {}", r.status_code, body)
    raise ApiError(r.status_code, body)
