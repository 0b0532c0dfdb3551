from __future__ import annotations

import logging
from typing import Any, Mapping

from ..client import ClientConfig, Credentials, HttpExecutor, RequestDescriptor, normalize_response
from ..errors import MissingCredentialsError
from ..signing import canonical_form, sign

logger = logging.getLogger(__name__)


class BterClient:
    """
    BTER API v1 adapter.

    Private calls:
      body = form-encoded params, `nonce` assigned last
      sign = HMAC-SHA512(secret, body), lowercase hex

    Headers:
      KEY, SIGN, Content-Type: application/x-www-form-urlencoded

    Public calls are plain GETs with no credentials.
    """

    def __init__(
        self,
        api_key: str | None = None,
        secret: str | None = None,
        options: Any = None,
        *,
        executor: HttpExecutor | None = None,
    ):
        self.credentials = Credentials(api_key=api_key, secret=secret)
        self.config = ClientConfig.from_options(options)
        self._executor = executor or HttpExecutor(self.config.agent)

    @property
    def session(self):
        return self._executor.session

    def close(self) -> None:
        self._executor.close()

    def __enter__(self) -> "BterClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ---------- request builders ----------
    def build_authenticated(self, method: str, params: Mapping[str, Any] | None = None) -> RequestDescriptor:
        if not self.credentials.is_configured():
            raise MissingCredentialsError()

        payload = dict(params or {})
        payload.pop("nonce", None)
        payload["nonce"] = self.config.nonce()

        body = canonical_form(payload)
        sig = sign(self.credentials.secret, body)

        return RequestDescriptor(
            url=f"{self.config.tapi_url}/{method}",
            method="POST",
            body=body,
            headers={
                "SIGN": sig,
                "KEY": self.credentials.api_key,
                "Content-Type": "application/x-www-form-urlencoded",
            },
        )

    def build_public(self, method: str, path_suffix: str | None = "") -> RequestDescriptor:
        url = f"{self.config.public_url}/{method}"
        if path_suffix:
            url = f"{url}/{path_suffix}"
        return RequestDescriptor(url=url, method="GET")

    # ---------- request core ----------
    def _send(self, request: RequestDescriptor) -> Any:
        error, status_code, body = self._executor(request, self.config)
        return normalize_response(error, status_code, body, method=request.method, url=request.url)

    def make_request(self, method: str, params: Mapping[str, Any] | None = None) -> Any:
        """Signed POST to any private endpoint."""
        return self._send(self.build_authenticated(method, params))

    def make_public_request(self, method: str, path_suffix: str | None = "") -> Any:
        return self._send(self.build_public(method, path_suffix))

    # ---------- private endpoints ----------
    def get_funds(self) -> Any:
        return self.make_request("getfunds", {})

    def trade(self, pair: str, type: str, rate: Any, amount: Any) -> Any:
        # POST placeorder; field order is part of the signed body
        return self.make_request(
            "placeorder",
            {"pair": pair, "order_type": type, "rate": rate, "amount": amount},
        )

    def my_trades(self, pair: str) -> Any:
        return self.make_request("mytrades", {"pair": pair})

    def cancel_order(self, order_id: Any) -> Any:
        return self.make_request("cancelorder", {"order_id": order_id})

    def get_order(self, order_id: Any) -> Any:
        return self.make_request("getorder", {"order_id": order_id})

    def order_list(self) -> Any:
        return self.make_request("orderlist", {})

    # ---------- public endpoints ----------
    def market_info(self) -> Any:
        return self.make_public_request("marketinfo")

    def market_list(self) -> Any:
        return self.make_public_request("marketlist")

    def tickers(self) -> Any:
        return self.make_public_request("tickers")

    def ticker(self, pair: str) -> Any:
        # GET /ticker/{pair}
        return self.make_public_request("ticker", pair)

    def depth(self, pair: str) -> Any:
        return self.make_public_request("depth", pair)

    def trade_history(self, pair: str) -> Any:
        return self.make_public_request("trade", pair)

    # camelCase names of the JavaScript client
    getFunds = get_funds
    myTrades = my_trades
    cancelOrder = cancel_order
    getOrder = get_order
    orderLink = order_list
    marketInfo = market_info
    marketList = market_list
    tradeHistory = trade_history
