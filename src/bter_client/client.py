from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Tuple, Union

import requests
from requests.exceptions import RequestException, Timeout

from .errors import ApiError, MalformedResponseError, TransportError
from .signing import NonceProvider, unix_nonce

logger = logging.getLogger(__name__)

DEFAULT_TAPI_URL = "https://bter.com/api/1/private"
DEFAULT_PUBLIC_URL = "http://data.bter.com/api/1"
DEFAULT_TIMEOUT_MS = 5000

TransportResult = Tuple[Optional[Exception], Optional[int], Union[str, bytes, None]]


@dataclass(frozen=True)
class Credentials:
    api_key: str | None = None
    secret: str | None = None

    def is_configured(self) -> bool:
        return bool(self.api_key) and bool(self.secret)

    def __repr__(self) -> str:
        # never leak the secret through logs or tracebacks
        return f"Credentials(api_key={self.api_key!r}, secret={'***' if self.secret else None})"


@dataclass(frozen=True)
class ClientConfig:
    timeout: float = DEFAULT_TIMEOUT_MS      # milliseconds, applied to every call
    agent: requests.Session | None = None   # shared session (pooling, proxies)
    strict_ssl: bool = True                 # maps to requests' `verify`
    tapi_url: str = DEFAULT_TAPI_URL
    public_url: str = DEFAULT_PUBLIC_URL
    nonce: NonceProvider = unix_nonce

    def __post_init__(self) -> None:
        if self.timeout is None or self.timeout <= 0:
            raise ValueError(f"timeout must be a positive number of milliseconds, got {self.timeout!r}")
        if not callable(self.nonce):
            raise ValueError("nonce must be a zero-argument callable")
        object.__setattr__(self, "strict_ssl", bool(self.strict_ssl))
        object.__setattr__(self, "tapi_url", self.tapi_url.rstrip("/"))
        object.__setattr__(self, "public_url", self.public_url.rstrip("/"))

    @property
    def timeout_seconds(self) -> float:
        return self.timeout / 1000.0

    @classmethod
    def from_options(cls, options: Any = None) -> "ClientConfig":
        """
        Build a config from the legacy constructor argument.

        Accepts None, an existing ClientConfig, a bare nonce callable, or a
        mapping with any of: nonce, agent, timeout, tapi_url, public_url,
        strict_ssl. Other keys are ignored.
        """
        if options is None:
            return cls()
        if isinstance(options, ClientConfig):
            return options
        if callable(options):
            return cls(nonce=options)
        if not isinstance(options, Mapping):
            raise TypeError(f"options must be a mapping or a nonce callable, got {type(options).__name__}")

        kwargs: dict[str, Any] = {}
        if options.get("nonce") is not None:
            kwargs["nonce"] = options["nonce"]
        if options.get("agent") is not None:
            kwargs["agent"] = options["agent"]
        if options.get("timeout") is not None:
            kwargs["timeout"] = options["timeout"]
        if options.get("tapi_url") is not None:
            kwargs["tapi_url"] = options["tapi_url"]
        if options.get("public_url") is not None:
            kwargs["public_url"] = options["public_url"]
        if options.get("strict_ssl") is not None:
            kwargs["strict_ssl"] = options["strict_ssl"]
        return cls(**kwargs)


@dataclass(frozen=True)
class RequestDescriptor:
    url: str
    method: str = "GET"
    body: str | None = None
    headers: Mapping[str, str] = field(default_factory=dict)


class HttpExecutor:
    """
    Sends one RequestDescriptor through a requests.Session.

    Never raises for transport problems: returns (error, status_code, body)
    and leaves interpretation to normalize_response.
    """

    def __init__(self, session: requests.Session | None = None):
        self._owns_session = session is None
        self.session = session or requests.Session()

    def __call__(self, request: RequestDescriptor, config: ClientConfig) -> TransportResult:
        logger.debug("%s %s", request.method, request.url)
        try:
            resp = self.session.request(
                request.method,
                request.url,
                headers=dict(request.headers) or None,
                data=request.body,
                timeout=config.timeout_seconds,
                verify=config.strict_ssl,
            )
        except Timeout as e:
            logger.debug("%s %s timed out after %.0fms", request.method, request.url, config.timeout)
            return e, None, None
        except RequestException as e:
            logger.debug("%s %s network error: %s", request.method, request.url, e)
            return e, None, None

        return None, resp.status_code, resp.text

    def close(self) -> None:
        if self._owns_session:
            self.session.close()


def normalize_response(
    transport_error: Exception | None,
    status_code: int | None,
    raw_body: str | bytes | None,
    *,
    method: str | None = None,
    url: str | None = None,
) -> Any:
    """Single success/error policy shared by every endpoint."""
    if transport_error is not None:
        raise TransportError(str(transport_error), method=method, url=url, cause=transport_error) from transport_error

    if status_code != 200:
        logger.debug("%s %s returned HTTP %s", method, url, status_code)
        raise TransportError(str(status_code), status_code=status_code, method=method, url=url)

    snippet = raw_body if isinstance(raw_body, str) else (raw_body or b"").decode("utf-8", "replace")
    try:
        data = json.loads(raw_body)  # type: ignore[arg-type]
    except (TypeError, ValueError) as e:
        logger.debug("%s %s returned invalid JSON", method, url)
        raise MalformedResponseError(f"Invalid JSON: {e}", body=snippet[:300], cause=e) from e

    if isinstance(data, dict) and data.get("error"):
        logger.debug("%s %s API error: %s", method, url, data["error"])
        raise ApiError(data["error"], body=snippet[:300])

    return data
