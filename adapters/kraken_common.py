#Description: Base Kraken adapter: nonce, request signing, private/public requests, envelope decoding.

import json
from typing import Callable, TypeVar
from urllib.parse import urlencode

import httpx
from pydantic import BaseModel, ValidationError

from models.schemas import Envelope
from utils.errors import TransportError, VenueAPIError, VenueResponseError
from utils.logging import logger
from utils.nonce import NonceSource
from utils.security import decode_secret, sign_request

T = TypeVar("T")

PRIVATE_PREFIX = "/0/private/"
PUBLIC_PREFIX = "/0/public/"
DEFAULT_TIMEOUT = 20.0
USER_AGENT = "tvwh-relay/1.0 (httpx)"

class KrakenBaseAdapter:
    BASE_URL = "https://api.kraken.com"

    def __init__(self, api_key: str, api_secret: str, base_url: str | None = None,
                 timeout: float = DEFAULT_TIMEOUT, nonce: Callable[[], int] | None = None,
                 client: httpx.Client | None = None):
        if not api_key:
            raise ValueError("API key cannot be empty")
        self.api_key = api_key
        # Only the decoded form is kept around.
        self._secret = decode_secret(api_secret)
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.nonce = nonce or NonceSource()
        self.client = client or httpx.Client(timeout=timeout)

    def __repr__(self):
        return f"{type(self).__name__}(base_url={self.base_url!r})"

    def close(self):
        self.client.close()

    def _send_signed(self, method: str, path: str, params: dict | None = None) -> bytes:
        if not path.startswith(PRIVATE_PREFIX):
            raise ValueError(f"path {path!r} is not a private endpoint ({PRIVATE_PREFIX})")
        params = dict(params or {})
        nonce = str(self.nonce())
        params["nonce"] = nonce
        body = urlencode(params)
        headers = {
            "Content-Type": "application/x-www-form-urlencoded",
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
            "API-Key": self.api_key,
            "API-Sign": sign_request(self._secret, path, nonce, body),
        }
        return self._request(method, path, headers=headers, content=body)

    def get_public(self, path: str, params: dict | None = None) -> bytes:
        if not path.startswith(PUBLIC_PREFIX):
            raise ValueError(f"path {path!r} is not a public endpoint ({PUBLIC_PREFIX})")
        return self._request("GET", path, headers={"Accept": "application/json", "User-Agent": USER_AGENT},
                             params=params)

    def _request(self, method: str, path: str, **kwargs) -> bytes:
        url = self.base_url + path
        try:
            r = self.client.request(method, url, **kwargs)
        except (httpx.ConnectError, httpx.ConnectTimeout) as e:
            raise TransportError(f"could not reach Kraken for {path}: {e}") from e
        except httpx.TimeoutException as e:
            raise TransportError(f"Kraken request {path} timed out: {e}", outcome_unknown=True) from e
        except httpx.HTTPError as e:
            raise TransportError(f"Kraken request {path} failed: {e}", outcome_unknown=True) from e
        if not r.is_success:
            logger.warning(f"Kraken {path} answered HTTP {r.status_code}")
            raise TransportError(f"received non-2xx HTTP status {r.status_code} from {path}",
                                 status_code=r.status_code, body=r.content)
        return r.content

    @staticmethod
    def unwrap(raw: bytes, result_type: type[T]) -> T:
        """Decode ``{"error": [...], "result": ...}`` into ``result_type``.

        The error list is checked before ``result`` is looked at; a non-empty
        list raises VenueAPIError with every message, a missing result raises
        VenueResponseError.
        """
        try:
            envelope = Envelope.model_validate(json.loads(raw))
        except (ValueError, ValidationError) as e:
            raise VenueResponseError(f"malformed Kraken response: {e}") from e
        if envelope.error:
            raise VenueAPIError(envelope.error)
        if envelope.result is None:
            raise VenueResponseError("Kraken reported success with no result payload")
        try:
            if isinstance(result_type, type) and issubclass(result_type, BaseModel):
                return result_type.model_validate(envelope.result)
            if not isinstance(envelope.result, result_type):
                raise TypeError(f"expected {result_type.__name__}, got {type(envelope.result).__name__}")
            return envelope.result
        except (ValidationError, TypeError) as e:
            raise VenueResponseError(f"unexpected Kraken result shape: {e}") from e
