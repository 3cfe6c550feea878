"""ArubaCloud REST client backed by an aiohttp session."""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from time import perf_counter
from typing import Any, ClassVar

import aiohttp

from arubacloud_provider.api.envelope import ApiErrorBody, ApiResponse
from arubacloud_provider.config.loader import Credentials
from arubacloud_provider.config.models import ProviderSettings
from arubacloud_provider.errors import ApiError, TransportError
from arubacloud_provider.observability.metrics import MetricsRecorder
from arubacloud_provider.observability.observable import ObservableMixin
from arubacloud_provider.observability.tracing import start_span

logger = logging.getLogger(__name__)

_TOKEN_EXPIRY_MARGIN_SECONDS = 30.0
_DEFAULT_TOKEN_LIFETIME_SECONDS = 300.0


def _translate_transport_error(*, operation: str, exc: BaseException) -> TransportError:
    """Translate an aiohttp/socket failure into a :class:`TransportError`."""
    if isinstance(exc, TransportError):
        return exc
    message = str(exc) or type(exc).__name__
    return TransportError(operation, message)


def _decode_body(text: str) -> Any:
    if not text.strip():
        return None
    try:
        return json.loads(text)
    except ValueError:
        return text


@dataclass(slots=True)
class ArubaCloudClient(ObservableMixin):
    """Authenticated REST client returning :class:`ApiResponse` envelopes.

    Every non-transport outcome, success or error, is returned as an
    envelope; only connection-level failures raise :class:`TransportError`.
    """

    _metrics_resource: ClassVar[str] = "api"

    base_url: str
    token_url: str
    _credentials: Credentials = field(repr=False)
    _session: Any
    request_timeout_seconds: float = 30.0
    _owns_session: bool = False
    _metrics: MetricsRecorder | None = None
    _clock: Callable[[], float] = time.monotonic
    _token: str | None = field(default=None, repr=False)
    _token_expires_at: float = 0.0
    _closed: bool = False

    @classmethod
    def create(
        cls,
        settings: ProviderSettings,
        credentials: Credentials,
        *,
        session: Any | None = None,
        metrics: MetricsRecorder | None = None,
    ) -> ArubaCloudClient:
        """Build a client from settings; a session is created when none is given."""
        owns_session = session is None
        if session is None:
            session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=settings.request_timeout_seconds),
            )
        return cls(
            base_url=settings.base_url.rstrip("/"),
            token_url=settings.token_url,
            _credentials=credentials,
            _session=session,
            request_timeout_seconds=settings.request_timeout_seconds,
            _owns_session=owns_session,
            _metrics=metrics,
        )

    @property
    def session(self) -> Any:
        """Expose underlying aiohttp session for advanced usage."""
        return self._session

    @property
    def is_closed(self) -> bool:
        return self._closed

    async def get(self, path: str, *, params: Mapping[str, Any] | None = None) -> ApiResponse:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, *, json: Any = None) -> ApiResponse:
        return await self.request("POST", path, json=json)

    async def put(self, path: str, *, json: Any = None) -> ApiResponse:
        return await self.request("PUT", path, json=json)

    async def patch(self, path: str, *, json: Any = None) -> ApiResponse:
        return await self.request("PATCH", path, json=json)

    async def delete(self, path: str) -> ApiResponse:
        return await self.request("DELETE", path)

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Mapping[str, Any] | None = None,
    ) -> ApiResponse:
        """Send one authenticated request.

        A 401 drops the cached token and the request is sent once more with
        a fresh one.

        Raises:
            TransportError: If the API or the token endpoint could not be reached.
            ApiError: If the token endpoint rejects the credentials.
        """
        operation = method.lower()
        started = perf_counter()
        with start_span(
            f"arubacloud.http.{operation}",
            attributes={"http.request.method": method, "url.path": path},
        ) as span:
            try:
                response = await self._send(method, path, json=json, params=params)
                if response.status_code == 401:
                    logger.debug("Access token rejected, requesting a new one")
                    self._invalidate_token()
                    response = await self._send(method, path, json=json, params=params)
            except Exception as exc:
                self._observe_error(operation, started, exc)
                raise
            span.set_attribute("http.response.status_code", response.status_code)

        self._observe_operation(operation, started, success=not response.is_error())
        return response

    async def close(self) -> None:
        """Close the session when this client created it."""
        if self._closed:
            return
        self._closed = True
        if self._owns_session:
            await self._session.close()

    async def __aenter__(self) -> ArubaCloudClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def _send(
        self,
        method: str,
        path: str,
        *,
        json: Any,
        params: Mapping[str, Any] | None,
    ) -> ApiResponse:
        token = await self._access_token()
        headers = {"Authorization": f"Bearer {token}", "Accept": "application/json"}
        url = f"{self.base_url}{path}"
        status, payload = await self._exchange(
            method, url, operation=method.lower(), headers=headers, json=json, params=params
        )
        if status >= 400:
            error = ApiErrorBody.from_payload(payload)
            return ApiResponse(status_code=status, data=payload, error=error)
        return ApiResponse(status_code=status, data=payload)

    async def _exchange(
        self,
        method: str,
        url: str,
        *,
        operation: str,
        **kwargs: Any,
    ) -> tuple[int, Any]:
        try:
            async with self._session.request(method, url, **kwargs) as response:
                text = await response.text()
                return response.status, _decode_body(text)
        except (aiohttp.ClientError, TimeoutError, OSError) as exc:
            raise _translate_transport_error(operation=operation, exc=exc) from exc

    async def _access_token(self) -> str:
        if self._token is not None and self._clock() < self._token_expires_at:
            return self._token

        status, payload = await self._exchange(
            "POST",
            self.token_url,
            operation="token",
            data={
                "grant_type": "client_credentials",
                "client_id": self._credentials.api_key.get_secret_value(),
                "client_secret": self._credentials.api_secret.get_secret_value(),
            },
        )
        if status >= 500:
            # Server-side token failures are transient.
            raise TransportError("token", f"token endpoint unavailable (status: {status})")
        if status >= 400 or not isinstance(payload, Mapping) or not payload.get("access_token"):
            raise ApiError(
                f"Unable to obtain an access token (status: {status})",
                status_code=status,
                error=ApiErrorBody.from_payload(payload),
            )

        lifetime = payload.get("expires_in", _DEFAULT_TOKEN_LIFETIME_SECONDS)
        try:
            lifetime_seconds = float(lifetime)
        except (TypeError, ValueError):
            lifetime_seconds = _DEFAULT_TOKEN_LIFETIME_SECONDS

        self._token = str(payload["access_token"])
        self._token_expires_at = self._clock() + lifetime_seconds - _TOKEN_EXPIRY_MARGIN_SECONDS
        return self._token

    def _invalidate_token(self) -> None:
        self._token = None
        self._token_expires_at = 0.0
