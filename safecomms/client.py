"""HTTP clients for the SafeComms moderation API.

:class:`SafeCommsClient` blocks the calling thread for each round trip;
:class:`AsyncSafeCommsClient` suspends the calling task instead.  Both
build requests and classify responses through the same helpers, hold no
per-call state, and issue exactly one request per operation.
"""

from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path
from typing import Any, Optional, TypeVar

import httpx
import pydantic

from safecomms import __version__
from safecomms.config import ClientConfig, resolve_config
from safecomms.errors import (
    AuthenticationError,
    DecodeError,
    NetworkError,
    RateLimitError,
    SafeCommsError,
    ServerError,
    ValidationError,
)
from safecomms.models import (
    ImageModerationOptions,
    ModerationOptions,
    ModerationResult,
    ProblemDetails,
    ReplaceSeverity,
    UsageReport,
)

log = logging.getLogger(__name__)

TEXT_PATH = "/moderation/text"
IMAGE_PATH = "/moderation/image"
IMAGE_UPLOAD_PATH = "/moderation/image/upload"
USAGE_PATH = "/usage"

_DEFAULT_IMAGE_NAME = "image.jpg"

ModelT = TypeVar("ModelT", bound=pydantic.BaseModel)


# ---------------------------------------------------------------------------
# Request helpers
# ---------------------------------------------------------------------------


def _require_content(value: Any, name: str) -> str:
    if not isinstance(value, str) or not value:
        raise ValidationError(f"{name} must be a non-empty string")
    return value


def build_text_payload(
    text: str, options: Optional[ModerationOptions] = None, **overrides: Any
) -> dict[str, Any]:
    """Return the JSON body for a text moderation request.

    Unset options are left out of the body entirely.
    """
    _require_content(text, "text")
    opts = (options or ModerationOptions()).merged(**overrides)
    return {"text": text, **opts.to_payload()}


def build_image_payload(
    image: str, options: Optional[ImageModerationOptions] = None, **overrides: Any
) -> dict[str, Any]:
    """Return the JSON body for an image URL / base64 moderation request."""
    _require_content(image, "image")
    opts = (options or ImageModerationOptions()).merged(**overrides)
    return {"image": image, **opts.to_payload()}


def _read_image(path: str | Path) -> tuple[str, bytes]:
    path = Path(path)
    try:
        content = path.read_bytes()
    except OSError as exc:
        raise ValidationError(f"Failed to read image file {path}: {exc.strerror or exc}") from exc
    return path.name or _DEFAULT_IMAGE_NAME, content


# ---------------------------------------------------------------------------
# Response helpers
# ---------------------------------------------------------------------------


def _retry_after(response: httpx.Response) -> float | None:
    value = response.headers.get("Retry-After")
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def _error_message(response: httpx.Response) -> str:
    """Pick the most useful human-readable message from an error body."""
    text = response.text
    try:
        problem = ProblemDetails.model_validate(response.json())
    except (ValueError, pydantic.ValidationError):
        problem = None
    if problem is not None and problem.message():
        return problem.message()
    status = f"{response.status_code} {response.reason_phrase}".strip()
    return f"{status} - {text}" if text else status


def error_for_response(response: httpx.Response) -> SafeCommsError:
    """Map a non-success response onto the error taxonomy."""
    status = response.status_code
    message = _error_message(response)
    if status in (401, 403):
        return AuthenticationError(message, status)
    if status == 429:
        return RateLimitError(message, status, retry_after=_retry_after(response))
    return ServerError(message, status, detail=response.text)


def decode_response(response: httpx.Response, model: type[ModelT]) -> ModelT:
    """Validate a success response body against *model*."""
    try:
        data = response.json()
    except ValueError as exc:
        raise DecodeError("Response body is not valid JSON", response.status_code) from exc
    if not isinstance(data, dict):
        raise DecodeError(
            f"Expected a JSON object for {model.__name__}, got {type(data).__name__}",
            response.status_code,
        )
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as exc:
        bad = ", ".join(".".join(str(p) for p in err["loc"]) for err in exc.errors())
        raise DecodeError(
            f"Unexpected {model.__name__} payload (invalid: {bad})", response.status_code
        ) from exc


def _handle(response: httpx.Response, model: type[ModelT], elapsed_ms: int) -> ModelT:
    request = response.request
    log.debug(
        "%s %s -> %d (%d ms)", request.method, request.url.path, response.status_code, elapsed_ms
    )
    if not response.is_success:
        error = error_for_response(response)
        log.warning(
            "%s %s failed with %d: %s",
            request.method,
            request.url.path,
            response.status_code,
            type(error).__name__,
        )
        raise error
    return decode_response(response, model)


def _network_error(method: str, path: str, exc: httpx.TransportError) -> NetworkError:
    log.warning("%s %s failed: %s", method, path, type(exc).__name__)
    return NetworkError(f"{method} {path} failed: {type(exc).__name__}: {exc}")


# ---------------------------------------------------------------------------
# Clients
# ---------------------------------------------------------------------------


class _BaseClient:
    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        *,
        timeout: float | None = None,
        config: ClientConfig | None = None,
    ) -> None:
        self._config = config or resolve_config(api_key=api_key, base_url=base_url, timeout=timeout)

    # -- properties ----------------------------------------------------------

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def base_url(self) -> str:
        return self._config.base_url

    def _client_kwargs(self, transport: Any) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "base_url": self._config.base_url,
            "timeout": self._config.timeout,
            "headers": {
                "Authorization": f"Bearer {self._config.api_key}",
                "Accept": "application/json",
                "User-Agent": f"safecomms-python/{__version__}",
            },
        }
        if transport is not None:
            kwargs["transport"] = transport
        return kwargs

    def __repr__(self) -> str:
        return f"{type(self).__name__}(base_url={self._config.base_url!r})"


class SafeCommsClient(_BaseClient):
    """Blocking client.

    Parameters
    ----------
    api_key : str | None
        API key.  Falls back to ``SAFECOMMS_API_KEY`` and then the config
        file; a missing key raises :class:`ConfigurationError`.
    base_url : str | None
        Service root.  Defaults to ``https://api.safecomms.dev``.
    timeout : float | None
        Per-request timeout in seconds.
    transport : httpx.BaseTransport | None
        Custom transport, e.g. ``httpx.MockTransport`` in tests.
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        *,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
        config: ClientConfig | None = None,
    ) -> None:
        super().__init__(api_key, base_url, timeout=timeout, config=config)
        self._http = httpx.Client(**self._client_kwargs(transport))

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> SafeCommsClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _send(self, method: str, path: str, model: type[ModelT], **kwargs: Any) -> ModelT:
        start = time.monotonic()
        try:
            response = self._http.request(method, path, **kwargs)
        except httpx.TransportError as exc:
            raise _network_error(method, path, exc) from exc
        return _handle(response, model, int((time.monotonic() - start) * 1000))

    # -- operations ----------------------------------------------------------

    def moderate_text(
        self,
        text: str,
        options: ModerationOptions | None = None,
        *,
        language: str | None = None,
        replace: bool | None = None,
        pii: bool | None = None,
        replace_severity: ReplaceSeverity | str | None = None,
        moderation_profile_id: str | None = None,
    ) -> ModerationResult:
        """Moderate *text* and return the server's verdict.

        Keyword arguments override the matching fields of *options*.
        """
        payload = build_text_payload(
            text,
            options,
            language=language,
            replace=replace,
            pii=pii,
            replace_severity=replace_severity,
            moderation_profile_id=moderation_profile_id,
        )
        return self._send("POST", TEXT_PATH, ModerationResult, json=payload)

    def moderate_image(
        self,
        image: str,
        options: ImageModerationOptions | None = None,
        **overrides: Any,
    ) -> ModerationResult:
        """Moderate an image given as a URL or base64 string."""
        payload = build_image_payload(image, options, **overrides)
        return self._send("POST", IMAGE_PATH, ModerationResult, json=payload)

    def moderate_image_file(
        self,
        path: str | Path,
        options: ImageModerationOptions | None = None,
        **overrides: Any,
    ) -> ModerationResult:
        """Upload a local image file for moderation."""
        opts = (options or ImageModerationOptions()).merged(**overrides)
        name, content = _read_image(path)
        return self._send(
            "POST",
            IMAGE_UPLOAD_PATH,
            ModerationResult,
            files={"image": (name, content)},
            data=opts.to_form(),
        )

    def get_usage(self) -> UsageReport:
        """Return the account's current usage counters."""
        return self._send("GET", USAGE_PATH, UsageReport)


class AsyncSafeCommsClient(_BaseClient):
    """Asyncio client with the same operations as :class:`SafeCommsClient`."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        config: ClientConfig | None = None,
    ) -> None:
        super().__init__(api_key, base_url, timeout=timeout, config=config)
        self._http = httpx.AsyncClient(**self._client_kwargs(transport))

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> AsyncSafeCommsClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def _send(self, method: str, path: str, model: type[ModelT], **kwargs: Any) -> ModelT:
        start = time.monotonic()
        try:
            response = await self._http.request(method, path, **kwargs)
        except httpx.TransportError as exc:
            raise _network_error(method, path, exc) from exc
        return _handle(response, model, int((time.monotonic() - start) * 1000))

    # -- operations ----------------------------------------------------------

    async def moderate_text(
        self,
        text: str,
        options: ModerationOptions | None = None,
        *,
        language: str | None = None,
        replace: bool | None = None,
        pii: bool | None = None,
        replace_severity: ReplaceSeverity | str | None = None,
        moderation_profile_id: str | None = None,
    ) -> ModerationResult:
        payload = build_text_payload(
            text,
            options,
            language=language,
            replace=replace,
            pii=pii,
            replace_severity=replace_severity,
            moderation_profile_id=moderation_profile_id,
        )
        return await self._send("POST", TEXT_PATH, ModerationResult, json=payload)

    async def moderate_image(
        self,
        image: str,
        options: ImageModerationOptions | None = None,
        **overrides: Any,
    ) -> ModerationResult:
        payload = build_image_payload(image, options, **overrides)
        return await self._send("POST", IMAGE_PATH, ModerationResult, json=payload)

    async def moderate_image_file(
        self,
        path: str | Path,
        options: ImageModerationOptions | None = None,
        **overrides: Any,
    ) -> ModerationResult:
        opts = (options or ImageModerationOptions()).merged(**overrides)
        name, content = await asyncio.to_thread(_read_image, path)
        return await self._send(
            "POST",
            IMAGE_UPLOAD_PATH,
            ModerationResult,
            files={"image": (name, content)},
            data=opts.to_form(),
        )

    async def get_usage(self) -> UsageReport:
        return await self._send("GET", USAGE_PATH, UsageReport)
