"""Outbound HTTP with bounded retries, optional rate limiting and typed failures.

``ResilientClient.call`` is the JSON entry point used by the platform adapters.
Transport errors and responses with a status in the retry policy's forcelist
are retried by ``httpx_retries``; whatever is left after the last attempt is
turned into one of the ``ClientError`` subclasses below.
"""

from __future__ import annotations

import time
from logging import getLogger
from typing import TYPE_CHECKING, TypedDict, Unpack

import httpx
from aiolimiter import AsyncLimiter
from httpx_retries import Retry, RetryTransport
from pydantic import BaseModel, ValidationError

from omniresolve.domain.errors import ExternalServiceError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Mapping
    from types import TracebackType

    from httpx._client import UseClientDefault
    from httpx._types import (
        HeaderTypes,
        QueryParamTypes,
        RequestContent,
        RequestExtensions,
        TimeoutTypes,
        URLTypes,
    )

    from omniresolve.config.http_resilience import ResilienceConfig, RetryPolicy

log = getLogger(__name__)

JSON_HEADERS: dict[str, str] = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


class ClientError(ExternalServiceError):
    """Base class for outbound call failures."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.body = body


class TransportError(ClientError):
    """The request could not be sent or no response was received."""


class UpstreamError(ClientError):
    """The remote answered with a non-retryable error status."""


class RetriesExhaustedError(ClientError):
    """The remote still answered with a retryable status after the last attempt."""


class DecodeError(ClientError):
    """The response body could not be decoded into the requested model."""


class RequestOptions(TypedDict, total=False):
    content: RequestContent | None
    json: object
    params: QueryParamTypes | None
    headers: HeaderTypes | None
    timeout: TimeoutTypes | UseClientDefault
    extensions: RequestExtensions | None


class AsyncClientOptions(TypedDict, total=False):
    base_url: str
    timeout: TimeoutTypes
    headers: HeaderTypes
    transport: httpx.AsyncBaseTransport


def build_retry(policy: RetryPolicy) -> Retry:
    return Retry(
        total=policy.total,
        backoff_factor=policy.backoff_factor,
        max_backoff_wait=policy.max_backoff_wait,
        respect_retry_after_header=policy.respect_retry_after_header,
        allowed_methods=tuple(policy.allowed_methods),
        status_forcelist=tuple(policy.status_forcelist),
        retry_on_exceptions=policy.retry_on_exceptions,
        backoff_jitter=policy.backoff_jitter,
    )


class ResilientClient:
    def __init__(
        self,
        config: ResilienceConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._limiter: AsyncLimiter | None = (
            AsyncLimiter(config.ratelimit.max_calls, config.ratelimit.per_seconds)
            if config.ratelimit
            else None
        )

        client_kwargs: AsyncClientOptions = {
            "timeout": config.timeout_seconds,
            "transport": RetryTransport(transport=transport, retry=build_retry(config.retry)),
        }
        if config.base_url is not None:
            client_kwargs["base_url"] = config.base_url
        if config.default_headers:
            client_kwargs["headers"] = dict(config.default_headers)

        self._client = httpx.AsyncClient(**client_kwargs)

    async def __aenter__(self) -> ResilientClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        url: URLTypes,
        **kwargs: Unpack[RequestOptions],
    ) -> httpx.Response:
        async def do_request() -> httpx.Response:
            return await self._client.request(method, url, **kwargs)

        return await self._send(do_request)

    async def call[TModel: BaseModel](
        self,
        method: str,
        url: str,
        *,
        json: object = None,
        headers: Mapping[str, str] | None = None,
        response_model: type[TModel] | None = None,
    ) -> TModel | None:
        """Send a JSON request and classify the outcome.

        Returns the decoded ``response_model`` instance, or ``None`` when no
        model is requested and the body is ignored.
        """

        request_headers = {**JSON_HEADERS, **(headers or {})}
        started = time.perf_counter()
        try:
            response = await self.request(method, url, json=json, headers=request_headers)
        except httpx.HTTPError as exc:
            self._log_call(method, url, json, request_headers, None, started)
            msg = f"{self.config.name}: {method} {url} failed: {exc}"
            raise TransportError(msg) from exc

        self._log_call(method, url, json, request_headers, response.status_code, started)

        status = response.status_code
        if status in self.config.retry.status_forcelist:
            msg = f"{self.config.name}: {method} {url} still returned {status} after retries"
            raise RetriesExhaustedError(msg, status_code=status, body=response.text)
        if status >= httpx.codes.BAD_REQUEST:
            msg = f"{self.config.name}: {method} {url} returned {status}"
            raise UpstreamError(msg, status_code=status, body=response.text)

        if response_model is None:
            return None
        try:
            return response_model.model_validate_json(response.content)
        except ValidationError as exc:
            msg = f"{self.config.name}: could not decode response of {method} {url}"
            raise DecodeError(msg, status_code=status, body=response.text) from exc

    async def _send(self, func: Callable[[], Awaitable[httpx.Response]]) -> httpx.Response:
        if self._limiter is None:
            return await func()
        async with self._limiter:
            return await func()

    def _log_call(
        self,
        method: str,
        url: str,
        body: object,
        headers: Mapping[str, str],
        status: int | None,
        started: float,
    ) -> None:
        if not self.config.debug:
            return
        elapsed_ms = (time.perf_counter() - started) * 1000
        sanitizer = self.config.sanitizer
        if sanitizer is None:
            log.debug(
                "%s %s %s status=%s latency=%.1fms",
                self.config.name,
                method,
                url,
                status,
                elapsed_ms,
            )
            return
        log.debug(
            "%s %s %s status=%s latency=%.1fms body=%s headers=%s",
            self.config.name,
            method,
            url,
            status,
            elapsed_ms,
            sanitizer.sanitize(body),
            sanitizer.sanitize_headers(headers),
        )
