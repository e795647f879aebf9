"""Request execution: auth headers, per-attempt timeouts and fixed-delay retries."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Sequence, Tuple, Union

import httpx

from .config import ClientConfig, RetryPolicy
from .errors import APIStatusError, AuthenticationRequiredError, RequestTimeoutError
from .files import FilePart

logger = logging.getLogger("fluxsave.executor")

API_KEY_HEADER = "x-api-key"
API_SECRET_HEADER = "x-api-secret"


@dataclass(frozen=True)
class RequestDescriptor:
    path: str
    method: str = "GET"
    json: Optional[Any] = None
    data: Optional[Mapping[str, str]] = None
    files: Optional[Sequence[FilePart]] = None
    headers: Optional[Mapping[str, str]] = None


@dataclass(frozen=True)
class TimedOut:
    def __str__(self) -> str:
        return "timeout"


@dataclass(frozen=True)
class TransportFailed:
    error: BaseException

    def __str__(self) -> str:
        return f"transport error ({type(self.error).__name__})"


@dataclass(frozen=True)
class HttpStatus:
    code: int

    def __str__(self) -> str:
        return f"status {self.code}"


Outcome = Union[TimedOut, TransportFailed, HttpStatus]


def should_retry(outcome: Outcome, attempt: int, policy: RetryPolicy) -> bool:
    if attempt >= policy.retries:
        return False
    if isinstance(outcome, HttpStatus):
        return outcome.code in policy.retry_on
    return True


def build_headers(config: ClientConfig, request: RequestDescriptor) -> Dict[str, str]:
    headers = {"User-Agent": config.user_agent}
    headers.update(config.headers)
    if request.headers:
        headers.update(request.headers)
    # Drop case variants of the auth headers before setting them.
    for name in list(headers):
        if name.lower() in (API_KEY_HEADER, API_SECRET_HEADER):
            del headers[name]
    headers[API_KEY_HEADER] = config.api_key or ""
    headers[API_SECRET_HEADER] = config.api_secret or ""
    return headers


def decode_body(response: httpx.Response) -> Any:
    content_type = response.headers.get("content-type", "")
    if "application/json" in content_type:
        return response.json()
    return response.text


def error_from_response(response: httpx.Response, payload: Any) -> APIStatusError:
    message = None
    if isinstance(payload, dict):
        message = payload.get("message") or payload.get("error")
    return APIStatusError(str(message or response.reason_phrase), response.status_code, payload)


class _BaseExecutor:
    def _prepare(self, request: RequestDescriptor, config: ClientConfig) -> Dict[str, str]:
        if not config.has_credentials:
            raise AuthenticationRequiredError()
        return build_headers(config, request)

    def _request_kwargs(self, request: RequestDescriptor, headers: Dict[str, str], config: ClientConfig) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {"headers": headers, "timeout": config.timeout}
        if request.json is not None:
            kwargs["json"] = request.json
        if request.data:
            kwargs["data"] = dict(request.data)
        if request.files:
            kwargs["files"] = list(request.files)
        return kwargs

    def _retrying(self, request: RequestDescriptor, outcome: Outcome, attempt: int, policy: RetryPolicy) -> bool:
        if should_retry(outcome, attempt, policy):
            logger.warning(
                "Retrying %s %s after %s (retry %d of %d, delay=%.3fs)",
                request.method,
                request.path,
                outcome,
                attempt + 1,
                policy.retries,
                policy.delay,
            )
            return True
        logger.error("%s %s failed with %s after %d attempt(s)", request.method, request.path, outcome, attempt + 1)
        return False


class RequestExecutor(_BaseExecutor):
    """Runs one logical request against a synchronous httpx client.

    ``config.timeout`` is handed to httpx, which applies it to each phase of
    the exchange (connect, write, each read, pool) rather than to the attempt
    as a whole. A server that keeps trickling bytes, or a transport that
    ignores ``request.extensions["timeout"]``, can keep an attempt running
    past ``config.timeout`` without a 408. Use :class:`AsyncRequestExecutor`
    when a hard per-attempt deadline is needed.
    """

    def __init__(self, client: httpx.Client, sleep: Callable[[float], None] = time.sleep) -> None:
        self._client = client
        self.sleep = sleep

    def execute(self, request: RequestDescriptor, config: ClientConfig) -> Any:
        return self.send(request, config)[1]

    def send(self, request: RequestDescriptor, config: ClientConfig) -> Tuple[int, Any]:
        """Like :meth:`execute`, but also returns the final HTTP status code."""
        headers = self._prepare(request, config)
        kwargs = self._request_kwargs(request, headers, config)
        policy = config.retry
        attempt = 0
        while True:
            logger.debug("%s %s attempt=%d", request.method, request.path, attempt)
            try:
                response = self._client.request(request.method, request.path, **kwargs)
                payload = decode_body(response)
            except httpx.TimeoutException:
                if self._retrying(request, TimedOut(), attempt, policy):
                    attempt += 1
                    self.sleep(policy.delay)
                    continue
                raise RequestTimeoutError() from None
            except Exception as exc:
                if self._retrying(request, TransportFailed(exc), attempt, policy):
                    attempt += 1
                    self.sleep(policy.delay)
                    continue
                raise

            if response.is_success:
                return response.status_code, payload
            if self._retrying(request, HttpStatus(response.status_code), attempt, policy):
                attempt += 1
                self.sleep(policy.delay)
                continue
            raise error_from_response(response, payload)


class AsyncRequestExecutor(_BaseExecutor):
    """Async counterpart of :class:`RequestExecutor`.

    Each attempt runs under ``asyncio.wait_for`` so the in-flight transport
    call is cancelled once ``config.timeout`` elapses.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._client = client
        self.sleep = sleep

    async def execute(self, request: RequestDescriptor, config: ClientConfig) -> Any:
        return (await self.send(request, config))[1]

    async def send(self, request: RequestDescriptor, config: ClientConfig) -> Tuple[int, Any]:
        headers = self._prepare(request, config)
        kwargs = self._request_kwargs(request, headers, config)
        policy = config.retry
        attempt = 0
        while True:
            logger.debug("%s %s attempt=%d", request.method, request.path, attempt)
            try:
                response = await asyncio.wait_for(
                    self._client.request(request.method, request.path, **kwargs),
                    timeout=config.timeout,
                )
                payload = decode_body(response)
            except (asyncio.TimeoutError, httpx.TimeoutException):
                if self._retrying(request, TimedOut(), attempt, policy):
                    attempt += 1
                    await self.sleep(policy.delay)
                    continue
                raise RequestTimeoutError() from None
            except Exception as exc:
                if self._retrying(request, TransportFailed(exc), attempt, policy):
                    attempt += 1
                    await self.sleep(policy.delay)
                    continue
                raise

            if response.is_success:
                return response.status_code, payload
            if self._retrying(request, HttpStatus(response.status_code), attempt, policy):
                attempt += 1
                await self.sleep(policy.delay)
                continue
            raise error_from_response(response, payload)


__all__ = [
    "RequestDescriptor",
    "RequestExecutor",
    "AsyncRequestExecutor",
    "TimedOut",
    "TransportFailed",
    "HttpStatus",
    "Outcome",
    "should_retry",
    "build_headers",
    "decode_body",
    "error_from_response",
]
