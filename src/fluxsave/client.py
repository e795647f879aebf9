"""Python client for the Fluxsave file storage API."""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Optional, Sequence, Union
from urllib.parse import quote, urlencode

import httpx

from .config import ClientConfig
from .executor import AsyncRequestExecutor, RequestDescriptor, RequestExecutor
from .files import FileInput, UploadFile, build_upload_form, to_upload_file
from .models import ApiResponse, TransformOptions

logger = logging.getLogger("fluxsave.client")

UPLOAD_PATH = "/api/v1/files/upload"
FILES_PATH = "/api/v1/files"
METRICS_PATH = "/api/v1/metrics"

BatchItem = Union[FileInput, tuple]


def _file_path(file_id: str) -> str:
    return f"{FILES_PATH}/{quote(file_id, safe='')}"


class _BaseClient:
    """Holds the config snapshot and builds request descriptors for both clients."""

    def __init__(self, config: ClientConfig) -> None:
        self._config = config

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def base_url(self) -> str:
        return self._config.base_url

    def set_auth(self, api_key: str, api_secret: str) -> None:
        self._config = self._config.with_auth(api_key, api_secret)

    def set_timeout(self, timeout: float) -> None:
        self._config = self._config.with_timeout(timeout)

    def set_retry(
        self,
        retries: int,
        delay: Optional[float] = None,
        retry_on: Optional[Iterable[int]] = None,
    ) -> None:
        self._config = self._config.with_retry(self._config.retry.merge(retries, delay=delay, retry_on=retry_on))

    def build_file_url(
        self,
        file_id: str,
        width: Optional[int] = None,
        height: Optional[int] = None,
        format: Optional[str] = None,
        quality: Optional[Union[int, str]] = None,
    ) -> str:
        options = TransformOptions(width=width, height=height, format=format, quality=quality)
        url = f"{self._config.base_url}{_file_path(file_id)}"
        params = options.query_params()
        if params:
            url += "?" + urlencode(params)
        return url

    def _upload_request(
        self,
        method: str,
        path: str,
        field: str,
        files: Sequence[UploadFile],
        name: Optional[str],
        transform: Optional[bool],
    ) -> RequestDescriptor:
        data, parts = build_upload_form(field, files, name=name, transform=transform)
        logger.debug("%s %s with %d file part(s)", method, path, len(parts))
        return RequestDescriptor(path=path, method=method, data=data, files=parts)

    def _single_upload(
        self,
        method: str,
        path: str,
        file: FileInput,
        name: Optional[str],
        transform: Optional[bool],
        filename: Optional[str],
    ) -> RequestDescriptor:
        return self._upload_request(method, path, "file", [to_upload_file(file, filename)], name, transform)

    def _batch_upload(
        self,
        files: Sequence[BatchItem],
        name: Optional[str],
        transform: Optional[bool],
    ) -> RequestDescriptor:
        if not files:
            raise ValueError("upload_files requires at least one file")
        uploads: List[UploadFile] = []
        for item in files:
            # (source, filename) pairs mirror the single-file ``filename`` option.
            if isinstance(item, tuple):
                source, filename = item
                uploads.append(to_upload_file(source, filename))
            else:
                uploads.append(to_upload_file(item))
        return self._upload_request("POST", UPLOAD_PATH, "files", uploads, name, transform)


class FluxsaveClient(_BaseClient):
    """Synchronous Fluxsave client.

    ``transport`` is handed to the underlying :class:`httpx.Client`; pass an
    :class:`httpx.MockTransport` to exercise the client without a server.
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        super().__init__(config)
        self._client = httpx.Client(base_url=config.base_url, timeout=config.timeout, transport=transport)
        self._executor = RequestExecutor(self._client)

    def __enter__(self) -> "FluxsaveClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def request(self, request: RequestDescriptor) -> ApiResponse[Any]:
        status_code, payload = self._executor.send(request, self._config)
        return ApiResponse.from_payload(payload, status_code)

    def upload_file(
        self,
        file: FileInput,
        *,
        name: Optional[str] = None,
        transform: Optional[bool] = None,
        filename: Optional[str] = None,
    ) -> ApiResponse[Any]:
        return self.request(self._single_upload("POST", UPLOAD_PATH, file, name, transform, filename))

    def upload_files(
        self,
        files: Sequence[BatchItem],
        *,
        name: Optional[str] = None,
        transform: Optional[bool] = None,
    ) -> ApiResponse[Any]:
        return self.request(self._batch_upload(files, name, transform))

    def list_files(self) -> ApiResponse[Any]:
        return self.request(RequestDescriptor(path=FILES_PATH, method="GET"))

    def get_file_metadata(self, file_id: str) -> ApiResponse[Any]:
        return self.request(RequestDescriptor(path=f"{FILES_PATH}/metadata/{quote(file_id, safe='')}", method="GET"))

    def update_file(
        self,
        file_id: str,
        file: FileInput,
        *,
        name: Optional[str] = None,
        transform: Optional[bool] = None,
        filename: Optional[str] = None,
    ) -> ApiResponse[Any]:
        return self.request(self._single_upload("PUT", _file_path(file_id), file, name, transform, filename))

    def delete_file(self, file_id: str) -> ApiResponse[Any]:
        return self.request(RequestDescriptor(path=_file_path(file_id), method="DELETE"))

    def get_metrics(self) -> ApiResponse[Any]:
        return self.request(RequestDescriptor(path=METRICS_PATH, method="GET"))

    def close(self) -> None:
        self._client.close()


class AsyncFluxsaveClient(_BaseClient):
    """Async Fluxsave client; concurrent calls each run their own retry loop."""

    def __init__(
        self,
        config: ClientConfig,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__(config)
        self._client = httpx.AsyncClient(base_url=config.base_url, timeout=config.timeout, transport=transport)
        self._executor = AsyncRequestExecutor(self._client)

    async def __aenter__(self) -> "AsyncFluxsaveClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def request(self, request: RequestDescriptor) -> ApiResponse[Any]:
        status_code, payload = await self._executor.send(request, self._config)
        return ApiResponse.from_payload(payload, status_code)

    async def upload_file(
        self,
        file: FileInput,
        *,
        name: Optional[str] = None,
        transform: Optional[bool] = None,
        filename: Optional[str] = None,
    ) -> ApiResponse[Any]:
        return await self.request(self._single_upload("POST", UPLOAD_PATH, file, name, transform, filename))

    async def upload_files(
        self,
        files: Sequence[BatchItem],
        *,
        name: Optional[str] = None,
        transform: Optional[bool] = None,
    ) -> ApiResponse[Any]:
        return await self.request(self._batch_upload(files, name, transform))

    async def list_files(self) -> ApiResponse[Any]:
        return await self.request(RequestDescriptor(path=FILES_PATH, method="GET"))

    async def get_file_metadata(self, file_id: str) -> ApiResponse[Any]:
        return await self.request(
            RequestDescriptor(path=f"{FILES_PATH}/metadata/{quote(file_id, safe='')}", method="GET")
        )

    async def update_file(
        self,
        file_id: str,
        file: FileInput,
        *,
        name: Optional[str] = None,
        transform: Optional[bool] = None,
        filename: Optional[str] = None,
    ) -> ApiResponse[Any]:
        return await self.request(self._single_upload("PUT", _file_path(file_id), file, name, transform, filename))

    async def delete_file(self, file_id: str) -> ApiResponse[Any]:
        return await self.request(RequestDescriptor(path=_file_path(file_id), method="DELETE"))

    async def get_metrics(self) -> ApiResponse[Any]:
        return await self.request(RequestDescriptor(path=METRICS_PATH, method="GET"))

    async def close(self) -> None:
        await self._client.aclose()


__all__ = ["FluxsaveClient", "AsyncFluxsaveClient"]
