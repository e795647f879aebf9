"""Fluxsave Python SDK."""

from .client import AsyncFluxsaveClient, FluxsaveClient
from .config import ClientConfig, RetryPolicy, __version__
from .errors import APIStatusError, AuthenticationRequiredError, FluxsaveError, RequestTimeoutError
from .executor import RequestDescriptor
from .files import UploadFile, file_from_buffer
from .models import ApiResponse, FileRecord, Metrics, TransformOptions

__all__ = [
    "FluxsaveClient",
    "AsyncFluxsaveClient",
    "ClientConfig",
    "RetryPolicy",
    "FluxsaveError",
    "AuthenticationRequiredError",
    "RequestTimeoutError",
    "APIStatusError",
    "RequestDescriptor",
    "UploadFile",
    "file_from_buffer",
    "ApiResponse",
    "FileRecord",
    "Metrics",
    "TransformOptions",
    "__version__",
]
