"""Response envelope and record models for the Fluxsave API."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)


class FileRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: Optional[str] = Field(default=None, alias="_id")
    file_id: Optional[str] = Field(default=None, alias="fileId")
    cloud_id: Optional[str] = Field(default=None, alias="cloudId")
    filename: str
    original_filename: Optional[str] = Field(default=None, alias="originalFilename")
    url: str
    size: int
    mime_type: str = Field(..., alias="mimeType")
    width: Optional[int] = None
    height: Optional[int] = None
    created_at: Optional[str] = Field(default=None, alias="createdAt")
    updated_at: Optional[str] = Field(default=None, alias="updatedAt")


class Metrics(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    total_files: int = Field(..., alias="totalFiles")
    total_storage_bytes: int = Field(..., alias="totalStorageBytes")
    average_file_size: float = Field(..., alias="averageFileSize")
    storage_limit_bytes: int = Field(..., alias="storageLimitBytes")
    storage_remaining_bytes: int = Field(..., alias="storageRemainingBytes")
    storage_used_percent: float = Field(..., alias="storageUsedPercent")
    uploads_last_7_days: int = Field(..., alias="uploadsLast7Days")
    latest_upload_at: Optional[str] = Field(default=None, alias="latestUploadAt")
    by_mime_type: Dict[str, int] = Field(default_factory=dict, alias="byMimeType")


class TransformOptions(BaseModel):
    width: Optional[int] = None
    height: Optional[int] = None
    format: Optional[str] = None
    quality: Optional[Union[int, str]] = None

    def query_params(self) -> List[tuple[str, str]]:
        params: List[tuple[str, str]] = []
        if self.width:
            params.append(("width", str(self.width)))
        if self.height:
            params.append(("height", str(self.height)))
        if self.format:
            params.append(("format", self.format))
        if self.quality is not None:
            params.append(("quality", str(self.quality)))
        return params


@dataclass(frozen=True)
class ApiResponse(Generic[T]):
    """The ``{status, message, data}`` envelope wrapping every JSON success response."""

    status: int
    message: str
    data: T

    @classmethod
    def from_payload(cls, payload: Any, status_code: int = 200) -> "ApiResponse[Any]":
        if isinstance(payload, dict) and "data" in payload:
            status = payload.get("status")
            if not isinstance(status, int) or isinstance(status, bool):
                status = status_code
            message = payload.get("message")
            return cls(
                status=status,
                message="" if message is None else str(message),
                data=payload["data"],
            )
        # Plain-text or unwrapped bodies are handed back as-is.
        return cls(status=status_code, message="", data=payload)

    def parse(self, model: Type[M]) -> Union[M, List[M], None]:
        """Validate ``data`` into ``model``; lists are validated item by item."""
        if self.data is None:
            return None
        if isinstance(self.data, list):
            return [model.model_validate(item) for item in self.data]
        return model.model_validate(self.data)


__all__ = ["ApiResponse", "FileRecord", "Metrics", "TransformOptions"]
