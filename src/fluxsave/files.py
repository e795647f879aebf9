"""Upload inputs and multipart form construction."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Dict, List, Optional, Sequence, Tuple, Union

DEFAULT_FILENAME = "file"
DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class UploadFile:
    """A file held fully in memory so it can be re-sent on every attempt."""

    content: bytes
    filename: str = DEFAULT_FILENAME
    content_type: str = DEFAULT_CONTENT_TYPE

    def as_part(self) -> Tuple[str, bytes, str]:
        return (self.filename, self.content, self.content_type)


FileInput = Union[UploadFile, bytes, bytearray, memoryview, str, "os.PathLike[str]", BinaryIO]
FilePart = Tuple[str, Tuple[str, bytes, str]]


def file_from_buffer(
    buffer: Union[bytes, bytearray, memoryview],
    filename: str,
    content_type: str = DEFAULT_CONTENT_TYPE,
) -> UploadFile:
    # bytes() copies, so later writes to the caller's buffer are not sent.
    return UploadFile(content=bytes(buffer), filename=filename, content_type=content_type)


def to_upload_file(source: FileInput, filename: Optional[str] = None) -> UploadFile:
    """Read ``source`` once into an :class:`UploadFile`.

    ``filename`` overrides whatever name the source carries; paths and named
    file objects default to their base name, raw bytes to ``"file"``.
    """
    if isinstance(source, UploadFile):
        if filename:
            return UploadFile(content=source.content, filename=filename, content_type=source.content_type)
        return source
    if isinstance(source, (bytes, bytearray, memoryview)):
        return file_from_buffer(source, filename or DEFAULT_FILENAME)
    if isinstance(source, (str, os.PathLike)):
        path = Path(source)
        return UploadFile(content=path.read_bytes(), filename=filename or path.name)
    read = getattr(source, "read", None)
    if callable(read):
        content = read()
        if isinstance(content, str):
            raise TypeError("file objects must be opened in binary mode")
        name = getattr(source, "name", None)
        default = Path(name).name if isinstance(name, str) and name else DEFAULT_FILENAME
        return UploadFile(content=bytes(content), filename=filename or default)
    raise TypeError(f"unsupported file input: {type(source).__name__}")


def build_upload_form(
    field: str,
    files: Sequence[UploadFile],
    name: Optional[str] = None,
    transform: Optional[bool] = None,
) -> Tuple[Dict[str, str], List[FilePart]]:
    data: Dict[str, str] = {}
    if name:
        data["name"] = name
    if transform is not None:
        data["transform"] = "true" if transform else "false"
    parts = [(field, item.as_part()) for item in files]
    return data, parts


__all__ = [
    "UploadFile",
    "FileInput",
    "file_from_buffer",
    "to_upload_file",
    "build_upload_form",
]
