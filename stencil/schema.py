"""Pydantic models for the file-system description returned by the model."""

from __future__ import annotations

import json
from enum import Enum
from pathlib import PurePosixPath
from typing import Any

from pydantic import BaseModel, Field, field_validator

# Name of the structured-output format sent to providers that want one.
SCHEMA_NAME = "file_system"


class ObjectType(str, Enum):
    """Kind of file-system object."""
    FILE = "file"
    DIRECTORY = "directory"


class FileSystemObject(BaseModel):
    """A single path/type/content record."""
    path: str = Field(
        description="Relative path to the file or directory that starts with './'",
    )
    type: ObjectType = Field(
        description="Type of file system object. either file or directory",
    )
    content: str | None = Field(
        default=None,
        description="File object contents",
    )

    @field_validator("path")
    @classmethod
    def _check_path(cls, value: str) -> str:
        value = value.strip().replace("\\", "/")
        if not value:
            raise ValueError("path must not be empty")
        if "\x00" in value:
            raise ValueError(f"path contains a NUL byte: {value!r}")
        if value.startswith("/") or (len(value) > 1 and value[1] == ":"):
            raise ValueError(f"path must be relative: {value!r}")
        if ".." in PurePosixPath(value).parts:
            raise ValueError(f"path escapes the destination root: {value!r}")
        return value

    @property
    def is_file(self) -> bool:
        return self.type == ObjectType.FILE

    @property
    def is_directory(self) -> bool:
        return self.type == ObjectType.DIRECTORY

    @property
    def relative_path(self) -> PurePosixPath:
        """Path with the leading ``./`` marker removed."""
        return PurePosixPath(self.path)


class FileSystem(BaseModel):
    """The wrapper object the model is asked to return."""
    file_contents: list[FileSystemObject] = Field(
        default_factory=list,
        alias="fileContents",
    )

    model_config = {"populate_by_name": True}

    @property
    def files(self) -> list[FileSystemObject]:
        return [o for o in self.file_contents if o.is_file]

    @property
    def directories(self) -> list[FileSystemObject]:
        return [o for o in self.file_contents if o.is_directory]

    def __len__(self) -> int:
        return len(self.file_contents)

    @classmethod
    def parse(cls, raw: Any) -> FileSystem:
        """Validate a raw model response.

        Accepts the wrapper object, its JSON text, or a bare list of
        records (some models drop the wrapper).
        """
        if isinstance(raw, cls):
            return raw
        if isinstance(raw, (str, bytes)):
            raw = json.loads(raw)
        if isinstance(raw, list):
            raw = {"fileContents": raw}
        return cls.model_validate(raw)

    @classmethod
    def json_schema(cls) -> dict[str, Any]:
        """Raw JSON schema, for SDKs that do not take pydantic models."""
        return cls.model_json_schema(by_alias=True)
