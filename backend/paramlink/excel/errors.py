"""Failure taxonomy for export/import.

Per-cell and per-row failures are turned into ErrorRecord entries and the
batch carries on. Only resource failures (workbook I/O, host transaction)
propagate as exceptions and abort the whole operation.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


class SyncError(Exception):
    """Base class for synchronization failures."""


class CodecError(SyncError):
    """A value could not be written to a parameter."""


class ReadOnlyError(CodecError):
    def __init__(self, parameter_name: str) -> None:
        super().__init__(f"Parameter '{parameter_name}' is read-only")
        self.parameter_name = parameter_name


class TypeMismatchError(CodecError):
    def __init__(self, parameter_name: str, value: str, expected: str) -> None:
        super().__init__(
            f"Value '{value}' is not a valid {expected} for parameter '{parameter_name}'"
        )
        self.parameter_name = parameter_name
        self.value = value


class LinkNotFoundError(CodecError):
    def __init__(self, parameter_name: str, value: str) -> None:
        super().__init__(
            f"No element matches '{value}' for parameter '{parameter_name}'"
        )
        self.parameter_name = parameter_name
        self.value = value


class SheetNotFoundError(SyncError):
    def __init__(self, sheet_name: str) -> None:
        super().__init__(f"Schedule '{sheet_name}' not found in model")
        self.sheet_name = sheet_name


class WorkbookError(SyncError):
    """The workbook could not be created, opened or saved."""


class HostFileLocked(WorkbookError):
    def __init__(self, path: str) -> None:
        super().__init__(
            f"The Excel file is already open: {path}. Please close it and try again."
        )
        self.path = path


class HostTransactionFailure(SyncError):
    """The host transaction could not be started or committed."""


class ErrorKind(str, enum.Enum):
    CODEC = "codec"
    ROW_KEY_UNRESOLVED = "row_key_unresolved"
    SHEET_NOT_FOUND = "sheet_not_found"


@dataclass(frozen=True)
class ErrorRecord:
    """One skipped unit of work, reported back to the caller."""

    key: str
    field: str | None
    message: str
    kind: ErrorKind = ErrorKind.CODEC

    @property
    def description(self) -> str:
        if self.field:
            return f"Error updating parameter '{self.field}': {self.message}"
        return self.message

    @classmethod
    def unresolved_row(cls, key: str, sheet: str | None = None) -> "ErrorRecord":
        where = f" (sheet '{sheet}')" if sheet else ""
        return cls(
            key=key,
            field=None,
            message=f"Element '{key}' not found in model{where}",
            kind=ErrorKind.ROW_KEY_UNRESOLVED,
        )

    @classmethod
    def missing_sheet(cls, sheet: str) -> "ErrorRecord":
        return cls(
            key="N/A",
            field=None,
            message=str(SheetNotFoundError(sheet)),
            kind=ErrorKind.SHEET_NOT_FOUND,
        )
