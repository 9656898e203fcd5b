"""Write-back of imported rows to host elements.

Every method taking a `document` runs in the coordination context and is
meant to be called through a bridge: bridge.call(method, *args) invokes
method(document, *args) there.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Sequence
from dataclasses import dataclass, field
from typing import Any

from paramlink.excel.codec import ValueCodec
from paramlink.excel.errors import CodecError, ErrorRecord
from paramlink.excel.host import HostDocument
from paramlink.excel.reader import ImportRow
from paramlink.excel.resolver import ParameterResolver

logger = logging.getLogger(__name__)

# Fallback row key after element id and element name
MARK_BUILTIN = "ALL_MODEL_MARK"


@dataclass(frozen=True)
class RowOutcome:
    """What happened to one imported row."""

    resolved: bool
    written: int = 0
    skipped: int = 0
    unchanged: int = 0
    errors: tuple[ErrorRecord, ...] = ()


@dataclass
class ImportStats:
    rows_processed: int = 0
    updated_elements: int = 0
    cells_written: int = 0
    cells_skipped: int = 0
    cells_unchanged: int = 0
    errors: list[ErrorRecord] = field(default_factory=list)

    def add(self, outcome: RowOutcome) -> None:
        self.rows_processed += 1
        if outcome.written:
            self.updated_elements += 1
        self.cells_written += outcome.written
        self.cells_skipped += outcome.skipped
        self.cells_unchanged += outcome.unchanged
        self.errors.extend(outcome.errors)


def resolve_row_key(document: HostDocument, key: str, candidate_ids: Sequence[int] = ()) -> Any | None:
    """Find the element a row key refers to.

    Tries the key as an element id, then as the name of a candidate element,
    then as the Mark of a candidate element.
    """
    try:
        element_id = int(float(key))
    except (ValueError, OverflowError):
        element_id = None
    if element_id is not None:
        element = document.get_element(element_id)
        if element is not None:
            return element

    candidates = [e for e in map(document.get_element, candidate_ids) if e is not None]
    for element in candidates:
        if element.name == key:
            return element
    for element in candidates:
        mark = element.get_parameter(MARK_BUILTIN)
        if mark is not None and mark.as_string() == key:
            return element
    return None


class ParameterImporter:
    """Applies ImportRow values to host elements, one row per call."""

    @staticmethod
    def category_scope(document: HostDocument, sheet_name: str) -> list[int] | None:
        """Element ids of the category a sheet was exported from."""
        category = document.find_category(sheet_name)
        if category is None:
            return None
        return [e.id for e in document.elements_in_category(category)]

    @staticmethod
    def schedule_scope(document: HostDocument, sheet_name: str) -> tuple[list[int], list[str]] | None:
        """Element ids and live field order of the schedule behind a sheet."""
        schedule = document.find_schedule(sheet_name)
        if schedule is None:
            return None
        element_ids = [e.id for e in document.schedule_elements(schedule)]
        return element_ids, document.schedule_field_names(schedule)

    @staticmethod
    def apply_row(
        document: HostDocument,
        row: ImportRow,
        sheet_name: str,
        candidate_ids: Sequence[int] = (),
        field_order: Sequence[str] | None = None,
        parameters: Collection[str] | None = None,
    ) -> RowOutcome:
        """Write one row's eligible cells to its element.

        Cells coloured Unavailable or ReadOnly are skipped, as are empty
        cells and parameters the element does not have. Codec failures are
        returned as error records; nothing is raised.

        Args:
            field_order: Live schedule field names. Column i of the sheet
                maps to field i-1. When None, the cell header is the name.
            parameters: When given, only these parameter names are written.
        """
        element = resolve_row_key(document, row.key, candidate_ids)
        if element is None:
            return RowOutcome(
                resolved=False,
                errors=(ErrorRecord.unresolved_row(row.key, sheet_name),),
            )

        resolver = ParameterResolver(document)
        codec = ValueCodec(document)
        written = skipped = unchanged = 0
        errors: list[ErrorRecord] = []

        for cell in row.cells:
            if field_order is not None:
                index = cell.column - 1
                name = field_order[index] if index < len(field_order) else ""
            else:
                name = cell.header
            if not name or (parameters is not None and name not in parameters):
                continue
            if not cell.state.is_writable:
                skipped += 1
                continue
            if cell.is_empty:
                continue

            resolved = resolver.resolve(element, name)
            if resolved is None:
                continue

            text = cell.text.strip()
            try:
                if codec.decode(resolved) == text:
                    unchanged += 1
                    continue
                codec.encode(resolved, text, link_lookup=document.lookup_element_id)
                written += 1
            except CodecError as e:
                errors.append(ErrorRecord(key=str(element.id), field=name, message=str(e)))

        if errors:
            logger.debug("Row %d of '%s': %d cell errors", row.row, sheet_name, len(errors))
        return RowOutcome(
            resolved=True,
            written=written,
            skipped=skipped,
            unchanged=unchanged,
            errors=tuple(errors),
        )
