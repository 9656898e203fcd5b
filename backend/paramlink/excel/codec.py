"""Display text <-> native parameter value conversion.

Each storage variant has its own codec; ValueCodec dispatches on the
SlotKind tag carried by the ResolvedParameter.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from typing import Any

from paramlink.excel.errors import LinkNotFoundError, ReadOnlyError, TypeMismatchError
from paramlink.excel.host import HostDocument
from paramlink.excel.resolver import ResolvedParameter, SlotKind
from paramlink.utils.units import (
    UnitConversionError,
    convert,
    format_number,
    strip_unit_suffix,
)

logger = logging.getLogger(__name__)

LinkLookup = Callable[[str], "int | None"]

# Host integer and element-id slots are signed 64-bit
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

_TRUE_TEXT = frozenset({"yes", "true", "1"})
_FALSE_TEXT = frozenset({"no", "false", "0"})


class TextCodec:
    kind = SlotKind.TEXT

    def decode(self, slot: ResolvedParameter) -> str:
        return slot.parameter.as_string() or ""

    def encode(self, slot: ResolvedParameter, text: str) -> str:
        return text


class IntegerCodec:
    kind = SlotKind.INTEGER

    def decode(self, slot: ResolvedParameter) -> str:
        return str(slot.parameter.as_integer())

    def encode(self, slot: ResolvedParameter, text: str) -> int:
        try:
            value = int(text.strip())
        except ValueError:
            raise TypeMismatchError(slot.name, text, "integer") from None
        if not INT64_MIN <= value <= INT64_MAX:
            raise TypeMismatchError(slot.name, text, "64-bit integer")
        return value


class BooleanCodec:
    """Integer parameters that hold a 1/0 flag, shown as Yes/No."""

    kind = SlotKind.BOOLEAN

    def decode(self, slot: ResolvedParameter) -> str:
        return "Yes" if slot.parameter.as_integer() == 1 else "No"

    def encode(self, slot: ResolvedParameter, text: str) -> int:
        lowered = text.strip().lower()
        if lowered in _TRUE_TEXT:
            return 1
        if lowered in _FALSE_TEXT:
            return 0
        raise TypeMismatchError(slot.name, text, "Yes/No value")


class RealCodec:
    """Doubles, shown in the parameter's display unit when it has one."""

    kind = SlotKind.REAL

    def decode(self, slot: ResolvedParameter) -> str:
        param = slot.parameter
        value = param.as_double()
        if param.unit and param.display_unit:
            try:
                value = convert(value, param.unit, param.display_unit)
            except UnitConversionError as e:
                logger.debug("Unit conversion skipped for '%s': %s", slot.name, e)
        return format_number(value)

    def encode(self, slot: ResolvedParameter, text: str) -> float:
        param = slot.parameter
        raw = strip_unit_suffix(text, param.display_unit or param.unit)
        try:
            value = float(raw)
        except ValueError:
            raise TypeMismatchError(slot.name, text, "number") from None
        if not math.isfinite(value):
            raise TypeMismatchError(slot.name, text, "finite number")
        if param.unit and param.display_unit:
            try:
                value = convert(value, param.display_unit, param.unit)
            except UnitConversionError as e:
                logger.debug("Unit conversion skipped for '%s': %s", slot.name, e)
        return value


class ElementIdCodec:
    """Links to other elements, shown by the linked element's name."""

    kind = SlotKind.ELEMENT_ID

    def __init__(self, document: HostDocument | None = None) -> None:
        self._document = document

    def decode(self, slot: ResolvedParameter) -> str:
        link = slot.parameter.as_element_id()
        if link is None:
            return ""
        if link < 0 or self._document is None:
            return str(link)
        linked = self._document.get_element(link)
        if linked is None:
            return str(link)
        return linked.name

    def encode(
        self,
        slot: ResolvedParameter,
        text: str,
        link_lookup: LinkLookup | None = None,
    ) -> int:
        stripped = text.strip()
        try:
            link = int(stripped)
        except ValueError:
            pass
        else:
            if not INT64_MIN <= link <= INT64_MAX:
                raise TypeMismatchError(slot.name, text, "element id")
            return link
        if link_lookup is not None:
            found = link_lookup(stripped)
            if found is not None:
                return found
        raise LinkNotFoundError(slot.name, text)


class ValueCodec:
    """Decodes resolved parameters to text and writes text back to them."""

    def __init__(self, document: HostDocument | None = None) -> None:
        self._links = ElementIdCodec(document)
        self._codecs = {
            SlotKind.TEXT: TextCodec(),
            SlotKind.INTEGER: IntegerCodec(),
            SlotKind.BOOLEAN: BooleanCodec(),
            SlotKind.REAL: RealCodec(),
            SlotKind.ELEMENT_ID: self._links,
        }

    def decode(self, slot: ResolvedParameter) -> str:
        return self._codecs[slot.kind].decode(slot)

    def to_native(
        self,
        slot: ResolvedParameter,
        text: str,
        link_lookup: LinkLookup | None = None,
    ) -> Any:
        """Parse text into the native value for the slot without writing."""
        if slot.kind == SlotKind.ELEMENT_ID:
            return self._links.encode(slot, text, link_lookup)
        return self._codecs[slot.kind].encode(slot, text)

    def encode(
        self,
        slot: ResolvedParameter,
        text: str,
        link_lookup: LinkLookup | None = None,
    ) -> None:
        """Write text to the slot.

        Raises:
            ReadOnlyError: slot is read-only; nothing is written.
            TypeMismatchError: text does not parse for the slot's kind.
            LinkNotFoundError: text names no element.
        """
        if slot.is_read_only:
            raise ReadOnlyError(slot.name)
        value = self.to_native(slot, text, link_lookup)
        try:
            slot.parameter.set(value)
        except (TypeError, ValueError) as e:
            raise TypeMismatchError(slot.name, text, slot.kind.value) from e
