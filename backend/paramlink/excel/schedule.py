"""Schedule snapshot extraction.

Must run in the coordination context: it reads the live schedule. The
snapshots it returns are plain values the writer can use from any thread.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from paramlink.excel.exporter import cell_state
from paramlink.excel.grid import ScheduleSnapshot
from paramlink.excel.host import HostDocument
from paramlink.excel.palette import CellState
from paramlink.excel.resolver import ParameterResolver

logger = logging.getLogger(__name__)


class ScheduleExtractor:
    @staticmethod
    def column_states(
        document: HostDocument, schedule: Any, width: int
    ) -> tuple[CellState, ...]:
        """Editability per column, judged on one sample element.

        An empty schedule cannot prove editability, so every column of it is
        read-only.
        """
        elements = document.schedule_elements(schedule)
        if not elements:
            return tuple(CellState.READ_ONLY for _ in range(width))

        sample = elements[0]
        resolver = ParameterResolver(document)
        fields = document.schedule_field_names(schedule)
        states = []
        for i in range(width):
            if i >= len(fields):
                states.append(CellState.READ_ONLY)
                continue
            states.append(cell_state(fields[i], resolver.resolve(sample, fields[i])))
        return tuple(states)

    @staticmethod
    def snapshot(
        document: HostDocument,
        schedule: Any,
        include_headers: bool = True,
        include_grand_totals: bool = True,
    ) -> ScheduleSnapshot:
        table = document.render_schedule(schedule)
        width = len(table.header)
        if not width and table.body:
            width = len(table.body[0])
        return ScheduleSnapshot(
            name=schedule.name,
            headers=tuple(table.header) if include_headers else (),
            column_states=ScheduleExtractor.column_states(document, schedule, width),
            body=tuple(tuple(row) for row in table.body),
            summary=(
                tuple(tuple(row) for row in table.summary)
                if include_grand_totals
                else ()
            ),
            include_headers=include_headers,
        )

    @staticmethod
    def extract(
        document: HostDocument,
        schedule_names: Sequence[str],
        include_headers: bool = True,
        include_grand_totals: bool = True,
    ) -> tuple[list[ScheduleSnapshot], list[str]]:
        """Snapshot the named schedules in input order.

        Returns:
            (snapshots, warnings) where warnings name schedules not found.
        """
        snapshots: list[ScheduleSnapshot] = []
        warnings: list[str] = []
        for name in schedule_names:
            schedule = document.find_schedule(name)
            if schedule is None:
                logger.warning("Schedule '%s' not found, skipped", name)
                warnings.append(f"Schedule '{name}' not found in model")
                continue
            snapshots.append(
                ScheduleExtractor.snapshot(
                    document, schedule, include_headers, include_grand_totals
                )
            )
        return snapshots, warnings
