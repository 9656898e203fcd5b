"""SQL-backed host document.

SqlDocument wraps a synchronous Session, so it is used inside
AsyncSession.run_sync on the event loop, never from a worker thread.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from paramlink.excel.config import sheet_name_matches
from paramlink.excel.errors import HostTransactionFailure
from paramlink.excel.host import TableData
from paramlink.excel.resolver import ParameterResolver
from paramlink.models.category import Category
from paramlink.models.element import Element
from paramlink.models.parameter import StorageType
from paramlink.models.schedule import Schedule
from paramlink.models.view import view_elements

logger = logging.getLogger(__name__)

# Session.info key holding the name of the open host transaction
_TRANSACTION_KEY = "paramlink.transaction"


class SqlDocument:
    """The host document interface over the ORM tables."""

    def __init__(self, session: Session) -> None:
        self.session = session

    # --- Elements ---

    def get_element(self, element_id: int) -> Element | None:
        # SQLite integers are 64-bit
        if not -(2**63) <= element_id < 2**63:
            return None
        return self.session.get(Element, element_id)

    def get_type(self, element: Element) -> Element | None:
        return element.get_type()

    def lookup_element_id(self, name: str) -> int | None:
        """Id of the first element with this name, for link values given by name."""
        return self.session.execute(
            select(Element.id).where(Element.name == name).order_by(Element.id).limit(1)
        ).scalar_one_or_none()

    # --- Categories ---

    def categories(self) -> list[Category]:
        return list(
            self.session.execute(select(Category).order_by(Category.name)).scalars().all()
        )

    def category_by_name(self, name: str) -> Category | None:
        return self.session.execute(
            select(Category).where(Category.name == name)
        ).scalar_one_or_none()

    def find_category(self, sheet_name: str) -> Category | None:
        """Category a sheet was exported from (exact or truncated name)."""
        category = self.category_by_name(sheet_name)
        if category is not None:
            return category
        for candidate in self.categories():
            if sheet_name_matches(sheet_name, candidate.name):
                return candidate
        return None

    def elements_in_category(
        self, category: Category, view_id: int | None = None
    ) -> list[Element]:
        """Instances (not types) of a category, in id order.

        Args:
            view_id: Only elements visible in this view; None for the
                entire model.
        """
        stmt = select(Element).where(
            Element.category_id == category.id,
            Element.is_type.is_(False),
        )
        if view_id is not None:
            stmt = stmt.join(
                view_elements, view_elements.c.element_id == Element.id
            ).where(view_elements.c.view_id == view_id)
        return list(self.session.execute(stmt.order_by(Element.id)).scalars().all())

    # --- Schedules ---

    def schedules(self) -> list[Schedule]:
        return list(
            self.session.execute(
                select(Schedule)
                .where(Schedule.is_template.is_(False))
                .order_by(Schedule.name)
            ).scalars().all()
        )

    def find_schedule(self, sheet_name: str) -> Schedule | None:
        """Schedule a sheet was exported from (exact or truncated name)."""
        for schedule in self.schedules():
            if sheet_name_matches(sheet_name, schedule.name):
                return schedule
        return None

    def schedule_elements(self, schedule: Schedule) -> list[Element]:
        return self.elements_in_category(schedule.category)

    def schedule_field_names(self, schedule: Schedule) -> list[str]:
        return schedule.field_names()

    def render_schedule(self, schedule: Schedule) -> TableData:
        """Render a schedule the way the host displays it."""
        resolver = ParameterResolver(self)
        elements = self.schedule_elements(schedule)
        names = schedule.field_names()

        body = []
        for element in elements:
            row = []
            for name in names:
                resolved = resolver.resolve(element, name)
                row.append("" if resolved is None else self._display(resolved.parameter))
            body.append(row)

        summary = []
        if schedule.show_grand_totals and names:
            summary.append([f"Grand total: {len(elements)}"] + [""] * (len(names) - 1))

        return TableData(
            header=[f.column_heading for f in schedule.fields],
            body=body,
            summary=summary,
        )

    def _display(self, parameter) -> str:
        if parameter.storage == StorageType.ELEMENT_ID and parameter.link_value is not None:
            linked = self.get_element(parameter.link_value)
            if linked is not None:
                return linked.name
        return parameter.as_value_string()

    # --- Transactions ---

    @property
    def transaction_name(self) -> str | None:
        return self.session.info.get(_TRANSACTION_KEY)

    def start_transaction(self, name: str) -> None:
        if self.transaction_name is not None:
            raise HostTransactionFailure(
                f"Cannot start '{name}': '{self.transaction_name}' is still open"
            )
        self.session.info[_TRANSACTION_KEY] = name
        logger.debug("Transaction '%s' started", name)

    def commit_transaction(self) -> None:
        name = self.session.info.pop(_TRANSACTION_KEY, None)
        if name is None:
            raise HostTransactionFailure("No transaction to commit")
        try:
            self.session.commit()
        except (SQLAlchemyError, OverflowError, ValueError) as e:
            self.session.rollback()
            raise HostTransactionFailure(f"Could not commit '{name}': {e}") from e
        logger.debug("Transaction '%s' committed", name)

    def rollback_transaction(self) -> None:
        name = self.session.info.pop(_TRANSACTION_KEY, None)
        try:
            self.session.rollback()
        except SQLAlchemyError as e:
            raise HostTransactionFailure(f"Could not roll back '{name}': {e}") from e
        logger.debug("Transaction '%s' rolled back", name)
