"""Visible-column selection for job tables and exports."""

from collections.abc import Iterable, Sequence

from freightdesk.services.fields import JOB_COLUMNS, lookup_field


class ColumnSelection:
    """Set of visible columns, always listed in master column order.

    Selection order is irrelevant to display; toggling a column twice
    leaves the selection as it was.
    """

    def __init__(
        self,
        all_columns: Sequence[str] = JOB_COLUMNS,
        selected: Iterable[str] | None = None,
    ):
        self.all_columns = tuple(all_columns)
        self._selected: set[str] = set()
        if selected is None:
            self._selected.update(self.all_columns)
        else:
            for name in selected:
                self.select(name)

    def _canonical(self, name: str) -> str:
        if name in self.all_columns:
            return name
        field = lookup_field(name)
        if field is not None and field.name in self.all_columns:
            return field.name
        raise ValueError(f"Unknown column: {name}")

    def is_selected(self, name: str) -> bool:
        return self._canonical(name) in self._selected

    def select(self, name: str) -> None:
        self._selected.add(self._canonical(name))

    def deselect(self, name: str) -> None:
        self._selected.discard(self._canonical(name))

    def toggle(self, name: str) -> bool:
        """Flip a column's visibility; returns the new state."""
        column = self._canonical(name)
        if column in self._selected:
            self._selected.remove(column)
            return False
        self._selected.add(column)
        return True

    def reset(self) -> None:
        self._selected = set(self.all_columns)

    def visible(self) -> list[str]:
        return [c for c in self.all_columns if c in self._selected]

    def __len__(self) -> int:
        return len(self._selected)
