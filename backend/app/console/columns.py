"""Resizable column widths for the console file table."""
from typing import Dict, Optional

from app.config import DEFAULT_COLUMN_WIDTHS

MIN_COLUMN_WIDTH = 50


class ColumnLayout:
    """Column widths plus the state of an in-progress resize drag.

    A drag starts on a column's resize handle (``begin_resize``), follows
    the pointer (``drag_to``) and finishes on release (``end_resize``).
    Widths never shrink below ``min_width``.
    """

    def __init__(
        self,
        widths: Optional[Dict[str, int]] = None,
        min_width: int = MIN_COLUMN_WIDTH,
    ) -> None:
        self._widths: Dict[str, int] = dict(widths or DEFAULT_COLUMN_WIDTHS)
        self._min_width = min_width
        self._column: Optional[str] = None
        self._start_x = 0.0
        self._start_width = 0

    @property
    def widths(self) -> Dict[str, int]:
        return dict(self._widths)

    @property
    def resizing(self) -> Optional[str]:
        """Column currently being resized, or None."""
        return self._column

    def width(self, column: str) -> int:
        return self._widths[column]

    def begin_resize(self, column: str, x: float) -> None:
        """Start dragging ``column``'s handle from pointer position ``x``.

        Raises:
            KeyError: If the column does not exist.
        """
        if column not in self._widths:
            raise KeyError(column)
        self._column = column
        self._start_x = x
        self._start_width = self._widths[column]

    def drag_to(self, x: float) -> Optional[int]:
        """Move the active drag to ``x``. Returns the new width, or None when idle."""
        if self._column is None:
            return None
        new_width = max(self._min_width, int(round(self._start_width + x - self._start_x)))
        self._widths[self._column] = new_width
        return new_width

    def end_resize(self) -> None:
        self._column = None
        self._start_x = 0.0
        self._start_width = 0

    def resize(self, column: str, start_x: float, end_x: float) -> int:
        """Apply a complete drag from ``start_x`` to ``end_x`` in one step."""
        self.begin_resize(column, start_x)
        try:
            return self.drag_to(end_x)
        finally:
            self.end_resize()
