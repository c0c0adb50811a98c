"""Typed spreadsheet cell: empty, numeric, or textual."""

from __future__ import annotations

import math
from numbers import Real
from typing import Any, cast

from spreadsheet_table.models import CellKind
from spreadsheet_table.utils.exceptions import EmptyTextError, TypeMismatchError


class Cell:
    """A single table cell holding exactly one of empty, number or text.

    The active kind decides which accessor succeeds; reading the wrong kind
    raises ``TypeMismatchError`` instead of returning a default. The kind
    only changes through ``set_number``, ``set_text`` and ``clear``.
    """

    __slots__ = ("_kind", "_value")

    def __init__(self) -> None:
        self._kind = CellKind.EMPTY
        self._value: float | str | None = None

    # ------------------------------------------------------------------ #
    # Construction
    # ------------------------------------------------------------------ #

    @classmethod
    def make_empty(cls) -> Cell:
        return cls()

    @classmethod
    def make_number(cls, value: float) -> Cell:
        cell = cls()
        cell.set_number(value)
        return cell

    @classmethod
    def make_text(cls, text: str) -> Cell:
        cell = cls()
        cell.set_text(text)
        return cell

    # ------------------------------------------------------------------ #
    # Inspection
    # ------------------------------------------------------------------ #

    @property
    def kind(self) -> CellKind:
        return self._kind

    def get_kind(self) -> CellKind:
        return self._kind

    @property
    def is_empty(self) -> bool:
        return self._kind is CellKind.EMPTY

    @property
    def is_number(self) -> bool:
        return self._kind is CellKind.NUMBER

    @property
    def is_text(self) -> bool:
        return self._kind is CellKind.TEXT

    @property
    def value(self) -> float | str | None:
        """Payload of the cell, or None when empty."""
        return self._value

    def get_number(self) -> float:
        """Return the numeric payload.

        Raises:
            TypeMismatchError: If the cell does not hold a number.
        """
        if self._kind is not CellKind.NUMBER:
            raise TypeMismatchError(CellKind.NUMBER.value, self._kind.value)
        return cast(float, self._value)

    def get_text(self) -> str:
        """Return the text payload.

        Raises:
            TypeMismatchError: If the cell does not hold text.
        """
        if self._kind is not CellKind.TEXT:
            raise TypeMismatchError(CellKind.TEXT.value, self._kind.value)
        return cast(str, self._value)

    # ------------------------------------------------------------------ #
    # Mutation
    # ------------------------------------------------------------------ #

    def set_number(self, value: float) -> None:
        """Store a number. NaN and infinities are accepted as-is.

        Raises:
            TypeMismatchError: If ``value`` is not a real number (bools included).
        """
        if isinstance(value, bool) or not isinstance(value, Real):
            raise TypeMismatchError(
                CellKind.NUMBER.value,
                type(value).__name__,
                message=f"Cannot store {type(value).__name__} as a number",
            )
        self._value = float(value)
        self._kind = CellKind.NUMBER

    def set_text(self, text: str) -> None:
        """Store text. Validation happens before any state changes.

        Raises:
            TypeMismatchError: If ``text`` is not a string.
            EmptyTextError: If ``text`` is empty.
        """
        if not isinstance(text, str):
            raise TypeMismatchError(
                CellKind.TEXT.value,
                type(text).__name__,
                message=f"Cannot store {type(text).__name__} as text",
            )
        if text == "":
            raise EmptyTextError()
        self._value = text
        self._kind = CellKind.TEXT

    def clear(self) -> None:
        self._value = None
        self._kind = CellKind.EMPTY

    # ------------------------------------------------------------------ #
    # Value semantics
    # ------------------------------------------------------------------ #

    def copy(self) -> Cell:
        clone = Cell()
        clone._kind = self._kind
        clone._value = self._value
        return clone

    __copy__ = copy

    def __deepcopy__(self, memo: dict[int, Any]) -> Cell:
        return self.copy()

    def __eq__(self, other: object) -> bool:
        # Exact float comparison, so NaN cells never compare equal.
        if not isinstance(other, Cell):
            return NotImplemented
        return self._kind is other._kind and self._value == other._value

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        if self._kind is CellKind.EMPTY:
            return "Cell.make_empty()"
        if self._kind is CellKind.NUMBER:
            number = cast(float, self._value)
            if math.isnan(number) or math.isinf(number):
                return f"Cell.make_number(float({str(number)!r}))"
            return f"Cell.make_number({number!r})"
        return f"Cell.make_text({self._value!r})"
