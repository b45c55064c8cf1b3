"""
Cursor over an ordered sequence with wrap-around navigation.
"""

from typing import Generic, Iterator, Optional, Sequence, Tuple, TypeVar

from logging_config import EmptyListError

T = TypeVar("T")


class SelectionList(Generic[T]):
    """Ordered items plus an optional cursor.

    The cursor is either None or a valid index into ``items``. Lists are
    replaced wholesale on rescan rather than edited in place.
    """

    def __init__(self, items: Sequence[T] = ()):
        self._items: Tuple[T, ...] = tuple(items)
        self._cursor: Optional[int] = None

    @classmethod
    def with_items(cls, items: Sequence[T]) -> "SelectionList[T]":
        return cls(items)

    @property
    def items(self) -> Tuple[T, ...]:
        return self._items

    @property
    def cursor(self) -> Optional[int]:
        return self._cursor

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __repr__(self) -> str:
        return f"SelectionList(items={list(self._items)!r}, cursor={self._cursor!r})"

    def is_empty(self) -> bool:
        return not self._items

    def advance(self) -> int:
        """Move the cursor forward, wrapping from the last item to the first.

        Returns:
            int: The new cursor index

        Raises:
            EmptyListError: If there is nothing to select
        """
        if self.is_empty():
            raise EmptyListError("Cannot advance an empty list")

        if self._cursor is None or self._cursor >= len(self._items) - 1:
            self._cursor = 0
        else:
            self._cursor += 1
        return self._cursor

    def retreat(self) -> int:
        """Move the cursor backward, wrapping from the first item to the last.

        An unset cursor selects the first item, same as ``advance``.

        Returns:
            int: The new cursor index

        Raises:
            EmptyListError: If there is nothing to select
        """
        if self.is_empty():
            raise EmptyListError("Cannot retreat an empty list")

        if self._cursor is None:
            self._cursor = 0
        elif self._cursor == 0:
            self._cursor = len(self._items) - 1
        else:
            self._cursor -= 1
        return self._cursor

    def select(self, index: Optional[int]) -> None:
        """Place the cursor explicitly; None clears it."""
        if index is not None and not 0 <= index < len(self._items):
            raise IndexError(f"Cursor {index} out of range for {len(self._items)} items")
        self._cursor = index

    def selected(self) -> Optional[T]:
        if self._cursor is None:
            return None
        return self._items[self._cursor]
