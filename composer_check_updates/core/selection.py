"""State machine behind the interactive update picker.

:class:`UpdateSelection` holds a cursor and one flag per update. It knows
nothing about terminals; the driver in
:mod:`composer_check_updates.commands.update` reads keys, feeds them to
:meth:`UpdateSelection.handle_key`, and redraws.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from composer_check_updates.models.update import PackageUpdate

#: Logical key names produced by the driver for non-printable keys.
KEY_UP = "up"
KEY_DOWN = "down"
KEY_ENTER = "enter"
KEY_ESCAPE = "escape"

_UP_KEYS = frozenset({KEY_UP, "k"})
_DOWN_KEYS = frozenset({KEY_DOWN, "j"})
_CONFIRM_KEYS = frozenset({KEY_ENTER, "\r", "\n"})
_CANCEL_KEYS = frozenset({KEY_ESCAPE, "\x1b", "q"})


class UpdateSelection:
    """Cursor and per-update selection flags. Every update starts selected.

    Example:
        >>> selection = UpdateSelection(updates)
        >>> selection.handle_key(" ")      # deselect the first update
        >>> selection.handle_key("enter")
        True
        >>> selection.chosen()
        [...]
    """

    def __init__(self, updates: Sequence[PackageUpdate]) -> None:
        self.updates: Tuple[PackageUpdate, ...] = tuple(updates)
        self.selected: List[bool] = [True] * len(self.updates)
        self.cursor = 0

    def __len__(self) -> int:
        return len(self.updates)

    @property
    def selected_count(self) -> int:
        return sum(self.selected)

    def is_selected(self, index: int) -> bool:
        return self.selected[index]

    def move_up(self) -> None:
        if self.updates:
            self.cursor = (self.cursor - 1) % len(self.updates)

    def move_down(self) -> None:
        if self.updates:
            self.cursor = (self.cursor + 1) % len(self.updates)

    def toggle(self) -> None:
        if self.updates:
            self.selected[self.cursor] = not self.selected[self.cursor]

    def toggle_all(self) -> None:
        """Select everything, or clear everything if all are selected."""
        value = not all(self.selected)
        self.selected = [value] * len(self.updates)

    def handle_key(self, key: str) -> Optional[bool]:
        """Apply *key*.

        Returns:
            ``True`` to confirm, ``False`` to cancel, ``None`` to keep going.
            Unknown keys are ignored.
        """
        if key in _UP_KEYS:
            self.move_up()
        elif key in _DOWN_KEYS:
            self.move_down()
        elif key == " ":
            self.toggle()
        elif key == "a":
            self.toggle_all()
        elif key in _CONFIRM_KEYS:
            return True
        elif key in _CANCEL_KEYS:
            return False
        return None

    def chosen(self) -> List[PackageUpdate]:
        """Selected updates, in their original order."""
        return [update for update, flag in zip(self.updates, self.selected) if flag]
