"""Text edit descriptors.

The core never touches a text buffer. Every change it wants is described as a
``TextEdit`` and handed to whoever owns the document.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, List, Optional

from .task import TextRange


class EditKind(Enum):
    """What an edit is for."""
    INSERT_OVERDUE_TAG = "insertOverdueTag"
    CLEAR_COUNT = "clearCount"
    CLEAR_COMPLETION = "clearCompletion"
    INSERT_COMPLETION = "insertCompletion"
    INSERT_DONE_MARKER = "insertDoneMarker"
    REMOVE_OVERDUE_TAG = "removeOverdueTag"
    SET_COUNT = "setCount"
    SET_DUE = "setDue"
    SET_PRIORITY = "setPriority"
    TOGGLE_COLLAPSE = "toggleCollapse"
    HIDE = "hide"
    TOGGLE_COMMENT = "toggleComment"
    DELETE_LINE = "deleteLine"


@dataclass(frozen=True)
class TextEdit:
    """Replace columns ``[start, end)`` of a line with ``new_text``.

    ``start == end`` is an insertion, an empty ``new_text`` a deletion.
    ``DELETE_LINE`` removes the whole line including its line break.
    """
    line_number: int
    kind: EditKind
    start: int = 0
    end: int = 0
    new_text: str = ""
    payload: Any = None

    @classmethod
    def insert(cls, line_number: int, column: int, text: str, kind: EditKind,
               payload: Any = None) -> "TextEdit":
        return cls(line_number, kind, column, column, text, payload)

    @classmethod
    def replace(cls, line_number: int, text_range: TextRange, text: str, kind: EditKind,
                payload: Any = None) -> "TextEdit":
        return cls(line_number, kind, text_range.start, text_range.end, text, payload)

    @classmethod
    def delete(cls, line_number: int, text_range: TextRange, kind: EditKind,
               payload: Any = None) -> "TextEdit":
        return cls(line_number, kind, text_range.start, text_range.end, "", payload)

    @property
    def range(self) -> Optional[TextRange]:
        if self.kind == EditKind.DELETE_LINE:
            return None
        return TextRange(self.start, self.end)


def apply_edits(lines: List[str], edits: Iterable[TextEdit]) -> List[str]:
    """Apply edits to a list of lines and return the new lines.

    Edits are applied right to left within a line so earlier column offsets
    stay valid; whole-line deletions are applied last.
    """
    edits = list(edits)
    result = list(lines)
    # Insertions at the same column keep their emission order
    ordered = sorted(
        ((index, edit) for index, edit in enumerate(edits) if edit.kind != EditKind.DELETE_LINE),
        key=lambda item: (item[1].line_number, item[1].start, item[1].end, item[0]),
        reverse=True,
    )
    for _, edit in ordered:
        text = result[edit.line_number]
        result[edit.line_number] = text[:edit.start] + edit.new_text + text[edit.end:]

    deleted = {edit.line_number for edit in edits if edit.kind == EditKind.DELETE_LINE}
    return [text for number, text in enumerate(result) if number not in deleted]
