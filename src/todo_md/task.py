"""Task data model for todo-md."""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Optional, Tuple

from .due import DueInfo
from .utils.datetime import DateLike, diff_in_whole_days, to_iso_string


@dataclass(frozen=True)
class TextRange:
    """Column span ``[start, end)`` inside a single line."""
    start: int
    end: int

    def to_dict(self) -> Dict[str, int]:
        return {"start": self.start, "end": self.end}


@dataclass(frozen=True)
class Count:
    """Progress counter ``{count:current/needed}``.

    ``current_range`` covers the digits of ``current`` as written, which may
    carry leading zeros.
    """
    current: int
    needed: int
    range: TextRange
    current_range: TextRange

    @property
    def is_complete(self) -> bool:
        return self.current >= self.needed


@dataclass(frozen=True)
class Overdue:
    """Persisted marker of a missed recurring occurrence."""
    since: date
    range: TextRange


@dataclass(frozen=True)
class Task:
    """One task line.

    Tasks are snapshots: the parser creates them and the tree builder issues
    new copies with the nesting fields filled in. Links between tasks are
    line numbers into the owning document, never object references.
    """

    # Identification
    line_number: int
    title: str
    raw_text: str
    indent_level: int = 0

    # Status
    done: bool = False
    done_range: Optional[TextRange] = None
    priority: Optional[str] = None  # "A".."Z"
    priority_range: Optional[TextRange] = None

    # Grouping (unique names, first-seen order; ranges keep every occurrence)
    tags: Tuple[str, ...] = ()
    projects: Tuple[str, ...] = ()
    contexts: Tuple[str, ...] = ()
    tag_ranges: Tuple[TextRange, ...] = ()
    project_ranges: Tuple[TextRange, ...] = ()
    context_ranges: Tuple[TextRange, ...] = ()

    # Special tags
    due: Optional[DueInfo] = None
    due_range: Optional[TextRange] = None
    count: Optional[Count] = None
    overdue: Optional[Overdue] = None
    completion_date: Optional[datetime] = None
    completion_range: Optional[TextRange] = None
    creation_date: Optional[datetime] = None
    creation_range: Optional[TextRange] = None
    collapsed: bool = False
    collapse_range: Optional[TextRange] = None
    hidden: bool = False
    hidden_range: Optional[TextRange] = None

    # Nesting
    parent_id: Optional[int] = None
    subtask_ids: Tuple[int, ...] = field(default_factory=tuple)

    @property
    def is_recurring(self) -> bool:
        return self.due is not None and self.due.is_recurring

    def overdue_in_days(self, now: DateLike) -> Optional[int]:
        """Days elapsed since the missed occurrence, if flagged overdue."""
        if self.overdue is None:
            return None
        return diff_in_whole_days(self.overdue.since, now)

    def to_dict(self) -> Dict[str, Any]:
        """Convert the Task to a plain dictionary."""
        def span(text_range: Optional[TextRange]) -> Optional[Dict[str, int]]:
            return text_range.to_dict() if text_range else None

        return {
            "line_number": self.line_number,
            "title": self.title,
            "raw_text": self.raw_text,
            "indent_level": self.indent_level,
            "done": self.done,
            "priority": self.priority,
            "tags": list(self.tags),
            "projects": list(self.projects),
            "contexts": list(self.contexts),
            "due": {
                "raw": self.due.raw,
                "is_due": self.due.is_due.value,
                "is_recurring": self.due.is_recurring,
                "is_range": self.due.is_range,
                "range": span(self.due_range),
            } if self.due else None,
            "count": {
                "current": self.count.current,
                "needed": self.count.needed,
                "range": span(self.count.range),
            } if self.count else None,
            "overdue": to_iso_string(self.overdue.since) if self.overdue else None,
            "completion_date": to_iso_string(self.completion_date, include_time=True),
            "creation_date": to_iso_string(self.creation_date, include_time=True),
            "collapsed": self.collapsed,
            "hidden": self.hidden,
            "parent_id": self.parent_id,
            "subtask_ids": list(self.subtask_ids),
        }


@dataclass(frozen=True)
class CommentLine:
    """A commented-out line kept for positional reinsertion."""
    line_number: int
    text: str
