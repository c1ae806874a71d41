"""
Recurring Task Reset for todo-md

When a task file is opened on a new day, recurring tasks start a new cycle:
finished ones reopen, counters restart and unfinished ones that were due
while the file was not visited get an ``{overdue:YYYY-MM-DD}`` marker.
This module only describes those changes as ``TextEdit`` values.
"""

import logging
from datetime import date
from typing import List, Optional, Sequence

from .due import DueDate, DueState
from .edits import EditKind, TextEdit
from .task import Task, TextRange
from .utils.datetime import (
    DateLike,
    diff_in_whole_days,
    is_same_calendar_day,
    now_local,
    shift_by_days,
    to_date_string,
    truncate_to_date,
)

logger = logging.getLogger(__name__)


def needs_reset(last_visit: Optional[DateLike], now: Optional[DateLike] = None) -> bool:
    """Check whether the file was last visited on another day."""
    if last_visit is None:
        return False
    return not is_same_calendar_day(last_visit, now or now_local())


def find_missed_occurrence(raw_due: str, last_visit: DateLike, now: DateLike) -> Optional[date]:
    """Most recent day in ``[last_visit, yesterday]`` on which ``raw_due`` was due.

    Scans backward from yesterday, so the closest miss wins.
    """
    today = truncate_to_date(now)
    days_since_last_visit = diff_in_whole_days(last_visit, today)
    for offset in range(1, days_since_last_visit + 1):
        day = shift_by_days(today, -offset)
        state = DueDate(raw_due, day).is_due
        if state in (DueState.DUE, DueState.OVERDUE):
            return day
    return None


def overdue_tag_edit(task: Task, since: date) -> TextEdit:
    """Append ``{overdue:...}`` to the end of the task line."""
    separator = '' if task.raw_text.endswith(' ') else ' '
    return TextEdit.insert(
        task.line_number,
        len(task.raw_text),
        f"{separator}{{overdue:{to_date_string(since)}}}",
        EditKind.INSERT_OVERDUE_TAG,
        payload=since,
    )


def count_value_edit(task: Task, value: int, kind: EditKind = EditKind.SET_COUNT) -> TextEdit:
    """Replace the current value of ``{count:a/b}``."""
    count = task.count
    return TextEdit.replace(
        task.line_number,
        count.current_range,
        str(value),
        kind,
        payload=count.needed,
    )


def clear_count_edit(task: Task) -> TextEdit:
    """Set the current value of ``{count:a/b}`` to zero."""
    return count_value_edit(task, 0, EditKind.CLEAR_COUNT)


def tag_span(task: Task, text_range: Optional[TextRange]) -> Optional[TextRange]:
    """Range of a special tag widened to swallow one adjacent space."""
    if text_range is None:
        return None
    start, end = text_range.start, text_range.end
    floor = task.done_range.end if task.done_range else 0
    if start > floor and task.raw_text[start - 1] == ' ':
        start -= 1
    elif end < len(task.raw_text) and task.raw_text[end] == ' ':
        end += 1
    return TextRange(start, end)


def clear_completion_edits(task: Task) -> List[TextEdit]:
    """Remove the done marker and the completion date of a task."""
    edits = []
    if task.done_range is not None:
        edits.append(TextEdit.delete(
            task.line_number, task.done_range, EditKind.CLEAR_COMPLETION, payload='done'))
    span = tag_span(task, task.completion_range)
    if span is not None:
        edits.append(TextEdit.delete(
            task.line_number, span, EditKind.CLEAR_COMPLETION, payload='cm'))
    return edits


def reset_for_new_visit(tasks: Sequence[Task], last_visit: DateLike,
                        now: Optional[DateLike] = None) -> List[TextEdit]:
    """Describe the edits that start a new cycle for every recurring task.

    Args:
        tasks: Tasks of the document, in document order
        last_visit: When the document was last opened
        now: Current time (defaults to now)

    Returns:
        Edits in document order; non-recurring tasks produce none
    """
    now = now or now_local()
    new_day = not is_same_calendar_day(now, last_visit)
    edits: List[TextEdit] = []

    for task in tasks:
        if not task.is_recurring:
            continue

        if task.done:
            edits.extend(clear_completion_edits(task))
        elif task.overdue is None and new_day:
            missed = find_missed_occurrence(task.due.raw, last_visit, now)
            if missed is not None:
                edits.append(overdue_tag_edit(task, missed))

        if task.count is not None:
            edits.append(clear_count_edit(task))

    logger.debug("Recurring reset produced %d edits", len(edits))
    return edits
