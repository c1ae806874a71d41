"""Document actions expressed as text edits.

Each function looks at a parsed task and returns the ``TextEdit`` list that a
host should apply to perform the action. Nothing here mutates a task.
"""

from typing import List, Optional

from .config import ConfigModel
from .edits import EditKind, TextEdit
from .recurring import clear_completion_edits, count_value_edit, tag_span
from .task import Task, TextRange
from .tree import TaskTree
from .utils.datetime import DateLike, now_local, to_iso_string


def _append(task: Task, text: str, kind: EditKind, payload=None) -> TextEdit:
    separator = '' if task.raw_text.endswith(' ') or not task.raw_text else ' '
    return TextEdit.insert(task.line_number, len(task.raw_text), separator + text, kind, payload)


def _content_start(task: Task) -> int:
    return len(task.raw_text) - len(task.raw_text.lstrip(' \t'))


def remove_overdue_edits(task: Task) -> List[TextEdit]:
    span = tag_span(task, task.overdue.range if task.overdue else None)
    if span is None:
        return []
    return [TextEdit.delete(task.line_number, span, EditKind.REMOVE_OVERDUE_TAG)]


def completion_edit(task: Task, config: ConfigModel, now: Optional[DateLike] = None) -> TextEdit:
    stamp = to_iso_string(now or now_local(), include_time=config.completion_date_include_time)
    return _append(task, f"{{cm:{stamp}}}", EditKind.INSERT_COMPLETION, payload=stamp)


def toggle_done(task: Task, config: Optional[ConfigModel] = None,
                now: Optional[DateLike] = None) -> List[TextEdit]:
    """Complete an open task or reopen a finished one.

    Completing also drops the overdue marker.
    """
    config = config or ConfigModel()
    edits = remove_overdue_edits(task)
    if task.done:
        edits.extend(clear_completion_edits(task))
    elif config.add_completion_date:
        edits.append(completion_edit(task, config, now))
    else:
        edits.append(TextEdit.insert(
            task.line_number, _content_start(task), config.done_symbol, EditKind.INSERT_DONE_MARKER))
    return edits


def increment_count(task: Task, config: Optional[ConfigModel] = None,
                    now: Optional[DateLike] = None) -> List[TextEdit]:
    """Add one to the counter; a full counter wraps around to zero."""
    if task.count is None:
        return []
    config = config or ConfigModel()
    count = task.count
    edits: List[TextEdit] = []
    if not count.is_complete:
        value = count.current + 1
        if value == count.needed:
            edits.append(completion_edit(task, config, now))
            edits.extend(remove_overdue_edits(task))
        edits.append(count_value_edit(task, value))
    else:
        edits.append(count_value_edit(task, 0))
        edits.extend(e for e in clear_completion_edits(task) if e.payload == 'cm')
    return edits


def decrement_count(task: Task) -> List[TextEdit]:
    """Subtract one from the counter, never below zero."""
    count = task.count
    if count is None or count.current == 0:
        return []
    edits: List[TextEdit] = []
    if count.is_complete:
        edits.extend(e for e in clear_completion_edits(task) if e.payload == 'cm')
    edits.append(count_value_edit(task, count.current - 1))
    return edits


def toggle_done_or_increment_count(task: Task, config: Optional[ConfigModel] = None,
                                   now: Optional[DateLike] = None) -> List[TextEdit]:
    if task.count is not None:
        return increment_count(task, config, now)
    return toggle_done(task, config, now)


def set_due_date(task: Task, due: str) -> List[TextEdit]:
    """Replace the ``{due:...}`` tag or append a new one."""
    text = f"{{due:{due}}}"
    if task.due_range is not None:
        return [TextEdit.replace(task.line_number, task.due_range, text, EditKind.SET_DUE, payload=due)]
    return [_append(task, text, EditKind.SET_DUE, payload=due)]


def change_priority(task: Task, direction: str) -> List[TextEdit]:
    """Raise (``increment``, towards A) or lower (``decrement``, towards Z) priority.

    A task without priority behaves as priority Z.

    Raises:
        ValueError: If ``direction`` is not ``increment`` or ``decrement``
    """
    if direction not in ('increment', 'decrement'):
        raise ValueError(f"Unknown priority direction: {direction}")

    current = task.priority or 'Z'
    if direction == 'increment' and current == 'A' or direction == 'decrement' and current == 'Z':
        return []
    new_priority = chr(ord(current) - 1) if direction == 'increment' else chr(ord(current) + 1)

    if task.priority_range is not None:
        return [TextEdit.replace(
            task.line_number, task.priority_range, f"({new_priority})",
            EditKind.SET_PRIORITY, payload=new_priority)]
    column = task.done_range.end if task.done_range else _content_start(task)
    return [TextEdit.insert(
        task.line_number, column, f"({new_priority}) ", EditKind.SET_PRIORITY, payload=new_priority)]


def toggle_collapse(task: Task) -> List[TextEdit]:
    span = tag_span(task, task.collapse_range)
    if span is not None:
        return [TextEdit.delete(task.line_number, span, EditKind.TOGGLE_COLLAPSE, payload=False)]
    return [_append(task, "{c}", EditKind.TOGGLE_COLLAPSE, payload=True)]


def hide_task(task: Task) -> List[TextEdit]:
    if task.hidden:
        return []
    return [_append(task, "{h}", EditKind.HIDE)]


def toggle_comment(line_number: int, text: str, config: Optional[ConfigModel] = None) -> List[TextEdit]:
    """Comment out a line or uncomment it."""
    prefix = (config or ConfigModel()).comment_prefix
    if text.startswith(prefix):
        return [TextEdit.delete(line_number, TextRange(0, len(prefix)), EditKind.TOGGLE_COMMENT)]
    return [TextEdit.insert(line_number, 0, prefix, EditKind.TOGGLE_COMMENT)]


def delete_task(tree: TaskTree, line_number: int) -> List[TextEdit]:
    """Delete a task line together with every nested task."""
    task = tree.get(line_number)
    if task is None:
        return []
    return [
        TextEdit(number, EditKind.DELETE_LINE)
        for number in [task.line_number] + tree.nested_ids(task)
    ]
