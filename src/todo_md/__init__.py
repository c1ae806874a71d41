"""todo-md - parse plain-text task lists with nesting and recurring due dates."""

__version__ = "0.1.0"
__author__ = "todo-md Team"

from .due import DueDate, DueInfo, DueState, evaluate
from .edits import EditKind, TextEdit, apply_edits
from .parser import LineParser, ParsedDocument, parse_document, parse_line
from .recurring import reset_for_new_visit
from .task import Task
from .tree import TaskTree, build_tree

__all__ = [
    "DueDate",
    "DueInfo",
    "DueState",
    "evaluate",
    "EditKind",
    "TextEdit",
    "apply_edits",
    "LineParser",
    "ParsedDocument",
    "parse_document",
    "parse_line",
    "reset_for_new_visit",
    "Task",
    "TaskTree",
    "build_tree",
    "__version__",
]
