"""Exceptions raised by the todo-md host layer.

Malformed task content never raises: invalid due expressions are reported as
``DueState.INVALID`` and malformed tokens stay in the task title.
"""


class TodoMdError(Exception):
    """Base class for todo-md errors."""


class NoActiveDocument(TodoMdError):
    """Raised when an operation needs a task file and none is available."""

    def __init__(self, message: str = "No active document"):
        super().__init__(message)
