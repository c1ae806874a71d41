"""Items handed to tree-view collaborators.

A tree view shows either groups (a tag, project or context with the tasks that
carry it) or task nodes. Both are plain values selected by ``kind``.
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, List, Tuple

from .due import DueState

if TYPE_CHECKING:
    from .tree import TaskTree


class TreeItemKind(Enum):
    TAG_GROUP = "tag"
    PROJECT_GROUP = "project"
    CONTEXT_GROUP = "context"
    TASK_NODE = "task"


class TreeItemSortType(Enum):
    """Ordering of group items."""
    ALPHABETIC = "alphabetic"
    COUNT = "count"


@dataclass(frozen=True)
class GroupItem:
    kind: TreeItemKind
    title: str
    task_ids: Tuple[int, ...]

    @property
    def count(self) -> int:
        return len(self.task_ids)


@dataclass(frozen=True)
class TaskNode:
    line_number: int
    title: str
    children: Tuple["TaskNode", ...] = ()
    kind: TreeItemKind = TreeItemKind.TASK_NODE


_INDEX_FOR_KIND = {
    TreeItemKind.TAG_GROUP: 'tags',
    TreeItemKind.PROJECT_GROUP: 'projects',
    TreeItemKind.CONTEXT_GROUP: 'contexts',
}


def group_items(tree: "TaskTree", kind: TreeItemKind,
                sort: TreeItemSortType = TreeItemSortType.ALPHABETIC) -> List[GroupItem]:
    """Group tasks by tag, project or context.

    Raises:
        ValueError: If ``kind`` is not a group kind
    """
    if kind not in _INDEX_FOR_KIND:
        raise ValueError(f"{kind} is not a group kind")

    index = getattr(tree, _INDEX_FOR_KIND[kind])
    items = [GroupItem(kind, title, task_ids) for title, task_ids in index.items()]
    if sort == TreeItemSortType.ALPHABETIC:
        items.sort(key=lambda item: item.title.lower())
    else:
        items.sort(key=lambda item: item.count, reverse=True)
    return items


def task_nodes(tree: "TaskTree", include_hidden: bool = False) -> List[TaskNode]:
    """Task nodes for the roots of the tree, children attached."""
    def build(task) -> TaskNode:
        children = tuple(
            build(child) for child in tree.subtasks(task)
            if include_hidden or not child.hidden
        )
        return TaskNode(task.line_number, task.title, children)

    return [build(task) for task in tree.roots if include_hidden or not task.hidden]


_DUE_ORDER = {DueState.DUE: 0, DueState.OVERDUE: 1}


def default_sort_key(task) -> Tuple[str, int]:
    """Priority first (A before Z, none last), then due before overdue."""
    priority = task.priority or '['  # sorts after 'Z'
    state = _DUE_ORDER.get(task.due.is_due, 2) if task.due is not None else 2
    return priority, state


def due_tasks(tree: "TaskTree") -> List:
    """Root tasks that are due or overdue, in default order.

    Ties keep document order.
    """
    tasks = [
        task for task in tree.roots
        if task.due is not None and task.due.is_due in (DueState.DUE, DueState.OVERDUE)
    ]
    return sorted(tasks, key=default_sort_key)
