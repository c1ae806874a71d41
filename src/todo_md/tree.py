"""Task tree construction.

Turns the flat, document-ordered list of parsed tasks into a forest using
indentation, and builds the tag / project / context membership indexes in the
same pass.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Tuple

from .task import Task

logger = logging.getLogger(__name__)

Index = Dict[str, Tuple[int, ...]]


@dataclass(frozen=True)
class TaskTree:
    """Tasks of one document stored flat and linked by line number."""
    roots: Tuple[Task, ...] = ()
    flat: Tuple[Task, ...] = ()
    by_line: Dict[int, Task] = field(default_factory=dict)
    tags: Index = field(default_factory=dict)
    projects: Index = field(default_factory=dict)
    contexts: Index = field(default_factory=dict)

    def get(self, line_number: int) -> Optional[Task]:
        return self.by_line.get(line_number)

    def subtasks(self, task: Task) -> List[Task]:
        return [self.by_line[line_number] for line_number in task.subtask_ids]

    def parent(self, task: Task) -> Optional[Task]:
        if task.parent_id is None:
            return None
        return self.by_line.get(task.parent_id)

    def ancestors(self, task: Task) -> List[Task]:
        """Parents of ``task``, closest first."""
        result = []
        current = self.parent(task)
        while current is not None:
            result.append(current)
            current = self.parent(current)
        return result

    def nested_ids(self, task: Task) -> List[int]:
        """Line numbers of every task nested under ``task`` (pre-order)."""
        return [nested.line_number for nested in self.walk(self.subtasks(task))]

    def walk(self, tasks: Optional[Sequence[Task]] = None) -> Iterator[Task]:
        """Pre-order traversal starting at ``tasks`` (defaults to the roots)."""
        stack = list(reversed(self.roots if tasks is None else tasks))
        while stack:
            task = stack.pop()
            yield task
            stack.extend(reversed(self.subtasks(task)))

    def tasks_for(self, line_numbers: Sequence[int]) -> List[Task]:
        return [self.by_line[line_number] for line_number in line_numbers]

    def filter(self, predicate: Callable[[Task], bool]) -> List[Task]:
        return [task for task in self.flat if predicate(task)]


def build_tree(tasks: Sequence[Task]) -> TaskTree:
    """Nest tasks by indentation.

    Keeps a stack of open ancestors. For every task the stack is popped until
    its top has a smaller measured indent; that top becomes the parent, or the
    task is a root when the stack runs empty. A line indented by two or more
    levels under its parent is clamped to one level below it.

    Returns:
        A TaskTree whose pre-order walk reproduces the input order
    """
    parents: Dict[int, Optional[int]] = {}
    children: Dict[int, List[int]] = {task.line_number: [] for task in tasks}
    depth: Dict[int, int] = {}
    root_ids: List[int] = []
    stack: List[Task] = []

    for task in tasks:
        while stack and stack[-1].indent_level >= task.indent_level:
            stack.pop()
        if stack:
            parent = stack[-1]
            parents[task.line_number] = parent.line_number
            children[parent.line_number].append(task.line_number)
            depth[task.line_number] = depth[parent.line_number] + 1
        else:
            parents[task.line_number] = None
            root_ids.append(task.line_number)
            depth[task.line_number] = 0
        stack.append(task)

    by_line: Dict[int, Task] = {}
    flat: List[Task] = []
    indexes: Dict[str, Dict[str, List[int]]] = {'tags': {}, 'projects': {}, 'contexts': {}}

    for task in tasks:
        linked = replace(
            task,
            indent_level=depth[task.line_number],
            parent_id=parents[task.line_number],
            subtask_ids=tuple(children[task.line_number]),
        )
        by_line[linked.line_number] = linked
        flat.append(linked)
        for name in ('tags', 'projects', 'contexts'):
            for item in getattr(linked, name):
                indexes[name].setdefault(item, []).append(linked.line_number)

    logger.debug("Built task tree: %d roots, %d tasks", len(root_ids), len(flat))

    return TaskTree(
        roots=tuple(by_line[line_number] for line_number in root_ids),
        flat=tuple(flat),
        by_line=by_line,
        tags={key: tuple(value) for key, value in indexes['tags'].items()},
        projects={key: tuple(value) for key, value in indexes['projects'].items()},
        contexts={key: tuple(value) for key, value in indexes['contexts'].items()},
    )


def flatten(tree: TaskTree) -> List[Task]:
    """Pre-order list of every task in the tree."""
    return list(tree.walk())
