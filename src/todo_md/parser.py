"""Line parser for todo-md task files."""

import logging
import re
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from .config import ConfigModel
from .due import DueDate
from .task import CommentLine, Count, Overdue, Task, TextRange
from .tree import TaskTree, build_tree
from .utils.datetime import DateLike, now_local, parse_iso_date, parse_iso_datetime, truncate_to_date

logger = logging.getLogger(__name__)

DocumentInput = Union[str, Sequence[str], Sequence[Tuple[int, str]]]


@dataclass(frozen=True)
class ParsedDocument:
    """Snapshot of a whole document. Rebuilt on every change."""
    tree: TaskTree
    comment_lines: Tuple[CommentLine, ...] = ()

    @property
    def tasks(self) -> Tuple[Task, ...]:
        """All tasks in pre-order (document order)."""
        return self.tree.flat

    @property
    def tasks_as_tree(self) -> Tuple[Task, ...]:
        """Root tasks in document order."""
        return self.tree.roots


class LineParser:
    """Parses one line of a task file into a ``Task``."""

    def __init__(self, config: Optional[ConfigModel] = None):
        self.config = config or ConfigModel()

        self.patterns = {
            'indent': re.compile(r'[ \t]*'),
            'priority': re.compile(r'\(([A-Z])\)(?=\s|$)'),
            # Special tags and sigil tokens in one alternation so that a
            # single left-to-right scan never matches overlapping spans.
            'token': re.compile(r'\{([A-Za-z]+)(?::([^{}]*))?\}|(?<!\S)([#+@])(\S+)'),
            'count': re.compile(r'^([0-9]+)/([0-9]+)$'),
        }

        self.special_handlers = {
            'due': self._parse_due,
            'cm': self._parse_completion,
            'cr': self._parse_creation,
            'count': self._parse_count,
            'overdue': self._parse_overdue,
            'h': self._parse_hidden,
            'c': self._parse_collapsed,
        }

    def measure_indent(self, text: str, indent_unit: int) -> Tuple[int, int]:
        """Return ``(indent_level, characters_of_indent)`` for a line.

        A tab counts as a full indent unit.
        """
        indent = self.patterns['indent'].match(text).group(0)
        width = sum(indent_unit if char == '\t' else 1 for char in indent)
        return width // indent_unit, len(indent)

    def is_comment(self, text: str) -> bool:
        prefix = self.config.comment_prefix
        return bool(prefix) and text.startswith(prefix)

    def parse_line(self, text: str, line_number: int, indent_unit: Optional[int] = None,
                   target_date: Optional[DateLike] = None) -> Task:
        """Parse one raw line into a Task.

        Parsing is total: tokens whose inner shape is wrong stay in the title
        as plain text and never raise.
        """
        indent_unit = indent_unit or self.config.tab_size
        target = truncate_to_date(target_date or now_local())

        indent_level, position = self.measure_indent(text, indent_unit)
        fields: Dict[str, Any] = {
            'line_number': line_number,
            'raw_text': text,
            'indent_level': indent_level,
        }

        done_symbol = self.config.done_symbol
        if done_symbol and text.startswith(done_symbol, position):
            fields['done'] = True
            fields['done_range'] = TextRange(position, position + len(done_symbol))
            position += len(done_symbol)

        priority_match = self.patterns['priority'].match(text, position)
        if priority_match:
            fields['priority'] = priority_match.group(1)
            fields['priority_range'] = TextRange(priority_match.start(), priority_match.end())
            position = priority_match.end()

        groups: Dict[str, List[str]] = {'#': [], '+': [], '@': []}
        group_ranges: Dict[str, List[TextRange]] = {'#': [], '+': [], '@': []}
        consumed: List[TextRange] = []
        seen = set()

        for match in self.patterns['token'].finditer(text, position):
            text_range = TextRange(match.start(), match.end())
            key = match.group(1)
            if key is not None:
                handler = self.special_handlers.get(key)
                # Unknown keys and repeated keys stay in the title
                if handler is None or key in seen:
                    continue
                if not handler(match.group(2), text_range, target, fields):
                    logger.debug("Malformed {%s} tag on line %d kept as text", key, line_number)
                    continue
                seen.add(key)
            else:
                sigil, name = match.group(3), match.group(4)
                if name not in groups[sigil]:
                    groups[sigil].append(name)
                group_ranges[sigil].append(text_range)
            consumed.append(text_range)

        fields['tags'] = tuple(groups['#'])
        fields['projects'] = tuple(groups['+'])
        fields['contexts'] = tuple(groups['@'])
        fields['tag_ranges'] = tuple(group_ranges['#'])
        fields['project_ranges'] = tuple(group_ranges['+'])
        fields['context_ranges'] = tuple(group_ranges['@'])
        fields['title'] = self._strip_ranges(text, position, consumed)

        return Task(**fields)

    def _strip_ranges(self, text: str, start: int, ranges: List[TextRange]) -> str:
        pieces = []
        cursor = start
        for text_range in ranges:
            pieces.append(text[cursor:text_range.start])
            cursor = text_range.end
        pieces.append(text[cursor:])
        return ' '.join(''.join(pieces).split())

    def _parse_due(self, value: Optional[str], text_range: TextRange, target: date,
                   fields: Dict[str, Any]) -> bool:
        if not value or not value.strip():
            return False
        fields['due'] = DueDate(value, target).to_info()
        fields['due_range'] = text_range
        return True

    def _parse_completion(self, value: Optional[str], text_range: TextRange, target: date,
                          fields: Dict[str, Any]) -> bool:
        completion_date = None
        if value is not None:
            completion_date = parse_iso_datetime(value)
            if completion_date is None:
                return False
        fields['done'] = True
        fields['completion_date'] = completion_date
        fields['completion_range'] = text_range
        return True

    def _parse_creation(self, value: Optional[str], text_range: TextRange, target: date,
                        fields: Dict[str, Any]) -> bool:
        creation_date = parse_iso_datetime(value) if value else None
        if creation_date is None:
            return False
        fields['creation_date'] = creation_date
        fields['creation_range'] = text_range
        return True

    def _parse_count(self, value: Optional[str], text_range: TextRange, target: date,
                     fields: Dict[str, Any]) -> bool:
        match = self.patterns['count'].match(value or '')
        if not match:
            return False
        value_start = text_range.start + len('{count:')
        current_start, current_end = match.span(1)
        fields['count'] = Count(
            int(match.group(1)),
            int(match.group(2)),
            text_range,
            TextRange(value_start + current_start, value_start + current_end),
        )
        return True

    def _parse_overdue(self, value: Optional[str], text_range: TextRange, target: date,
                       fields: Dict[str, Any]) -> bool:
        since = parse_iso_date(value) if value else None
        if since is None:
            return False
        fields['overdue'] = Overdue(since, text_range)
        return True

    def _parse_hidden(self, value: Optional[str], text_range: TextRange, target: date,
                      fields: Dict[str, Any]) -> bool:
        if value is not None:
            return False
        fields['hidden'] = True
        fields['hidden_range'] = text_range
        return True

    def _parse_collapsed(self, value: Optional[str], text_range: TextRange, target: date,
                         fields: Dict[str, Any]) -> bool:
        if value is not None:
            return False
        fields['collapsed'] = True
        fields['collapse_range'] = text_range
        return True

    def parse_document(self, document: DocumentInput, indent_unit: Optional[int] = None,
                       target_date: Optional[DateLike] = None) -> ParsedDocument:
        """Parse a whole document and build its task tree.

        Comment lines go to ``comment_lines``, blank lines are skipped and
        every other line becomes exactly one Task.
        """
        target = truncate_to_date(target_date or now_local())
        tasks: List[Task] = []
        comments: List[CommentLine] = []

        for line_number, text in numbered_lines(document):
            if not text.strip():
                continue
            if self.is_comment(text):
                comments.append(CommentLine(line_number, text))
                continue
            tasks.append(self.parse_line(text, line_number, indent_unit, target))

        tree = build_tree(tasks)
        logger.debug("Parsed %d tasks and %d comment lines", len(tree.flat), len(comments))
        return ParsedDocument(tree=tree, comment_lines=tuple(comments))


def numbered_lines(document: DocumentInput) -> Iterable[Tuple[int, str]]:
    """Normalize document input to ``(line_number, text)`` pairs."""
    if isinstance(document, str):
        return list(enumerate(document.splitlines()))
    pairs = []
    for index, item in enumerate(document):
        if isinstance(item, str):
            pairs.append((index, item))
        else:
            pairs.append((item[0], item[1]))
    return pairs


def parse_line(text: str, line_number: int, indent_unit: Optional[int] = None,
               config: Optional[ConfigModel] = None,
               target_date: Optional[DateLike] = None) -> Task:
    """Parse a single line with a throwaway parser."""
    return LineParser(config).parse_line(text, line_number, indent_unit, target_date)


def parse_document(document: DocumentInput, config: Optional[ConfigModel] = None,
                   indent_unit: Optional[int] = None,
                   target_date: Optional[DateLike] = None) -> ParsedDocument:
    """Main function to parse a task file into a ParsedDocument."""
    return LineParser(config).parse_document(document, indent_unit, target_date)
