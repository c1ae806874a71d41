"""
Due Date Engine for todo-md

This module parses the due-date mini-language used inside ``{due:...}`` tags
and classifies an expression against a target day. Supported forms:

    today                      due on any day, not recurring
    2018-01-01                 fixed day
    2018-01-01|e2d             every N days starting at the anchor day
    monday, mon, ...           weekday recurrence (case-insensitive)
    ed                         every day
    2018-01-01..2018-01-07     inclusive date range

Alternatives are separated by commas: ``mon,fri``.
"""

import logging
import re
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Callable, Iterable, List, Optional

from .utils.datetime import (
    DateLike,
    diff_in_whole_days,
    now_local,
    parse_iso_date,
    shift_by_days,
    truncate_to_date,
)

logger = logging.getLogger(__name__)

# How far ahead the closest upcoming due day is searched for
CLOSEST_DUE_HORIZON_DAYS = 3660


class DueState(Enum):
    """Due state of a task on a given day."""
    NOT_DUE = "notDue"
    DUE = "due"
    OVERDUE = "overdue"
    INVALID = "invalid"


@dataclass(frozen=True)
class DueInfo:
    """Result of evaluating a due expression."""
    raw: str
    is_due: DueState
    is_recurring: bool = False
    is_range: bool = False

    @property
    def is_active(self) -> bool:
        """Due or overdue."""
        return self.is_due in (DueState.DUE, DueState.OVERDUE)


@dataclass(frozen=True)
class DueRule:
    """One comma-separated alternative of a due expression."""
    text: str
    check: Callable[[date], DueState]
    is_recurring: bool = False
    is_range: bool = False

    @property
    def is_valid(self) -> bool:
        return self.check is not _invalid


WEEKDAYS = ['monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday', 'sunday']

_ANCHORED = re.compile(r'^([0-9]{4}-[0-9]{2}-[0-9]{2})(?:[|-](.*))?$')
_EVERY_N_DAYS = re.compile(r'^e([0-9]+)d$')


def day_name_to_number(day_name: str) -> Optional[int]:
    """Convert a day name or 3-letter abbreviation to a number (0=Monday)"""
    day_name = day_name.lower()
    for number, name in enumerate(WEEKDAYS):
        if day_name == name or day_name == name[:3]:
            return number
    return None


def _invalid(target: date) -> DueState:
    return DueState.INVALID


def _always_due(target: date) -> DueState:
    return DueState.DUE


def is_due_exact_date(due_day: date, target: date) -> DueState:
    """Classify a fixed day against the target day."""
    diff = diff_in_whole_days(due_day, target)
    if diff == 0:
        return DueState.DUE
    if diff > 0:
        return DueState.OVERDUE
    return DueState.NOT_DUE


def is_due_between(first: date, last: date, target: date) -> DueState:
    """Classify an inclusive range against the target day."""
    target = truncate_to_date(target)
    if first < target and last < target:
        return DueState.OVERDUE
    if first <= target <= last:
        return DueState.DUE
    return DueState.NOT_DUE


def is_due_with_date(algorithm: str, start: Optional[date], target: date) -> DueState:
    """Evaluate an interval rule such as ``e3d`` anchored at ``start``.

    Raises:
        ValueError: If no anchor date is given
    """
    if start is None:
        raise ValueError(f"Interval rule '{algorithm}' requires a start date")

    match = _EVERY_N_DAYS.match(algorithm)
    if not match:
        return DueState.INVALID
    interval = int(match.group(1))
    if interval == 0:
        return DueState.INVALID

    diff = diff_in_whole_days(start, target)
    if diff >= 0 and diff % interval == 0:
        return DueState.DUE
    return DueState.NOT_DUE


def parse_rule(text: str) -> DueRule:
    """Parse a single alternative into a rule.

    Never raises: anything outside the grammar becomes an invalid rule.
    """
    normalized = text.strip().lower()

    if normalized == 'today':
        return DueRule(text, _always_due)

    if normalized == 'ed':
        return DueRule(text, _always_due, is_recurring=True)

    if '..' in normalized:
        parts = normalized.split('..')
        if len(parts) != 2:
            return DueRule(text, _invalid)
        first, last = parse_iso_date(parts[0].strip()), parse_iso_date(parts[1].strip())
        if first is None or last is None:
            return DueRule(text, _invalid)
        return DueRule(text, lambda target: is_due_between(first, last, target), is_range=True)

    weekday = day_name_to_number(normalized)
    if weekday is not None:
        return DueRule(
            text,
            lambda target: DueState.DUE if target.weekday() == weekday else DueState.NOT_DUE,
            is_recurring=True,
        )

    match = _ANCHORED.match(normalized)
    if match:
        start = parse_iso_date(match.group(1))
        algorithm = match.group(2)
        if start is None:
            return DueRule(text, _invalid)
        if algorithm is None:
            return DueRule(text, lambda target: is_due_exact_date(start, target))
        every = _EVERY_N_DAYS.match(algorithm)
        if not every or int(every.group(1)) == 0:
            return DueRule(text, _invalid)
        return DueRule(
            text,
            lambda target: is_due_with_date(algorithm, start, target),
            is_recurring=True,
        )

    return DueRule(text, _invalid)


def combine_states(states: Iterable[DueState]) -> DueState:
    """Merge the states of comma-separated alternatives.

    Any due alternative wins, then any overdue one. Invalid alternatives are
    ignored unless every alternative is invalid.
    """
    states = list(states)
    if DueState.DUE in states:
        return DueState.DUE
    if DueState.OVERDUE in states:
        return DueState.OVERDUE
    if all(state == DueState.INVALID for state in states):
        return DueState.INVALID
    return DueState.NOT_DUE


class DueDate:
    """A due expression evaluated against a target day."""

    def __init__(self, raw: str, target_date: Optional[DateLike] = None):
        self.raw = raw
        self.target_date = truncate_to_date(target_date or now_local())
        self.rules: List[DueRule] = [
            parse_rule(part) for part in raw.split(',') if part.strip()
        ]

        valid = [rule for rule in self.rules if rule.is_valid]
        if len(valid) != len(self.rules):
            logger.debug("Ignoring invalid due alternatives in %r", raw)

        self.is_recurring = any(rule.is_recurring for rule in valid)
        self.is_range = not self.is_recurring and any(rule.is_range for rule in valid)
        self.is_due = self.state_on(self.target_date)

    def state_on(self, day: DateLike) -> DueState:
        """Evaluate the expression on another day."""
        day = truncate_to_date(day)
        return combine_states(rule.check(day) for rule in self.rules)

    @property
    def closest_due_date_in_the_future(self) -> Optional[date]:
        """First day after the target day on which the expression is due."""
        if self.is_due == DueState.INVALID:
            return None
        for offset in range(1, CLOSEST_DUE_HORIZON_DAYS + 1):
            day = shift_by_days(self.target_date, offset)
            if self.state_on(day) == DueState.DUE:
                return day
        return None

    def to_info(self) -> DueInfo:
        return DueInfo(
            raw=self.raw,
            is_due=self.is_due,
            is_recurring=self.is_recurring,
            is_range=self.is_range,
        )


def evaluate(expression: str, target_date: Optional[DateLike] = None) -> DueInfo:
    """Classify a due expression against ``target_date`` (defaults to today)."""
    return DueDate(expression, target_date).to_info()
