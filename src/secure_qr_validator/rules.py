"""Business rules: pure predicates over envelope data, composed in order."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Protocol, runtime_checkable

from pydantic.types import JsonValue

from secure_qr_validator.expiration import Clock, utc_now

type BusinessData = Mapping[str, JsonValue]
type RuleFunction = Callable[[BusinessData], str | None]

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


@runtime_checkable
class ValidationRule(Protocol):
    """Rule contract: ``None`` when data passes, otherwise an error message."""

    def evaluate(self, data: BusinessData) -> str | None:
        """Evaluate rule against business data.

        Args:
            data: Business payload extracted from the envelope.
        """


@dataclass(frozen=True)
class FunctionRule:
    """Adapter for plain ``data -> message | None`` callables."""

    func: RuleFunction

    def evaluate(self, data: BusinessData) -> str | None:
        return self.func(data)


def as_rule(rule: ValidationRule | RuleFunction) -> ValidationRule:
    """Normalize a rule object or plain callable into a ValidationRule.

    Args:
        rule: Rule instance or callable.

    Returns:
        Rule exposing ``evaluate``.

    Raises:
        TypeError: If ``rule`` is neither.
    """
    if isinstance(rule, ValidationRule):
        return rule
    if callable(rule):
        return FunctionRule(rule)
    raise TypeError(f"Unsupported rule type: {type(rule).__name__}")


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass(frozen=True)
class RequiredRule:
    """Field must be present and non-null."""

    field: str

    def evaluate(self, data: BusinessData) -> str | None:
        if data.get(self.field) is None:
            return f"Field '{self.field}' is required"
        return None


@dataclass(frozen=True)
class NumberInRangeRule:
    """Field must be a number within ``[minimum, maximum]``."""

    field: str
    minimum: float
    maximum: float

    def evaluate(self, data: BusinessData) -> str | None:
        value = data.get(self.field)
        if not _is_number(value):
            return f"Field '{self.field}' must be a number"
        if value < self.minimum or value > self.maximum:  # type: ignore[operator]
            return (
                f"Field '{self.field}' must be between {self.minimum} and {self.maximum}"
            )
        return None


def _parse_date(value: JsonValue) -> datetime | None:
    """Parse ISO-8601 text or epoch milliseconds; ``None`` when unparsable."""
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError:
            return None
        # Naive values are local time.
        return parsed if parsed.tzinfo is not None else parsed.astimezone()
    if isinstance(value, int) and not isinstance(value, bool):
        try:
            return _EPOCH + timedelta(milliseconds=value)
        except OverflowError:
            return None
    return None


@dataclass(frozen=True)
class DateMustBeFutureRule:
    """Field, when present, must be a date strictly after now."""

    field: str
    clock: Clock = utc_now

    def evaluate(self, data: BusinessData) -> str | None:
        value = data.get(self.field)
        if value is None:
            return None
        date = _parse_date(value)
        if date is None:
            return f"Field '{self.field}' must be a valid date"
        if date <= self.clock():
            return f"Field '{self.field}' must be in the future"
        return None


@dataclass(frozen=True)
class MatchesPatternRule:
    """Field, when present, must be a string matching ``pattern``."""

    field: str
    pattern: re.Pattern[str]

    def evaluate(self, data: BusinessData) -> str | None:
        value = data.get(self.field)
        if value is None:
            return None
        if not isinstance(value, str):
            return f"Field '{self.field}' must be a string"
        if self.pattern.search(value) is None:
            return f"Field '{self.field}' does not match the expected format"
        return None


@dataclass(frozen=True)
class ListLengthRule:
    """Field, when present, must be a list with length inside the bounds."""

    field: str
    minimum: int | None = None
    maximum: int | None = None

    def evaluate(self, data: BusinessData) -> str | None:
        value = data.get(self.field)
        if value is None:
            return None
        if not isinstance(value, list):
            return f"Field '{self.field}' must be a list"
        if self.minimum is not None and len(value) < self.minimum:
            return f"Field '{self.field}' must contain at least {self.minimum} items"
        if self.maximum is not None and len(value) > self.maximum:
            return f"Field '{self.field}' must contain at most {self.maximum} items"
        return None


@dataclass(frozen=True)
class MutuallyExclusiveRule:
    """At most one of ``fields`` may be present (non-null)."""

    fields: tuple[str, ...]

    def evaluate(self, data: BusinessData) -> str | None:
        present = [name for name in self.fields if data.get(name) is not None]
        if len(present) > 1:
            return f"Fields {', '.join(present)} are mutually exclusive"
        return None


def required(field_name: str) -> ValidationRule:
    """Build a rule failing when ``field_name`` is absent or null."""
    return RequiredRule(field_name)


def number_in_range(field_name: str, minimum: float, maximum: float) -> ValidationRule:
    """Build a rule failing when the field is not numeric or out of range."""
    return NumberInRangeRule(field_name, minimum, maximum)


def date_must_be_future(field_name: str, *, clock: Clock = utc_now) -> ValidationRule:
    """Build a rule failing when the field is not a date strictly after now."""
    return DateMustBeFutureRule(field_name, clock)


def matches_pattern(field_name: str, pattern: str | re.Pattern[str]) -> ValidationRule:
    """Build a rule failing when the field is not a string matching pattern."""
    return MatchesPatternRule(field_name, re.compile(pattern))


def list_length(
    field_name: str, *, minimum: int | None = None, maximum: int | None = None
) -> ValidationRule:
    """Build a rule failing when the field is not a list within bounds."""
    return ListLengthRule(field_name, minimum, maximum)


def mutually_exclusive(field_names: Iterable[str]) -> ValidationRule:
    """Build a rule failing when more than one of the fields is present."""
    return MutuallyExclusiveRule(tuple(field_names))


@dataclass(frozen=True)
class CompositeRule:
    """Runs rules in order and returns the first failure message."""

    rules: tuple[ValidationRule, ...] = ()

    def evaluate(self, data: BusinessData) -> str | None:
        for rule in self.rules:
            message = rule.evaluate(data)
            if message is not None:
                return message
        return None


@dataclass
class ValidationRuleBuilder:
    """Ordered rule accumulator producing one composed rule."""

    _rules: list[ValidationRule] = field(default_factory=list)

    def add_rule(self, rule: ValidationRule | RuleFunction) -> ValidationRuleBuilder:
        """Append one rule; returns self for chaining."""
        self._rules.append(as_rule(rule))
        return self

    def add_rules(
        self, rules: Sequence[ValidationRule | RuleFunction]
    ) -> ValidationRuleBuilder:
        """Append rules in order; returns self for chaining."""
        self._rules.extend(as_rule(rule) for rule in rules)
        return self

    def build(self) -> CompositeRule:
        """Snapshot accumulated rules into an immutable composite rule."""
        return CompositeRule(tuple(self._rules))
