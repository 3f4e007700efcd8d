"""
Changesets: a validated, not-yet-committed set of field changes plus the
field errors collected while building it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, NamedTuple, Optional

PLACEHOLDER_RE = re.compile(r"\{(\w+)\}")


class FieldError(NamedTuple):
    field: str
    message: str
    meta: dict

    def render(self) -> str:
        """Interpolate meta values (e.g. ``{count}``) into the message.

        Placeholders without a matching meta key are left as they are, so
        messages that were formatted up front render unchanged.
        """
        return PLACEHOLDER_RE.sub(
            lambda m: str(self.meta.get(m.group(1), m.group(0))), self.message
        )


@dataclass
class Changeset:
    data: Any
    changes: dict = field(default_factory=dict)
    errors: list[FieldError] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    # -- field access --------------------------------------------------------

    def get_change(self, name: str, default: Any = None) -> Any:
        return self.changes.get(name, default)

    def get_field(self, name: str) -> Any:
        """Pending change if present, otherwise the current value on ``data``."""
        if name in self.changes:
            return self.changes[name]
        return getattr(self.data, name, None)

    def put_change(self, name: str, value: Any) -> "Changeset":
        self.changes[name] = value
        return self

    def delete_change(self, name: str) -> "Changeset":
        self.changes.pop(name, None)
        return self

    def add_error(self, name: str, message: str, *, first: bool = False, **meta: Any) -> "Changeset":
        error = FieldError(name, message, meta)
        if first:
            self.errors.insert(0, error)
        else:
            self.errors.append(error)
        return self

    def errors_on(self, name: str) -> list[str]:
        """Rendered messages recorded against one field."""
        return [e.render() for e in self.errors if e.field == name]

    def has_error(self, name: str) -> bool:
        return any(e.field == name for e in self.errors)

    # -- casting and validation ----------------------------------------------

    def cast(self, params: dict, permitted: Iterable[str]) -> "Changeset":
        """Record permitted keys that are present in ``params`` and differ
        from the current value. Absent keys are never treated as clearing."""
        for name in permitted:
            if name not in params:
                continue
            value = params[name]
            if isinstance(value, str) and not value.strip():
                value = None
            if value != getattr(self.data, name, None):
                self.changes[name] = value
        return self

    def validate_required(self, names: Iterable[str]) -> "Changeset":
        for name in names:
            value = self.get_field(name)
            if value is None or (isinstance(value, str) and not value.strip()):
                self.add_error(name, "can't be blank", validation="required")
        return self

    def validate_length(
        self, name: str, *, min: Optional[int] = None, max: Optional[int] = None
    ) -> "Changeset":
        value = self.changes.get(name)
        if value is None:
            return self
        if min is not None and len(value) < min:
            self.add_error(
                name, "should be at least {count} character(s)",
                count=min, validation="length", kind="min",
            )
        elif max is not None and len(value) > max:
            self.add_error(
                name, "should be at most {count} character(s)",
                count=max, validation="length", kind="max",
            )
        return self

    def validate_format(self, name: str, check: Callable[[str], bool]) -> "Changeset":
        value = self.changes.get(name)
        if value is not None and not check(value):
            self.add_error(name, "has invalid format", validation="format")
        return self

    def update_change(self, name: str, fn: Callable[[Any], Any]) -> "Changeset":
        """Transform a pending change; drop it if it now equals the current value."""
        if self.changes.get(name) is not None:
            value = fn(self.changes[name])
            if value == getattr(self.data, name, None):
                del self.changes[name]
            else:
                self.changes[name] = value
        return self

    def apply(self, target: Any = None) -> Any:
        """Copy the changes onto ``target`` (defaults to ``data``)."""
        target = self.data if target is None else target
        for name, value in self.changes.items():
            setattr(target, name, value)
        return target


class ValidationFailed(Exception):
    """Raised when a changeset is invalid at commit time."""

    def __init__(self, changeset: Changeset):
        self.changeset = changeset
        fields = ", ".join(sorted({e.field for e in changeset.errors}))
        super().__init__(f"validation failed: {fields}")
