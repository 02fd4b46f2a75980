"""Record registration - explicit field/column descriptors for mapped types.

A record is a SQLModel class decorated with `@record`. The decorator reads the
declared fields once and stores a `RecordSpec` on the class; the mapper only
ever consults that RecordSpec, never the class at call time.

    @record
    class Post(SQLModel, table=True):
        pid: Optional[int] = Field(default=None, primary_key=True)
        date: str
        content: str = ""
"""

import re
from dataclasses import dataclass
from typing import Any, Callable, Mapping, TypeVar

from dailyposts.core.errors import RecordDefinitionError

IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

R = TypeVar("R")


def is_zero(value: Any) -> bool:
    """Default zero test: None and the empty/false value of the builtin types."""
    if value is None:
        return True
    if isinstance(value, (bool, int, float, str, bytes, list, tuple, dict, set)):
        return not value
    return False


@dataclass(frozen=True)
class RecordField:
    name: str
    column: str
    is_zero: Callable[[Any], bool] = is_zero


@dataclass(frozen=True)
class RecordSpec:
    type: type
    fields: tuple[RecordField, ...]

    @property
    def columns(self) -> tuple[str, ...]:
        return tuple(f.column for f in self.fields)

    def field_for(self, column: str) -> RecordField | None:
        for f in self.fields:
            if f.column == column:
                return f
        return None

    def values(self, instance: Any, skip_zero: bool) -> list[tuple[str, Any]]:
        """(column, value) pairs in declaration order, optionally without zero values."""
        pairs = []
        for f in self.fields:
            value = getattr(instance, f.name)
            if skip_zero and f.is_zero(value):
                continue
            pairs.append((f.column, value))
        return pairs

    def build(self, values: Mapping[str, Any]) -> Any:
        return self.type.model_validate(dict(values))


def _build_spec(cls: type, zero: Mapping[str, Callable[[Any], bool]]) -> RecordSpec:
    names = list(getattr(cls, "model_fields", {}))
    if not names:
        raise RecordDefinitionError(f"{cls.__name__} declares no fields")

    unknown = set(zero) - set(names)
    if unknown:
        raise RecordDefinitionError(f"zero tests given for unknown fields of {cls.__name__}: {sorted(unknown)}")

    fields = []
    seen: dict[str, str] = {}
    for name in names:
        column = name.lower()
        if not IDENTIFIER.match(column):
            raise RecordDefinitionError(f"{cls.__name__}.{name} is not a valid column name")
        if column in seen:
            raise RecordDefinitionError(
                f"{cls.__name__}.{name} and {cls.__name__}.{seen[column]} both map to column {column!r}"
            )
        seen[column] = name
        fields.append(RecordField(name, column, zero.get(name, is_zero)))

    return RecordSpec(cls, tuple(fields))


def record(cls: type[R] | None = None, *, zero: Mapping[str, Callable[[Any], bool]] | None = None):
    """Register a SQLModel class as a mapped record.

    Can be used bare (`@record`) or with per-field zero tests
    (`@record(zero={"score": lambda v: v is None})`).
    """

    def wrap(target: type[R]) -> type[R]:
        target.__record__ = _build_spec(target, zero or {})
        return target

    if cls is None:
        return wrap
    return wrap(cls)


def spec_of(record_type: type) -> RecordSpec:
    spec = record_type.__dict__.get("__record__")
    if spec is None:
        raise RecordDefinitionError(f"{record_type.__name__} is not a registered record")
    return spec
