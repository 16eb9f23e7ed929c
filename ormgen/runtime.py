"""Query runtime imported by generated modules.

Generated ``<Model>Query`` classes extend Query and decode rows with the
``as_*`` cast helpers; generated ``<Model>QueryWhere`` classes extend
QueryWhere and hold one expression builder per field.

Builders produce SQL fragments with ``@name`` placeholders; bound values are
collected in ``substitution_values`` under the same names.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, ClassVar, Generic, Iterable, Optional, Sequence, TypeVar

logger = logging.getLogger(__name__)

M = TypeVar("M")
W = TypeVar("W", bound="QueryWhere")
N = TypeVar("N", int, float)

# Executes compiled SQL with its bound values and returns positional rows.
QueryExecutor = Callable[[str, dict[str, Any]], Iterable[Sequence[Any]]]

_TRUE_STRINGS = {"true", "t", "1", "yes"}
_FALSE_STRINGS = {"false", "f", "0", "no"}


# ---------------------------------------------------------------------------
# Row value casts
# ---------------------------------------------------------------------------

def as_string(value: Any) -> Optional[str]:
    if value is None or isinstance(value, str):
        return value
    return str(value)


def as_bool(value: Any) -> Optional[bool]:
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
        raise ValueError(f"Cannot read {value!r} as a boolean")
    raise TypeError(f"Cannot cast {type(value).__name__} to bool")


def as_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool):
        raise TypeError("Cannot cast bool to int")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        return int(value)
    raise TypeError(f"Cannot cast {type(value).__name__} to int")


def as_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, bool):
        raise TypeError("Cannot cast bool to float")
    if isinstance(value, (int, float, str)):
        return float(value)
    raise TypeError(f"Cannot cast {type(value).__name__} to float")


def as_datetime(value: Any) -> Optional[datetime]:
    """Accept a datetime or ISO-8601 text."""
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, str):
        return datetime.fromisoformat(value)
    raise TypeError(f"Cannot cast {type(value).__name__} to datetime")


# ---------------------------------------------------------------------------
# Expression builders
# ---------------------------------------------------------------------------

class SqlExpressionBuilder:
    """Holds at most one pending predicate on a single column.

    Calling a comparison method replaces any earlier predicate. Bound values
    are kept per slot (``_``, ``_lower``, ``_0``...); a slot's default
    parameter name is the column name plus the slot suffix, and QueryWhere
    may pass other names to keep parameters unique across columns.
    """

    def __init__(self, column_name: str) -> None:
        self.column_name = column_name
        self._template: Optional[str] = None
        self._values: dict[str, Any] = {}

    @property
    def has_value(self) -> bool:
        return self._template is not None

    def parameter_names(self) -> dict[str, str]:
        """Default parameter name per value slot."""
        return {
            key: self.column_name if key == "_" else f"{self.column_name}{key}"
            for key in self._values
        }

    def compile(self, names: Optional[dict[str, str]] = None) -> Optional[str]:
        if self._template is None:
            return None
        names = names or self.parameter_names()
        placeholders = {key: f"@{name}" for key, name in names.items()}
        return f"{self.column_name} {self._template.format(**placeholders)}"

    def bind(self, names: Optional[dict[str, str]] = None) -> dict[str, Any]:
        """Bound values keyed by parameter name."""
        names = names or self.parameter_names()
        return {names[key]: value for key, value in self._values.items()}

    @property
    def substitution_values(self) -> dict[str, Any]:
        return self.bind()

    def _set(self, template: str, **values: Any) -> None:
        self._template = template
        self._values = dict(values)

    def _set_in(self, operator: str, values: Sequence[Any]) -> None:
        if not values:
            raise ValueError(f"{self.column_name}: IN requires at least one value")
        keyed = {f"_{i}": value for i, value in enumerate(values)}
        placeholders = ", ".join("{" + key + "}" for key in keyed)
        self._set(f"{operator} ({placeholders})", **keyed)

    def is_null(self) -> None:
        self._set("IS NULL")

    def is_not_null(self) -> None:
        self._set("IS NOT NULL")


class StringSqlExpressionBuilder(SqlExpressionBuilder):
    def equals(self, value: str) -> None:
        self._set("= {_}", _=_check(self.column_name, value, str))

    def not_equals(self, value: str) -> None:
        self._set("!= {_}", _=_check(self.column_name, value, str))

    def like(self, pattern: str) -> None:
        self._set("LIKE {_}", _=_check(self.column_name, pattern, str))

    def is_in(self, values: Sequence[str]) -> None:
        self._set_in("IN", [_check(self.column_name, v, str) for v in values])

    def is_not_in(self, values: Sequence[str]) -> None:
        self._set_in("NOT IN", [_check(self.column_name, v, str) for v in values])


class BooleanSqlExpressionBuilder(SqlExpressionBuilder):
    def equals(self, value: bool) -> None:
        self._set("= {_}", _=_check(self.column_name, value, bool))


class NumericSqlExpressionBuilder(SqlExpressionBuilder, Generic[N]):
    """Comparisons on an int or float column.

    Values are checked against ``numeric_type``; a float column also accepts
    ints.
    """

    def __init__(self, column_name: str, numeric_type: type[N]) -> None:
        if numeric_type not in (int, float):
            raise TypeError(f"{column_name}: numeric builders take int or float, not {numeric_type!r}")
        super().__init__(column_name)
        self.numeric_type = numeric_type

    def _value(self, value: Any) -> N:
        accepted = (int, float) if self.numeric_type is float else (int,)
        if isinstance(value, bool) or not isinstance(value, accepted):
            raise TypeError(
                f"{self.column_name}: expected {self.numeric_type.__name__}, got {type(value).__name__}"
            )
        return value

    def equals(self, value: N) -> None:
        self._set("= {_}", _=self._value(value))

    def not_equals(self, value: N) -> None:
        self._set("!= {_}", _=self._value(value))

    def less_than(self, value: N) -> None:
        self._set("< {_}", _=self._value(value))

    def less_than_or_equal_to(self, value: N) -> None:
        self._set("<= {_}", _=self._value(value))

    def greater_than(self, value: N) -> None:
        self._set("> {_}", _=self._value(value))

    def greater_than_or_equal_to(self, value: N) -> None:
        self._set(">= {_}", _=self._value(value))

    def is_between(self, lower: N, upper: N) -> None:
        self._set("BETWEEN {_lower} AND {_upper}", _lower=self._value(lower), _upper=self._value(upper))

    def is_in(self, values: Sequence[N]) -> None:
        self._set_in("IN", [self._value(v) for v in values])


class DateTimeSqlExpressionBuilder(SqlExpressionBuilder):
    def equals(self, value: datetime) -> None:
        self._set("= {_}", _=_check(self.column_name, value, datetime))

    def before(self, value: datetime) -> None:
        self._set("< {_}", _=_check(self.column_name, value, datetime))

    def after(self, value: datetime) -> None:
        self._set("> {_}", _=_check(self.column_name, value, datetime))

    def is_between(self, lower: datetime, upper: datetime) -> None:
        self._set(
            "BETWEEN {_lower} AND {_upper}",
            _lower=_check(self.column_name, lower, datetime),
            _upper=_check(self.column_name, upper, datetime),
        )


def _check(column: str, value: Any, expected: type) -> Any:
    if not isinstance(value, expected):
        raise TypeError(f"{column}: expected {expected.__name__}, got {type(value).__name__}")
    return value


# ---------------------------------------------------------------------------
# Query bases
# ---------------------------------------------------------------------------

class QueryWhere:
    """Base of generated where classes."""

    @property
    def expression_builders(self) -> list[SqlExpressionBuilder]:
        raise NotImplementedError

    def _active(self) -> list[tuple[SqlExpressionBuilder, dict[str, str]]]:
        """Active builders with parameter names unique across the where.

        A builder keeps its default names unless an earlier builder already
        took one; that name gets a ``_2``, ``_3``... suffix no other builder
        asks for.
        """
        active = [b for b in self.expression_builders if b.has_value]
        requested = {name for b in active for name in b.parameter_names().values()}
        taken: set[str] = set()
        assigned = []
        for builder in active:
            names = {}
            for key, name in builder.parameter_names().items():
                unique, n = name, 1
                while unique in taken or (unique != name and unique in requested):
                    n += 1
                    unique = f"{name}_{n}"
                taken.add(unique)
                names[key] = unique
            assigned.append((builder, names))
        return assigned

    def compile(self) -> Optional[str]:
        """Active predicates joined with AND, or None when nothing is set."""
        parts = [builder.compile(names) for builder, names in self._active()]
        return " AND ".join(parts) if parts else None

    @property
    def substitution_values(self) -> dict[str, Any]:
        values: dict[str, Any] = {}
        for builder, names in self._active():
            values.update(builder.bind(names))
        return values


class Query(Generic[M, W]):
    """Base of generated query classes."""

    table_name: ClassVar[str]
    fields: ClassVar[tuple[str, ...]]
    where: W

    def deserialize(self, row: Sequence[Any]) -> M:
        raise NotImplementedError

    def compile(self) -> str:
        """SELECT every column in field order, filtered by ``where``."""
        columns = [b.column_name for b in self.where.expression_builders]
        sql = f"SELECT {', '.join(columns)} FROM {self.table_name}"
        predicate = self.where.compile()
        if predicate:
            sql += f" WHERE {predicate}"
        return sql

    def get(self, executor: QueryExecutor) -> list[M]:
        """Run the compiled query and decode every returned row."""
        sql = self.compile()
        logger.debug("Executing %s with %r", sql, self.where.substitution_values)
        return [self.deserialize(row) for row in executor(sql, self.where.substitution_values)]
