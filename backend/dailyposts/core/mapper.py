"""Record mapper - turns registered records into parameterized SQL and back.

Column names only ever come from a record's registered fields, values only ever
travel as bound parameters. Filters skip zero-valued fields; patches never do,
so a patch can set a column back to 0/""/False.
"""

import logging
from contextlib import contextmanager
from typing import Any, Iterator, TypeVar

from dailyposts.core.database import QueryExecutor
from dailyposts.core.errors import ValidationError
from dailyposts.core.records import IDENTIFIER, RecordSpec, spec_of

logger = logging.getLogger(__name__)

R = TypeVar("R")


def _check_table(table: str) -> str:
    if not IDENTIFIER.match(table):
        raise ValidationError(f"invalid table name: {table!r}")
    return table


def _filter_clause(filter: Any) -> tuple[str, list[Any]]:
    pairs = spec_of(type(filter)).values(filter, skip_zero=True)
    clause = " AND ".join(f"{column} = ?" for column, _ in pairs)
    return clause, [value for _, value in pairs]


class RecordMapper:
    def __init__(self, executor: QueryExecutor):
        self.executor = executor

    def select(self, record_type: type[R], table: str, where: str = "", *args: Any) -> list[R]:
        """SELECT the record's columns from `table` and scan every row into a new record.

        `where` is a trusted clause with `?` placeholders for `args`.
        """
        spec = spec_of(record_type)
        sql = f"SELECT {', '.join(spec.columns)} FROM {_check_table(table)}"
        if where:
            sql = f"{sql} WHERE {where}"

        keys, rows = self.executor.query(sql, *args)
        return self._scan(spec, keys, rows)

    def _scan(self, spec: RecordSpec, keys: list[str], rows: list[Any]) -> list[Any]:
        # result columns are matched by name; unknown ones are dropped
        fields = [spec.field_for(key.lower()) for key in keys]
        for key, field in zip(keys, fields):
            if field is None:
                logger.warning(f"Column {key} not found in record {spec.type.__name__}, value discarded")

        results = []
        for row in rows:
            values = {field.name: value for field, value in zip(fields, row) if field is not None}
            results.append(spec.build(values))
        return results

    def count(self, table: str, filter: Any) -> int:
        """Number of rows matching the non-zero fields of `filter`."""
        clause, args = _filter_clause(filter)
        sql = f"SELECT COUNT(*) FROM {_check_table(table)}"
        if clause:
            sql = f"{sql} WHERE {clause}"

        _, rows = self.executor.query(sql, *args)
        return rows[0][0]

    def insert(self, table: str, row: Any) -> None:
        pairs = spec_of(type(row)).values(row, skip_zero=True)
        if not pairs:
            raise ValidationError(f"nothing to insert into {table}")

        columns = ", ".join(column for column, _ in pairs)
        placeholders = ", ".join("?" for _ in pairs)
        self.executor.execute(
            f"INSERT INTO {_check_table(table)} ({columns}) VALUES ({placeholders})",
            *[value for _, value in pairs],
        )

    def update(self, table: str, patch: Any, filter: Any) -> int:
        """Write every field of `patch` into the rows matching `filter`."""
        sets = spec_of(type(patch)).values(patch, skip_zero=False)
        clause, where_args = _filter_clause(filter)
        if not clause:
            raise ValidationError(f"refusing to update every row of {table}")

        assignments = ", ".join(f"{column} = ?" for column, _ in sets)
        return self.executor.execute(
            f"UPDATE {_check_table(table)} SET {assignments} WHERE {clause}",
            *[value for _, value in sets],
            *where_args,
        )

    def delete(self, table: str, filter: Any) -> int:
        clause, args = _filter_clause(filter)
        if not clause:
            raise ValidationError(f"refusing to delete every row of {table}")

        return self.executor.execute(f"DELETE FROM {_check_table(table)} WHERE {clause}", *args)

    @contextmanager
    def transaction(self) -> Iterator["RecordMapper"]:
        with self.executor.transaction() as executor:
            yield RecordMapper(executor)
