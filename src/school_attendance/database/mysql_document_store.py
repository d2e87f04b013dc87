from __future__ import annotations

import json
import re
import uuid
from typing import Any, Mapping, Optional

import mysql.connector

from ..core.exceptions import DuplicateRecordError, RecordNotFoundError
from .connection import DatabaseConnection
from .document_store import Cursor, Document, SubscribableStoreMixin, check_direction
from .mysql_base import db_cursor, fetchall, fetchone, load_json_body

_FIELD_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _field_expr(field: str) -> str:
    # Field names are interpolated into SQL, so only plain identifiers pass.
    if not _FIELD_RE.match(field):
        raise ValueError(f"Invalid document field name: {field!r}")
    return f"JSON_UNQUOTE(JSON_EXTRACT(body, '$.{field}'))"


def _where(collection: str, filters: Optional[Mapping[str, Any]]) -> tuple[list[str], list[Any]]:
    clauses = ["collection=%s"]
    params: list[Any] = [collection]
    for field, value in (filters or {}).items():
        if not _FIELD_RE.match(field):
            raise ValueError(f"Invalid document field name: {field!r}")
        clauses.append(f"JSON_EXTRACT(body, '$.{field}') = CAST(%s AS JSON)")
        params.append(json.dumps(value))
    return clauses, params


class MySQLDocumentStore(SubscribableStoreMixin):
    """Documents kept as JSON rows of a single ``documents`` table.

    Subscriptions are served from the in-process listener registry, so they
    observe writes made through this instance.
    """

    def __init__(self, conn_factory: DatabaseConnection):
        super().__init__()
        self._conn_factory = conn_factory

    def insert(self, collection: str, data: Mapping[str, Any], *, doc_id: Optional[str] = None) -> str:
        doc_id = doc_id or uuid.uuid4().hex
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "INSERT INTO documents(collection, doc_id, body) VALUES(%s,%s,%s)",
                    (collection, doc_id, json.dumps(dict(data))),
                )
        except mysql.connector.IntegrityError as exc:
            raise DuplicateRecordError(f"{collection}/{doc_id} already exists") from exc
        self._notify(collection)
        return doc_id

    def update(self, collection: str, doc_id: str, fields: Mapping[str, Any]) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT body FROM documents WHERE collection=%s AND doc_id=%s FOR UPDATE",
                (collection, doc_id),
            )
            row = fetchone(cur)
            if not row:
                raise RecordNotFoundError(f"{collection}/{doc_id} does not exist")
            body = load_json_body(row["body"])
            body.update(dict(fields))
            cur.execute(
                "UPDATE documents SET body=%s WHERE collection=%s AND doc_id=%s",
                (json.dumps(body), collection, doc_id),
            )
        self._notify(collection)

    def delete(self, collection: str, doc_id: str) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM documents WHERE collection=%s AND doc_id=%s", (collection, doc_id))
            if cur.rowcount == 0:
                raise RecordNotFoundError(f"{collection}/{doc_id} does not exist")
        self._notify(collection)

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT doc_id, body FROM documents WHERE collection=%s AND doc_id=%s",
                (collection, doc_id),
            )
            row = fetchone(cur)
            if not row:
                return None
            return Document(row["doc_id"], load_json_body(row["body"]))

    def query_equal(self, collection: str, filters: Optional[Mapping[str, Any]] = None) -> list[Document]:
        clauses, params = _where(collection, filters)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT doc_id, body FROM documents WHERE {' AND '.join(clauses)}",
                tuple(params),
            )
            return [Document(r["doc_id"], load_json_body(r["body"])) for r in fetchall(cur)]

    def query_range(
        self,
        collection: str,
        *,
        order_field: str,
        direction: str = "desc",
        limit: Optional[int] = None,
        after: Optional[Cursor] = None,
        filters: Optional[Mapping[str, Any]] = None,
    ) -> list[Document]:
        descending = check_direction(direction)
        order_expr = _field_expr(order_field)
        clauses, params = _where(collection, filters)

        if after is not None:
            op = "<" if descending else ">"
            clauses.append(f"({order_expr} {op} %s OR ({order_expr} = %s AND doc_id {op} %s))")
            params.extend([after[0], after[0], after[1]])

        sql_dir = "DESC" if descending else "ASC"
        sql = (
            f"SELECT doc_id, body FROM documents WHERE {' AND '.join(clauses)} "
            f"ORDER BY {order_expr} {sql_dir}, doc_id {sql_dir}"
        )
        if limit is not None:
            sql += " LIMIT %s"
            params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [Document(r["doc_id"], load_json_body(r["body"])) for r in fetchall(cur)]

    def count(self, collection: str, filters: Optional[Mapping[str, Any]] = None) -> int:
        clauses, params = _where(collection, filters)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT COUNT(*) AS total FROM documents WHERE {' AND '.join(clauses)}",
                tuple(params),
            )
            row = fetchone(cur)
            return int(row["total"]) if row else 0
