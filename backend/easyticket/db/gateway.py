from typing import Any, Iterable, Optional, Type, TypeVar
from sqlalchemy.orm import Session

T = TypeVar("T")


class DocumentGateway:
    """Collection-style operations over a single SQLAlchemy session.

    A "collection" is a mapped model class. Keyword filters are equality
    matches on columns; positional criteria are arbitrary SQLAlchemy
    expressions (used as guards for compare-and-set style updates).

    Each write is one SQL statement and therefore atomic on its own row(s).
    The gateway never commits: whoever opened the session decides when the
    unit of work is committed or rolled back.
    """

    def __init__(self, db: Session):
        self.db = db

    def find_one(self, model: Type[T], *criteria, **filters) -> Optional[T]:
        return self.db.query(model).filter(*criteria).filter_by(**filters).first()

    def get(self, model: Type[T], ident: Any) -> Optional[T]:
        return self.db.get(model, ident)

    def find(
        self,
        model: Type[T],
        *criteria,
        sort: Iterable[Any] | None = None,
        skip: int = 0,
        limit: int | None = None,
        **filters,
    ) -> list[T]:
        q = self.db.query(model).filter(*criteria).filter_by(**filters)
        if sort is not None:
            q = q.order_by(*sort)
        if skip:
            q = q.offset(skip)
        if limit is not None:
            q = q.limit(limit)
        return q.all()

    def insert_one(self, obj: Any) -> int:
        """Add and flush so constraint violations raise IntegrityError here."""
        self.db.add(obj)
        self.db.flush()
        return obj.id

    def update_one(
        self,
        model: Type[T],
        ident: Any,
        *criteria,
        values: dict[str, Any] | None = None,
        increments: dict[str, int] | None = None,
    ) -> int:
        """Update the row with primary key ``ident`` if it also matches ``criteria``.

        ``values`` are set, ``increments`` are added to the current column value,
        both in one UPDATE statement. Returns the matched row count (0 or 1).
        """
        return self._update(model, [model.id == ident, *criteria], values, increments)  # type: ignore[attr-defined]

    def update_many(self, model: Type[T], *criteria, values: dict[str, Any] | None = None, **filters) -> int:
        eq = [getattr(model, k) == v for k, v in filters.items()]
        return self._update(model, [*criteria, *eq], values, None)

    def count_documents(self, model: Type[T], *criteria, **filters) -> int:
        return self.db.query(model).filter(*criteria).filter_by(**filters).count()

    def aggregate(self, model: Type[T], *exprs, **filters) -> tuple:
        """Evaluate aggregate expressions (sum, count, ...) over the matching rows."""
        eq = [getattr(model, k) == v for k, v in filters.items()]
        return tuple(self.db.query(*exprs).select_from(model).filter(*eq).one())

    def delete_one(self, model: Type[T], ident: Any) -> int:
        obj = self.db.get(model, ident)
        if obj is None:
            return 0
        self.db.delete(obj)
        self.db.flush()
        return 1

    def _update(self, model, criteria: list, values, increments) -> int:
        patch: dict[Any, Any] = {}
        for key, val in (values or {}).items():
            patch[getattr(model, key)] = val
        for key, delta in (increments or {}).items():
            col = getattr(model, key)
            patch[col] = col + delta
        if not patch:
            raise ValueError("update requires values or increments")
        matched = self.db.query(model).filter(*criteria).update(patch, synchronize_session="fetch")
        return int(matched or 0)


LIKE_ESCAPE = "\\"


def contains_pattern(term: str) -> str:
    """``%term%`` with LIKE wildcards in ``term`` matched literally (use with ``escape=LIKE_ESCAPE``)."""
    escaped = term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2).replace("%", LIKE_ESCAPE + "%").replace("_", LIKE_ESCAPE + "_")
    return f"%{escaped}%"
