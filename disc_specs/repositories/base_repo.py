from __future__ import annotations

from typing import Generic, TypeVar, Type, Optional, Any, Iterable
from sqlalchemy.orm import Session
from sqlalchemy import select

T = TypeVar("T")


class BaseRepository(Generic[T]):
    def __init__(self, session: Session, model: Type[T]) -> None:
        self.session = session
        self.model = model

    def create(self, obj: T, *, commit: bool = True) -> T:
        self.session.add(obj)
        if commit:
            self.session.commit()
            self.session.refresh(obj)
        else:
            self.session.flush()
        return obj

    def get_by_id(self, id_: Any) -> Optional[T]:
        return self.session.get(self.model, id_)

    def find_one(self, **criteria: Any) -> Optional[T]:
        """First row whose columns equal *criteria*; ``None`` values match NULL."""
        stmt = select(self.model)
        for field, value in criteria.items():
            column = getattr(self.model, field)
            stmt = stmt.where(column.is_(None) if value is None else column == value)
        return self.session.execute(stmt.limit(1)).scalars().first()

    def update(self, obj: T, *, commit: bool = True) -> T:
        obj = self.session.merge(obj)
        if commit:
            self.session.commit()
            self.session.refresh(obj)
        return obj

    def upsert(
        self,
        values: dict[str, Any],
        unique_fields: Iterable[str],
        *,
        commit: bool = True,
    ) -> T:
        """Insert a row built from *values* or overwrite the row matching its *unique_fields*."""
        existing = self.find_one(**{field: values.get(field) for field in unique_fields})

        if existing is not None:
            for key, value in values.items():
                if key == "id":
                    continue
                setattr(existing, key, value)
            if commit:
                self.session.commit()
                self.session.refresh(existing)
            else:
                self.session.flush()
            return existing

        return self.create(self.model(**values), commit=commit)
