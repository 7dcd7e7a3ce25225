from __future__ import annotations

from sqlalchemy import update
from sqlalchemy.orm import Session

from disc_specs.entities.collection_item import CollectionItem
from disc_specs.repositories.base_repo import BaseRepository


class CollectionItemRepository(BaseRepository[CollectionItem]):
    def __init__(self, session: Session) -> None:
        super().__init__(session=session, model=CollectionItem)

    def attach_spec(self, collection_item_id: int, spec_id: int, *, commit: bool = True) -> bool:
        """Point a collection item at its technical specs. False if the item does not exist."""
        stmt = (
            update(CollectionItem)
            .where(CollectionItem.id == collection_item_id)
            .values(technical_specs_id=spec_id)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        if commit:
            self.session.commit()
        return result.rowcount == 1
