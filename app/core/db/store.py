"""
Thin persistence adapter over a Beanie document class.

Every entity kind gets one EntityStore; stores hold no cross-entity logic.
"""
import logging
from typing import Any, Callable, Generic, List, Optional, Tuple, Type, TypeVar

from pymongo.errors import DuplicateKeyError

from app.core.exceptions import NotFoundError
from app.core.models.base import AppDocument

logger = logging.getLogger(__name__)

DocT = TypeVar("DocT", bound=AppDocument)


class EntityStore(Generic[DocT]):

    def __init__(self, model: Type[DocT], label: str):
        self.model = model
        self.label = label

    async def create(self, doc: DocT) -> DocT:
        await doc.insert()
        return doc

    async def get(self, doc_id: str) -> Optional[DocT]:
        return await self.model.get(doc_id)

    async def get_or_404(self, doc_id: str) -> DocT:
        doc = await self.model.get(doc_id)
        if doc is None:
            raise NotFoundError(f"{self.label} not found")
        return doc

    async def find_one(self, *criteria: Any) -> Optional[DocT]:
        return await self.model.find_one(*criteria)

    async def find(self, *criteria: Any, sort: Optional[str] = None) -> List[DocT]:
        query = self.model.find(*criteria)
        if sort:
            query = query.sort(sort)
        return await query.to_list()

    async def all(self, sort: Optional[str] = "-created_at") -> List[DocT]:
        query = self.model.find_all()
        if sort:
            query = query.sort(sort)
        return await query.to_list()

    async def save(self, doc: DocT) -> DocT:
        doc.touch()
        await doc.save()
        return doc

    async def update(self, doc_id: str, **fields: Any) -> DocT:
        doc = await self.get_or_404(doc_id)
        for key, value in fields.items():
            setattr(doc, key, value)
        return await self.save(doc)

    async def delete(self, doc_id: str) -> bool:
        doc = await self.model.get(doc_id)
        if doc is None:
            return False
        await doc.delete()
        return True

    async def clear_all(self) -> int:
        result = await self.model.delete_all()
        return result.deleted_count if result else 0

    async def get_or_create(
        self, factory: Callable[[], DocT], *criteria: Any
    ) -> Tuple[DocT, bool]:
        """
        Lookup-or-create keyed by `criteria`.

        The insert is guarded by the collection's unique index: if a concurrent
        caller inserted the same key first, its document is returned instead.

        Returns:
            (document, created)
        """
        existing = await self.model.find_one(*criteria)
        if existing is not None:
            return existing, False

        doc = factory()
        try:
            await doc.insert()
        except DuplicateKeyError:
            existing = await self.model.find_one(*criteria)
            if existing is None:
                raise
            logger.info("Concurrent insert detected for %s; reusing %s", self.label, existing.id)
            return existing, False
        return doc, True
