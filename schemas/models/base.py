"""
Base model for all table-store row models.

TableRowModel provides to_entity() / from_entity() for round-tripping between
Python objects and the TableEntity rows exchanged with a TableStore. The
subject key is always the partition key; subclasses decide the row key.
"""

from __future__ import annotations

from typing import Optional, TypeVar

from pydantic import BaseModel, ConfigDict

from infrastructure.storage.protocol import TableEntity

RowT = TypeVar("RowT", bound="TableRowModel")


class TableRowModel(BaseModel):
    """
    Base for all row models.

    to_entity()   - converts model → TableEntity with JSON-safe properties
    from_entity() - converts TableEntity → model instance (returns None
                    gracefully when passed None); the row's etag is offered
                    to the model as ``concurrency_token``
    """

    model_config = ConfigDict(populate_by_name=True)

    subject_key: str

    @property
    def row_key(self) -> str:
        raise NotImplementedError

    def to_entity(self) -> TableEntity:
        """Return a TableEntity ready for the store (etag left to the store)."""
        return TableEntity(
            partition_key=self.subject_key,
            row_key=self.row_key,
            properties=self.model_dump(mode="json"),
        )

    @classmethod
    def from_entity(cls: type[RowT], entity: Optional[TableEntity]) -> Optional[RowT]:
        """Build a model instance from a stored row.

        Returns None when entity is None (e.g. a point read found nothing).
        """
        if entity is None:
            return None
        return cls.model_validate(
            {**entity.properties, "concurrency_token": entity.etag}
        )
