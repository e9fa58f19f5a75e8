"""TableStore protocol - services depend on this, not the concrete implementation.

Rows are addressed by ``(partition_key, row_key)``. Every write stamps a new
opaque ``etag``; ``update_entity`` only succeeds when the caller presents the
etag it read, which is the only coordination primitive the OTP services use.
"""

from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Optional, Protocol


@dataclass
class TableEntity:
    partition_key: str
    row_key: str
    properties: dict[str, Any] = field(default_factory=dict)
    etag: Optional[str] = None


class TableStore(Protocol):
    async def get_entity(
        self, partition_key: str, row_key: str
    ) -> Optional[TableEntity]: ...

    async def upsert_entity(
        self, entity: TableEntity, ttl_seconds: Optional[int] = None
    ) -> TableEntity: ...

    async def update_entity(self, entity: TableEntity, etag: str) -> bool: ...

    async def delete_entity(self, partition_key: str, row_key: str) -> None: ...

    def query_entities(
        self,
        partition_key: str,
        row_key_from: Optional[str] = None,
        row_key_to: Optional[str] = None,
    ) -> AsyncIterator[TableEntity]: ...

    async def ping(self) -> bool: ...

    async def aclose(self) -> None: ...
