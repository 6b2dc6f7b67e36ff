from typing import Protocol
from dataclasses import dataclass


@dataclass
class StoredObject:
    url: str
    storage_key: str


class ObjectStorage(Protocol):
    def upload(self, data: bytes, folder: str, public_id: str, content_type: str) -> StoredObject:
        ...

    def delete(self, storage_key: str) -> None:
        ...
