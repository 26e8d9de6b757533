"""Core records shared between the scheduler, the workers and the storage."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import IntEnum

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass
class Data:
    """A stored value together with its locality preferences."""

    value: str = ""
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    locality: list[str] = field(default_factory=list)
    hard_locality: bool = False


@dataclass(frozen=True)
class Driver:
    """A process registered with the metadata storage."""

    id: uuid.UUID
    addr: str


@dataclass(frozen=True)
class Scheduler:
    """A scheduler reachable at an address and port."""

    id: uuid.UUID
    addr: str
    port: int


class StorageErrorType(IntEnum):
    """Kinds of failure reported by a storage backend."""

    SUCCESS = 0
    CONNECTION = 1
    DB_NOT_FOUND = 2
    KEY_NOT_FOUND = 3
    DUPLICATE_KEY = 4
    CONSTRAINT_VIOLATION = 5
    OTHER = 6


class StorageError(Exception):
    """Raised when a storage operation fails."""

    def __init__(self, type: StorageErrorType, description: str = "") -> None:
        super().__init__(type, description)
        self.type = type
        self.description = description

    def __str__(self) -> str:
        if self.description:
            return f"{self.type.name}: {self.description}"
        return self.type.name


@dataclass(frozen=True)
class JobMetadata:
    """Identity, owner and creation time of a submitted job."""

    id: uuid.UUID = field(default_factory=lambda: uuid.UUID(int=0))
    client_id: uuid.UUID = field(default_factory=lambda: uuid.UUID(int=0))
    creation_time: datetime = _EPOCH


class JobStatus(IntEnum):
    """Lifecycle state of a job."""

    RUNNING = 0
    SUCCEEDED = 1
    FAILED = 2
    CANCELLED = 3


@dataclass(frozen=True)
class KeyValueData:
    """A key/value pair owned by a client or task."""

    key: str
    value: str
    id: uuid.UUID