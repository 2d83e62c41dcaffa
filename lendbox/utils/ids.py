"""Record identifier generation"""

import itertools
import uuid
from abc import ABC, abstractmethod
from collections import defaultdict
from typing import DefaultDict, Iterator


class IdGenerator(ABC):
    """Produces unique string ids for a record kind (e.g. "c" for clients)"""

    @abstractmethod
    def next_id(self, prefix: str) -> str:
        ...


class UuidIdGenerator(IdGenerator):
    def next_id(self, prefix: str) -> str:
        return f"{prefix}-{uuid.uuid4().hex}"


class SequentialIdGenerator(IdGenerator):
    """Deterministic ids (c1, c2, l1, ...) for tests and fixtures"""

    def __init__(self) -> None:
        self._counters: DefaultDict[str, Iterator[int]] = defaultdict(lambda: itertools.count(1))

    def next_id(self, prefix: str) -> str:
        return f"{prefix}{next(self._counters[prefix])}"
