"""Ordered, value-semantics collection of scan records and the export snapshot."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Iterator, Mapping

from .config import ScanConfig
from .types import JSONDict, ScanRecord
from .url import hostname_of


RecordInput = ScanRecord | Mapping[str, Any]
Predicate = Callable[[ScanRecord], bool]


def _coerce(item: RecordInput) -> ScanRecord:
    if isinstance(item, ScanRecord):
        return item
    if isinstance(item, Mapping):
        return ScanRecord.from_json(item)
    raise TypeError(f"Cannot build a ScanRecord from {type(item)!r}")


def _coerce_many(items: RecordInput | Iterable[RecordInput]) -> tuple[ScanRecord, ...]:
    if isinstance(items, (ScanRecord, Mapping)):
        return (_coerce(items),)
    return tuple(_coerce(item) for item in items)


class ResultSet:
    """Scan records in discovery order.

    Instances never change after construction: `append` and `prepend` build
    new sets. Uniqueness is not enforced here; the engine's visited set
    guarantees it for scan output.
    """

    __slots__ = ("_items",)

    def __init__(self, items: Iterable[RecordInput] = ()) -> None:
        self._items: tuple[ScanRecord, ...] = _coerce_many(items)

    def append(self, items: RecordInput | Iterable[RecordInput]) -> "ResultSet":
        return ResultSet(self._items + _coerce_many(items))

    def prepend(self, items: RecordInput | Iterable[RecordInput]) -> "ResultSet":
        return ResultSet(_coerce_many(items) + self._items)

    def match(self, condition: Predicate | Mapping[str, Any]) -> "ResultSet":
        """Return records satisfying a predicate, or whose fields equal a mapping."""

        if isinstance(condition, Mapping):
            expected = dict(condition)

            def predicate(record: ScanRecord) -> bool:
                return all(record.get(key) == value for key, value in expected.items())

        else:
            predicate = condition

        return ResultSet(record for record in self._items if predicate(record))

    def extract(self, name: str) -> list[Any]:
        return [record.get(name) for record in self._items]

    def count(self) -> int:
        return len(self._items)

    def is_empty(self) -> bool:
        return not self._items

    def to_list(self) -> list[ScanRecord]:
        return list(self._items)

    def to_json(self) -> list[JSONDict]:
        return [record.to_json() for record in self._items]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[ScanRecord]:
        return iter(self._items)

    def __getitem__(self, index: int) -> ScanRecord:
        return self._items[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ResultSet):
            return NotImplemented
        return self._items == other._items

    def __repr__(self) -> str:
        return f"ResultSet({len(self._items)} records)"


@dataclass(frozen=True, slots=True)
class ScanSnapshot:
    """Structured payload written by the exporter and rebuilt by the importer."""

    full_base_url: str
    max_depth: int
    start_time: int
    elapsed_time: int
    links: ResultSet = field(default_factory=ResultSet)
    hostname: str = ""

    def __post_init__(self) -> None:
        if not self.hostname:
            object.__setattr__(self, "hostname", hostname_of(self.full_base_url))

    def to_config(self, base: ScanConfig | None = None) -> ScanConfig:
        """Return `base` (or a default config) carrying the persisted settings."""

        base = base or ScanConfig()
        return base.copy(full_base_url=self.full_base_url, max_depth=self.max_depth)

    @property
    def checked_links(self) -> int:
        return self.links.count()

    def to_json(self) -> JSONDict:
        return {
            "fullBaseUrl": self.full_base_url,
            "hostname": self.hostname,
            "maxDepth": self.max_depth,
            "startTime": self.start_time,
            "elapsedTime": self.elapsed_time,
            "checkedLinks": self.checked_links,
            "links": self.links.to_json(),
        }

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> "ScanSnapshot":
        return cls(
            full_base_url=str(payload["fullBaseUrl"]),
            hostname=str(payload.get("hostname") or ""),
            max_depth=int(payload["maxDepth"]),
            start_time=int(payload["startTime"]),
            elapsed_time=int(payload["elapsedTime"]),
            links=ResultSet(payload.get("links") or ()),
        )


__all__ = [
    "Predicate",
    "RecordInput",
    "ResultSet",
    "ScanSnapshot",
]
