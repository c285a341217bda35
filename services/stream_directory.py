import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

PLATFORM_SEPARATOR = ' :: '
ALL_PLATFORMS = '*ALL*'

class StreamParseError(ValueError):
    """A single stream document could not be turned into a StreamRecord"""

@dataclass(frozen=True)
class PlatformRecord:
    id: str
    name: str
    enabled: bool = False
    broadcasting_status: Optional[str] = None

@dataclass(frozen=True)
class StreamRecord:
    id: str
    name: str
    enabled: bool = False
    broadcasting_status: Optional[str] = None
    ingest_server: str = ''
    ingest_key: str = ''
    platforms: Tuple[PlatformRecord, ...] = ()

def platform_reference(stream_name: str, platform_name: str) -> str:
    """Build a "{stream} :: {platform}" reference string"""
    return f"{stream_name}{PLATFORM_SEPARATOR}{platform_name}"

def _required_str(doc: Mapping[str, Any], key: str, what: str) -> str:
    value = doc.get(key)
    if value is None or isinstance(value, (dict, list)):
        raise StreamParseError(f"{what} is missing a valid '{key}'")
    return str(value)

def parse_platform(doc: Any) -> PlatformRecord:
    if not isinstance(doc, Mapping):
        raise StreamParseError(f"platform entry is not an object: {doc!r}")
    return PlatformRecord(
        id=_required_str(doc, '_id', 'platform'),
        name=_required_str(doc, 'name', 'platform'),
        enabled=bool(doc.get('enabled') or False),
        broadcasting_status=doc.get('broadcasting_status')
    )

def parse_stream(doc: Any) -> StreamRecord:
    """Convert one element of the API "docs" list into a StreamRecord"""
    if not isinstance(doc, Mapping):
        raise StreamParseError(f"stream entry is not an object: {doc!r}")

    stream_id = _required_str(doc, '_id', 'stream')
    ingest = doc.get('ingest') or {}
    if not isinstance(ingest, Mapping):
        raise StreamParseError(f"stream '{stream_id}' has a malformed ingest block")

    platforms = doc.get('platforms') or []
    if not isinstance(platforms, list):
        raise StreamParseError(f"stream '{stream_id}' has a malformed platform list")

    return StreamRecord(
        id=stream_id,
        name=_required_str(doc, 'name', f"stream '{stream_id}'"),
        enabled=bool(doc.get('enabled') or False),
        broadcasting_status=doc.get('broadcasting_status'),
        ingest_server=str(ingest.get('server') or ''),
        ingest_key=str(ingest.get('key') or ''),
        platforms=tuple(parse_platform(p) for p in platforms)
    )

@dataclass(frozen=True)
class DirectorySnapshot:
    """Immutable view of every stream known after one poll"""
    streams: Tuple[StreamRecord, ...] = ()
    by_id: Mapping[str, StreamRecord] = field(default_factory=lambda: MappingProxyType({}))
    by_name: Mapping[str, StreamRecord] = field(default_factory=lambda: MappingProxyType({}))
    # "{stream} :: {platform}" -> (stream id, platform id)
    platform_index: Mapping[str, Tuple[str, str]] = field(default_factory=lambda: MappingProxyType({}))
    references: Tuple[str, ...] = ()

    def __len__(self) -> int:
        return len(self.streams)

    @classmethod
    def build(cls, records: Iterable[StreamRecord]) -> 'DirectorySnapshot':
        streams: List[StreamRecord] = []
        by_id: Dict[str, StreamRecord] = {}
        by_name: Dict[str, StreamRecord] = {}
        platform_index: Dict[str, Tuple[str, str]] = {}
        references: List[str] = []

        for record in records:
            streams.append(record)
            by_id[record.id] = record
            by_name[record.name] = record
            references.append(platform_reference(record.name, ALL_PLATFORMS))
            for platform in record.platforms:
                ref = platform_reference(record.name, platform.name)
                references.append(ref)
                platform_index[ref] = (record.id, platform.id)

        return cls(
            streams=tuple(streams),
            by_id=MappingProxyType(by_id),
            by_name=MappingProxyType(by_name),
            platform_index=MappingProxyType(platform_index),
            references=tuple(sorted(references))
        )

class StreamDirectory:
    """In-memory source of truth for streams, replaced on every successful poll"""

    def __init__(self):
        self._snapshot = DirectorySnapshot()

    @property
    def snapshot(self) -> DirectorySnapshot:
        return self._snapshot

    def rebuild(self, docs: Iterable[Any]) -> DirectorySnapshot:
        """Rebuild from the API document list, skipping records that fail to parse"""
        records = []
        skipped = 0
        for doc in docs or []:
            try:
                records.append(parse_stream(doc))
            except StreamParseError as e:
                skipped += 1
                logger.error(f"failed to parse stream data: {e}")

        snapshot = DirectorySnapshot.build(records)
        self._snapshot = snapshot
        logger.debug(f"Directory rebuilt with {len(snapshot)} streams ({skipped} skipped)")
        return snapshot

    def clear(self) -> None:
        self._snapshot = DirectorySnapshot()

    def get(self, stream_id: str) -> Optional[StreamRecord]:
        return self._snapshot.by_id.get(stream_id)

    def get_by_name(self, name: str) -> Optional[StreamRecord]:
        return self._snapshot.by_name.get(name)

    def __contains__(self, stream_id: str) -> bool:
        return stream_id in self._snapshot.by_id

    def __len__(self) -> int:
        return len(self._snapshot)
