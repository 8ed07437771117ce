"""
Record resolvers: look up the physical record behind a `folder/name` reference.
"""
from __future__ import annotations
from pathlib import Path
from typing import Dict, Mapping, Optional, Protocol, Tuple, Union
import logging

from railconsist import defaults
from railconsist.records import NotFound, PhysicalRecord
from railconsist.serde import MalformedDefinition

log = logging.getLogger(__name__)

Resolution = Union[PhysicalRecord, NotFound]


class RecordResolver(Protocol):
    def resolve(self, folder: str, name: str, is_engine: bool) -> Resolution:
        ...


def _key(folder: str, name: str) -> Tuple[str, str]:
    # trainset paths are case-insensitive, as they are on the systems that ship them
    return folder.lower(), name.lower()


class DictResolver:
    """
    Resolves references from an in-memory mapping of `(folder, name)` to record.
    """

    def __init__(self, records: Optional[Mapping[Tuple[str, str], PhysicalRecord]] = None):
        self.records: Dict[Tuple[str, str], PhysicalRecord] = {}
        for (folder, name), record in (records or {}).items():
            self.add(folder, name, record)

    def add(self, folder: str, name: str, record: PhysicalRecord) -> None:
        self.records[_key(folder, name)] = record

    def resolve(self, folder: str, name: str, is_engine: bool) -> Resolution:
        record = self.records.get(_key(folder, name))
        if record is None:
            return NotFound(f"{folder}/{name}")
        return record


class TrainsetResolver:
    """
    Resolves references from serialized records in a route's trainset tree:
    `<route_root>/Trains/Trainset/<folder>/<name>.eng.yaml` for engines and
    `<name>.wag.yaml` for wagons (`.yml` and `.json` are accepted too).
    """

    def __init__(self, route_root: Union[str, Path]):
        self.trainset_root = Path(route_root).joinpath(*defaults.TRAINSET_DIR)
        if not self.trainset_root.is_dir():
            log.warning(f"trainset directory does not exist: {self.trainset_root}")

    def _find_in(self, folder: Path, stem: str) -> Optional[Path]:
        files = {p.name.lower(): p for p in sorted(folder.iterdir()) if p.is_file()}
        for fmt in defaults.RECORD_FORMATS:
            if stem + fmt in files:
                return files[stem + fmt]
        return None

    def find(self, folder: str, name: str, is_engine: bool) -> Optional[Path]:
        suffix = defaults.ENGINE_SUFFIX if is_engine else defaults.WAGON_SUFFIX
        stem = (name + suffix).lower()
        folder_path = self.trainset_root / folder
        if not folder_path.is_dir():
            # fall back to a case-insensitive folder match
            if not self.trainset_root.is_dir():
                return None
            matches = [
                p for p in sorted(self.trainset_root.iterdir())
                if p.is_dir() and p.name.lower() == folder.lower()
            ]
            if not matches:
                return None
            folder_path = matches[0]
        return self._find_in(folder_path, stem)

    def resolve(self, folder: str, name: str, is_engine: bool) -> Resolution:
        reference = f"{folder}/{name}"
        try:
            path = self.find(folder, name, is_engine)
            if path is None:
                return NotFound(reference, f"no record file under {self.trainset_root / folder}")
            return PhysicalRecord.from_file(path)
        except MalformedDefinition as err:
            log.warning(f"malformed record {reference}: {err}")
            return NotFound(reference, f"malformed record: {err}")
        except OSError as err:
            log.warning(f"could not read record {reference}: {err}")
            return NotFound(reference, str(err))


class CachedResolver:
    """
    Memoises another resolver's results per `(folder, name, is_engine)`, so a
    batch of consists sharing rolling stock reads each record once.
    """

    def __init__(self, inner: RecordResolver):
        self.inner = inner
        self._cache: Dict[Tuple[str, str, bool], Resolution] = {}

    def resolve(self, folder: str, name: str, is_engine: bool) -> Resolution:
        key = _key(folder, name) + (is_engine,)
        if key not in self._cache:
            self._cache[key] = self.inner.resolve(folder, name, is_engine)
        return self._cache[key]

    def clear(self) -> None:
        self._cache.clear()
