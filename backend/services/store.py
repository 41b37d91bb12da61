"""Row store for verdicts, identities and audit logs.

The pipeline only sees ``BaseStore``. Two backends:
    - InMemoryStore: process-local dicts (default, tests)
    - JsonFileStore: same tables persisted to a single JSON file

Verdicts and identities are upserted (last writer wins, no locking across
requests). The override and disagreement logs are append-only.
"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path

from models.schemas.audit import DisagreementEntry, ManualOverrideEntry
from models.schemas.identity import IdentityRecord
from models.schemas.verdict import Verdict
from services.errors import StorageError

logger = logging.getLogger(__name__)


class BaseStore(ABC):
    """Storage collaborator used by the review pipeline."""

    @abstractmethod
    async def upsert_verdict(self, verdict: Verdict) -> Verdict:
        """Insert or replace the verdict keyed by (subject_id, question_number)."""

    @abstractmethod
    async def get_verdict(self, subject_id: str, question_number: int) -> Verdict | None:
        ...

    @abstractmethod
    async def list_verdicts(self, subject_id: str | None = None) -> list[Verdict]:
        """Verdicts for one subject (or all), in ascending question order."""

    @abstractmethod
    async def upsert_identity(self, record: IdentityRecord) -> IdentityRecord:
        ...

    @abstractmethod
    async def get_identity(self, subject_id: str) -> IdentityRecord | None:
        ...

    @abstractmethod
    async def append_override(self, entry: ManualOverrideEntry) -> None:
        ...

    @abstractmethod
    async def list_overrides(self, subject_id: str) -> list[ManualOverrideEntry]:
        ...

    @abstractmethod
    async def append_disagreement(self, entry: DisagreementEntry) -> None:
        ...

    @abstractmethod
    async def list_disagreements(self, subject_id: str) -> list[DisagreementEntry]:
        ...


def _sorted_verdicts(verdicts, subject_id: str | None) -> list[Verdict]:
    rows = [v for v in verdicts if subject_id is None or v.subject_id == subject_id]
    return sorted(rows, key=lambda v: (v.subject_id, v.question_number))


class InMemoryStore(BaseStore):
    def __init__(self) -> None:
        self._verdicts: dict[tuple[str, int], Verdict] = {}
        self._identities: dict[str, IdentityRecord] = {}
        self._overrides: list[ManualOverrideEntry] = []
        self._disagreements: list[DisagreementEntry] = []

    async def upsert_verdict(self, verdict: Verdict) -> Verdict:
        self._verdicts[(verdict.subject_id, verdict.question_number)] = verdict
        return verdict

    async def get_verdict(self, subject_id: str, question_number: int) -> Verdict | None:
        return self._verdicts.get((subject_id, question_number))

    async def list_verdicts(self, subject_id: str | None = None) -> list[Verdict]:
        return _sorted_verdicts(self._verdicts.values(), subject_id)

    async def upsert_identity(self, record: IdentityRecord) -> IdentityRecord:
        self._identities[record.subject_id] = record
        return record

    async def get_identity(self, subject_id: str) -> IdentityRecord | None:
        return self._identities.get(subject_id)

    async def append_override(self, entry: ManualOverrideEntry) -> None:
        self._overrides.append(entry)

    async def list_overrides(self, subject_id: str) -> list[ManualOverrideEntry]:
        return [e for e in self._overrides if e.subject_id == subject_id]

    async def append_disagreement(self, entry: DisagreementEntry) -> None:
        self._disagreements.append(entry)

    async def list_disagreements(self, subject_id: str) -> list[DisagreementEntry]:
        return [e for e in self._disagreements if e.subject_id == subject_id]


class JsonFileStore(InMemoryStore):
    """InMemoryStore that loads from and writes through to one JSON file."""

    def __init__(self, path: str | Path) -> None:
        super().__init__()
        self.path = Path(path)
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            return
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Could not read store file {self.path}: {e}") from e

        for row in data.get("verdicts", []):
            v = Verdict.model_validate(row)
            self._verdicts[(v.subject_id, v.question_number)] = v
        for row in data.get("identities", []):
            r = IdentityRecord.model_validate(row)
            self._identities[r.subject_id] = r
        self._overrides = [ManualOverrideEntry.model_validate(r) for r in data.get("overrides", [])]
        self._disagreements = [DisagreementEntry.model_validate(r) for r in data.get("disagreements", [])]
        logger.info("Loaded store from %s (%d verdicts)", self.path, len(self._verdicts))

    def _save(self) -> None:
        data = {
            "verdicts": [v.model_dump(mode="json") for v in self._verdicts.values()],
            "identities": [r.model_dump(mode="json") for r in self._identities.values()],
            "overrides": [e.model_dump(mode="json") for e in self._overrides],
            "disagreements": [e.model_dump(mode="json") for e in self._disagreements],
        }
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
            tmp_path.replace(self.path)
        except OSError as e:
            raise StorageError(f"Could not write store file {self.path}: {e}") from e

    # Each write is undone in memory when it cannot be saved, so the process
    # never serves a row that is not on disk.

    async def upsert_verdict(self, verdict: Verdict) -> Verdict:
        key = (verdict.subject_id, verdict.question_number)
        previous = self._verdicts.get(key)
        await super().upsert_verdict(verdict)
        try:
            self._save()
        except StorageError:
            _restore(self._verdicts, key, previous)
            raise
        return verdict

    async def upsert_identity(self, record: IdentityRecord) -> IdentityRecord:
        previous = self._identities.get(record.subject_id)
        await super().upsert_identity(record)
        try:
            self._save()
        except StorageError:
            _restore(self._identities, record.subject_id, previous)
            raise
        return record

    async def append_override(self, entry: ManualOverrideEntry) -> None:
        await super().append_override(entry)
        try:
            self._save()
        except StorageError:
            self._overrides.pop()
            raise

    async def append_disagreement(self, entry: DisagreementEntry) -> None:
        await super().append_disagreement(entry)
        try:
            self._save()
        except StorageError:
            self._disagreements.pop()
            raise


def _restore(table: dict, key, previous) -> None:
    if previous is None:
        table.pop(key, None)
    else:
        table[key] = previous


def create_store(backend: str, path: str | Path | None = None) -> BaseStore:
    """Factory: build a store by backend name."""
    if backend == "memory":
        return InMemoryStore()
    elif backend == "json":
        if not path:
            raise ValueError("JSON store requires a path")
        return JsonFileStore(path)
    else:
        raise ValueError(f"Unknown store backend: {backend}")
