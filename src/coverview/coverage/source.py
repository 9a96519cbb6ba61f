"""Coverage sources: where a root's ``CoverageRecordSet`` comes from.

Parsing raw report formats (lcov, cobertura, ...) is the job of whatever
produced the records. ``JsonRecordSource`` reads records that are already
structured, serialized as::

    {"files": [{"file_path": "src/a.ts", "lines_found": 10, "lines_hit": 7,
                "functions": [{"name": "f", "source_line": 3, "hit_count": 2}]}]}
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

import structlog
from pydantic import BaseModel, Field, ValidationError, model_validator

from coverview.core.errors import LoadError
from coverview.core.excludes import should_prune_dir
from coverview.coverage.models import CoverageRecord, CoverageRecordSet, FunctionDetail

if TYPE_CHECKING:
    from coverview.config.store import ConfigStore
    from coverview.workspace import MonitoredRoot

logger = structlog.get_logger()

DEFAULT_RECORDS_FILE = "coverview-records.json"


class CoverageSource(Protocol):
    """Loads the current coverage records of one root."""

    async def load_coverage(self, root: MonitoredRoot) -> CoverageRecordSet:
        """Return the root's records. Raises ``LoadError`` on failure."""
        ...


class _FunctionPayload(BaseModel):
    name: str
    source_line: int = Field(ge=0)
    hit_count: int = Field(ge=0)


class _RecordPayload(BaseModel):
    file_path: str = Field(min_length=1)
    lines_found: int = Field(ge=0)
    lines_hit: int = Field(ge=0)
    functions: list[_FunctionPayload] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_hits(self) -> _RecordPayload:
        if self.lines_hit > self.lines_found:
            raise ValueError(
                f"lines_hit ({self.lines_hit}) exceeds lines_found ({self.lines_found})"
            )
        return self

    def to_record(self) -> CoverageRecord:
        return CoverageRecord(
            file_path=self.file_path,
            lines_found=self.lines_found,
            lines_hit=self.lines_hit,
            functions=tuple(
                FunctionDetail(name=f.name, source_line=f.source_line, hit_count=f.hit_count)
                for f in self.functions
            ),
        )


class _RecordsDocument(BaseModel):
    files: list[_RecordPayload] = Field(default_factory=list)


def parse_records_document(content: str) -> list[CoverageRecord]:
    """Validate a JSON records document.

    Raises:
        ValueError: On malformed JSON or schema violations.
    """
    try:
        document = _RecordsDocument.model_validate(json.loads(content))
    except json.JSONDecodeError as e:
        raise ValueError(f"invalid JSON: {e}") from e
    except ValidationError as e:
        err = e.errors()[0]
        where = ".".join(str(loc) for loc in err["loc"])
        raise ValueError(f"{where}: {err['msg']}") from e
    return [payload.to_record() for payload in document.files]


class JsonRecordSource:
    """Reads JSON record documents found under a root's coverage directories."""

    def __init__(self, config_store: ConfigStore, file_name: str = DEFAULT_RECORDS_FILE) -> None:
        self._config_store = config_store
        self._file_name = file_name

    def find_documents(self, root: MonitoredRoot) -> list[Path]:
        config = self._config_store.get(root)
        found: set[Path] = set()
        for entry in config.coverage_file_patterns:
            entry = entry.strip("/")
            if not entry:
                continue
            for candidate in root.path.glob(f"**/{entry}/{self._file_name}"):
                rel_parts = candidate.relative_to(root.path).parts[:-1]
                if any(should_prune_dir(part) for part in rel_parts):
                    continue
                if candidate.is_file():
                    found.add(candidate)
        return sorted(found)

    async def load_coverage(self, root: MonitoredRoot) -> CoverageRecordSet:
        return await asyncio.to_thread(self._load_sync, root)

    def _load_sync(self, root: MonitoredRoot) -> CoverageRecordSet:
        records: list[CoverageRecord] = []
        for document in self.find_documents(root):
            try:
                content = document.read_text()
            except (OSError, UnicodeDecodeError) as e:
                raise LoadError.for_root(str(root.path), str(e), document=str(document)) from e
            try:
                records.extend(parse_records_document(content))
            except ValueError as e:
                raise LoadError.for_root(str(root.path), str(e), document=str(document)) from e
            logger.debug("coverage_document_loaded", root=root.name, document=str(document))

        record_set = CoverageRecordSet.of(records)
        logger.info("coverage_loaded", root=root.name, files=len(record_set))
        return record_set
