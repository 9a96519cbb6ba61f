"""Coverage records, sources and generation.

Usage:
    from coverview.coverage import CoverageRecord, CoverageRecordSet, JsonRecordSource

    source = JsonRecordSource(config_store)
    records = await source.load_coverage(root)
"""

from coverview.coverage.command import CommandRunner, ShellCommandRunner
from coverview.coverage.models import (
    CoverageLevel,
    CoverageLevelThresholds,
    CoverageRecord,
    CoverageRecordSet,
    FunctionDetail,
    line_percent,
)
from coverview.coverage.source import (
    DEFAULT_RECORDS_FILE,
    CoverageSource,
    JsonRecordSource,
    parse_records_document,
)

__all__ = [
    # Models
    "CoverageLevel",
    "CoverageLevelThresholds",
    "CoverageRecord",
    "CoverageRecordSet",
    "FunctionDetail",
    "line_percent",
    # Sources
    "DEFAULT_RECORDS_FILE",
    "CoverageSource",
    "JsonRecordSource",
    "parse_records_document",
    # Commands
    "CommandRunner",
    "ShellCommandRunner",
]
