"""Core module containing the scan executor, detection interface and data models."""

from secret_sweep.core.executor import (
    HEAD_BRANCH,
    BranchLevel,
    DataSource,
    Executor,
    ExecutorConfig,
    FilePayload,
    ReadFailurePolicy,
    build_source,
    merge_omit_patterns,
)
from secret_sweep.core.inspector import (
    DetectorRule,
    Inspector,
    PatternInspector,
    RuleSet,
    load_rules,
)
from secret_sweep.core.models import (
    BytesProcessed,
    DecoderType,
    ReportInput,
    Secret,
    SecretFound,
    new_report_queue,
)

__all__ = [
    "HEAD_BRANCH",
    "BranchLevel",
    "BytesProcessed",
    "DataSource",
    "DecoderType",
    "DetectorRule",
    "Executor",
    "ExecutorConfig",
    "FilePayload",
    "Inspector",
    "PatternInspector",
    "ReadFailurePolicy",
    "ReportInput",
    "RuleSet",
    "Secret",
    "SecretFound",
    "build_source",
    "load_rules",
    "merge_omit_patterns",
    "new_report_queue",
]
