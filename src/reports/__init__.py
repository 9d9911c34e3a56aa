"""SiteLens report assembly package."""

from reports.assembler import AuditTimeoutError, ReportAssembler, build_assembler
from reports.jobs import CeleryJobRunner, InlineJobRunner, JobHandle, JobRunner, JobStatus
from reports.progress import AuditStage, ProgressBroker, ProgressEvent

__all__ = [
    "AuditTimeoutError",
    "ReportAssembler",
    "build_assembler",
    "CeleryJobRunner",
    "InlineJobRunner",
    "JobHandle",
    "JobRunner",
    "JobStatus",
    "AuditStage",
    "ProgressBroker",
    "ProgressEvent",
]
