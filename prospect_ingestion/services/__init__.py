"""Import services (orchestration, batch commit, reporting)."""

from prospect_ingestion.services.aggregator import ReportAggregator
from prospect_ingestion.services.committer import BatchCommitter, CommitResult
from prospect_ingestion.services.import_service import ImportPreview, ImportService

__all__ = [
    "BatchCommitter",
    "CommitResult",
    "ImportPreview",
    "ImportService",
    "ReportAggregator",
]
