"""Record stores: the persistence seam of the import pipeline."""

from prospect_ingestion.store.base import RecordStore
from prospect_ingestion.store.memory import InMemoryRecordStore
from prospect_ingestion.store.sqlalchemy_store import SqlAlchemyRecordStore

__all__ = ["InMemoryRecordStore", "RecordStore", "SqlAlchemyRecordStore"]
