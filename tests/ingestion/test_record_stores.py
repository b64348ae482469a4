"""Tests for the in-memory and SQLAlchemy record stores."""

from datetime import date
from uuid import uuid4

import pytest
from sqlalchemy import func, select

from prospect_kernel.domain.tiers import SubscriptionTier
from prospect_kernel.exceptions import StoreError
from prospect_kernel.models import Company, Contact
from prospect_ingestion.domain.types import CompanyDraft, ContactDraft, EntityKind
from prospect_ingestion.store import InMemoryRecordStore, RecordStore, SqlAlchemyRecordStore


def _company(name="Acme", row_index=0, **kwargs):
    return CompanyDraft(row_index=row_index, company_name=name, **kwargs)


def _contact(company_id, row_index=0, **kwargs):
    return ContactDraft(
        row_index=row_index,
        name="Jane Roe",
        job_title="CTO",
        company_name="Acme",
        company_id=company_id,
        **kwargs,
    )


class TestInMemoryRecordStore:
    def test_satisfies_protocol(self, memory_store):
        assert isinstance(memory_store, RecordStore)

    def test_find_returns_first_created(self, memory_store, test_actor_id):
        first = memory_store.create_company(_company(), test_actor_id)
        memory_store.create_company(_company(), test_actor_id)
        assert memory_store.find_company_id_by_name("Acme") == first
        assert memory_store.find_company_id_by_name("acme") is None

    def test_batch_rejects_unknown_company_atomically(self, memory_store, test_actor_id):
        company_id = memory_store.create_company(_company(), test_actor_id)
        drafts = [_contact(company_id, 0), _contact(uuid4(), 1)]
        with pytest.raises(StoreError):
            memory_store.create_batch(EntityKind.CONTACT, drafts, test_actor_id)
        assert memory_store.contacts == {}

    def test_batch_rejects_unresolved_contact(self, memory_store, test_actor_id):
        with pytest.raises(StoreError, match="no resolved company_id"):
            memory_store.create_batch(EntityKind.CONTACT, [_contact(None)], test_actor_id)


class TestSqlAlchemyRecordStore:
    def test_satisfies_protocol(self, sql_store):
        assert isinstance(sql_store, RecordStore)

    def test_create_and_find_company(self, sql_store, session, test_actor_id):
        company_id = sql_store.create_company(
            _company(technologies_used=("React", "Go"), headcount=350),
            test_actor_id,
        )
        assert sql_store.find_company_id_by_name("Acme") == company_id
        assert sql_store.find_company_id_by_name("Globex") is None

        company = session.get(Company, company_id)
        assert company.technologies_used == ["React", "Go"]
        assert company.headcount == 350
        assert company.visible_to_tiers == ["free"]
        assert company.created_by_id == test_actor_id
        assert company.company_type == ""

    def test_batch_of_contacts(self, sql_store, session, test_actor_id):
        company_id = sql_store.create_company(_company(), test_actor_id)
        drafts = [
            _contact(company_id, 0, start_date=date(2021, 3, 1)),
            _contact(company_id, 1).with_tiers(frozenset({SubscriptionTier.PRO})),
        ]
        ids = sql_store.create_batch(EntityKind.CONTACT, drafts, test_actor_id)
        assert len(ids) == 2
        first, second = (session.get(Contact, i) for i in ids)
        assert first.start_date == date(2021, 3, 1)
        assert first.company_id == company_id
        assert second.visible_to_tiers == ["pro"]

    def test_empty_batch(self, sql_store, test_actor_id):
        assert sql_store.create_batch(EntityKind.COMPANY, [], test_actor_id) == []

    def test_batch_is_all_or_nothing(self, sql_store, session, test_actor_id):
        company_id = sql_store.create_company(_company(), test_actor_id)
        drafts = [_contact(company_id, 0), _contact(uuid4(), 1)]
        with pytest.raises(StoreError) as exc_info:
            sql_store.create_batch(EntityKind.CONTACT, drafts, test_actor_id)
        assert exc_info.value.operation == "create_batch"
        assert session.scalar(select(func.count()).select_from(Contact)) == 0
        # Earlier committed work survives and the session stays usable
        assert sql_store.find_company_id_by_name("Acme") == company_id

    def test_unresolved_contact_is_store_error(self, sql_store, test_actor_id):
        with pytest.raises(StoreError, match="no resolved company_id"):
            sql_store.create_batch(EntityKind.CONTACT, [_contact(None)], test_actor_id)

    def test_writes_are_committed(self, sql_store, engine, test_actor_id):
        sql_store.create_company(_company("Durable"), test_actor_id)
        with engine.connect() as conn:
            names = conn.execute(select(Company.company_name)).scalars().all()
        assert names == ["Durable"]

    def test_write_without_commit_stays_in_session(self, session, engine, test_actor_id):
        store = SqlAlchemyRecordStore(session, commit_each_write=False)
        store.create_company(_company("Pending"), test_actor_id)
        session.rollback()
        assert store.find_company_id_by_name("Pending") is None
