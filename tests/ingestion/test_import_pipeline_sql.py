"""ImportService against the SQLite-backed store."""

from sqlalchemy import func, select

from prospect_kernel.exceptions import StoreError
from prospect_kernel.models import Company, Contact
from prospect_ingestion.domain.types import RowState
from prospect_ingestion.services import ImportService
from prospect_ingestion.store import SqlAlchemyRecordStore


def _count(session, model, **filters) -> int:
    stmt = select(func.count()).select_from(model).filter_by(**filters)
    return session.scalar(stmt)


class ExplodingBatchStore(SqlAlchemyRecordStore):
    def create_batch(self, entity_kind, drafts, actor_id):
        raise StoreError("create_batch", "disk I/O error")


class TestSqlImport:
    def test_company_import_persists_rows(self, sql_service, session, test_actor_id):
        report = sql_service.submit(
            "company_name,headcount,industry_keywords\nAcme,40,saas;b2b\nGlobex,x,\n",
            "company",
            actor_id=test_actor_id,
        )
        assert (report.added, report.failed) == (2, 0)
        acme = session.scalars(select(Company).where(Company.company_name == "Acme")).one()
        assert acme.headcount == 40
        assert acme.industry_keywords == ["saas", "b2b"]
        assert acme.created_by_id == test_actor_id
        globex = session.scalars(select(Company).where(Company.company_name == "Globex")).one()
        assert globex.headcount is None

    def test_contacts_share_auto_created_parent(self, sql_service, session):
        text = "name,job_title,company_name\nJane Roe,CTO,NewCo\nJohn Doe,CEO,NewCo\n"
        report = sql_service.submit(text, "contact", visibility_override="pro")
        assert report.added == 2
        assert _count(session, Company, company_name="NewCo") == 1
        [company_id] = report.created_parents
        contacts = session.scalars(select(Contact)).all()
        assert {c.company_id for c in contacts} == {company_id}
        assert all(c.visible_to_tiers == ["pro"] for c in contacts)
        assert session.get(Company, company_id).visible_to_tiers == ["pro"]

    def test_existing_company_reused_across_runs(self, sql_service, session):
        sql_service.submit("company_name\nAcme\n", "company")
        report = sql_service.submit("name,job_title,company_name\nJane Roe,CTO,Acme\n", "contact")
        assert report.created_parents == ()
        assert _count(session, Company) == 1
        assert _count(session, Contact) == 1

    def test_batch_failure_leaves_no_contacts(self, session, import_config, deterministic_clock):
        service = ImportService(ExplodingBatchStore(session), import_config, deterministic_clock)
        text = "name,job_title,company_name\nJane Roe,CTO,NewCo\nJohn Doe,CEO,NewCo\n"
        report = service.submit(text, "contact")
        assert (report.added, report.failed) == (0, 2)
        assert all(r.state == RowState.COMMIT_FAILED for r in report.failed_rows)
        assert _count(session, Contact) == 0
        assert _count(session, Company, company_name="NewCo") == 1
