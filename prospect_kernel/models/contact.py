"""
Module: prospect_kernel.models.contact
Responsibility: ORM persistence for contacts (people) in the prospect
    directory. Every contact belongs to exactly one company.
Architecture position: Kernel > Models. May import from db/base.py only.

Invariants enforced:
    - company_id is NOT NULL and references companies.id.
    - visible_to_tiers is never NULL; new rows default to ["free"].
"""

from datetime import date
from uuid import UUID

from sqlalchemy import JSON, Float, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from prospect_kernel.db.base import TrackedBase, UUIDString
from prospect_kernel.models.company import Company


def _default_tiers() -> list[str]:
    return ["free"]


class Contact(TrackedBase):
    """A person working at a company."""

    __tablename__ = "contacts"

    __table_args__ = (
        Index("idx_contact_company", "company_id"),
        Index("idx_contact_name", "name"),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    linkedin_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    job_title: Mapped[str] = mapped_column(String(255), nullable=False)
    company_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("companies.id"),
        nullable=False,
    )
    start_date: Mapped[date | None] = mapped_column(nullable=True)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    email_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    phone_number: Mapped[str | None] = mapped_column(String(100), nullable=True)
    location_city: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    location_state: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    location_region: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    visible_to_tiers: Mapped[list] = mapped_column(JSON, nullable=False, default=_default_tiers)

    company: Mapped[Company] = relationship(Company, foreign_keys=[company_id])

    def __repr__(self) -> str:
        return f"<Contact {self.name!r} company_id={self.company_id}>"
