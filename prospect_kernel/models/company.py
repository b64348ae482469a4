"""
Module: prospect_kernel.models.company
Responsibility: ORM persistence for companies in the prospect directory.
    Companies are the parent entity of contacts; the import pipeline creates
    them from company files and, on the fly, from contact rows that name an
    unknown company.
Architecture position: Kernel > Models. May import from db/base.py and
    domain/tiers.py only.

Invariants enforced:
    - visible_to_tiers is never NULL; new rows default to ["free"].
    - company_name is NOT unique: the import pipeline is insert-only, so
      re-importing a name produces a second row. Lookups by name pick the
      oldest row.

Failure modes:
    - IntegrityError on NULL company_name.
"""

from sqlalchemy import JSON, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from prospect_kernel.db.base import TrackedBase


def _default_tiers() -> list[str]:
    return ["free"]


class Company(TrackedBase):
    """
    A company record.

    Guarantees:
        - List-valued columns (keywords, technologies, tiers) are JSON arrays,
          never NULL.
    """

    __tablename__ = "companies"

    __table_args__ = (
        Index("idx_company_name", "company_name"),
    )

    company_name: Mapped[str] = mapped_column(String(255), nullable=False)
    company_type: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    industry: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    website: Mapped[str | None] = mapped_column(String(500), nullable=True)
    linkedin_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    hq_location: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    location_city: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    location_state: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    location_region: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    size_range: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    headcount: Mapped[int | None] = mapped_column(Integer, nullable=True)
    revenue: Mapped[str | None] = mapped_column(String(100), nullable=True)
    phone_number: Mapped[str | None] = mapped_column(String(100), nullable=True)
    company_keywords: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    industry_keywords: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    technologies_used: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    visible_to_tiers: Mapped[list] = mapped_column(JSON, nullable=False, default=_default_tiers)

    def __repr__(self) -> str:
        return f"<Company {self.company_name!r} id={self.id}>"
