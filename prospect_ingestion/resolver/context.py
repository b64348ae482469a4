"""Per-run state shared by the resolver and the service. One instance per submit()."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID, uuid4

from prospect_kernel.domain.tiers import VisibilityTierSet

from prospect_ingestion.domain.types import EntityKind


@dataclass
class ImportRunContext:
    """
    Run id, actor, visibility override and the parent-resolution memo.

    resolved maps a parent natural key to its id, whether it was found or
    created in this run. failures maps a key to the reason its lookup or
    creation failed, so the same bad key is not retried within the run.
    """

    entity_kind: EntityKind
    actor_id: UUID
    run_id: UUID = field(default_factory=uuid4)
    visibility_override: VisibilityTierSet | None = None
    started_at: datetime | None = None
    resolved: dict[str, UUID] = field(default_factory=dict)
    failures: dict[str, str] = field(default_factory=dict)
    created_parents: list[UUID] = field(default_factory=list)

    def remember(self, key: str, parent_id: UUID, created: bool = False) -> None:
        self.resolved[key] = parent_id
        if created:
            self.created_parents.append(parent_id)

    def remember_failure(self, key: str, reason: str) -> None:
        self.failures[key] = reason
