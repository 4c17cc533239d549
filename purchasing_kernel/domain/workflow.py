"""
Workflow level configuration (``purchasing_kernel.domain.workflow``).

Responsibility
--------------
Pure value objects describing the approval chain configured for a
business process: one ``WorkflowLevel`` per tier, collected into a
validated ``WorkflowDefinition``.

Architecture position
---------------------
**Kernel domain layer** -- ZERO I/O.  No imports from ``db/``,
``services/``, ``selectors/`` or outer layers.

Invariants enforced
-------------------
* Levels are contiguous integers starting at 1 with exactly one row per
  level.  A definition that violates this is refused at construction
  with ``WorkflowConfigurationError`` instead of silently using the
  first matching row.
* Config row ids are unique within a definition.
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from purchasing_kernel.exceptions import WorkflowConfigurationError


@dataclass(frozen=True)
class WorkflowLevel:
    """One approval tier: who approves at ``level`` and whether override applies."""

    config_id: UUID
    process_name: str
    level: int
    role_id: UUID
    override_enabled: bool = False


@dataclass(frozen=True)
class WorkflowDefinition:
    """The ordered, validated approval chain for one process.

    ``levels`` must already be ordered by level.  An empty definition is
    valid and means the process requires no approval.
    """

    process_name: str
    levels: tuple[WorkflowLevel, ...] = ()

    def __post_init__(self) -> None:
        seen_ids: set[UUID] = set()
        for expected, lvl in enumerate(self.levels, start=1):
            if lvl.process_name != self.process_name:
                raise WorkflowConfigurationError(
                    self.process_name,
                    f"level {lvl.level} belongs to process '{lvl.process_name}'",
                )
            if lvl.level != expected:
                raise WorkflowConfigurationError(
                    self.process_name,
                    f"levels must be contiguous from 1; expected level {expected}, "
                    f"found {lvl.level}",
                )
            if lvl.config_id in seen_ids:
                raise WorkflowConfigurationError(
                    self.process_name,
                    f"duplicate config id {lvl.config_id}",
                )
            seen_ids.add(lvl.config_id)

    @property
    def max_level(self) -> int:
        return len(self.levels)

    @property
    def is_empty(self) -> bool:
        return not self.levels

    def at_level(self, level: int) -> WorkflowLevel | None:
        if 1 <= level <= len(self.levels):
            return self.levels[level - 1]
        return None

    def level_of(self, config_id: UUID | None) -> int | None:
        """Level number of a config row, or None if the id is unknown."""
        if config_id is None:
            return None
        for lvl in self.levels:
            if lvl.config_id == config_id:
                return lvl.level
        return None

    def role_for_level(self, level: int) -> UUID | None:
        lvl = self.at_level(level)
        return lvl.role_id if lvl is not None else None

    def levels_from(self, level: int) -> tuple[WorkflowLevel, ...]:
        """Levels ``level`` through ``max_level`` inclusive."""
        return tuple(lvl for lvl in self.levels if lvl.level >= level)

    @property
    def role_ids(self) -> tuple[UUID, ...]:
        return tuple(lvl.role_id for lvl in self.levels)
