"""
Approval ledger entries (``purchasing_kernel.domain.ledger``).

Responsibility
--------------
Closed, immutable variants for the events recorded on a purchase order's
approval history, plus the helpers the state machine needs to read a
ledger (sequence allocation, prior-approver lookup, finalization).

The ledger is persisted as an ordered JSON array on the order row.
``to_dict`` / ``ledger_entry_from_dict`` define that wire shape; array
order is significant and is preserved by both directions.

Architecture position
---------------------
**Kernel domain layer** -- ZERO I/O.

Invariants enforced
-------------------
* Each variant carries only the fields valid for its trail:
  ``approved_by`` exists only on Approved, ``rejected_by``/``rejected_to``
  only on Rejected.
* ``sequence_no`` values are unique and increasing within a ledger;
  ``next_sequence_no`` allocates ``max(existing, default -1) + 1``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Iterable, Union
from uuid import UUID


class ApprovalTrail(str, Enum):
    """Trail tag of a ledger entry."""

    APPROVED = "Approved"
    PENDING = "Pending"
    REJECTED = "Rejected"


CREATED_REJECTED_LABEL = "Created - Rejected"

_LEVEL_PATTERN = re.compile(r"\bLevel (\d+)\b")


def approved_label(level: int) -> str:
    return f"Level {level} Approved"


def pending_label(level: int) -> str:
    return f"Level {level} Approval Pending"


def rejected_label(level: int) -> str:
    """Level 1 rejections return the order to its creator."""
    if level <= 1:
        return CREATED_REJECTED_LABEL
    return f"Level {level} Approval Rejected"


def level_from_status(status: str) -> int | None:
    """Parse the level number out of a status label, if it names one."""
    if status == CREATED_REJECTED_LABEL:
        return 1
    match = _LEVEL_PATTERN.search(status or "")
    return int(match.group(1)) if match else None


def _uuid_or_none(value: Any) -> UUID | None:
    if value in (None, ""):
        return None
    return value if isinstance(value, UUID) else UUID(str(value))


def _str_or_none(value: UUID | None) -> str | None:
    return str(value) if value is not None else None


def _date_or_none(value: Any) -> datetime | None:
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


@dataclass(frozen=True)
class ApprovedEntry:
    level: int
    role_id: UUID | None
    sequence_no: int
    approved_by: UUID
    date: datetime
    comment: str = ""
    is_finalized: bool = False

    trail = ApprovalTrail.APPROVED

    @property
    def status(self) -> str:
        return approved_label(self.level)

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "trail": self.trail.value,
            "level": self.level,
            "role_id": _str_or_none(self.role_id),
            "sequence_no": self.sequence_no,
            "isFinalized": self.is_finalized,
            "approvedBy": str(self.approved_by),
            "date": self.date.isoformat(),
            "comment": self.comment,
        }


@dataclass(frozen=True)
class PendingEntry:
    level: int
    role_id: UUID | None
    sequence_no: int
    date: datetime | None = None
    comment: str = ""

    trail = ApprovalTrail.PENDING

    @property
    def status(self) -> str:
        return pending_label(self.level)

    @property
    def is_finalized(self) -> bool:
        return False

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "status": self.status,
            "trail": self.trail.value,
            "level": self.level,
            "role_id": _str_or_none(self.role_id),
            "sequence_no": self.sequence_no,
            "isFinalized": False,
        }
        if self.date is not None:
            data["date"] = self.date.isoformat()
        if self.comment:
            data["comment"] = self.comment
        return data


@dataclass(frozen=True)
class RejectedEntry:
    level: int
    role_id: UUID | None
    sequence_no: int
    rejected_by: UUID
    rejected_to: UUID | None
    date: datetime
    comment: str

    trail = ApprovalTrail.REJECTED

    @property
    def status(self) -> str:
        return rejected_label(self.level)

    @property
    def is_finalized(self) -> bool:
        return False

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "trail": self.trail.value,
            "level": self.level,
            "role_id": _str_or_none(self.role_id),
            "sequence_no": self.sequence_no,
            "isFinalized": False,
            "rejectedBy": str(self.rejected_by),
            "rejectedTo": _str_or_none(self.rejected_to),
            "date": self.date.isoformat(),
            "comment": self.comment,
        }


LedgerEntry = Union[ApprovedEntry, PendingEntry, RejectedEntry]


def ledger_entry_from_dict(data: dict[str, Any]) -> LedgerEntry:
    """Rebuild the right variant from its persisted dict.

    Raises:
        ValueError: unknown trail, or no level in either ``level`` or
            ``status``.
    """
    trail = ApprovalTrail(data["trail"])
    level = data.get("level")
    if level is None:
        level = level_from_status(data.get("status", ""))
    if level is None:
        raise ValueError(f"Ledger entry has no level: {data!r}")
    role_id = _uuid_or_none(data.get("role_id"))
    sequence_no = int(data["sequence_no"])
    comment = data.get("comment") or ""

    if trail is ApprovalTrail.APPROVED:
        return ApprovedEntry(
            level=int(level),
            role_id=role_id,
            sequence_no=sequence_no,
            approved_by=_uuid_or_none(data.get("approvedBy")),
            date=_date_or_none(data.get("date")),
            comment=comment,
            is_finalized=bool(data.get("isFinalized", False)),
        )
    if trail is ApprovalTrail.PENDING:
        return PendingEntry(
            level=int(level),
            role_id=role_id,
            sequence_no=sequence_no,
            date=_date_or_none(data.get("date")),
            comment=comment,
        )
    return RejectedEntry(
        level=int(level),
        role_id=role_id,
        sequence_no=sequence_no,
        rejected_by=_uuid_or_none(data.get("rejectedBy")),
        rejected_to=_uuid_or_none(data.get("rejectedTo")),
        date=_date_or_none(data.get("date")),
        comment=comment,
    )


def ledger_from_json(items: Iterable[dict[str, Any]] | None) -> tuple[LedgerEntry, ...]:
    return tuple(ledger_entry_from_dict(item) for item in (items or ()))


def ledger_to_json(entries: Iterable[LedgerEntry]) -> list[dict[str, Any]]:
    return [entry.to_dict() for entry in entries]


# ---------------------------------------------------------------------------
# Ledger queries
# ---------------------------------------------------------------------------


def next_sequence_no(entries: Iterable[LedgerEntry]) -> int:
    return max((e.sequence_no for e in entries), default=-1) + 1


def latest_approver(entries: Iterable[LedgerEntry], level: int) -> UUID | None:
    """User who most recently approved ``level``, by sequence number."""
    approvals = [
        e for e in entries
        if isinstance(e, ApprovedEntry) and e.level == level and e.approved_by is not None
    ]
    if not approvals:
        return None
    return max(approvals, key=lambda e: e.sequence_no).approved_by


def finalized_entries(entries: Iterable[LedgerEntry]) -> tuple[ApprovedEntry, ...]:
    return tuple(
        e for e in entries if isinstance(e, ApprovedEntry) and e.is_finalized
    )


def is_sequence_increasing(entries: Iterable[LedgerEntry]) -> bool:
    seqs = [e.sequence_no for e in entries]
    return all(a < b for a, b in zip(seqs, seqs[1:]))
