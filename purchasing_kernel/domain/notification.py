"""Notification payload value objects.  Output-only; persisted by NotificationService."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from uuid import UUID


class NotificationStatus(str, Enum):
    NEW = "New"
    READ = "Read"
    DELETED = "Deleted"


class NotificationPriority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class AlertType(str, Enum):
    APPROVED = "Purchase Order Approved"
    COMPLETED = "Purchase Order Completed"
    APPROVAL_REQUESTED = "Purchase Order Approval Requested"
    REJECTED = "Purchase Order Rejected"


@dataclass(frozen=True)
class NotificationPayload:
    """One message for one recipient.  ``entity_id`` is the PO number."""

    assign_to: UUID
    message: str
    priority: NotificationPriority
    alert_type: AlertType
    entity_id: str
    status: NotificationStatus = NotificationStatus.NEW
