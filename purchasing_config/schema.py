"""
PurchasingSettings schema.

Frozen dataclasses for the runtime settings of the purchasing workflow.
YAML documents are parsed into these types by ``purchasing_config.loader``;
callers obtain them only through ``purchasing_config.get_active_config()``.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class DatabaseSettings:
    url: str
    echo: bool = False
    pool_size: int = 10
    max_overflow: int = 5
    pool_timeout: int = 30
    pool_recycle: int = 1800


@dataclass(frozen=True)
class WorkflowSettings:
    """Names and status codes the approval workflow looks up at runtime."""

    process_name: str = "Purchase Order"
    super_admin_role_name: str = "Super Admin"
    status_category: str = "PURCHASE_ORDER"
    created_sub_category: str = "ORDER_CREATED"
    pending_sub_category: str = "APPROVAL_PENDING"
    completed_sub_category: str = "APPROVER_COMPLETED"
    approval_audit_module: str = "Purchase Approval"
    order_audit_module: str = "Purchase Management"


@dataclass(frozen=True)
class NotificationSettings:
    currency_symbol: str = "$"


@dataclass(frozen=True)
class InventorySettings:
    restore_capacity_ceiling: int = 999_999
    invoice_audit_module: str = "Sales Invoice"


@dataclass(frozen=True)
class LoggingSettings:
    level: str = "INFO"


@dataclass(frozen=True)
class PurchasingSettings:
    database: DatabaseSettings
    workflow: WorkflowSettings = field(default_factory=WorkflowSettings)
    notifications: NotificationSettings = field(default_factory=NotificationSettings)
    inventory: InventorySettings = field(default_factory=InventorySettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    checksum: str = ""
