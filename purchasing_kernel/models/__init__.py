"""SQLAlchemy ORM models.  Importing this package registers every table on Base.metadata."""

from purchasing_kernel.models.audit import SystemLogModel
from purchasing_kernel.models.directory import RoleModel, UserModel
from purchasing_kernel.models.inventory import StockLotModel
from purchasing_kernel.models.invoice import SalesInvoiceItemModel, SalesInvoiceModel
from purchasing_kernel.models.notification import NotificationModel
from purchasing_kernel.models.purchase_order import PurchaseOrderModel
from purchasing_kernel.models.workflow import StatusMessageModel, WorkflowConfigModel

__all__ = [
    "NotificationModel",
    "PurchaseOrderModel",
    "RoleModel",
    "SalesInvoiceItemModel",
    "SalesInvoiceModel",
    "StatusMessageModel",
    "StockLotModel",
    "SystemLogModel",
    "UserModel",
    "WorkflowConfigModel",
]
