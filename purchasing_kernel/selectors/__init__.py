"""Read-only selectors returning domain DTOs."""

from purchasing_kernel.selectors.directory_selector import DirectorySelector
from purchasing_kernel.selectors.inventory_selector import InventorySelector
from purchasing_kernel.selectors.purchase_order_selector import PurchaseOrderSelector
from purchasing_kernel.selectors.workflow_selector import WorkflowSelector

__all__ = [
    "DirectorySelector",
    "InventorySelector",
    "PurchaseOrderSelector",
    "WorkflowSelector",
]
