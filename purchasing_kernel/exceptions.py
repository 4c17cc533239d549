"""
Typed Exception Hierarchy for the Purchasing Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers of the approval workflow must react to failures precisely: a missing
rejection comment is shown to the user, a configuration hole is escalated to
an administrator, a version conflict is retried after a refresh.  Parsing
message strings for that is fragile, so:

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (not just a message string)

Example:
    try:
        orchestrator.reject(order_id, actor, comment="")
    except MissingCommentError as e:
        show_toast(e.code)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    PurchasingError (base)
    |
    +-- WorkflowError
    |   +-- ValidationError
    |   |   +-- MissingCommentError
    |   |   +-- MissingActorContextError
    |   |   +-- OrderNotAwaitingApprovalError
    |   |   +-- OrderNotSubmittableError
    |   +-- PermissionDeniedError
    |   +-- ConfigurationError
    |       +-- WorkflowConfigurationError
    |       +-- StatusMessageNotFoundError
    |
    +-- InventoryError
    |   +-- InsufficientStockError
    |   +-- NoStockLotsError
    |
    +-- NotFoundError
    |   +-- PurchaseOrderNotFoundError
    |   +-- InvoiceNotFoundError
    |
    +-- ConcurrencyError
    |   +-- ConflictError
    |
    +-- NetworkError
    +-- NotificationDeliveryError
    +-- ImmutableRecordError
    +-- InvalidInvoiceError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category      | Code                           | When Raised
--------------|--------------------------------|-----------------------------------
Validation    | REJECTION_COMMENT_REQUIRED     | Reject without a comment
              | ACTOR_CONTEXT_REQUIRED         | Actor has no user or role id
              | ORDER_NOT_AWAITING_APPROVAL    | No active level on the order
              | ORDER_NOT_SUBMITTABLE          | Resubmit while pending/completed
Permission    | PERMISSION_DENIED              | Actor lacks the level's role
Configuration | WORKFLOW_CONFIGURATION_INVALID | Level rows missing/duplicated
              | STATUS_MESSAGE_NOT_FOUND       | Status message row missing
Inventory     | INSUFFICIENT_STOCK             | FIFO reduction cannot be met
              | NO_STOCK_LOTS                  | Item has no lots in the store
Lookup        | PURCHASE_ORDER_NOT_FOUND       | Order id does not exist
              | INVOICE_NOT_FOUND              | Invoice id does not exist
Concurrency   | CONFLICT                       | Order version changed underneath
Backend       | NETWORK_ERROR                  | Any backend read/write failure
Notification  | NOTIFICATION_DELIVERY_FAILED   | Notification batch insert failed
Audit         | IMMUTABLE_RECORD               | System log row updated or deleted
Invoice       | INVOICE_INVALID                | No lines, or a non-positive quantity
"""


class PurchasingError(Exception):
    """
    Base exception for all purchasing kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "PURCHASING_ERROR"


# Workflow exceptions


class WorkflowError(PurchasingError):
    """Base exception for approval workflow errors."""

    code: str = "WORKFLOW_ERROR"


class ValidationError(WorkflowError):
    """The requested action is not valid for the order as it stands."""

    code: str = "VALIDATION_ERROR"


class MissingCommentError(ValidationError):
    """Rejection was attempted without a reason."""

    code: str = "REJECTION_COMMENT_REQUIRED"

    def __init__(self, po_number: str):
        self.po_number = po_number
        super().__init__(
            f"A rejection comment is required for purchase order {po_number}"
        )


class MissingActorContextError(ValidationError):
    """The acting user or role could not be determined."""

    code: str = "ACTOR_CONTEXT_REQUIRED"

    def __init__(self, missing_field: str):
        self.missing_field = missing_field
        super().__init__(f"Actor context is incomplete: {missing_field} is required")


class OrderNotAwaitingApprovalError(ValidationError):
    """The order has no active approval level to act on."""

    code: str = "ORDER_NOT_AWAITING_APPROVAL"

    def __init__(self, po_number: str, reason: str = "no active approval level"):
        self.po_number = po_number
        self.reason = reason
        super().__init__(f"Purchase order {po_number} is not awaiting approval: {reason}")


class OrderNotSubmittableError(ValidationError):
    """The order cannot be (re)submitted for approval in its current state."""

    code: str = "ORDER_NOT_SUBMITTABLE"

    def __init__(self, po_number: str, reason: str):
        self.po_number = po_number
        self.reason = reason
        super().__init__(f"Purchase order {po_number} cannot be submitted: {reason}")


class PermissionDeniedError(WorkflowError):
    """Actor is not allowed to act at the order's current level."""

    code: str = "PERMISSION_DENIED"

    def __init__(self, actor_id: str, level: int, required_role_id: str | None):
        self.actor_id = actor_id
        self.level = level
        self.required_role_id = required_role_id
        super().__init__(
            f"User {actor_id} is not authorized to act at level {level} "
            f"(requires role {required_role_id})"
        )


class ConfigurationError(WorkflowError):
    """An expected workflow or status configuration row is missing."""

    code: str = "CONFIGURATION_ERROR"


class WorkflowConfigurationError(ConfigurationError):
    """Workflow level configuration is missing, duplicated or non-contiguous."""

    code: str = "WORKFLOW_CONFIGURATION_INVALID"

    def __init__(self, process_name: str, reason: str):
        self.process_name = process_name
        self.reason = reason
        super().__init__(f"Invalid workflow configuration for '{process_name}': {reason}")


class StatusMessageNotFoundError(ConfigurationError):
    """No status message row matches the requested sub-category."""

    code: str = "STATUS_MESSAGE_NOT_FOUND"

    def __init__(self, sub_category: str, level: int | None = None):
        self.sub_category = sub_category
        self.level = level
        suffix = f" for level {level}" if level is not None else ""
        super().__init__(f"Status message not found: {sub_category}{suffix}")


# Inventory exceptions


class InventoryError(PurchasingError):
    """Base exception for stock lot errors."""

    code: str = "INVENTORY_ERROR"


class InsufficientStockError(InventoryError):
    """Available quantity across all lots is below the required quantity."""

    code: str = "INSUFFICIENT_STOCK"

    def __init__(self, item_id: str, store_id: str, available: int, required: int):
        self.item_id = item_id
        self.store_id = store_id
        self.available = available
        self.required = required
        super().__init__(
            f"Insufficient stock for item {item_id} in store {store_id}: "
            f"available {available}, required {required}"
        )


class NoStockLotsError(InventoryError):
    """The item has no stock lots in the store."""

    code: str = "NO_STOCK_LOTS"

    def __init__(self, item_id: str, store_id: str):
        self.item_id = item_id
        self.store_id = store_id
        super().__init__(f"No inventory records found for item {item_id} in store {store_id}")


# Lookup exceptions


class NotFoundError(PurchasingError):
    """Base exception for missing records."""

    code: str = "NOT_FOUND"


class PurchaseOrderNotFoundError(NotFoundError):
    """Purchase order with given id was not found."""

    code: str = "PURCHASE_ORDER_NOT_FOUND"

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"Purchase order not found: {order_id}")


class InvoiceNotFoundError(NotFoundError):
    """Sales invoice with given id was not found."""

    code: str = "INVOICE_NOT_FOUND"

    def __init__(self, invoice_id: str):
        self.invoice_id = invoice_id
        super().__init__(f"Invoice not found: {invoice_id}")


# Concurrency exceptions


class ConcurrencyError(PurchasingError):
    """Base exception for concurrency errors."""

    code: str = "CONCURRENCY_ERROR"


class ConflictError(ConcurrencyError):
    """The order was modified by another actor since it was read."""

    code: str = "CONFLICT"

    def __init__(
        self,
        entity_type: str,
        entity_id: str,
        expected_version: int | None = None,
        actual_version: int | None = None,
    ):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"Conflict on {entity_type} {entity_id}: expected version "
            f"{expected_version}, found {actual_version}; refresh and retry"
        )


# Backend exceptions


class NetworkError(PurchasingError):
    """Opaque backend read/write failure."""

    code: str = "NETWORK_ERROR"

    def __init__(self, operation: str, detail: str = ""):
        self.operation = operation
        self.detail = detail
        super().__init__(f"Backend operation failed during {operation}")


class NotificationDeliveryError(PurchasingError):
    """Notification batch could not be written."""

    code: str = "NOTIFICATION_DELIVERY_FAILED"

    def __init__(self, entity_id: str, count: int):
        self.entity_id = entity_id
        self.count = count
        super().__init__(f"Failed to deliver {count} notification(s) for {entity_id}")


# Audit exceptions


class ImmutableRecordError(PurchasingError):
    """Attempted to modify or delete an append-only record."""

    code: str = "IMMUTABLE_RECORD"

    def __init__(self, entity_type: str, entity_id: str, operation: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.operation = operation
        super().__init__(f"Cannot {operation} {entity_type} {entity_id}: record is append-only")


class InvalidInvoiceError(PurchasingError):
    """Invoice lines are missing or carry an invalid quantity, price or discount."""

    code: str = "INVOICE_INVALID"

    def __init__(self, invoice_number: str, reason: str):
        self.invoice_number = invoice_number
        self.reason = reason
        super().__init__(f"Invoice {invoice_number} is invalid: {reason}")
