"""Kernel services: flush-only writers that run inside the caller's transaction."""

from purchasing_kernel.services.base import BaseService
from purchasing_kernel.services.notification_service import (
    DeliveryReport,
    NotificationService,
)
from purchasing_kernel.services.system_log_service import SystemLogService

__all__ = [
    "BaseService",
    "DeliveryReport",
    "NotificationService",
    "SystemLogService",
]
