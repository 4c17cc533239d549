"""
Purchasing Kernel

Domain value objects, persistence and kernel services for the purchase
order approval workflow:
- Multi-level sequential approval with Super Admin override
- Append-only approval ledger embedded in the order record
- Notification and system-log delivery
- FIFO stock lots for invoice editing
"""

__version__ = "0.1.0"
