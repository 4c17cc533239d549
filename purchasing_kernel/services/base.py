"""
BaseService -- abstract base for all kernel services.

Every service receives a SQLAlchemy ``Session`` from its caller and uses
``session.flush()``.  It never calls ``session.commit()`` or
``session.rollback()``: the caller (an orchestrator, ``session_scope()`` or
the test harness) owns the transaction, so an approval's order update,
system log row and notifications land atomically.
"""

from abc import ABC

from sqlalchemy.orm import Session

from purchasing_kernel.domain.clock import Clock, SystemClock


class BaseService(ABC):

    def __init__(self, session: Session, clock: Clock | None = None):
        self.session = session
        self.clock = clock or SystemClock()
