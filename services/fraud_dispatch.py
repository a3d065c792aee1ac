"""
Fire-and-forget handoff of fraud checks.

Order ingestion must never wait on, or fail because of, fraud detection.
The dispatcher schedules the check on FastAPI's BackgroundTasks so it runs
after the response has been sent. Without a BackgroundTasks object (CLI,
direct service use) the check runs inline. Either way the task has its own
failure path: every exception is logged and swallowed.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional
from uuid import UUID

from fastapi import BackgroundTasks

from domain.order import Order
from services.fraud_service import FraudDetectionResult, detect_fraud

logger = logging.getLogger(__name__)


def run_fraud_check_safely(
    order_id: UUID,
    detector: Callable[[UUID], FraudDetectionResult] = detect_fraud,
) -> None:
    """Run a fraud check, logging instead of raising on failure."""
    try:
        detector(order_id)
    except Exception:
        logger.exception(
            "Fraud detection failed (non-blocking)",
            extra={"order_id": str(order_id)},
        )


class FraudDispatcher:
    """
    Enqueues fraud checks for newly created orders.

    Example:
        dispatcher = FraudDispatcher(background_tasks)
        order = create_order(actor, request, on_created=dispatcher.enqueue)
    """

    def __init__(
        self,
        background_tasks: Optional[BackgroundTasks] = None,
        detector: Callable[[UUID], FraudDetectionResult] = detect_fraud,
    ):
        self._background_tasks = background_tasks
        self._detector = detector

    def enqueue(self, order: Order) -> None:
        if not order.is_completed:
            return
        if self._background_tasks is None:
            run_fraud_check_safely(order.order_id, self._detector)
        else:
            self._background_tasks.add_task(run_fraud_check_safely, order.order_id, self._detector)


__all__ = ["FraudDispatcher", "run_fraud_check_safely"]
