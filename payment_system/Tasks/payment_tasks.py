"""
Payment System Celery Tasks

Handles payment distribution after delivery:
- Distribution of a single order queued when its delivery is confirmed
- Periodic sweep for delivered orders that were never distributed
"""

import logging

from celery import shared_task

from marketplace.services.base import ErrorCodes

logger = logging.getLogger(__name__)

# Expected outcomes that a retry cannot change
FINAL_ERRORS = (
    ErrorCodes.ALREADY_DISTRIBUTED,
    ErrorCodes.ORDER_NOT_FOUND,
    ErrorCodes.INVALID_ORDER_STATE,
    ErrorCodes.INVALID_PAYMENT_STATE,
)


@shared_task(bind=True, max_retries=3, queue="payment_tasks")
def distribute_order_payment_task(self, order_id):
    """
    Distribute one delivered order's payment to its seller.

    Args:
        order_id (str): The UUID of the delivered order

    Returns:
        dict: Distribution result or the reason it was skipped
    """
    from infrastructure.container import container

    logger.info(f"Distributing payment for order {order_id}")

    try:
        result = container.payout_service().distribute(order_id)
    except Exception as exc:
        logger.error(f"Error distributing order {order_id}: {exc}", exc_info=True)
        raise self.retry(exc=exc, countdown=60 * (2**self.request.retries))

    if result.ok:
        return {"success": True, "order_id": order_id, "distribution": result.value.to_dict()}

    if result.error in FINAL_ERRORS:
        logger.info(f"Order {order_id} not distributed: {result.error_detail}")
        return {"success": False, "order_id": order_id, "error": result.error, "message": result.error_detail}

    # Transfer failures are retried with backoff
    logger.warning(f"Distribution of order {order_id} failed: {result.error_detail}")
    raise self.retry(exc=RuntimeError(result.error_detail), countdown=60 * (2**self.request.retries))


@shared_task(bind=True, max_retries=3, queue="payment_tasks")
def distribute_delivered_orders_task(self, limit=100):
    """
    Periodic task: distribute delivered, paid orders that have no distribution.

    Returns:
        dict: Counts of distributed and skipped orders
    """
    from infrastructure.container import container

    try:
        payout_service = container.payout_service()
        order_ids = payout_service.pending_distributions(limit=limit)
        logger.info(f"Found {len(order_ids)} delivered orders awaiting distribution")

        results = payout_service.distribute_many(order_ids)
    except Exception as exc:
        logger.error(f"Error in distribution sweep: {exc}", exc_info=True)
        raise self.retry(exc=exc, countdown=300)

    distributed = [order_id for order_id, result in results.items() if result.ok]
    failed = {order_id: result.error for order_id, result in results.items() if not result.ok}

    if failed:
        logger.warning(f"Distribution sweep: {len(failed)} orders not distributed: {failed}")
    logger.info(f"Distribution sweep complete: {len(distributed)} orders distributed")

    return {"success": True, "distributed": distributed, "failed": failed, "checked": len(order_ids)}
