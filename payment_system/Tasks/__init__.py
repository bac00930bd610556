"""
Payment System Tasks Package

Celery task definitions for settling delivered orders with sellers.
"""

# Import tasks to ensure they are registered with Celery
from .payment_tasks import distribute_delivered_orders_task, distribute_order_payment_task

__all__ = [
    "distribute_order_payment_task",
    "distribute_delivered_orders_task",
]
