from prometheus_client import Counter, Histogram


# Order Metrics
orders_placed_total = Counter("marketplace_orders_placed_total", "Total orders placed", ["status"])
order_value = Histogram(
    "marketplace_order_value",
    "Order value distribution",
    buckets=[10, 50, 100, 200, 500, 1000, 2000, 5000, float("inf")],
)
checkout_shop_failures_total = Counter(
    "marketplace_checkout_shop_failures_total", "Shop units that failed during checkout", ["stage"]
)

# Stock Metrics
stock_deduction_failures = Counter("marketplace_stock_deduction_failure", "Best-effort stock deductions that failed")

# Notification Metrics
notifications_failed_total = Counter(
    "marketplace_notifications_failed_total", "Notifications that could not be stored", ["type"]
)

# Performance Metrics
checkout_duration = Histogram("marketplace_checkout_seconds", "End-to-end checkout processing time")
