from prometheus_client import Counter, Histogram

# Business Metrics
ecomm_checkout_total = Counter(
    "ecomm_checkout_total",
    "Checkouts attempted",
    ["status", "payment_method"] # status: 'success' or the error code
)

ecomm_checkout_duration_seconds = Histogram(
    "ecomm_checkout_duration_seconds",
    "Checkout duration in seconds"
)

ecomm_payment_verifications_total = Counter(
    "ecomm_payment_verifications_total",
    "Gateway callback signature checks",
    ["result"] # Labels: 'verified', 'mismatch'
)

ecomm_order_transitions_total = Counter(
    "ecomm_order_transitions_total",
    "Order status transitions applied",
    ["from_status", "to_status"]
)

ecomm_cart_stale_items_total = Counter(
    "ecomm_cart_stale_items_total",
    "Cart lines dropped because their product was deleted"
)
