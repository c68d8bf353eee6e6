from .setup import setup_observability
from .metrics import (
    ecomm_checkout_total,
    ecomm_checkout_duration_seconds,
    ecomm_payment_verifications_total,
    ecomm_order_transitions_total,
    ecomm_cart_stale_items_total
)
