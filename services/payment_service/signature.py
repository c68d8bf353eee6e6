import hashlib
import hmac

from services.order_service.domain import VerifiedGatewayPayment
from shared.errors import InvalidInput, SignatureMismatch
from shared.observability import ecomm_payment_verifications_total


def compute_signature(gateway_order_id: str, gateway_payment_id: str, secret: str) -> str:
    """Hex HMAC-SHA256 of ``order_id|payment_id``, as Razorpay signs its checkout callback."""
    message = f"{gateway_order_id}|{gateway_payment_id}".encode()
    return hmac.new(secret.encode(), message, hashlib.sha256).hexdigest()


def verify_signature(
    gateway_order_id: str, gateway_payment_id: str, signature: str, secret: str
) -> VerifiedGatewayPayment:
    if not gateway_order_id or not gateway_payment_id or not signature:
        raise InvalidInput("Payment verification details are required")

    expected = compute_signature(gateway_order_id, gateway_payment_id, secret)
    if not hmac.compare_digest(expected.encode(), signature.encode()):
        ecomm_payment_verifications_total.labels(result="mismatch").inc()
        raise SignatureMismatch()

    ecomm_payment_verifications_total.labels(result="verified").inc()
    return VerifiedGatewayPayment(gateway_order_id, gateway_payment_id, signature)
