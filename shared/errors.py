"""
Error taxonomy shared by every service.

Services raise these; the handlers registered by ``register_error_handlers``
render them into the ``{success: false, message, error}`` envelope. Only
``Internal`` maps to a 5xx status.
"""
import structlog
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

logger = structlog.get_logger(__name__)


class ServiceError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "internal"
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"
    default_message = "Resource not found"


class InvalidInput(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "invalid_input"
    default_message = "Invalid input"


class OutOfStock(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "out_of_stock"
    default_message = "Product is currently out of stock"


class EmptyCart(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "empty_cart"
    default_message = "Cart is empty. Add items before checkout"


class StaleCartItem(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "stale_cart_item"
    default_message = "Some products in cart no longer exist"


class SignatureMismatch(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "signature_mismatch"
    default_message = "Payment verification failed. Invalid signature"


class DuplicatePayment(ServiceError):
    status_code = status.HTTP_409_CONFLICT
    code = "duplicate_payment"
    default_message = "This payment has already been used for an order"


class Forbidden(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"
    default_message = "Unauthorized: This order does not belong to you"


class InvalidTransition(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "invalid_transition"
    default_message = "Illegal order status change"


class Internal(ServiceError):
    pass


def _envelope(message: str, error: str, status_code: int, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message, "error": error},
        headers=headers,
    )


async def service_error_handler(request: Request, exc: ServiceError):
    if exc.status_code >= 500:
        logger.error("request.failed", path=request.url.path, error=exc.code, detail=exc.message)
    return _envelope(exc.message, exc.code, exc.status_code)


async def http_error_handler(request: Request, exc: HTTPException):
    return _envelope(str(exc.detail), f"http_{exc.status_code}", exc.status_code, getattr(exc, "headers", None))


async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = jsonable_encoder(exc.errors())
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"{location}: {first.get('msg')}" if location else str(first.get("msg", "Invalid input"))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"success": False, "message": message, "error": InvalidInput.code, "details": errors},
    )


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error("request.crashed", path=request.url.path, exc_info=exc)
    return _envelope(Internal.default_message, Internal.code, status.HTTP_500_INTERNAL_SERVER_ERROR)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(HTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
