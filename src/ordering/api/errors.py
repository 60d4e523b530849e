"""HTTP mapping for ordering errors not covered by Protean's FastAPI handlers."""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError

from ordering.errors import ConcurrentModification, OrderNumberConflict, PaymentVerificationFailed
from ordering.gateway.port import GatewayError

logger = structlog.get_logger(__name__)


def register_ordering_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ObjectNotFoundError)
    async def object_not_found(request: Request, exc: ObjectNotFoundError):
        return JSONResponse(status_code=404, content={"error": "Not found"})

    @app.exception_handler(PaymentVerificationFailed)
    async def payment_verification_failed(request: Request, exc: PaymentVerificationFailed):
        # Details stay in the security log
        return JSONResponse(status_code=400, content={"error": "Payment verification failed"})

    @app.exception_handler(ConcurrentModification)
    async def concurrent_modification(request: Request, exc: ConcurrentModification):
        return JSONResponse(status_code=409, content={"error": exc.message, **exc.context})

    @app.exception_handler(OrderNumberConflict)
    async def order_number_conflict(request: Request, exc: OrderNumberConflict):
        return JSONResponse(status_code=409, content={"error": exc.message})

    @app.exception_handler(GatewayError)
    async def gateway_error(request: Request, exc: GatewayError):
        logger.error("payment_gateway_error", path=request.url.path, error=str(exc))
        return JSONResponse(status_code=502, content={"error": "Payment gateway unavailable"})
