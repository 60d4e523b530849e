import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient
from protean.integrations.fastapi import register_exception_handlers


def build_app(services) -> FastAPI:
    from ordering.api import checkout_router, order_router, realtime_router, restaurant_router
    from ordering.api.errors import register_ordering_exception_handlers
    from ordering.domain import ordering

    app = FastAPI()
    app.state.services = services

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        with ordering.domain_context():
            return await call_next(request)

    register_exception_handlers(app)
    register_ordering_exception_handlers(app)
    app.include_router(checkout_router)
    app.include_router(order_router)
    app.include_router(restaurant_router)
    app.include_router(realtime_router)
    return app


@pytest.fixture()
def client(services, food_court):
    return TestClient(build_app(services))


@pytest.fixture()
def hub():
    from ordering.broadcast.websocket import WebSocketHub

    return WebSocketHub()


@pytest.fixture()
def live_client(gateway, hub, secret, food_court):
    """Client whose services broadcast through a real WebSocket hub."""
    from ordering.container import build_services

    services = build_services(gateway=gateway, broadcaster=hub, secret=secret, pause_seconds=0)
    return TestClient(build_app(services))
