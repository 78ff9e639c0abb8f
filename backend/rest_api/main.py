"""
REST API main application.
Entry point for the FastAPI REST server.
"""

from fastapi import FastAPI

from shared.config.settings import settings
from rest_api.core import configure_cors, lifespan, register_middlewares
from rest_api.routers.catalog import router as catalog_router
from rest_api.routers.health import router as health_router
from rest_api.routers.orders import router as orders_router
from rest_api.routers.queue import router as queue_router


# Create FastAPI application
app = FastAPI(
    title="Counter POS API",
    description="Order admission and queue ticketing for a counter-service restaurant",
    version="0.1.0",
    lifespan=lifespan,
)

register_middlewares(app)
configure_cors(app)


# =============================================================================
# Include Routers
# =============================================================================

app.include_router(health_router)
app.include_router(queue_router)
app.include_router(orders_router)
app.include_router(catalog_router)


# =============================================================================
# Development entry point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "rest_api.main:app",
        host="0.0.0.0",
        port=settings.rest_api_port,
        reload=True,
    )
