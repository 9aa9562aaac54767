"""FastAPI application entry point."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.v1.api import api_router
from .settings import settings
from .utils import setup_logging

logger = setup_logging("getman")

app = FastAPI(
    title="Getman API",
    description="Workspace service for the Getman HTTP request composer",
    version="0.1.0",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix=settings.api_prefix)


@app.get("/")
async def root():
    """Service banner."""
    return {
        "status": "ok",
        "service": "Getman API",
        "version": "0.1.0"
    }


if __name__ == "__main__":
    import uvicorn

    settings.validate_configuration()
    uvicorn.run(
        "getman.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
