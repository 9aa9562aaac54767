"""Health check API endpoint."""

from fastapi import APIRouter

from getman.components.workspace.storage_provider import get_storage_type

router = APIRouter(tags=["Health"])


@router.get("")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "storage": get_storage_type()}
