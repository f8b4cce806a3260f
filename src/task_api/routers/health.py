from fastapi import APIRouter
from fastapi.responses import PlainTextResponse


router = APIRouter(tags=["health"])


@router.get("/", response_class=PlainTextResponse)
def health_check() -> str:
    """Confirms the process is serving traffic; does not touch the database."""
    return "API is running"
