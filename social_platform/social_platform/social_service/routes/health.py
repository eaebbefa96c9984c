"""
Status and health check endpoints
"""
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..db import get_db, store_time
from ..errors import StoreError
from ..schemas import StatusResponse

router = APIRouter(tags=["health"])


@router.get("/", response_model=StatusResponse)
def service_status(db: Session = Depends(get_db)):
    """
    Report that the service is up and that the store answers.

    Raises:
        StoreError: 500 if the database cannot be queried
    """
    try:
        db_time = store_time(db)
    except SQLAlchemyError as e:
        raise StoreError(f"DB Connection Failed: {e}") from e

    return StatusResponse(
        message="Social App Backend Live!",
        db_time=db_time,
        status="Ready for posts, users, and image uploads",
    )


@router.get("/health", status_code=status.HTTP_200_OK)
def health_check() -> Dict[str, Any]:
    """Liveness probe; does not touch the database."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
