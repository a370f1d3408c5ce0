"""Stored quiz result endpoints."""
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session as DbSession

from api.database import get_db
from api.services import result_service
from api.utils import parse_iso_timestamp, validate_id

router = APIRouter(prefix="/api/results", tags=["results"])


@router.get("")
def list_results(
    db: Annotated[DbSession, Depends(get_db)],
    eligible: bool = False,
    since: str | None = None,
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
) -> list[dict[str, object]]:
    """List stored results, optionally only certification-eligible ones."""
    completed_after = None
    if since is not None:
        completed_after = parse_iso_timestamp(since)
        if completed_after is None:
            raise HTTPException(status_code=400, detail="Invalid since timestamp")
    records = result_service.list_results(
        db,
        eligible_only=eligible,
        completed_after=completed_after,
        limit=limit,
        offset=offset,
    )
    return [record.to_dict() for record in records]


@router.get("/{session_id}")
def get_result(
    session_id: str,
    db: Annotated[DbSession, Depends(get_db)],
) -> dict[str, object]:
    session_id = validate_id("sessionId", session_id)
    record = result_service.get_result_record(db, session_id)
    if not record:
        raise HTTPException(status_code=404, detail="Result not found")
    return record.to_dict()
