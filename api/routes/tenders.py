"""
Tender browsing routes.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy import desc, or_
from sqlalchemy.orm import Session

from database import TenderDB, parse_datetime_string
from core.dependencies import get_db, get_tender_or_404

router = APIRouter()


@router.get("/api/tenders")
async def list_tenders(
    q: Optional[str] = Query(None, description="Text search over title, agency and description"),
    category: Optional[str] = Query(None),
    location: Optional[str] = Query(None),
    closing_after: Optional[str] = Query(None, alias="closingAfter"),
    db: Session = Depends(get_db),
):
    """List active tenders, newest first."""
    query = db.query(TenderDB).filter(TenderDB.status == "active")

    if q:
        pattern = f"%{q.strip()}%"
        query = query.filter(or_(
            TenderDB.title.ilike(pattern),
            TenderDB.agency.ilike(pattern),
            TenderDB.description.ilike(pattern),
        ))
    if category:
        query = query.filter(TenderDB.category == category)
    if location:
        query = query.filter(TenderDB.location.ilike(f"%{location.strip()}%"))

    closing_after_dt = parse_datetime_string(closing_after)
    if closing_after_dt:
        query = query.filter(TenderDB.closing_date >= closing_after_dt)

    tenders = query.order_by(desc(TenderDB.created_at)).all()
    return JSONResponse([tender.to_frontend_format() for tender in tenders])


@router.get("/api/tenders/{tender_id}")
async def get_tender(tender_id: str, db: Session = Depends(get_db)):
    tender = get_tender_or_404(db, tender_id)
    return JSONResponse(tender.to_frontend_format(detailed=True))
