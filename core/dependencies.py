"""
Shared dependencies for FastAPI routes.
"""

from typing import Optional
from fastapi import Request, Depends, HTTPException
from sqlalchemy.orm import Session

from database import SessionLocal, UserDB, CompanyDB, TenderDB
from core.security import get_session


def get_db():
    """Database session dependency."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_bearer_token(request: Request) -> Optional[str]:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    header = request.headers.get('authorization', '')
    scheme, _, token = header.partition(' ')
    if scheme.lower() != 'bearer' or not token.strip():
        return None
    return token.strip()


def get_current_user(request: Request, db: Session = Depends(get_db)) -> Optional[UserDB]:
    """Resolve the user owning the bearer token, or None."""
    session_token = get_bearer_token(request)
    if not session_token:
        return None

    session_data = get_session(session_token)
    if not session_data:
        return None

    return db.query(UserDB).filter(UserDB.id == session_data['user_id']).first()


def require_user(request: Request, db: Session) -> UserDB:
    """Like get_current_user but answers 401 when the caller is anonymous."""
    if not get_bearer_token(request):
        raise HTTPException(status_code=401, detail="No authorization token provided")

    current_user = get_current_user(request, db)
    if not current_user:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    return current_user


def get_company_profile(db: Session, user_id: str) -> Optional[CompanyDB]:
    return db.query(CompanyDB).filter(CompanyDB.user_id == user_id).first()


def get_tender_or_404(db: Session, tender_id: str) -> TenderDB:
    tender = db.query(TenderDB).filter(TenderDB.id == tender_id).first()
    if not tender:
        raise HTTPException(status_code=404, detail="Tender not found")
    return tender


async def read_json_body(request: Request) -> dict:
    """Parse the request body as a JSON object, answering 400 otherwise."""
    try:
        body = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid JSON payload")
    if not isinstance(body, dict):
        raise HTTPException(status_code=400, detail="Invalid JSON payload")
    return body


# Collaborators are built once in the startup hook and kept on app.state

def get_ai_assistant(request: Request):
    return request.app.state.ai_assistant


def get_attestation_client(request: Request):
    return request.app.state.attestation_client


def get_translator(request: Request):
    return request.app.state.translator
