"""
Authentication routes: signup, login and logout with bearer tokens.
"""

import logging
from datetime import datetime
from fastapi import APIRouter, Request, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from database import UserDB
from core.dependencies import get_db, get_bearer_token, read_json_body, require_user
from core.security import hash_password, verify_password, create_session, delete_session

logger = logging.getLogger(__name__)

router = APIRouter()

MIN_PASSWORD_LENGTH = 8


@router.post("/api/auth/signup")
async def signup(request: Request, db: Session = Depends(get_db)):
    """Create an account and return a session token."""
    body = await read_json_body(request)
    email = (body.get('email') or '').strip().lower()
    password = body.get('password') or ''
    name = (body.get('name') or '').strip()

    if not email or not password or not name:
        raise HTTPException(status_code=400, detail="email, password and name are required")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise HTTPException(status_code=400, detail=f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

    if db.query(UserDB).filter(UserDB.email == email).first():
        raise HTTPException(status_code=400, detail="Email already registered")

    user = UserDB(email=email, name=name, password_hash=hash_password(password), last_login=datetime.utcnow())
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"New user registered: {user.id}")

    return JSONResponse({"token": create_session(user.id), "user": user.to_dict()}, status_code=201)


@router.post("/api/auth/login")
async def login(request: Request, db: Session = Depends(get_db)):
    body = await read_json_body(request)
    email = (body.get('email') or '').strip().lower()
    password = body.get('password') or ''

    if not email or not password:
        raise HTTPException(status_code=400, detail="email and password are required")

    user = db.query(UserDB).filter(UserDB.email == email).first()
    if not user or not verify_password(password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid email or password")

    user.last_login = datetime.utcnow()
    db.commit()

    return JSONResponse({"token": create_session(user.id), "user": user.to_dict()})


@router.post("/api/auth/logout")
async def logout(request: Request, db: Session = Depends(get_db)):
    require_user(request, db)
    delete_session(get_bearer_token(request))
    return JSONResponse({"success": True})


@router.get("/api/auth/me")
async def current_user(request: Request, db: Session = Depends(get_db)):
    user = require_user(request, db)
    return JSONResponse(user.to_dict())
