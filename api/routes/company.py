"""
Company profile routes and the dashboard counters built on it.
"""

import logging
from datetime import datetime
from fastapi import APIRouter, Request, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from database import AttestationDB, CompanyDB, ProposalDB, empty_company_profile, parse_date_string, extract_int_value
from core.dependencies import get_db, get_company_profile, read_json_body, require_user

logger = logging.getLogger(__name__)

router = APIRouter()


def _as_list(value):
    return value if isinstance(value, list) else []


def _text(value) -> str:
    return "" if value is None else str(value).strip()


PROFILE_SECTIONS = ('basicInfo', 'certifications', 'experience', 'team', 'preferences')


def validate_profile_document(body: dict) -> None:
    for section in PROFILE_SECTIONS:
        value = body.get(section)
        if value is not None and not isinstance(value, dict):
            raise HTTPException(status_code=400, detail=f"{section} must be an object")


def apply_profile_document(company: CompanyDB, body: dict) -> None:
    """Copy the nested camelCase profile document onto the flat columns."""
    basic = body.get('basicInfo') or {}
    certs = body.get('certifications') or {}
    experience = body.get('experience') or {}
    team = body.get('team') or {}
    preferences = body.get('preferences') or {}

    company.company_name = _text(basic.get('companyName'))
    company.registration_number = _text(basic.get('registrationNumber'))
    company.address = _text(basic.get('address'))
    company.phone = _text(basic.get('phone'))
    company.email = _text(basic.get('email'))
    company.website = _text(basic.get('website'))
    company.established_year = extract_int_value(basic.get('establishedYear'))

    company.cidb_grade = _text(certs.get('cidbGrade')).upper()
    company.cidb_expiry = parse_date_string(certs.get('cidbExpiry'))
    company.iso9001 = bool(certs.get('iso9001'))
    company.iso14001 = bool(certs.get('iso14001'))
    company.ohsas18001 = bool(certs.get('ohsas18001'))
    company.contractor_license = _text(certs.get('contractorLicense'))
    company.license_expiry = parse_date_string(certs.get('licenseExpiry'))
    company.custom_certifications = [
        {"name": _text(cert.get('name')), "expiry": _text(cert.get('expiry'))}
        for cert in _as_list(certs.get('customCertifications'))
        if isinstance(cert, dict) and _text(cert.get('name'))
    ]

    company.years_in_operation = extract_int_value(experience.get('yearsInOperation'))
    company.total_projects = extract_int_value(experience.get('totalProjects'))
    company.total_value = _text(experience.get('totalValue'))
    company.specialties = _as_list(experience.get('specialties'))
    company.major_projects = _as_list(experience.get('majorProjects'))
    company.experience = _text(experience.get('summary'))

    company.total_employees = extract_int_value(team.get('totalEmployees'))
    company.engineers = extract_int_value(team.get('engineers'))
    company.supervisors = extract_int_value(team.get('supervisors'))
    company.technicians = extract_int_value(team.get('technicians'))
    company.laborers = extract_int_value(team.get('laborers'))
    company.key_personnel = _as_list(team.get('keyPersonnel'))

    company.preferred_categories = _as_list(preferences.get('categories'))
    company.preferred_locations = _as_list(preferences.get('locations'))
    company.budget_range = _text(preferences.get('budgetRange'))


@router.get("/api/company")
async def get_company(request: Request, db: Session = Depends(get_db)):
    current_user = require_user(request, db)
    company = get_company_profile(db, current_user.id)
    if not company:
        return JSONResponse(empty_company_profile())
    return JSONResponse(company.to_frontend_format())


@router.put("/api/company")
async def save_company(request: Request, db: Session = Depends(get_db)):
    """Create or replace the caller's company profile."""
    current_user = require_user(request, db)
    body = await read_json_body(request)
    validate_profile_document(body)

    company = get_company_profile(db, current_user.id)
    if not company:
        company = CompanyDB(user_id=current_user.id)
        db.add(company)
        logger.info(f"Creating company profile for user {current_user.id}")

    apply_profile_document(company, body)
    company.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(company)

    return JSONResponse(company.to_frontend_format())


@router.get("/api/dashboard")
async def dashboard_stats(request: Request, db: Session = Depends(get_db)):
    """Proposal and attestation counters for the caller's dashboard."""
    current_user = require_user(request, db)

    proposals = db.query(ProposalDB).filter(ProposalDB.user_id == current_user.id)
    total = proposals.count()
    submitted = proposals.filter(ProposalDB.status == "submitted").count()
    attestations = db.query(AttestationDB).filter(AttestationDB.user_id == current_user.id).count()

    return JSONResponse({
        "totalProposals": total,
        "draftProposals": total - submitted,
        "submittedProposals": submitted,
        "attestations": attestations,
        "profileComplete": get_company_profile(db, current_user.id) is not None,
    })
