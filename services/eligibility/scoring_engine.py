"""Scoring engine implementing the tender eligibility rubric."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .requirements import extract_requirements_from_description
from .utils import (
    CERT_NAME_PATTERN,
    GRADE_PATTERN,
    YEARS_PATTERN,
    contains_any,
    parse_company_grade,
    parse_date,
    parse_int,
)


DEFAULT_WEIGHTS = {
    "grade": 30,
    "experience": 20,
    "certification_pool": 30,
    "certification_cap": 10,
    "license": 20,
    "expired_license_penalty": 10,
}

STATUS_BANDS = [
    (80, "high_match", "High match for your qualifications"),
    (50, "medium_match", "Moderate match for your qualifications"),
    (1, "low_match", "Low match for your qualifications"),
]
NO_MATCH = ("no_match", "Insufficient information to determine match")


@dataclass
class EligibilityVerdict:
    score: int
    status: str
    message: str
    matched_criteria: List[str] = field(default_factory=list)
    missing_criteria: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, object]:
        return {
            "score": self.score,
            "status": self.status,
            "message": self.message,
            "matchedCriteria": list(self.matched_criteria),
            "missingCriteria": list(self.missing_criteria),
        }


def incomplete_profile_verdict() -> EligibilityVerdict:
    return EligibilityVerdict(score=0, status="incomplete_profile", message="Complete your company profile")


def tender_not_found_verdict() -> EligibilityVerdict:
    return EligibilityVerdict(score=0, status="not_found", message="Tender not found")


class EligibilityScorer:
    """Score a company profile against one tender's requirement strings."""

    def __init__(self, profile: Mapping[str, Any], weights: Optional[Dict[str, int]] = None,
                 today: Optional[date] = None):
        self.profile = profile
        self.weights = weights or DEFAULT_WEIGHTS
        self.today = today or date.today()

    def score_requirements(self, requirements: Sequence[str]) -> EligibilityVerdict:
        matches: List[str] = []
        gaps: List[str] = []
        earned = 0
        available = 0

        for scorer in (self._score_grade, self._score_experience, self._score_certifications, self._score_license):
            points, max_points = scorer(requirements, matches, gaps)
            earned += points
            available += max_points

        # Half-up rounding, 62.5 -> 63
        score = math.floor(earned / available * 100 + 0.5) if available > 0 else 0
        score = max(0, min(100, score))

        status, message = NO_MATCH
        for threshold, band_status, band_message in STATUS_BANDS:
            if score >= threshold:
                status, message = band_status, band_message
                break

        return EligibilityVerdict(
            score=score,
            status=status,
            message=message,
            matched_criteria=matches,
            missing_criteria=gaps,
        )

    # --- component scoring helpers -------------------------------------------------

    def _score_grade(self, requirements: Sequence[str], matches: List[str], gaps: List[str]):
        requirement = next(
            (req for req in requirements if "cidb" in req.lower() and "grade" in req.lower()),
            None,
        )
        if requirement is None:
            return 0, 0

        weight = self.weights["grade"]
        company_grade_text = str(self.profile.get("cidb_grade") or "").strip()
        if not company_grade_text:
            gaps.append("CIDB Grade: Not provided in your profile")
            return 0, weight

        required_match = GRADE_PATTERN.search(requirement)
        if not required_match:
            # Requirement names CIDB but no grade we can compare against
            return 0, weight

        required_label = required_match.group(0)
        required_grade = int(required_match.group(1))
        company_grade = parse_company_grade(company_grade_text)

        if company_grade is not None and company_grade >= required_grade:
            matches.append(f"CIDB Grade: {company_grade_text} meets or exceeds required {required_label}")
            return weight, weight

        gaps.append(f"CIDB Grade: {company_grade_text} is below required {required_label}")
        return 0, weight

    def _score_experience(self, requirements: Sequence[str], matches: List[str], gaps: List[str]):
        requirement = next(
            (req for req in requirements if contains_any(req, ("experience", "years"))),
            None,
        )
        if requirement is None:
            return 0, 0

        weight = self.weights["experience"]
        company_years = parse_int(self.profile.get("years_in_operation"))
        if not company_years:
            gaps.append("Experience: Years in operation not provided in your profile")
            return 0, weight

        years_match = YEARS_PATTERN.search(requirement)
        if not years_match:
            return 0, weight

        required_years = int(years_match.group(1))
        if company_years >= required_years:
            matches.append(f"Experience: {company_years} years meets or exceeds required {required_years} years")
            return weight, weight

        gaps.append(f"Experience: {company_years} years is below required {required_years} years")
        return 0, weight

    def _score_certifications(self, requirements: Sequence[str], matches: List[str], gaps: List[str]):
        cert_requirements = [
            req for req in requirements if contains_any(req, ("iso", "certification", "certified"))
        ]
        if not cert_requirements:
            return 0, 0

        per_cert = min(
            self.weights["certification_cap"],
            math.floor(self.weights["certification_pool"] / len(cert_requirements)),
        )
        listed = self.profile.get("custom_certifications")
        custom_certs = [
            cert for cert in (listed if isinstance(listed, (list, tuple)) else [])
            if isinstance(cert, Mapping) and str(cert.get("name") or "").strip()
        ]

        earned = 0
        for requirement in cert_requirements:
            lowered = requirement.lower()
            matched = self._standard_certificate(lowered)
            if matched is None:
                custom = next(
                    (cert for cert in custom_certs if str(cert["name"]).strip().lower() in lowered),
                    None,
                )
                if custom is not None:
                    matched = f"{str(custom['name']).strip()} certification"

            if matched is not None:
                earned += per_cert
                matches.append(matched)
            else:
                name_match = CERT_NAME_PATTERN.search(requirement)
                gaps.append(name_match.group(0) if name_match else requirement)

        return earned, per_cert * len(cert_requirements)

    def _standard_certificate(self, lowered_requirement: str) -> Optional[str]:
        if "iso 9001" in lowered_requirement and self.profile.get("iso9001"):
            return "ISO 9001: Quality Management certification"
        if "iso 14001" in lowered_requirement and self.profile.get("iso14001"):
            return "ISO 14001: Environmental Management certification"
        if contains_any(lowered_requirement, ("iso 45001", "ohsas 18001")) and self.profile.get("ohsas18001"):
            return "ISO 45001/OHSAS 18001: Occupational Health & Safety certification"
        return None

    def _score_license(self, requirements: Sequence[str], matches: List[str], gaps: List[str]):
        requirement = next(
            (req for req in requirements if contains_any(req, ("license", "permit"))),
            None,
        )
        if requirement is None:
            return 0, 0

        weight = self.weights["license"]
        license_number = str(self.profile.get("contractor_license") or "").strip()
        if not license_number:
            gaps.append("License: Not provided in your profile")
            return 0, weight

        points = weight
        matches.append(f"License: {license_number}")

        expiry = parse_date(self.profile.get("license_expiry"))
        if expiry is not None and expiry < self.today:
            points -= self.weights["expired_license_penalty"]
            gaps.append("License is expired")

        return points, weight


def _requirements_for(tender: Mapping[str, Any]) -> List[str]:
    requirements = tender.get("requirements")
    if isinstance(requirements, (list, tuple)) and requirements:
        return [str(req) for req in requirements if req]
    return extract_requirements_from_description(tender.get("description"))


def calculate_eligibility_score(
    tender: Mapping[str, Any],
    profile: Optional[Mapping[str, Any]],
    today: Optional[date] = None,
) -> EligibilityVerdict:
    """
    Heuristic match between a tender and a company profile.

    ``tender`` needs ``requirements`` and/or ``description``; ``profile`` is
    the flat snake_case company view. Never raises: data the rubric cannot
    use is reported as a missing criterion.
    """
    if not profile:
        return incomplete_profile_verdict()

    return EligibilityScorer(profile, today=today).score_requirements(_requirements_for(tender))
