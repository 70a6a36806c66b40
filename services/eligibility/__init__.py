"""Tender eligibility heuristic package."""

from .requirements import extract_requirements_from_description
from .scoring_engine import (
    EligibilityScorer,
    EligibilityVerdict,
    calculate_eligibility_score,
    incomplete_profile_verdict,
    tender_not_found_verdict,
)

__all__ = [
    "extract_requirements_from_description",
    "EligibilityScorer",
    "EligibilityVerdict",
    "calculate_eligibility_score",
    "incomplete_profile_verdict",
    "tender_not_found_verdict",
]
