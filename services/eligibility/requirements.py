"""Pull requirement lines out of free-form tender descriptions."""

from __future__ import annotations

import re
from typing import List, Optional


SECTION_START_PATTERN = re.compile(r"requirements|qualifications|eligibility", re.IGNORECASE)
SECTION_HEADING_PATTERN = re.compile(r"^[A-Z][\w\s]+:")
BULLET_PATTERN = re.compile(r"^[-*•]")
NUMBERED_PATTERN = re.compile(r"^\d+\.")
BULLET_PREFIX = re.compile(r"^[-*•]\s*")
NUMBER_PREFIX = re.compile(r"^\d+\.\s*")

# Used only when the description has no list structure at all
KEY_PHRASE_PATTERNS = [
    re.compile(r"CIDB\s+Grade\s+G[1-7]", re.IGNORECASE),
    re.compile(r"ISO\s+\d+", re.IGNORECASE),
    re.compile(r"\d+\s+years?\s+experience", re.IGNORECASE),
    re.compile(r"contractor\s+license", re.IGNORECASE),
    re.compile(r"certification\s+required", re.IGNORECASE),
]


def extract_requirements_from_description(description: Optional[str]) -> List[str]:
    """
    Collect requirement strings from a tender description.

    A line that mentions requirements, qualifications or eligibility and ends
    with ``:`` opens a section; a blank line or another ``Heading:`` closes
    it. Lines inside a section, bullet lines and numbered lines are kept
    with their markers stripped, in order and without duplicates. When no
    such line exists, the first match of each key phrase is returned.
    """
    if not description or not isinstance(description, str):
        return []

    requirements: List[str] = []
    in_section = False

    for line in description.split("\n"):
        stripped = line.strip()

        if SECTION_START_PATTERN.search(stripped) and stripped.endswith(":"):
            in_section = True
            continue

        if in_section and (stripped == "" or SECTION_HEADING_PATTERN.match(stripped)):
            in_section = False

        if in_section or BULLET_PATTERN.match(stripped) or NUMBERED_PATTERN.match(stripped):
            requirement = NUMBER_PREFIX.sub("", BULLET_PREFIX.sub("", stripped, count=1), count=1)
            if requirement and requirement not in requirements:
                requirements.append(requirement)

    if not requirements:
        for pattern in KEY_PHRASE_PATTERNS:
            match = pattern.search(description)
            if match:
                requirements.append(match.group(0))

    return requirements
