"""Quality checks and clean-up for LLM output."""

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


HALLUCINATION_INDICATORS = [
    "as an ai language model",
    "i cannot provide",
    "i apologize",
    "it is likely that",
    "probably",
    "might be",
    "could potentially",
    "generally speaking",
    "typically",
    "usually",
    "in most cases",
    "it is common",
    "often",
    "sometimes",
]

OFF_TOPIC_INDICATORS = [
    "legal advice",
    "financial advice",
    "investment recommendation",
    "guarantee",
    "promise",
    "ensure success",
    "definitely win",
    "certain to succeed",
]

REQUIRED_ELEMENTS = {
    "SUMMARIZE": ["tender", "requirement", "agency"],
    "ELIGIBILITY_CHECK": ["requirement", "company", "certification"],
    "PROPOSAL_GENERATION": ["executive summary", "company", "approach"],
    "PROPOSAL_IMPROVEMENT": ["enhanced", "improved", "better"],
}

DISCLAIMER_PATTERNS = [
    re.compile(r"^(As an AI language model,?|I'm an AI assistant,?|As an AI,?)\s*", re.IGNORECASE),
    re.compile(r"\*\*?Disclaimer\*\*?:.*$", re.IGNORECASE | re.MULTILINE),
    re.compile(r"\*\*?Note\*\*?:.*$", re.IGNORECASE | re.MULTILINE),
    re.compile(r"Please note that.*$", re.IGNORECASE | re.MULTILINE),
    re.compile(r"It's important to note that.*$", re.IGNORECASE | re.MULTILINE),
]
EXTRA_BLANK_LINES = re.compile(r"\n\s*\n\s*\n")
JSON_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")
IMPROVED_CONTENT_FIELD = re.compile(r'"improvedContent":\s*"([\s\S]*?)"(\s*,\s*"insights"|\s*\})')


@dataclass
class ContentValidation:
    is_valid: bool
    issues: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    score: int = 100


def validate_ai_content(content: str, task: str, context: Optional[Dict[str, Any]] = None) -> ContentValidation:
    """
    Score a completion for grounding and tone.

    Hallucination and off-topic phrases are issues (-20 each); missing task
    elements, short output and unused context are warnings (-5 each).
    """
    context = context or {}
    issues: List[str] = []
    warnings: List[str] = []
    lowered = content.lower()

    for phrase in HALLUCINATION_INDICATORS:
        if phrase in lowered:
            issues.append(f'Contains hallucination indicator: "{phrase}"')

    for phrase in OFF_TOPIC_INDICATORS:
        if phrase in lowered:
            issues.append(f'Contains off-topic content: "{phrase}"')

    for element in REQUIRED_ELEMENTS.get(task, []):
        if element not in lowered:
            warnings.append(f'Missing expected element: "{element}"')

    if len(content.strip()) < 100:
        warnings.append("Response is quite short")

    tender_title = (context.get("tender") or {}).get("title")
    if tender_title and tender_title.lower() not in lowered:
        warnings.append("Response may not be using tender title from context")

    company_name = (context.get("company") or {}).get("name")
    if company_name and company_name.lower() not in lowered:
        warnings.append("Response may not be using company name from context")

    if task == "ELIGIBILITY_CHECK" and "eligible" not in content and "requirement" not in content:
        issues.append("Eligibility check response missing key terms")
    elif task == "PROPOSAL_GENERATION" and "#" not in content:
        warnings.append("Proposal missing markdown headers")

    return ContentValidation(
        is_valid=not issues,
        issues=issues,
        warnings=warnings,
        score=max(0, 100 - len(issues) * 20 - len(warnings) * 5),
    )


def sanitize_ai_response(content: str) -> str:
    """Strip AI disclaimers and collapse runs of blank lines."""
    sanitized = content
    for pattern in DISCLAIMER_PATTERNS:
        sanitized = pattern.sub("", sanitized)
    return EXTRA_BLANK_LINES.sub("\n\n", sanitized).strip()


def log_ai_metrics(task: str, validation: ContentValidation, context: Optional[Dict[str, Any]] = None) -> None:
    context = context or {}
    logger.info(
        f"[AI Metrics] task={task} valid={validation.is_valid} score={validation.score} "
        f"issues={len(validation.issues)} warnings={len(validation.warnings)} "
        f"tender={(context.get('tender') or {}).get('id')} user={context.get('user_id')}"
    )
    if validation.issues:
        logger.warning(f"[AI Issues] {validation.issues}")
    if validation.warnings:
        logger.info(f"[AI Warnings] {validation.warnings}")


def _escape_json_string(text: str) -> str:
    text = re.sub(r'(?<!\\)"', r'\\"', text)
    return (
        text.replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
        .replace("\f", "\\f")
        .replace("\b", "\\b")
    )


def extract_json_object(text: str) -> Dict[str, Any]:
    """
    Parse the outermost ``{...}`` in a completion.

    Models often put raw newlines inside the ``improvedContent`` string; on a
    first parse failure those control characters are escaped and parsing is
    retried once.

    Raises:
        ValueError: If no JSON object can be recovered
    """
    match = JSON_OBJECT_PATTERN.search(text)
    if not match:
        raise ValueError("No JSON found in AI response")

    candidate = match.group(0)
    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError as first_error:
        logger.warning(f"First JSON parse failed, attempting to sanitize: {first_error}")
        repaired = IMPROVED_CONTENT_FIELD.sub(
            lambda m: f'"improvedContent": "{_escape_json_string(m.group(1))}"{m.group(2)}',
            candidate,
            count=1,
        )
        try:
            parsed = json.loads(repaired)
        except json.JSONDecodeError as e:
            raise ValueError(f"Could not parse AI JSON: {e}")

    if not isinstance(parsed, dict):
        raise ValueError("AI JSON is not an object")
    return parsed
