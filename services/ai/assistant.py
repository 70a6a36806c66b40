"""
AI features behind the proposal workflow.

Every public method returns an Outcome: ``Ok`` when the LLM answered,
``Degraded`` with deterministic content when it is not configured or
failed. Nothing here raises for a provider failure.
"""

import logging
from typing import Any, Dict, List, Optional

from core.llm_client import LLMClient, LLMServiceError
from core.outcome import Degraded, Ok
from . import fallbacks
from .language import detect_language
from .prompts import TASK_CONFIGS, build_prompt, validate_response
from .validation import extract_json_object, log_ai_metrics, sanitize_ai_response, validate_ai_content

logger = logging.getLogger(__name__)

NOT_CONFIGURED = "No LLM provider configured"


def company_context(company: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Map the flat company profile onto the prompt's COMPANY PROFILE block."""
    if not company:
        return {}

    experience = company.get("experience") or ""
    years = company.get("years_in_operation")
    if not experience and years:
        experience = f"{years} years in operation"

    return {
        "name": company.get("company_name"),
        "registration_number": company.get("registration_number"),
        "certifications": company.get("certifications") or [],
        "experience": experience,
        "contact_email": company.get("email"),
    }


def build_context(
    tender: Dict[str, Any],
    company: Optional[Dict[str, Any]] = None,
    proposal_content: str = "",
    user_id: Optional[str] = None,
) -> Dict[str, Any]:
    return {
        "tender": tender,
        "company": company_context(company),
        "proposal_content": proposal_content,
        "user_id": user_id,
    }


class AIAssistant:
    """Prompt, call, validate and fall back for each AI task."""

    def __init__(self, llm: LLMClient):
        self.llm = llm

    @property
    def is_configured(self) -> bool:
        return self.llm.is_configured

    def _complete(self, task: str, messages: List[Dict[str, str]]) -> str:
        config = TASK_CONFIGS[task]
        try:
            return self.llm.chat_completion(
                messages,
                temperature=config["temperature"],
                max_tokens=config["max_tokens"],
            )
        except LLMServiceError:
            raise
        except Exception as e:
            logger.error(f"Unexpected LLM failure during {task}: {e}")
            raise LLMServiceError(f"Unexpected error: {e}")

    def _check(self, task: str, text: str, context: Dict[str, Any]) -> None:
        validation = validate_response(text, task)
        if not validation.is_valid:
            logger.warning(f"AI response validation failed for {task}: {validation.issues}")
        log_ai_metrics(task, validate_ai_content(text, task, context), context)

    def summarize(self, tender: Dict[str, Any]):
        if not self.is_configured:
            return Degraded(fallbacks.summary_template(tender), NOT_CONFIGURED)

        context = build_context(tender)
        try:
            text = sanitize_ai_response(self._complete("SUMMARIZE", build_prompt("SUMMARIZE", context)))
        except LLMServiceError as e:
            logger.error(f"Summarize failed, using template: {e}")
            return Degraded(fallbacks.summary_template(tender), str(e))

        self._check("SUMMARIZE", text, context)
        return Ok(text)

    def check_eligibility(self, tender: Dict[str, Any], company: Dict[str, Any], user_id: Optional[str] = None):
        """Returns a list of ``{"requirement", "eligible"}`` items."""
        if not self.is_configured:
            return Degraded(fallbacks.mock_eligibility(tender.get("category")), NOT_CONFIGURED)

        context = build_context(tender, company, user_id=user_id)
        try:
            text = self._complete("ELIGIBILITY_CHECK", build_prompt("ELIGIBILITY_CHECK", context))
        except LLMServiceError as e:
            logger.error(f"AI eligibility check error: {e}")
            return Degraded(fallbacks.eligibility_items(fallbacks.UNAVAILABLE_ELIGIBILITY), str(e))

        self._check("ELIGIBILITY_CHECK", text, context)

        try:
            parsed = extract_json_object(text)
        except ValueError as e:
            logger.error(f"Eligibility JSON parsing error: {e}")
            return Degraded(fallbacks.eligibility_items(fallbacks.UNPARSEABLE_ELIGIBILITY), str(e))

        items = []
        for key, eligible in (("matched_criteria", True), ("missing_criteria", False), ("insufficient_data", False)):
            for entry in parsed.get(key) or []:
                items.append({"requirement": str(entry), "eligible": eligible})
        return Ok(items)

    def chat(
        self,
        tender: Dict[str, Any],
        company: Optional[Dict[str, Any]],
        user_message: str,
        proposal_content: str = "",
        chat_history: Optional[List[Dict[str, str]]] = None,
        user_id: Optional[str] = None,
    ):
        context = build_context(tender, company, proposal_content, user_id)
        if not self.is_configured:
            return Degraded(fallbacks.chat_reply(user_message, tender, context["company"]), NOT_CONFIGURED)

        messages = build_prompt("CHAT_ASSISTANCE", context, user_message=user_message, chat_history=chat_history)
        try:
            reply = sanitize_ai_response(self._complete("CHAT_ASSISTANCE", messages))
        except LLMServiceError as e:
            logger.error(f"AI chat error: {e}")
            return Degraded(fallbacks.CHAT_UNAVAILABLE_REPLY, str(e))
        return Ok(reply)

    def generate_proposal(self, tender: Dict[str, Any], company: Dict[str, Any], user_id: Optional[str] = None):
        context = build_context(tender, company, user_id=user_id)
        if not self.is_configured:
            return Degraded(fallbacks.proposal_template(tender, context["company"]), NOT_CONFIGURED)

        try:
            content = self._complete("PROPOSAL_GENERATION", build_prompt("PROPOSAL_GENERATION", context))
        except LLMServiceError as e:
            logger.error(f"AI generation error: {e}")
            return Degraded(fallbacks.failed_generation_template(tender, context["company"]), str(e))

        content = sanitize_ai_response(content)
        self._check("PROPOSAL_GENERATION", content, context)
        return Ok(content)

    def improve_proposal(
        self,
        tender: Dict[str, Any],
        company: Optional[Dict[str, Any]],
        proposal_content: str,
        user_id: Optional[str] = None,
    ):
        """Returns ``{"improvedContent", "insights", "language", "validation"}``."""
        language = detect_language(proposal_content)
        logger.info(f"[Improve Proposal] detected language: {language}")
        context = build_context(tender, company, proposal_content, user_id)

        if not self.is_configured:
            result = fallbacks.template_improvement(proposal_content, language, context["company"].get("name"))
            result.update(language=language, validation="template")
            return Degraded(result, NOT_CONFIGURED)

        try:
            text = self._complete("PROPOSAL_IMPROVEMENT", build_prompt("PROPOSAL_IMPROVEMENT", context))
        except LLMServiceError as e:
            logger.error(f"AI improvement error: {e}")
            result = fallbacks.unavailable_improvement(proposal_content, language)
            result.update(language=language, validation="unavailable")
            return Degraded(result, str(e))

        validation = validate_response(text, "PROPOSAL_IMPROVEMENT")
        if not validation.is_valid:
            logger.warning(f"AI response validation failed: {validation.issues}")

        try:
            parsed = extract_json_object(text)
            improved = parsed.get("improvedContent")
            if not improved:
                raise ValueError("Missing improvedContent in AI response")
        except ValueError as e:
            logger.error(f"Failed to parse AI improvement response: {e}")
            return Degraded({
                "improvedContent": text,
                "insights": [dict(fallbacks.UNPARSED_IMPROVEMENT_INSIGHT)],
                "language": language,
                "validation": "fallback",
            }, str(e))

        insights = [
            insight for insight in (parsed.get("insights") or [])
            if isinstance(insight, dict)
        ]
        return Ok({
            "improvedContent": improved,
            "insights": insights,
            "language": language,
            "validation": "passed" if validation.is_valid else "warning",
        })
