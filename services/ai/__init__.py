"""AI prompt/response pipeline package."""

from .assistant import AIAssistant, build_context, company_context
from .language import detect_language
from .prompts import AI_TASKS, SYSTEM_PROMPT, TASK_CONFIGS, ValidationResult, build_prompt, validate_response
from .validation import (
    ContentValidation,
    extract_json_object,
    log_ai_metrics,
    sanitize_ai_response,
    validate_ai_content,
)

__all__ = [
    "AIAssistant",
    "build_context",
    "company_context",
    "detect_language",
    "AI_TASKS",
    "SYSTEM_PROMPT",
    "TASK_CONFIGS",
    "ValidationResult",
    "build_prompt",
    "validate_response",
    "ContentValidation",
    "extract_json_object",
    "log_ai_metrics",
    "sanitize_ai_response",
    "validate_ai_content",
]
