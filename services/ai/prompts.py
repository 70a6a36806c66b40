"""
Prompt templates and response checks shared by every AI feature.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


SYSTEM_PROMPT = """You are an AI assistant for Tenderly, a platform that helps SMEs and contractors in Malaysia and ASEAN access government and GLC tenders.

CRITICAL RULES:
1. NEVER invent facts. Only use information provided in the context.
2. If required data is missing, clearly state: "Not enough data to answer."
3. Never output boilerplate, apologies, or disclaimers.
4. Always follow the required output format exactly.
5. Be clear, concise, and businesslike.
6. Your outputs are used for legal and financial decisions - accuracy is critical.

CONTEXT FORMAT:
You will always receive:
- Tender Context: Full tender details, requirements, deadlines
- Company Profile: Company info, certifications, experience
- Task Instructions: Specific task to perform
- Output Format: Required structure for response

QUALITY TARGETS:
IDEAL: Accurate, comprehensive, uses only supplied context, follows exact format
ACCEPTABLE: Minor format errors but factually grounded
FORBIDDEN: Invents information, goes off-topic, uses generic phrases, fails to follow structure"""


AI_TASKS: Dict[str, Dict[str, Any]] = {
    "SUMMARIZE": {
        "instruction": """Summarize this tender in 3-4 sentences, focusing on key points and requirements. Use only the provided tender information.

OUTPUT FORMAT:
A concise paragraph covering:
- What the tender is for
- Key requirements
- Budget/timeline if specified
- Agency/location""",
        "examples": {
            "good": "This tender from DBKL seeks contractors for RM 2.5M road maintenance in KL, including pothole repairs and drainage improvements. Requires CIDB G4+ certification and 5+ years experience. Project duration is 24 months with regular quality inspections.",
            "bad": "This is a great opportunity for construction companies. The project involves various road works and maintenance activities. Companies should apply if they have relevant experience.",
        },
    },
    "ELIGIBILITY_CHECK": {
        "instruction": """Check company eligibility against tender requirements. Use ONLY the provided company profile data.

OUTPUT FORMAT:
{
  "matched_criteria": [
    "Requirement met: [specific requirement] - [evidence from profile]"
  ],
  "missing_criteria": [
    "Requirement not met: [specific requirement] - [what's missing]"
  ],
  "insufficient_data": [
    "Cannot verify: [requirement] - [what data is needed]"
  ]
}""",
        "examples": {
            "good": """{
  "matched_criteria": [
    "CIDB certification: Company has G5 (exceeds G4 requirement)",
    "Experience: 8 years in road construction (meets 5+ requirement)"
  ],
  "missing_criteria": [
    "ISO 9001: Not found in company certifications"
  ],
  "insufficient_data": [
    "Financial capacity: No financial information provided"
  ]
}""",
            "bad": """{
  "matched_criteria": [
    "Company likely meets requirements",
    "Should be eligible based on profile"
  ]
}""",
        },
    },
    "PROPOSAL_GENERATION": {
        "instruction": """Generate a professional proposal using ONLY the provided tender and company information.

OUTPUT FORMAT:
# Proposal for [Tender Title]

## Executive Summary
[2-3 sentences about company's suitability]

## Company Background
[Use only provided company info - name, experience, certifications]

## Technical Approach
[Address tender requirements using company capabilities]

## Compliance
[Map company qualifications to tender requirements]

## Conclusion
[Professional closing]""",
        "examples": {
            "good": "Uses specific company certifications, actual experience details, addresses exact tender requirements",
            "bad": "Generic statements, invented experience, boilerplate content",
        },
    },
    "PROPOSAL_IMPROVEMENT": {
        "instruction": """Improve the provided proposal by enhancing clarity and alignment with tender requirements. Keep the proposal in the same language it is written in (English or Bahasa Malaysia). Use ONLY the provided context.

IMPROVEMENTS TO MAKE:
1. Strengthen executive summary with better value proposition
2. Better align with tender requirements
3. Improve professional language and tone
4. Enhance technical approach section
5. Ensure compliance section is complete

OUTPUT FORMAT:
{
  "improvedContent": "[Full improved proposal text]",
  "insights": [
    {
      "change": "[Brief description of what was changed]",
      "explanation": "[Why this change improves the proposal]"
    }
  ]
}""",
        "examples": {
            "good": """{
  "improvedContent": "# Cadangan untuk Projek Penyelenggaraan Jalan\\n\\n## Ringkasan Eksekutif\\nKami dengan hormatnya mengemukakan cadangan komprehensif untuk projek penyelenggaraan jalan...",
  "insights": [
    {
      "change": "Diperkukuhkan bahagian ringkasan eksekutif",
      "explanation": "Ringkasan eksekutif yang lebih kuat akan memberikan kesan pertama yang baik kepada panel penilai dan menunjukkan kefahaman mendalam terhadap keperluan projek"
    }
  ]
}""",
            "bad": "Enhanced content that better highlights company strengths while staying factual",
        },
    },
    "CHAT_ASSISTANCE": {
        "instruction": """Answer the user's question about their proposal for this tender. Use ONLY the tender context, company profile and current proposal content. Keep answers under 150 words and end with one concrete next step.

OUTPUT FORMAT:
Plain text, no JSON, no headings.""",
        "examples": {
            "good": "The tender asks for CIDB G4 and your profile lists G5, so state that in the Compliance section with your CIDB expiry date. Next step: add a sentence citing your registration number.",
            "bad": "You should probably highlight your strengths. Companies typically do well when they are confident.",
        },
    },
}


OPENAI_CONFIG: Dict[str, Any] = {
    "temperature": 0.3,
    "max_tokens": 1500,
}

TASK_CONFIGS: Dict[str, Dict[str, Any]] = {
    "SUMMARIZE": {**OPENAI_CONFIG, "max_tokens": 300, "temperature": 0.2},
    "ELIGIBILITY_CHECK": {**OPENAI_CONFIG, "max_tokens": 800, "temperature": 0.1},
    "PROPOSAL_GENERATION": {**OPENAI_CONFIG, "max_tokens": 2000, "temperature": 0.4},
    "PROPOSAL_IMPROVEMENT": {**OPENAI_CONFIG, "max_tokens": 3000, "temperature": 0.3},
    "CHAT_ASSISTANCE": {**OPENAI_CONFIG, "max_tokens": 600, "temperature": 0.5},
}

FORBIDDEN_PHRASES = [
    "as an ai",
    "i cannot",
    "i apologize",
    "it is likely",
    "probably",
    "might be",
    "could be",
    "generally speaking",
    "typically",
    "usually",
]

MIN_RESPONSE_LENGTH = 50
MAX_CHAT_HISTORY = 10


def _or(value: Any, default: str) -> str:
    if value is None or value == "" or value == []:
        return default
    return str(value)


def _join(values: Optional[List[Any]], default: str) -> str:
    if not values:
        return default
    if isinstance(values, str):
        return values
    if not isinstance(values, (list, tuple)):
        return str(values)
    return ", ".join(str(v) for v in values if v) or default


def build_prompt(
    task: str,
    context: Dict[str, Any],
    specific_instructions: str = "",
    user_message: Optional[str] = None,
    chat_history: Optional[List[Dict[str, str]]] = None,
) -> List[Dict[str, str]]:
    """
    Build the chat messages for one AI task.

    Args:
        task: Key of AI_TASKS
        context: {"tender": {...}, "company": {...}, "proposal_content": str}
        specific_instructions: Extra instructions appended after the task
        user_message: New user turn (CHAT_ASSISTANCE)
        chat_history: Earlier turns as {"role", "content"} dicts

    Raises:
        ValueError: If the task is unknown
    """
    task_config = AI_TASKS.get(task)
    if not task_config:
        raise ValueError(f"Unknown task: {task}")

    tender = context.get("tender") or {}
    company = context.get("company") or {}
    proposal_content = context.get("proposal_content") or ""

    sections = [f"TASK: {task_config['instruction']}"]

    if specific_instructions:
        sections.append(f"ADDITIONAL INSTRUCTIONS: {specific_instructions}")

    sections.append(
        "TENDER CONTEXT:\n"
        f"Title: {_or(tender.get('title'), 'Not provided')}\n"
        f"Description: {_or(tender.get('description'), 'Not provided')}\n"
        f"Agency: {_or(tender.get('agency'), 'Not provided')}\n"
        f"Category: {_or(tender.get('category'), 'Not provided')}\n"
        f"Budget: {_or(tender.get('budget'), 'Not specified')}\n"
        f"Requirements: {_join(tender.get('requirements'), 'See description')}"
    )

    sections.append(
        "COMPANY PROFILE:\n"
        f"Name: {_or(company.get('name'), 'Not provided')}\n"
        f"Registration: {_or(company.get('registration_number'), 'Not provided')}\n"
        f"Certifications: {_join(company.get('certifications'), 'None listed')}\n"
        f"Experience: {_or(company.get('experience'), 'Not provided')}\n"
        f"Contact: {_or(company.get('contact_email'), 'Not provided')}"
    )

    if proposal_content:
        sections.append(f"CURRENT PROPOSAL CONTENT:\n{proposal_content}")

    sections.append(
        "EXAMPLES:\n"
        f"Good Response: {task_config['examples']['good']}\n"
        f"Bad Response (AVOID): {task_config['examples']['bad']}"
    )
    sections.append("Provide your response following the exact output format specified above.")

    messages = [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": "\n\n".join(sections)},
    ]

    if user_message is not None:
        for turn in (chat_history or [])[-MAX_CHAT_HISTORY:]:
            role = turn.get("role") if isinstance(turn, dict) else None
            content = turn.get("content") if isinstance(turn, dict) else None
            if role in ("user", "assistant") and content:
                messages.append({"role": role, "content": str(content)})
        messages.append({"role": "user", "content": user_message})

    return messages


@dataclass
class ValidationResult:
    is_valid: bool
    issues: List[str] = field(default_factory=list)


def validate_response(response: str, task: str) -> ValidationResult:
    """Cheap structural check run on every completion before it is used."""
    issues: List[str] = []
    lowered = response.lower()

    for phrase in FORBIDDEN_PHRASES:
        if phrase in lowered:
            issues.append(f'Contains forbidden phrase: "{phrase}"')

    if len(response.strip()) < MIN_RESPONSE_LENGTH:
        issues.append("Response too short")

    if task == "ELIGIBILITY_CHECK" and "matched_criteria" not in response:
        issues.append("Missing required eligibility format")
    elif task == "PROPOSAL_GENERATION" and "# Proposal for" not in response and "Executive Summary" not in response:
        issues.append("Missing required proposal structure")
    elif task == "PROPOSAL_IMPROVEMENT" and "improvedContent" not in response:
        issues.append("Missing required improvement format")

    return ValidationResult(is_valid=not issues, issues=issues)
