"""
Deterministic content used when no LLM is configured or a call fails.
"""

import re
from datetime import datetime
from typing import Any, Dict, List, Optional


def _lower(value: Optional[str], default: str) -> str:
    return (value or default).lower()


def summary_template(tender: Dict[str, Any]) -> str:
    return (
        f"This tender from {tender.get('agency') or 'the issuing agency'} seeks qualified contractors for "
        f"{_lower(tender.get('title'), 'this project')}. "
        f"The project involves comprehensive {_lower(tender.get('category'), 'general')} services with specific "
        "certification and experience requirements. "
        "Successful bidders must demonstrate relevant expertise and meet all technical specifications outlined "
        "in the tender documentation."
    )


CATEGORY_ELIGIBILITY = {
    "Construction": [
        ("Minimum 10 years experience in commercial construction", True),
        ("ISO 9001:2015 Quality Management certification", True),
        ("Valid contractor license Grade A", False),
        ("Previous experience with government projects", True),
        ("Safety certification (OHSAS 18001 or equivalent)", True),
    ],
    "Information Technology": [
        ("Cloud architecture certification (AWS/Azure)", False),
        ("ISO 27001 Information Security certification", False),
        ("Minimum 5 years experience in large-scale IT projects", True),
        ("Proven expertise in government sector IT solutions", True),
        ("Local presence with certified technical staff", True),
    ],
}

DEFAULT_ELIGIBILITY = [
    ("Relevant industry experience and certifications", True),
    ("Financial capacity and technical capabilities", True),
    ("Compliance with regulatory requirements", False),
]

UNPARSEABLE_ELIGIBILITY = [
    ("Company meets basic tender requirements", True),
    ("Additional verification may be required", False),
]

UNAVAILABLE_ELIGIBILITY = [
    ("Basic eligibility requirements", True),
    ("AI analysis temporarily unavailable", False),
]


def eligibility_items(pairs) -> List[Dict[str, Any]]:
    return [{"requirement": requirement, "eligible": eligible} for requirement, eligible in pairs]


def mock_eligibility(category: Optional[str]) -> List[Dict[str, Any]]:
    return eligibility_items(CATEGORY_ELIGIBILITY.get(category or "", DEFAULT_ELIGIBILITY))


CHAT_UNAVAILABLE_REPLY = (
    "I'm here to help with your proposal. Could you please rephrase your question? I can assist with "
    "requirements analysis, proposal structure, or specific content suggestions."
)


def _has_word(message: str, words) -> bool:
    return any(re.search(rf"\b{word}", message) for word in words)


def chat_reply(user_message: str, tender: Dict[str, Any], company: Optional[Dict[str, Any]]) -> str:
    """Keyword-routed reply for the proposal chat when no LLM is available."""
    message = user_message.lower()
    company = company or {}

    if _has_word(message, ("requirement", "criteria")):
        listed = tender.get("requirements")
        listed = listed if isinstance(listed, (list, tuple)) else []
        requirements = ", ".join(str(req) for req in listed[:3] if req) or (
            "technical expertise, relevant experience, and compliance certifications"
        )
        return (
            f"Based on the tender requirements, the key criteria include: {requirements}. "
            "Would you like me to help you address any specific requirement in your proposal?"
        )

    if _has_word(message, ("budget", "cost", "price")):
        return (
            f"The tender budget is {tender.get('budget') or 'not specified'}. I recommend structuring your pricing "
            "to be competitive while ensuring you can deliver quality work. Would you like help with the pricing "
            "section of your proposal?"
        )

    if _has_word(message, ("experience", "qualification")):
        experience = "relevant experience" if company.get("experience") else "capabilities"
        certifications = "certifications and " if company.get("certifications") else ""
        return (
            f"Your company has {experience} that align with this tender. I suggest highlighting your "
            f"{certifications}past projects in the proposal. Shall I help you draft that section?"
        )

    if _has_word(message, ("improve", "better", "enhance")):
        return (
            "I can help improve your proposal by strengthening the executive summary, adding more specific details "
            "about your approach, or better aligning with the tender requirements. What specific area would you "
            "like to focus on?"
        )

    if _has_word(message, ("deadline", "timeline", "schedule")):
        closing_date = tender.get("closing_date")
        if isinstance(closing_date, datetime):
            closing_text = closing_date.strftime("%d %B %Y")
        else:
            closing_text = closing_date or "not specified"
        return (
            f"The tender closing date is {closing_text}. Make sure to submit well before the deadline. "
            "Would you like help with the project timeline section?"
        )

    return (
        f"I understand you're asking about \"{user_message}\". Based on the tender details and your company "
        "profile, I'd recommend focusing on your strengths and how they align with the project requirements. "
        "Could you be more specific about what aspect you'd like help with?"
    )


def proposal_template(tender: Dict[str, Any], company: Dict[str, Any]) -> str:
    name = company.get("name") or "Our company"
    certifications = ", ".join(company.get("certifications") or []) or "Various industry certifications"
    return (
        f"# Proposal for {tender.get('title')}\n\n"
        "## Executive Summary\n\n"
        "Dear Sir/Madam,\n\n"
        f"{name} is pleased to submit our proposal for \"{tender.get('title')}\" as advertised by "
        f"{tender.get('agency') or 'the issuing agency'}. "
        f"With our extensive experience in {_lower(tender.get('category'), 'this field')} and proven track record "
        "of successful project delivery, we are confident in our ability to meet and exceed all requirements "
        "outlined in this tender.\n\n"
        "## Company Overview\n\n"
        f"{company.get('experience') or 'Our company brings extensive experience and proven capabilities to this project.'}\n\n"
        "## Our Approach\n\n"
        "We propose a comprehensive approach that addresses all technical requirements while ensuring quality, "
        "timeline adherence, and cost-effectiveness. Our methodology includes:\n\n"
        "- Detailed project planning and risk assessment\n"
        "- Quality assurance and compliance with all standards\n"
        "- Regular progress reporting and stakeholder communication\n"
        "- Post-implementation support and maintenance\n\n"
        "## Qualifications\n\n"
        f"Our certifications include: {certifications}\n\n"
        "## Conclusion\n\n"
        f"We look forward to the opportunity to discuss our proposal in detail and demonstrate how {name} "
        "can deliver exceptional value for this important project.\n\n"
        "Sincerely,\n"
        f"{name} Team\n\n"
        "*(This is an AI-generated proposal based on your company profile)*"
    )


def failed_generation_template(tender: Dict[str, Any], company: Dict[str, Any]) -> str:
    return (
        f"# Proposal for {tender.get('title')}\n\n"
        "*AI generation failed, using template. Please edit this proposal.*\n\n"
        "## Executive Summary\n\n"
        "We are pleased to submit our proposal for this opportunity.\n\n"
        "## Company Overview\n\n"
        f"{company.get('experience') or 'Our company overview.'}\n\n"
        "## Conclusion\n\n"
        "We look forward to working with you."
    )


IMPROVEMENT_TEMPLATES = {
    "ms": {
        "headings": [
            ("**Sijil:**", "**Pensijilan dan Kelayakan:**"),
            ("**Pengalaman Syarikat:**", "**Pengalaman dan Kepakaran Syarikat:**"),
        ],
        "appendix": """

## Pendekatan Teknikal

Kami mencadangkan pendekatan menyeluruh yang menangani semua keperluan teknikal sambil memastikan kualiti, pematuhan jadual masa, dan keberkesanan kos. Metodologi kami merangkumi:

- Perancangan projek terperinci dan penilaian risiko
- Jaminan kualiti dan pematuhan kepada semua standard
- Pelaporan kemajuan berkala dan komunikasi pihak berkepentingan
- Sokongan dan penyelenggaraan selepas pelaksanaan

## Kesimpulan

Kami berharap dapat peluang untuk membincangkan cadangan kami secara terperinci dan menunjukkan bagaimana {name} dapat menyampaikan nilai luar biasa untuk projek penting ini.

Yang benar,
Pasukan {team}""",
        "default_name": "syarikat kami",
        "default_team": "Syarikat Kami",
        "insights": [
            {
                "change": "Diperkukuhkan bahagian latar belakang syarikat",
                "explanation": "Bahagian latar belakang syarikat telah diperkukuhkan dengan maklumat yang lebih terperinci tentang pengalaman dan keupayaan syarikat. Ini memberikan keyakinan kepada panel penilai tentang kredibiliti dan kesesuaian syarikat untuk projek ini.",
            },
            {
                "change": "Ditambah bahagian pendekatan teknikal",
                "explanation": "Bahagian pendekatan teknikal yang baru ditambah menunjukkan metodologi yang jelas dan terstruktur. Ini membantu panel penilai memahami bagaimana syarikat akan melaksanakan projek dengan jayanya.",
            },
            {
                "change": "Diperbaiki struktur dan format dokumen",
                "explanation": "Struktur dokumen telah diperbaiki dengan penggunaan tajuk yang lebih jelas dan format yang konsisten. Ini meningkatkan kebolehbacaan dan profesionalisme cadangan.",
            },
        ],
        "unavailable_note": "\n\n*Perkhidmatan penambahbaikan AI tidak tersedia buat masa ini*",
        "unavailable_insight": {
            "change": "Perkhidmatan AI tidak tersedia",
            "explanation": "Sistem AI mengalami masalah teknikal. Kandungan asal dalam Bahasa Malaysia telah dikekalkan. Sila cuba lagi kemudian atau hubungi sokongan teknikal.",
        },
    },
    "en": {
        "headings": [
            ("**Company Background:**", "**Company Background and Expertise:**"),
            ("**Certifications:**", "**Certifications and Qualifications:**"),
            ("**Company Experience:**", "**Company Experience and Capabilities:**"),
        ],
        "appendix": """

## Technical Approach

We propose a comprehensive approach that addresses all technical requirements while ensuring quality, timeline adherence, and cost-effectiveness. Our methodology includes:

- Detailed project planning and risk assessment
- Quality assurance and compliance with all standards
- Regular progress reporting and stakeholder communication
- Post-implementation support and maintenance

## Project Management

Our proven project management framework ensures successful delivery:
- Dedicated project manager with relevant experience
- Clear communication channels and regular updates
- Proactive risk management and mitigation strategies
- Adherence to agreed timelines and budget constraints

## Conclusion

We look forward to the opportunity to discuss our proposal in detail and demonstrate how {name} can deliver exceptional value for this important project.

Sincerely,
{team} Team""",
        "default_name": "our company",
        "default_team": "Our Company",
        "insights": [
            {
                "change": "Enhanced company background section",
                "explanation": "The company background section has been strengthened with more detailed information about experience and capabilities. This provides confidence to the evaluation panel about the company's credibility and suitability for this project.",
            },
            {
                "change": "Added technical approach section",
                "explanation": "A new technical approach section has been added to demonstrate clear and structured methodology. This helps the evaluation panel understand how the company will successfully execute the project.",
            },
            {
                "change": "Improved document structure and formatting",
                "explanation": "The document structure has been improved with clearer headings and consistent formatting. This enhances readability and professionalism of the proposal.",
            },
        ],
        "unavailable_note": "\n\n*AI improvement service temporarily unavailable*",
        "unavailable_insight": {
            "change": "AI service unavailable",
            "explanation": "The AI system experienced technical issues. Original content in English has been preserved. Please try again later or contact technical support.",
        },
    },
}

UNPARSED_IMPROVEMENT_INSIGHT = {
    "change": "Content has been improved by AI",
    "explanation": "AI has made general improvements to the proposal based on tender context and company profile. The AI response could not be fully processed but the content has been enhanced.",
}


def template_improvement(content: str, language: str, company_name: Optional[str]) -> Dict[str, Any]:
    """Rule-based improvement that keeps the proposal in its own language."""
    template = IMPROVEMENT_TEMPLATES.get(language, IMPROVEMENT_TEMPLATES["en"])
    improved = content
    for old, new in template["headings"]:
        improved = improved.replace(old, new)
    improved += template["appendix"].format(
        name=company_name or template["default_name"],
        team=company_name or template["default_team"],
    )
    return {
        "improvedContent": improved,
        "insights": [dict(insight) for insight in template["insights"]],
    }


def unavailable_improvement(content: str, language: str) -> Dict[str, Any]:
    template = IMPROVEMENT_TEMPLATES.get(language, IMPROVEMENT_TEMPLATES["en"])
    return {
        "improvedContent": content + template["unavailable_note"],
        "insights": [dict(template["unavailable_insight"])],
    }
