"""All prompt templates for the LLM review calls."""

from models.score_band import ScoreBand, format_band

# Best band first, the order the LLM is shown the choices in
_BANDS_DESC = sorted(ScoreBand, key=lambda b: b.weight, reverse=True)
_ALLOWED_SCORES = ", ".join(format_band(b) for b in _BANDS_DESC)
_BAND_BULLETS = "\n".join(f"   - {b.value} ({b.weight}/5)" for b in _BANDS_DESC)


def build_review_prompt(
    question_text: str,
    scoring_guide: str,
    document_text: str,
    user_explanation: str | None = None,
) -> str:
    """Per-document review: one score line, summary, suggestions."""
    explanation_section = ""
    if user_explanation:
        explanation_section = f"\n---\n**User Explanation:**\n{user_explanation}\n"
    and_explanation = " and user explanation" if user_explanation else ""

    return f"""
You are an OHS compliance auditor. For the following question, review the vendor's uploaded document{and_explanation} and provide:

IMPORTANT INSTRUCTIONS:

- First, determine if the uploaded document matches the CURRENT requirement described below.
- If it appears to be for a different requirement (e.g., a different question), or if it's unrelated, you MUST reject it.
- Clearly explain why it does NOT satisfy the listed requirement.
- Only give a positive score (Stretch, Commitment, Robust) if the file matches the requirement clearly and exactly.
- If there is any doubt or mismatch, assign one of these:
  - Warning (2/5)
  - Offtrack (1/5)
- Do not accept general documents that are good but unrelated.
- Always format each suggestion as a separate markdown bullet point starting with "- ".

1. **Score band**: One of ONLY these five (must match exactly):
{_BAND_BULLETS}
You MUST return the score in this exact format:
Score: Robust (3/5)

2. A short summary (1-2 sentences) as to why you gave this score.
3. Suggestions for improvement (if any).

Refer STRICTLY to the scoring guide below. ONLY consider evidence in the provided file and, if present, the user's explanation.

---
**Assessment Question:**
{question_text}

**Scoring Guide:**
{scoring_guide}

---
**File Content:**
{document_text}
{explanation_section}
---

Return your answer in this exact format:

Score: [write one of: {_ALLOWED_SCORES}]

Summary:
[1-2 sentence reason for the score]

Suggestions:
- [each suggestion as a markdown bullet point; if there are no suggestions, write "- None"]

Do not invent new score labels. Only use the five exact bands above.
"""


_EVIDENCE_RULES = f"""IMPORTANT SCORING INSTRUCTIONS:

- If the supplier's argument is based ONLY on a feeling, personal opinion, or a general/unsubstantiated statement (such as "it doesn't feel right" or "I don't agree" without facts), you MUST assign:
  Score: {format_band(ScoreBand.OFFTRACK)}
  Summary: Subjective opinions or feelings are NOT valid evidence in compliance assessments.
- DO NOT give a higher score because the supplier is polite, questions the result, or expresses willingness to comply. Only factual evidence, official documents, or specific regulatory/policy references are acceptable grounds.
- If in doubt, require objective supporting evidence.
- Use the lowest score unless real evidence is present."""


def build_disagreement_prompt(
    requirement_text: str,
    reason: str,
    file_text: str | None = None,
) -> str:
    """Supplier contests an earlier verdict, optionally with a new file."""
    file_section = f"File Content:\n{file_text}\n" if file_text else ""

    return f"""
You are an OHS compliance auditor reviewing a supplier's disagreement with the AI's feedback.

Requirement: {requirement_text}
Disagreement Reason: {reason}
{file_section}
- Assess if the supplier's argument and/or additional file support compliance.
- Give a new score using ONLY: {_ALLOWED_SCORES}
- Give a short summary and suggestion.

{_EVIDENCE_RULES}

Format:
Score: [exactly one of the scores above]
Summary: [short]
Suggestions: [bullets, or 'None']
"""


def build_missing_justification_prompt(requirement_text: str, reason: str) -> str:
    """Supplier explains why a required document is absent."""
    return f"""
A supplier was asked to submit the following requirement:
"{requirement_text}"

However, they responded that they don't have it. Their reason was:
"{reason}"

As an OHS compliance evaluator, you must:
1. Decide if the reason reasonably justifies the absence of the document.
2. Provide a temporary compliance score using ONLY: {_ALLOWED_SCORES}
3. Give a short recommendation to improve.

{_EVIDENCE_RULES}

Your response must use this format:
Score: [one of the allowed scores]
Justification: [your decision on the explanation]
Suggestion: [1-2 sentence recommendation]
"""


def build_session_summary_prompt(entries: list[dict]) -> str:
    """Prose summary of a whole session.

    ``entries`` hold question_number, question_text, answer and feedback.
    """
    parts = ["You are a supplier compliance auditor. Here is a supplier's interview session:\n"]
    for entry in entries:
        parts.append(f"Question {entry['question_number']}: {entry.get('question_text', '')}")
        if entry.get("answer"):
            parts.append(f"Answer: {entry['answer']}")
        if entry.get("feedback"):
            parts.append(f"Document Review: {entry['feedback']}")
        parts.append("")

    parts.append(
        "Summarize this supplier's OHS compliance in under 5 sentences. "
        "List strengths and weaknesses. "
        'Respond with ONLY valid JSON (no markdown, no code fences): {"feedback": "<summary>"}'
    )
    return "\n".join(parts)
