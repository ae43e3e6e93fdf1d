from __future__ import annotations

"""Instructions and response schemas sent to the generative model."""

from google.genai import types

DIMENSIONS = (
    "Emotional Stability",
    "Empathy",
    "Autonomy",
    "Stress Resilience",
    "Risk Tolerance",
    "Social Dependence",
    "Control/Dominance",
    "Analytical vs Emotional Decision-Making",
    "Moral Flexibility",
)


def question_instruction(count: int) -> str:
    return f"""
You are PSYCHE-7, a psychological assessment engine producing the question set
for a classified evaluation.

OBJECTIVES:
1. Write {count} distinct multiple-choice questions.
2. Cover these dimensions evenly: {", ".join(DIMENSIONS)}.
3. Phrase questions formally and clinically, in a serious investigative tone.
4. Give exactly 4 options per question; no option is objectively right or wrong.
5. Avoid repetition; the set should read like a security clearance evaluation.
6. Number the questions with unique integer ids starting at 1.
"""


def question_request(count: int) -> str:
    return f"Generate {count} psychological assessment questions."


ANALYSIS_INSTRUCTION = """
You are PSYCHE-7, a classified psychological profiler.

TASK:
Build a personality dossier from the question/answer pairs provided.

PROTOCOL:
1. Evaluate the answers across hidden axes: emotional stability, empathy,
   autonomy, stress resilience, risk tolerance, social dependence,
   control/dominance, analytical vs emotional decision-making and moral
   flexibility.
2. Weigh each choice internally to derive traits.
3. Use 'timeTakenMs' as a behavioural signal: very fast answers suggest
   impulsivity or certainty, slow ones hesitation or calculation, and erratic
   timing suggests instability.
4. Compute a stability score from 1 (highly volatile) to 100 (ideal agent).

REPORT:
- Formal, analytical, clinical register; no humour or casual phrasing.
- 'score': stability score (1-100).
- 'dominantTraits': 3-5 key traits.
- 'strengths' and 'weaknesses': psychological assets and vulnerabilities.
- 'behavioralTendencies': decision-making patterns.
- 'riskIndicators': cautionary notes, empty if none.
- 'confidenceScore': reliability of this assessment (1-100) from answer
  consistency and timing.
"""


def analysis_request(subject_data: str) -> str:
    return f"Analyze this subject data: {subject_data}"


def _string_list() -> types.Schema:
    return types.Schema(type=types.Type.ARRAY, items=types.Schema(type=types.Type.STRING))


QUESTIONS_SCHEMA = types.Schema(
    type=types.Type.ARRAY,
    items=types.Schema(
        type=types.Type.OBJECT,
        properties={
            "id": types.Schema(type=types.Type.INTEGER),
            "text": types.Schema(type=types.Type.STRING),
            "dimension": types.Schema(type=types.Type.STRING),
            "options": _string_list(),
        },
        required=["id", "text", "dimension", "options"],
    ),
)

ANALYSIS_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "score": types.Schema(type=types.Type.INTEGER, description="Psychological stability score 1-100"),
        "dominantTraits": _string_list(),
        "strengths": _string_list(),
        "weaknesses": _string_list(),
        "behavioralTendencies": _string_list(),
        "riskIndicators": _string_list(),
        "confidenceScore": types.Schema(type=types.Type.INTEGER, description="Confidence in analysis 1-100"),
    },
    required=[
        "score",
        "dominantTraits",
        "strengths",
        "weaknesses",
        "behavioralTendencies",
        "riskIndicators",
        "confidenceScore",
    ],
)
