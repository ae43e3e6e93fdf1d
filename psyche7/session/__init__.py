from .schema import AnalysisPayload, Answer, PersonalityReport, Question
from .state import AssessmentSession

__all__ = [
    "AnalysisPayload",
    "Answer",
    "PersonalityReport",
    "Question",
    "AssessmentSession",
]
