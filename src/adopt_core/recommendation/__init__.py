"""
Pet recommendation questionnaire and scorer.

Runs client-side against a pool of available pets fetched from the API.
"""

from .questions import GREETING, QUESTIONS, QUESTIONS_BY_ID, RESULTS_INTRO, Question
from .scorer import CORE_SPECIES, ScoredPet, allowed_species, recommend, score_pet
from .session import RecommendationSession

__all__ = [
    "Question",
    "QUESTIONS",
    "QUESTIONS_BY_ID",
    "GREETING",
    "RESULTS_INTRO",
    "ScoredPet",
    "CORE_SPECIES",
    "allowed_species",
    "score_pet",
    "recommend",
    "RecommendationSession",
]
