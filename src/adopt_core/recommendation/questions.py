"""
The adoption questionnaire: four fixed questions with fixed options.
"""

from dataclasses import dataclass
from typing import Dict, List, Tuple

EXPERIENCE = "experience"
LIFESTYLE = "lifestyle"
SPACE = "space"
PREFERENCE = "preference"

BEGINNER = "Beginner (first time with small pets)"
INTERMEDIATE = "Intermediate (had guinea pigs/rock cavies before)"
EXPERT = "Expert (experienced with various small animals)"

VERY_BUSY = "Very busy (1-2 hours max)"
MODERATE = "Moderate (2-4 hours)"
FLEXIBLE = "Flexible (4+ hours)"
LOTS_OF_TIME = "Lots of time (work from home/student)"

SMALL_APARTMENT = "Small apartment (limited space)"
MEDIUM_HOME = "Medium apartment/house"
LARGE_HOUSE = "Large house with yard"
RURAL_PROPERTY = "Rural property with outdoor space"

PREFER_CAPYBARAS = "Capybaras (large, social, need outdoor space)"
PREFER_GUINEA_PIGS = "Guinea pigs (friendly, vocal, need companions)"
PREFER_ROCK_CAVIES = "Rock cavies (independent, active)"
OPEN_TO_ANY = "I'm open to any small pet!"


@dataclass(frozen=True)
class Question:
    """One questionnaire step."""

    id: str
    text: str
    options: Tuple[str, ...]

    def accepts(self, answer: str) -> bool:
        return answer in self.options

    def option_for(self, choice: int) -> str:
        """Resolve a 1-based menu choice to its option text."""
        if not 1 <= choice <= len(self.options):
            raise ValueError(f"Choice must be between 1 and {len(self.options)}")
        return self.options[choice - 1]


QUESTIONS: List[Question] = [
    Question(
        id=EXPERIENCE,
        text="What's your experience level with small pets?",
        options=(BEGINNER, INTERMEDIATE, EXPERT),
    ),
    Question(
        id=LIFESTYLE,
        text="How much time can you dedicate to your pet daily?",
        options=(VERY_BUSY, MODERATE, FLEXIBLE, LOTS_OF_TIME),
    ),
    Question(
        id=SPACE,
        text="What's your living space like?",
        options=(SMALL_APARTMENT, MEDIUM_HOME, LARGE_HOUSE, RURAL_PROPERTY),
    ),
    Question(
        id=PREFERENCE,
        text="Which type of small pet interests you most?",
        options=(PREFER_CAPYBARAS, PREFER_GUINEA_PIGS, PREFER_ROCK_CAVIES, OPEN_TO_ANY),
    ),
]

QUESTIONS_BY_ID: Dict[str, Question] = {q.id: q for q in QUESTIONS}

GREETING = (
    "Hi! I'm your small pet adoption assistant. I'll help you find the perfect "
    "capybara, guinea pig, or rock cavy for your lifestyle. Let's get started!"
)
RESULTS_INTRO = (
    "Based on your preferences and the pets' personalities, "
    "I've found some perfect small pets for you!"
)
