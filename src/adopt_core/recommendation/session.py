"""
Stateful walk through the questionnaire.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from .questions import QUESTIONS, Question
from .scorer import TOP_N, ScoredPet, recommend

logger = logging.getLogger(__name__)


class RecommendationSession:
    """
    Asks the questions in order and produces recommendations at the end.

    Example:
        session = RecommendationSession()
        while not session.is_complete:
            session.answer(pick(session.current_question))
        top = session.recommendations(pool)
    """

    def __init__(self, questions: Sequence[Question] = tuple(QUESTIONS)):
        self.questions = list(questions)
        self.answers: Dict[str, str] = {}
        self._index = 0

    @property
    def current_question(self) -> Optional[Question]:
        """The question awaiting an answer, or None once all are answered."""
        if self._index < len(self.questions):
            return self.questions[self._index]
        return None

    @property
    def is_complete(self) -> bool:
        return self._index >= len(self.questions)

    def answer(self, answer: str) -> Optional[Question]:
        """
        Record an answer to the current question.

        Returns:
            The next question, or None when the questionnaire is complete

        Raises:
            ValueError: If the questionnaire is complete or the answer is
                not one of the current question's options
        """
        question = self.current_question
        if question is None:
            raise ValueError("All questions have already been answered")
        if not question.accepts(answer):
            raise ValueError(f"'{answer}' is not a valid answer to '{question.text}'")

        self.answers[question.id] = answer
        self._index += 1
        logger.debug(f"Answered {question.id}")
        return self.current_question

    def recommendations(self, pets: Sequence[Any], limit: int = TOP_N) -> List[ScoredPet]:
        """
        Score the pool against the recorded answers.

        Raises:
            ValueError: If questions remain unanswered
        """
        if not self.is_complete:
            raise ValueError("Answer every question before asking for recommendations")
        return recommend(pets, self.answers, limit=limit)

    def reset(self) -> None:
        """Start over from the first question."""
        self.answers.clear()
        self._index = 0
