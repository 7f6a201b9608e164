"""
Keyword scorer that picks the top three pets for a set of answers.

Pure functions over an in-memory pool; pets may be mappings (API JSON)
or objects with ``id``, ``species`` and ``description`` attributes.
"""

from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Sequence, Tuple

from .questions import (
    BEGINNER,
    EXPERIENCE,
    EXPERT,
    FLEXIBLE,
    INTERMEDIATE,
    LARGE_HOUSE,
    LIFESTYLE,
    LOTS_OF_TIME,
    MODERATE,
    OPEN_TO_ANY,
    PREFERENCE,
    RURAL_PROPERTY,
    SMALL_APARTMENT,
    SPACE,
    VERY_BUSY,
)

TOP_N = 3
RECOMMEND_KEYWORD = "recommend"
RECOMMEND_BONUS = 10
BACKFILL_RECOMMENDED_SCORE = 5
BACKFILL_OTHER_SCORE = 0

CORE_SPECIES: FrozenSet[str] = frozenset({"capybara", "guinea_pig", "rock_cavy"})
SMALL_SPACE_SPECIES: FrozenSet[str] = frozenset({"guinea_pig", "rock_cavy"})

# (keywords, points): points are added once if any keyword is present
KeywordRule = Tuple[Tuple[str, ...], int]

EXPERIENCE_RULES: Dict[str, List[KeywordRule]] = {
    BEGINNER: [
        (("gentle", "calm", "easy", "friendly", "patient", "docile"), 3),
        (("independent", "low maintenance"), 2),
    ],
    INTERMEDIATE: [
        (("social", "playful", "active"), 2),
        (("trainable", "intelligent"), 1),
    ],
    EXPERT: [
        (("challenging", "energetic", "special needs"), 2),
        (("unique", "rare"), 1),
    ],
}

_LOTS_OF_ATTENTION: List[KeywordRule] = [
    (("high energy", "needs attention", "social", "playful"), 2),
]

LIFESTYLE_RULES: Dict[str, List[KeywordRule]] = {
    VERY_BUSY: [
        (("independent", "low maintenance", "quiet", "calm"), 3),
        (("nocturnal",), 1),
    ],
    MODERATE: [
        (("social", "playful", "active"), 2),
    ],
    FLEXIBLE: _LOTS_OF_ATTENTION,
    LOTS_OF_TIME: _LOTS_OF_ATTENTION,
}

_ROOMY: List[KeywordRule] = [
    (("outdoor", "large", "active"), 2),
    (("needs space", "energetic"), 1),
]

SPACE_RULES: Dict[str, List[KeywordRule]] = {
    SMALL_APARTMENT: [
        (("small", "compact", "indoor"), 2),
        (("quiet", "low noise"), 1),
    ],
    LARGE_HOUSE: _ROOMY,
    RURAL_PROPERTY: _ROOMY,
}

# Checked in order against the lower-cased preference answer
PREFERENCE_SPECIES: List[Tuple[str, str]] = [
    ("capybara", "capybara"),
    ("guinea pig", "guinea_pig"),
    ("hamster", "rock_cavy"),
    ("rabbit", "rock_cavy"),
    ("rock cavy", "rock_cavy"),
]

# Preference term -> description words that must all be present
PREFERENCE_TRAITS: List[Tuple[str, Tuple[str, ...]]] = [
    ("capybara", ("social", "large")),
    ("guinea pig", ("vocal", "social")),
    ("hamster", ("independent", "nocturnal")),
    ("rabbit", ("quiet", "trainable")),
    ("rock cavy", ("independent", "active")),
]
PREFERENCE_BONUS = 3


@dataclass(frozen=True)
class ScoredPet:
    """A recommended pet and the score that placed it."""

    pet: Any
    score: int

    @property
    def pet_id(self) -> Any:
        return _field(self.pet, "id")


def _field(pet: Any, name: str) -> Any:
    if isinstance(pet, Mapping):
        return pet.get(name)
    return getattr(pet, name, None)


def _identity(pet: Any) -> Any:
    pet_id = _field(pet, "id")
    return pet_id if pet_id is not None else id(pet)


def _species(pet: Any) -> Optional[str]:
    species = _field(pet, "species")
    return getattr(species, "value", species)


def _description(pet: Any) -> str:
    return (_field(pet, "description") or "").lower()


def _apply_rules(description: str, rules: Sequence[KeywordRule]) -> int:
    return sum(
        points for keywords, points in rules if any(k in description for k in keywords)
    )


def allowed_species(answers: Mapping[str, str]) -> FrozenSet[str]:
    """
    Species the answers allow.

    Experience and lifestyle always resolve to the core species; only a
    small apartment or a specific preference narrows the set.
    """
    allowed = CORE_SPECIES
    if answers.get(SPACE) == SMALL_APARTMENT:
        allowed = allowed & SMALL_SPACE_SPECIES

    preference = answers.get(PREFERENCE)
    if preference and preference != OPEN_TO_ANY:
        lowered = preference.lower()
        for term, species in PREFERENCE_SPECIES:
            if term in lowered:
                allowed = allowed & {species}
                break
    return allowed


def score_pet(pet: Any, answers: Mapping[str, str]) -> int:
    """Score one pet's description against the answers."""
    description = _description(pet)
    score = RECOMMEND_BONUS if RECOMMEND_KEYWORD in description else 0

    score += _apply_rules(description, EXPERIENCE_RULES.get(answers.get(EXPERIENCE), []))
    score += _apply_rules(description, LIFESTYLE_RULES.get(answers.get(LIFESTYLE), []))
    score += _apply_rules(description, SPACE_RULES.get(answers.get(SPACE), []))

    preference = (answers.get(PREFERENCE) or "").lower()
    if preference:
        for term, traits in PREFERENCE_TRAITS:
            if term in preference and all(t in description for t in traits):
                score += PREFERENCE_BONUS
                break
    return score


def recommend(
    pets: Sequence[Any], answers: Mapping[str, str], limit: int = TOP_N
) -> List[ScoredPet]:
    """
    Recommend up to ``limit`` pets from an available pool.

    Candidates matching the answers are scored; if fewer than ``limit``
    match, the list is backfilled from the remaining core-species pets,
    "recommend" descriptions first. The result is stably sorted by
    descending score, so equal scores keep pool order.
    """
    allowed = allowed_species(answers)
    matched = [
        ScoredPet(pet=pet, score=score_pet(pet, answers))
        for pet in pets
        if _species(pet) in allowed
    ]
    matched.sort(key=lambda scored: scored.score, reverse=True)

    results = matched[:limit]
    if len(results) < limit:
        chosen = {_identity(scored.pet) for scored in results}
        spare = [
            pet
            for pet in pets
            if _species(pet) in CORE_SPECIES and _identity(pet) not in chosen
        ]
        recommended = [p for p in spare if RECOMMEND_KEYWORD in _description(p)]
        others = [p for p in spare if RECOMMEND_KEYWORD not in _description(p)]
        backfill = [ScoredPet(p, BACKFILL_RECOMMENDED_SCORE) for p in recommended]
        backfill += [ScoredPet(p, BACKFILL_OTHER_SCORE) for p in others]
        results.extend(backfill[: limit - len(results)])

    results.sort(key=lambda scored: scored.score, reverse=True)
    return results
