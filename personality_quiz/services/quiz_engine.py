import random
from typing import Dict, List, Optional, Sequence, Set, Tuple
from ..config import settings
from ..constants import Answer
from ..models import Outcome, Question, QuizSession
from .ssml import strip_emoji

TRAIT_DELIMITER = "&"

_rng = random.Random()

def init_session_state(questions: Sequence[Question], questions_per_quiz: int, rng: Optional[random.Random] = None, max_questions: Optional[int] = None) -> QuizSession:
    """Builds the quiz progress record for a fresh session.

    Every trait in the full pool gets a zero weight, including traits whose
    questions did not make the cut.
    """
    cap = settings.max_questions_per_quiz if max_questions is None else max_questions
    normalized = [q.model_copy(update={"trait": q.trait.lower()}) for q in questions]
    limit = max(0, min(questions_per_quiz, len(normalized), cap))
    return QuizSession(
        count=0,
        limit=limit,
        questions=shuffle_by_traits(normalized, rng)[:limit],
        trait_to_weight={trait: 0 for trait in get_unique_traits(normalized)},
    )

def get_unique_traits(questions: Sequence[Question]) -> List[str]:
    return list(dict.fromkeys(q.trait.lower() for q in questions))

def shuffle_by_traits(questions: Sequence[Question], rng: Optional[random.Random] = None) -> List[Question]:
    """Shuffles questions in rounds of distinct traits.

    Each round holds at most one question per trait still in play, in random
    order. For a pool of 3xA, 3xB, 2xC, 1xD the output is a shuffled [ABCD]
    round, then [ABC], then [AB].
    """
    rng = rng or _rng
    buckets: Dict[str, List[Question]] = {}
    for q in questions:
        buckets.setdefault(q.trait.lower(), []).append(q)

    shuffled: List[Question] = []
    while buckets:
        traits = list(buckets)
        rng.shuffle(traits)
        for trait in traits:
            bucket = buckets[trait]
            shuffled.append(bucket.pop(rng.randrange(len(bucket))))
            if not bucket:
                del buckets[trait]
    return shuffled

def _clean_answer(answer: str) -> str:
    return strip_emoji("".join((answer or "").lower().split()))

def match_answer(question: Question, answer: str = "") -> Tuple[Optional[str], Optional[int]]:
    """Returns (trait, +1/-1) for a positive/negative answer, (None, None) otherwise."""
    cleaned = _clean_answer(answer)
    if not cleaned:
        return None, None
    trait = question.trait.lower()
    if cleaned == Answer.POSITIVE.value or cleaned in _answer_set(question.positive_answers):
        return trait, 1
    if cleaned == Answer.NEGATIVE.value or cleaned in _answer_set(question.negative_answers):
        return trait, -1
    return None, None

def _answer_set(answers: Sequence[str]) -> Set[str]:
    # emoji-only synonyms clean to "" and can never be matched
    return {c for c in (_clean_answer(a) for a in answers) if c}

def parse_traits(value: Optional[str]) -> Set[str]:
    if not isinstance(value, str):
        return set()
    return {t.strip().lower() for t in value.split(TRAIT_DELIMITER) if t.strip()}

def score_outcome(outcome: Outcome, trait_to_weight: Dict[str, int]) -> int:
    positive = parse_traits(outcome.positive_traits)
    negative = parse_traits(outcome.negative_traits)
    score = 0
    for trait, weight in trait_to_weight.items():
        trait = trait.lower()
        if trait in positive:
            score += weight
        if trait in negative:
            score -= weight
    return score

def match_outcome(outcomes: Sequence[Outcome], trait_to_weight: Dict[str, int], rng: Optional[random.Random] = None) -> Outcome:
    """Picks the highest scoring outcome, uniformly at random among ties."""
    if not outcomes:
        raise ValueError("no outcomes to match")
    rng = rng or _rng
    scored = [(score_outcome(o, trait_to_weight), o) for o in outcomes]
    best = max(score for score, _ in scored)
    return rng.choice([o for score, o in scored if score == best])
