"""Menu candidate scoring and restaurant selection."""
import re
from typing import Dict, Iterable, Optional, Sequence

from concierge.services.ordering.models import (
    ConfidenceLevel,
    MatchScore,
    ParsedRequestLine,
    RestaurantCoverageCandidate,
    SelectionQuality,
)
from concierge.services.ordering.request_parser import normalize_text, tokenize

EXACT_NAME_BONUS = 120
PHRASE_BONUS = 60
NAME_TOKEN_WEIGHT = 18
DESCRIPTION_TOKEN_WEIGHT = 7
COVERAGE_WEIGHT = 20
LENGTH_RATIO_WEIGHT = 10

HIGH_CONFIDENCE_SCORE = 120
CLEAR_WIN_SCORE = 80
CLEAR_WIN_GAP = 30
MEDIUM_CONFIDENCE_SCORE = 50
AMBIGUITY_GAP = 8
GENERIC_REQUEST_AMBIGUITY_GAP = 15

SALAD_ENTREE_CUES = frozenset(
    {"caesar", "garden", "greek", "cobb", "romaine", "arugula", "kale", "chopped", "vinaigrette"}
)
SALAD_SPREAD_CUES = frozenset(
    {"olive", "chicken", "tuna", "egg", "macaroni", "potato", "pimento"}
)
MODIFIER_CUES = frozenset(
    {"no", "extra", "without", "light", "easy", "hold", "sub", "substitute", "less"}
)

_OUNCE_PATTERN = re.compile(r"\b\d+\s*oz\b")


def score_menu_candidate(
    request: ParsedRequestLine,
    candidate_name: str,
    candidate_description: Optional[str],
) -> MatchScore:
    """
    Score a parsed request line against one menu item.

    An exact full-name match earns a bonus larger than the combined swing of
    every other term, so it always outranks a partial match.
    """
    normalized_name = normalize_text(candidate_name)
    normalized_description = normalize_text(candidate_description or "")
    name_tokens = set(tokenize(normalized_name))
    description_tokens = set(tokenize(normalized_description))

    exact_name_match = bool(normalized_name) and request.normalized == normalized_name
    phrase_match = bool(normalized_name) and (
        request.normalized in normalized_name or normalized_name in request.normalized
    )

    token_hits_in_name = 0
    token_hits_in_description = 0
    for token in request.tokens:
        if token in name_tokens:
            token_hits_in_name += 1
        elif token in description_tokens:
            token_hits_in_description += 1

    semantic_adjustment = _semantic_adjustment(
        request, normalized_name, name_tokens, description_tokens
    )

    score = 0
    if exact_name_match:
        score += EXACT_NAME_BONUS
    if phrase_match:
        score += PHRASE_BONUS
    score += token_hits_in_name * NAME_TOKEN_WEIGHT
    score += token_hits_in_description * DESCRIPTION_TOKEN_WEIGHT

    if exact_name_match or phrase_match or token_hits_in_name or token_hits_in_description:
        if request.tokens:
            coverage = (token_hits_in_name + token_hits_in_description) / len(request.tokens)
            score += round(coverage * COVERAGE_WEIGHT)
        longer = max(len(request.normalized), len(normalized_name))
        if longer:
            ratio = min(len(request.normalized), len(normalized_name)) / longer
            score += round(ratio * LENGTH_RATIO_WEIGHT)
        score += semantic_adjustment

    return MatchScore(
        score=score,
        matched_text=candidate_name,
        exact_name_match=exact_name_match,
        phrase_match=phrase_match,
        token_hits_in_name=token_hits_in_name,
        token_hits_in_description=token_hits_in_description,
        semantic_adjustment=semantic_adjustment,
    )


def to_match_reason(score: MatchScore) -> str:
    """Describe why a candidate matched."""
    if score.semantic_adjustment >= 12:
        return "Intent-aligned match"
    if score.semantic_adjustment <= -12:
        return "Lexical match (de-prioritized by intent)"
    if score.exact_name_match:
        return "Exact item-name match"
    if score.phrase_match:
        return "Name phrase match"
    if score.token_hits_in_name and score.token_hits_in_description:
        return (
            f"Token overlap (name {score.token_hits_in_name}, "
            f"description {score.token_hits_in_description})"
        )
    if score.token_hits_in_name:
        return f"Token overlap in name ({score.token_hits_in_name})"
    if score.token_hits_in_description:
        return f"Token overlap in description ({score.token_hits_in_description})"
    return "Weak lexical similarity"


def is_likely_modifier_only_request_line(request: ParsedRequestLine) -> bool:
    """Detect lines like "no onions" that modify an item without naming one."""
    words = request.normalized.split(" ")
    if not words or words[0] not in MODIFIER_CUES:
        return False
    return len(words) <= 3


def assess_candidate_selection_quality(
    request: ParsedRequestLine, scores: Sequence[float]
) -> SelectionQuality:
    """Rate how confidently the top-scoring candidate can be picked."""
    if not scores:
        return SelectionQuality(level=ConfidenceLevel.LOW, is_ambiguous=False)

    ranked = sorted(scores, reverse=True)
    top_score = ranked[0]
    score_gap = top_score - ranked[1] if len(ranked) > 1 else None

    min_gap = GENERIC_REQUEST_AMBIGUITY_GAP if len(request.tokens) <= 1 else AMBIGUITY_GAP
    is_ambiguous = score_gap is not None and score_gap < min_gap

    if is_ambiguous:
        level = ConfidenceLevel.LOW
    elif top_score >= HIGH_CONFIDENCE_SCORE or (
        top_score >= CLEAR_WIN_SCORE and (score_gap is None or score_gap >= CLEAR_WIN_GAP)
    ):
        level = ConfidenceLevel.HIGH
    elif top_score >= MEDIUM_CONFIDENCE_SCORE:
        level = ConfidenceLevel.MEDIUM
    else:
        level = ConfidenceLevel.LOW

    return SelectionQuality(
        level=level,
        is_ambiguous=is_ambiguous,
        top_score=top_score,
        score_gap=score_gap,
    )


def choose_best_restaurant_guid(
    per_line_candidates: Iterable[Iterable[RestaurantCoverageCandidate]],
) -> Optional[str]:
    """
    Pick the restaurant that can serve the most request lines.

    Ties on coverage are broken by the sum of each restaurant's best score
    per line, then by the order restaurants first appear in the input.
    """
    coverage: Dict[str, int] = {}
    totals: Dict[str, float] = {}

    for candidates in per_line_candidates:
        best_for_line: Dict[str, float] = {}
        for candidate in candidates:
            current = best_for_line.get(candidate.restaurant_guid)
            if current is None or candidate.score > current:
                best_for_line[candidate.restaurant_guid] = candidate.score

        for restaurant_guid, score in best_for_line.items():
            coverage[restaurant_guid] = coverage.get(restaurant_guid, 0) + 1
            totals[restaurant_guid] = totals.get(restaurant_guid, 0.0) + score

    if not coverage:
        return None

    # max() keeps the first of equal keys, i.e. input order.
    return max(coverage, key=lambda guid: (coverage[guid], totals[guid]))


def _semantic_adjustment(
    request: ParsedRequestLine,
    normalized_name: str,
    name_tokens: set,
    description_tokens: set,
) -> int:
    # A bare "salad" usually means an entree salad, not a deli spread.
    if set(request.tokens) != {"salad"}:
        return 0

    has_entree_cues = bool((name_tokens | description_tokens) & SALAD_ENTREE_CUES)
    has_spread_cues = bool(
        (name_tokens | description_tokens) & SALAD_SPREAD_CUES
    ) or bool(_OUNCE_PATTERN.search(normalized_name))

    adjustment = 0
    if has_entree_cues:
        adjustment += 16
    if has_spread_cues:
        adjustment -= 22
    if adjustment == 0 and "salad" in normalized_name.split(" ") and not has_spread_cues:
        adjustment += 6
    return adjustment
