"""Unit tests for candidate scoring and restaurant selection."""
import pytest

from concierge.services.ordering.matcher import (
    assess_candidate_selection_quality,
    choose_best_restaurant_guid,
    is_likely_modifier_only_request_line,
    score_menu_candidate,
    to_match_reason,
)
from concierge.services.ordering.models import (
    ConfidenceLevel,
    ParsedRequestLine,
    RestaurantCoverageCandidate,
)
from concierge.services.ordering.request_parser import parse_order_request_lines


def line(text: str) -> ParsedRequestLine:
    return parse_order_request_lines(text)[0]


def candidates(*pairs):
    return [RestaurantCoverageCandidate(restaurant_guid=guid, score=score) for guid, score in pairs]


class TestScoreMenuCandidate:
    """Test lexical scoring of one line against one menu item."""

    def test_exact_name_beats_partial_match(self):
        request = line("chicken sandwich")

        exact = score_menu_candidate(request, "Chicken Sandwich", None)
        partial = score_menu_candidate(request, "Chicken Club", "Grilled chicken with bacon")

        assert exact.exact_name_match is True
        assert partial.exact_name_match is False
        assert exact.score > partial.score

    def test_exact_match_outranks_long_descriptive_partial(self):
        request = line("fries")

        exact = score_menu_candidate(request, "Fries", None)
        partial = score_menu_candidate(
            request, "Loaded Fries Platter", "fries fries with cheese fries and more fries"
        )

        assert exact.score > partial.score

    def test_is_case_insensitive(self):
        request = line("CAESAR SALAD")

        assert score_menu_candidate(request, "caesar salad", None).exact_name_match is True

    def test_no_overlap_scores_zero(self):
        score = score_menu_candidate(line("sushi"), "Cheeseburger", "Beef patty")

        assert score.score == 0
        assert to_match_reason(score) == "Weak lexical similarity"

    def test_description_hits_weigh_less_than_name_hits(self):
        request = line("avocado toast")

        in_name = score_menu_candidate(request, "Avocado Bowl", None)
        in_description = score_menu_candidate(request, "Morning Bowl", "avocado and greens")

        assert in_name.token_hits_in_name == 1
        assert in_description.token_hits_in_description == 1
        assert in_name.score > in_description.score

    def test_generic_salad_prefers_entree_salads(self):
        request = line("salad")

        caesar = score_menu_candidate(request, "Caesar Salad", "Romaine, parmesan and garlic croutons")
        spread = score_menu_candidate(request, "8oz Chicken Salad", "House chicken salad spread")

        assert caesar.semantic_adjustment > 0
        assert spread.semantic_adjustment < 0
        assert caesar.score > spread.score
        assert to_match_reason(caesar) == "Intent-aligned match"
        assert to_match_reason(spread) == "Lexical match (de-prioritized by intent)"

    def test_specific_salad_request_is_not_adjusted(self):
        request = line("chicken salad")

        spread = score_menu_candidate(request, "8oz Chicken Salad", "House chicken salad spread")
        caesar = score_menu_candidate(request, "Caesar Salad", None)

        assert spread.semantic_adjustment == 0
        assert spread.score > caesar.score

    def test_match_reasons(self):
        request = line("chicken sandwich")

        assert to_match_reason(score_menu_candidate(request, "Chicken Sandwich", None)) == (
            "Exact item-name match"
        )
        assert to_match_reason(score_menu_candidate(request, "Spicy Chicken Sandwich", None)) == (
            "Name phrase match"
        )
        assert to_match_reason(score_menu_candidate(request, "Chicken Club", None)) == (
            "Token overlap in name (1)"
        )


class TestModifierOnlyLines:
    """Test detection of lines that only carry a modifier."""

    @pytest.mark.parametrize("text", ["no onions", "extra cheese", "without ice", "light mayo please"])
    def test_modifier_lines(self, text):
        request = ParsedRequestLine(raw=text, normalized=text, tokens=text.split())

        assert is_likely_modifier_only_request_line(request) is True

    @pytest.mark.parametrize(
        "text", ["cheeseburger", "extra cheese burger with fries", "onion rings no salt"]
    )
    def test_item_lines(self, text):
        request = ParsedRequestLine(raw=text, normalized=text, tokens=text.split())

        assert is_likely_modifier_only_request_line(request) is False


class TestSelectionQuality:
    """Test confidence assessment of the top candidate."""

    def test_no_scores_is_low(self):
        quality = assess_candidate_selection_quality(line("burger"), [])

        assert quality.level == ConfidenceLevel.LOW
        assert quality.is_ambiguous is False
        assert quality.top_score is None

    def test_single_exact_match_is_high(self):
        quality = assess_candidate_selection_quality(line("chicken sandwich"), [246])

        assert quality.level == ConfidenceLevel.HIGH
        assert quality.score_gap is None

    def test_close_scores_are_ambiguous(self):
        quality = assess_candidate_selection_quality(line("chicken sandwich"), [60, 55])

        assert quality.is_ambiguous is True
        assert quality.level == ConfidenceLevel.LOW
        assert quality.score_gap == 5

    def test_generic_request_needs_a_wider_gap(self):
        two_tokens = assess_candidate_selection_quality(line("chicken sandwich"), [100, 90])
        one_token = assess_candidate_selection_quality(line("chicken"), [100, 90])

        assert two_tokens.is_ambiguous is False
        assert one_token.is_ambiguous is True

    def test_clear_winner_is_high(self):
        quality = assess_candidate_selection_quality(line("chicken sandwich"), [40, 90])

        assert quality.top_score == 90
        assert quality.score_gap == 50
        assert quality.level == ConfidenceLevel.HIGH

    def test_moderate_winner_is_medium(self):
        quality = assess_candidate_selection_quality(line("chicken sandwich"), [70, 40])

        assert quality.level == ConfidenceLevel.MEDIUM

    def test_weak_winner_is_low(self):
        quality = assess_candidate_selection_quality(line("chicken sandwich"), [40])

        assert quality.level == ConfidenceLevel.LOW
        assert quality.is_ambiguous is False


class TestChooseBestRestaurant:
    """Test restaurant selection by coverage and score."""

    def test_coverage_beats_score(self):
        chosen = choose_best_restaurant_guid(
            [candidates(("r1", 90), ("r2", 100)), candidates(("r1", 80))]
        )

        assert chosen == "r1"

    def test_total_score_breaks_coverage_ties(self):
        assert choose_best_restaurant_guid([candidates(("r1", 50), ("r2", 70))]) == "r2"

    def test_input_order_breaks_full_ties(self):
        assert choose_best_restaurant_guid([candidates(("r2", 50), ("r1", 50))]) == "r2"

    def test_only_best_score_per_line_counts(self):
        chosen = choose_best_restaurant_guid(
            [candidates(("r1", 10), ("r1", 60), ("r1", 30), ("r2", 90))]
        )

        assert chosen == "r2"

    def test_repeated_entries_do_not_inflate_coverage(self):
        chosen = choose_best_restaurant_guid(
            [candidates(("r1", 10), ("r1", 20)), candidates(("r2", 30)), candidates(("r2", 5))]
        )

        assert chosen == "r2"

    def test_nothing_covered_returns_none(self):
        assert choose_best_restaurant_guid([]) is None
        assert choose_best_restaurant_guid([[], []]) is None
