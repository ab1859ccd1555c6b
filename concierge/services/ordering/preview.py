"""Free-text order preview: match request lines to menu items, then compile."""
import logging
from typing import Dict, List, Optional, Sequence

from concierge.services.catalog.base import IndexedMenuItem
from concierge.services.catalog.repository import CatalogRepository
from concierge.services.ordering.exceptions import (
    NoCandidatesError,
    OrderCompilerError,
    UnparseableRequestError,
)
from concierge.services.ordering.matcher import (
    assess_candidate_selection_quality,
    choose_best_restaurant_guid,
    is_likely_modifier_only_request_line,
    score_menu_candidate,
    to_match_reason,
)
from concierge.services.ordering.models import (
    CandidateMatch,
    CanonicalDraft,
    CompileStatus,
    ConfidenceLevel,
    DraftOrderItem,
    IssueSeverity,
    MatchConfidence,
    MatchResolution,
    OrderCompilerPreview,
    ParsedRequestLine,
    PreviewCompileSummary,
    PreviewInput,
    PreviewIssue,
    PreviewIssueCode,
    ResolvedMatch,
    RestaurantCoverageCandidate,
    SearchStats,
    SelectedRestaurant,
)
from concierge.services.ordering.request_parser import parse_order_request_lines
from concierge.services.ordering.service import compile_canonical_order_request

logger = logging.getLogger(__name__)


async def run_order_compiler_preview(
    repository: CatalogRepository,
    message: str,
    restaurant_guid: Optional[str] = None,
    max_candidates: int = 3,
) -> OrderCompilerPreview:
    """
    Turn a guest's free-text message into a compiled draft order.

    Each parsed line is scored against every orderable menu item in scope.
    When no restaurant is given, the one covering the most lines is chosen.
    Only confidently matched lines become draft items; the rest surface as
    needs-user-input issues next to the compiler's own issues.

    Raises:
        NoCandidatesError: No menu items in scope, or nothing matched
        UnparseableRequestError: The message holds no orderable lines
    """
    indexed_items = await repository.get_indexed_menu_items(restaurant_guid)
    if not indexed_items:
        raise NoCandidatesError("No approved menu items found for this scope")

    parsed_lines = parse_order_request_lines(
        message, protected_phrases=_protected_phrases(indexed_items)
    )
    if not parsed_lines:
        raise UnparseableRequestError("Could not parse any orderable items from input")

    line_candidates = []
    for line in parsed_lines:
        if is_likely_modifier_only_request_line(line):
            line_candidates.append(None)
        else:
            line_candidates.append(rank_candidates_for_line(line, indexed_items, max_candidates))

    selected_guid = restaurant_guid or choose_best_restaurant_guid(
        [
            [
                RestaurantCoverageCandidate(
                    restaurant_guid=candidate.restaurant_guid, score=candidate.score
                )
                for candidate in candidates
            ]
            for candidates in line_candidates
            if candidates is not None
        ]
    )
    if not selected_guid:
        raise NoCandidatesError("No restaurant candidates matched your input")

    selected_name = next(
        (item.restaurant_name for item in indexed_items if item.restaurant_guid == selected_guid),
        None,
    )
    logger.info(
        f"[PREVIEW] Parsed {len(parsed_lines)} lines - restaurant: {selected_guid} ({selected_name})"
    )

    matches = [
        resolve_request_line_match(line, candidates, selected_guid)
        for line, candidates in zip(parsed_lines, line_candidates)
    ]

    draft_items = [
        DraftOrderItem(
            menu_item_guid=match.selected_candidate.menu_item_guid,
            menu_item_name=match.selected_candidate.menu_item_name,
            quantity=match.quantity,
        )
        for match in matches
        if match.resolution == MatchResolution.SELECTED and match.selected_candidate
    ]
    resolution_issues = build_input_resolution_issues(matches)

    compile_summary = None
    compile_error = None
    if draft_items:
        try:
            result = await compile_canonical_order_request(
                repository,
                selected_guid,
                [item.to_request_item() for item in draft_items],
            )
        except OrderCompilerError as e:
            logger.warning(f"[PREVIEW] Compile failed for restaurant {selected_guid}: {e}")
            compile_error = str(e)
        else:
            issues = [
                PreviewIssue(code=str(issue.code), message=issue.message, severity=issue.severity)
                for issue in result.issues
            ] + resolution_issues
            compile_summary = PreviewCompileSummary(
                status=_combined_status(issues, result.status),
                subtotal=result.subtotal,
                item_count=len(result.items),
                issues=issues,
            )
    elif resolution_issues:
        compile_summary = PreviewCompileSummary(
            status=CompileStatus.NEEDS_USER_INPUT,
            subtotal=0.0,
            item_count=0,
            issues=resolution_issues,
        )

    return OrderCompilerPreview(
        input=PreviewInput(message=message, restaurant_guid=restaurant_guid),
        selected_restaurant=SelectedRestaurant(
            restaurant_guid=selected_guid, restaurant_name=selected_name
        ),
        matches=matches,
        unmatched_requests=[
            match.request_text for match in matches if match.resolution != MatchResolution.SELECTED
        ],
        canonical_draft=CanonicalDraft(restaurant_guid=selected_guid, items=draft_items),
        compile=compile_summary,
        compile_error=compile_error,
        search_stats=SearchStats(
            menu_items_scanned=len(indexed_items),
            request_lines_parsed=len(parsed_lines),
            restaurants_considered=len({item.restaurant_guid for item in indexed_items}),
        ),
    )


def rank_candidates_for_line(
    line: ParsedRequestLine,
    indexed_items: Sequence[IndexedMenuItem],
    max_candidates: int,
) -> List[CandidateMatch]:
    """Top-scoring menu items for one line; ties ordered by item name."""
    candidates = []
    for item in indexed_items:
        score = score_menu_candidate(line, item.menu_item_name, item.menu_item_description)
        if score.score <= 0:
            continue
        candidates.append(
            CandidateMatch(
                restaurant_guid=item.restaurant_guid,
                restaurant_name=item.restaurant_name,
                menu_item_guid=item.menu_item_guid,
                menu_item_name=item.menu_item_name,
                score=score.score,
                reason=to_match_reason(score),
            )
        )

    candidates.sort(key=lambda candidate: (-candidate.score, candidate.menu_item_name.casefold()))
    return candidates[:max_candidates]


def resolve_request_line_match(
    line: ParsedRequestLine,
    candidates: Optional[List[CandidateMatch]],
    selected_restaurant_guid: str,
) -> ResolvedMatch:
    """Decide whether a line maps to one item of the selected restaurant.

    ``candidates`` is None for modifier-only lines.
    """
    base = dict(
        request_text=line.raw,
        normalized_request=line.normalized,
        quantity=line.quantity,
    )
    if candidates is None:
        return ResolvedMatch(
            **base,
            resolution=MatchResolution.MODIFIER_ONLY,
            resolution_reason="Looks like a modifier request without a clear parent item.",
        )

    quality = assess_candidate_selection_quality(
        line, [candidate.score for candidate in candidates]
    )
    confidence = MatchConfidence(
        level=quality.level, top_score=quality.top_score, score_gap=quality.score_gap
    )
    selected = next(
        (c for c in candidates if c.restaurant_guid == selected_restaurant_guid), None
    )

    if selected is None:
        return ResolvedMatch(
            **base,
            resolution=MatchResolution.UNMATCHED,
            resolution_reason="No candidate matched in selected restaurant scope.",
            confidence=confidence,
            candidates=candidates,
        )

    if quality.is_ambiguous or quality.level == ConfidenceLevel.LOW:
        return ResolvedMatch(
            **base,
            resolution=MatchResolution.AMBIGUOUS,
            resolution_reason=(
                "Multiple close candidates; needs clarification."
                if quality.is_ambiguous
                else "Low confidence match; needs clarification."
            ),
            confidence=confidence,
            candidates=candidates,
        )

    return ResolvedMatch(
        **base,
        resolution=MatchResolution.SELECTED,
        confidence=confidence,
        selected_candidate=selected,
        candidates=candidates,
    )


def build_input_resolution_issues(matches: Sequence[ResolvedMatch]) -> List[PreviewIssue]:
    """One needs-user-input issue per line that did not resolve to an item."""
    issues = []
    for match in matches:
        if match.resolution == MatchResolution.SELECTED:
            continue
        if match.resolution == MatchResolution.MODIFIER_ONLY:
            code = PreviewIssueCode.MODIFIER_CONTEXT_MISSING
            message = f'Clarify which item should use modifier: "{match.request_text}"'
        elif match.resolution == MatchResolution.AMBIGUOUS:
            code = PreviewIssueCode.AMBIGUOUS_ITEM_MATCH
            message = f'Clarify item for: "{match.request_text}"'
        else:
            code = PreviewIssueCode.MENU_ITEM_UNCLEAR
            message = f'No confident menu match for: "{match.request_text}"'
        issues.append(
            PreviewIssue(code=code.value, message=message, severity=IssueSeverity.NEEDS_USER_INPUT)
        )
    return issues


def _combined_status(issues: Sequence[PreviewIssue], compiled: CompileStatus) -> CompileStatus:
    if any(issue.severity == IssueSeverity.UNFULFILLABLE for issue in issues):
        return CompileStatus.UNFULFILLABLE
    if any(issue.severity == IssueSeverity.NEEDS_USER_INPUT for issue in issues):
        return CompileStatus.NEEDS_USER_INPUT
    return compiled


def _protected_phrases(indexed_items: Sequence[IndexedMenuItem]) -> List[str]:
    names: Dict[str, None] = {}
    for item in indexed_items:
        if " and " in item.menu_item_name.lower():
            names[item.menu_item_name] = None
    return list(names)
