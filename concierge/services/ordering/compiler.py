"""Canonical order compilation against a restaurant catalog."""
import logging
from collections import defaultdict
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Annotated, Any, Dict, List, Optional, Sequence, Tuple

from pydantic import Field, TypeAdapter, ValidationError

from concierge.services.ordering.models import (
    ISSUE_SEVERITY,
    Catalog,
    CatalogModifierGroup,
    CatalogModifierOption,
    CompilationIssue,
    CompiledOrderItem,
    CompiledOrderResult,
    CompileStatus,
    IssueCode,
    IssueSeverity,
    ModifierGroupDetail,
    ModifierOptionDetail,
    OrderRequestItem,
)

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")

_request_items_adapter = TypeAdapter(
    Annotated[List[OrderRequestItem], Field(min_length=1)]
)


def compile_order_payload(payload: Any, catalog: Catalog) -> CompiledOrderResult:
    """
    Validate an untrusted request payload, then compile it.

    A payload that is not a non-empty list of request items yields an
    unfulfillable result with a single ``invalid_payload`` issue.
    """
    try:
        request_items = _request_items_adapter.validate_python(payload)
    except ValidationError as e:
        logger.info(f"[COMPILER] Rejected order payload - {e.error_count()} validation errors")
        return CompiledOrderResult(
            status=CompileStatus.UNFULFILLABLE,
            issues=[_issue(IssueCode.INVALID_PAYLOAD, "Order payload is invalid")],
        )
    return compile_order_with_catalog(request_items, catalog)


def compile_order_with_catalog(
    request_items: Sequence[OrderRequestItem], catalog: Catalog
) -> CompiledOrderResult:
    """
    Compile guest selections into priced order lines.

    Every request item is checked on its own; an item with any issue is left
    out of ``items`` and ``subtotal`` but never stops the others from being
    compiled.

    Args:
        request_items: Guest intent, one entry per menu item
        catalog: Snapshot of the restaurant's menu items, groups and options

    Returns:
        CompiledOrderResult whose status is derived from the issues found
    """
    if not request_items:
        return CompiledOrderResult(
            status=CompileStatus.UNFULFILLABLE,
            issues=[_issue(IssueCode.INVALID_PAYLOAD, "Order has no items")],
        )

    menu_items_by_guid = {item.menu_item_guid: item for item in catalog.menu_items}
    groups_by_menu_item_id: Dict[int, List[CatalogModifierGroup]] = defaultdict(list)
    for group in catalog.modifier_groups:
        groups_by_menu_item_id[group.menu_item_id].append(group)
    options_by_guid = {
        option.modifier_option_guid: option for option in catalog.modifier_options
    }

    compiled_items: List[CompiledOrderItem] = []
    issues: List[CompilationIssue] = []
    subtotal = Decimal("0")

    for request_item in request_items:
        menu_item = menu_items_by_guid.get(request_item.menu_item_guid)
        if menu_item is None:
            issues.append(
                _issue(
                    IssueCode.MENU_ITEM_NOT_FOUND,
                    f"Menu item not found: {request_item.menu_item_guid}",
                    menu_item_guid=request_item.menu_item_guid,
                )
            )
            continue

        item_issues: List[CompilationIssue] = []
        groups = groups_by_menu_item_id.get(menu_item.id, [])
        known_group_guids = {group.modifier_group_guid for group in groups}
        for group_guid in request_item.selected_modifiers:
            if group_guid not in known_group_guids:
                item_issues.append(
                    _issue(
                        IssueCode.MODIFIER_GROUP_NOT_FOUND,
                        f"Modifier group not found for item {menu_item.menu_item_guid}: {group_guid}",
                        menu_item_guid=menu_item.menu_item_guid,
                        group_id=group_guid,
                    )
                )

        modifier_price = Decimal("0")
        modifier_details: List[ModifierGroupDetail] = []
        for group in groups:
            selected = request_item.selected_modifiers.get(group.modifier_group_guid, [])
            item_issues.extend(
                _check_selection_count(menu_item.menu_item_guid, group, selected)
            )

            group_price, options, option_issues = _resolve_options(
                menu_item.menu_item_guid, group, selected, options_by_guid
            )
            item_issues.extend(option_issues)
            modifier_price += group_price
            if options:
                modifier_details.append(
                    ModifierGroupDetail(
                        group_id=group.modifier_group_guid,
                        group_name=group.name,
                        options=options,
                    )
                )

        base_price = parse_money(menu_item.price)
        if base_price is None:
            item_issues.append(
                _issue(
                    IssueCode.INVALID_PRICE,
                    f"Menu item {menu_item.menu_item_guid} has an invalid price",
                    menu_item_guid=menu_item.menu_item_guid,
                )
            )
            base_price = Decimal("0")

        if item_issues:
            issues.extend(item_issues)
            continue

        try:
            modifier_price = round_money(modifier_price)
            unit_price = round_money(base_price + modifier_price)
            total_price = round_money(unit_price * request_item.quantity)
            subtotal = round_money(subtotal + total_price)
        except InvalidOperation:
            logger.warning(
                f"[COMPILER] Price overflow for {menu_item.menu_item_guid} x{request_item.quantity}"
            )
            issues.append(
                _issue(
                    IssueCode.INVALID_PRICE,
                    f"Price for menu item {menu_item.menu_item_guid} is out of range",
                    menu_item_guid=menu_item.menu_item_guid,
                )
            )
            continue

        compiled_items.append(
            CompiledOrderItem(
                menu_item_guid=menu_item.menu_item_guid,
                item_name=menu_item.name,
                base_price=float(base_price),
                modifier_price=float(modifier_price),
                unit_price=float(unit_price),
                quantity=request_item.quantity,
                total_price=float(total_price),
                modifier_details=modifier_details,
            )
        )

    status = derive_status(issues)
    logger.debug(
        f"[COMPILER] Compiled {len(compiled_items)}/{len(request_items)} items - "
        f"status: {status}, issues: {[str(issue.code) for issue in issues]}"
    )
    return CompiledOrderResult(
        status=status,
        items=compiled_items,
        issues=issues,
        subtotal=float(subtotal),
    )


def derive_status(issues: Sequence[CompilationIssue]) -> CompileStatus:
    """Map a list of issues to the overall compile status."""
    if not issues:
        return CompileStatus.READY_TO_EXECUTE
    if any(issue.severity == IssueSeverity.UNFULFILLABLE for issue in issues):
        return CompileStatus.UNFULFILLABLE
    return CompileStatus.NEEDS_USER_INPUT


def parse_money(value: Optional[str]) -> Optional[Decimal]:
    """
    Parse a catalog decimal string into cents.

    Returns Decimal("0") for a missing price and None when the value is not
    a finite number or is too large to round to cents.
    """
    if value is None:
        return Decimal("0")
    try:
        amount = Decimal(value.strip())
        if not amount.is_finite():
            return None
        return round_money(amount)
    except InvalidOperation:
        return None


def round_money(amount: Decimal) -> Decimal:
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def selection_bounds(group: CatalogModifierGroup) -> Tuple[int, Optional[int]]:
    """Effective (min, max) number of selections for a modifier group."""
    minimum = max(group.min_selections or 0, 0)
    if group.is_required:
        minimum = max(minimum, 1)

    maximum = group.max_selections
    if group.is_multi_select is not True:
        maximum = 1 if maximum is None else min(maximum, 1)
    return minimum, maximum


def _check_selection_count(
    menu_item_guid: str, group: CatalogModifierGroup, selected: List[str]
) -> List[CompilationIssue]:
    issues = []
    minimum, maximum = selection_bounds(group)
    count = len(selected)

    if maximum is not None and minimum > maximum:
        issues.append(
            _issue(
                IssueCode.MODIFIER_GROUP_MISCONFIGURED,
                f"Modifier group {group.name} requires {minimum} selections but allows at most {maximum}",
                menu_item_guid=menu_item_guid,
                group_id=group.modifier_group_guid,
            )
        )
    elif count == 0:
        if minimum > 0:
            issues.append(
                _issue(
                    IssueCode.REQUIRED_MODIFIER_MISSING,
                    f"Required modifier group {group.name} is missing selections",
                    menu_item_guid=menu_item_guid,
                    group_id=group.modifier_group_guid,
                )
            )
    elif count < minimum or (maximum is not None and count > maximum):
        allowed = f"{minimum}-{maximum}" if maximum is not None else f"at least {minimum}"
        issues.append(
            _issue(
                IssueCode.SELECTION_COUNT_OUT_OF_RANGE,
                f"Modifier group {group.name} allows {allowed} selections, got {count}",
                menu_item_guid=menu_item_guid,
                group_id=group.modifier_group_guid,
            )
        )

    if len(set(selected)) != count:
        issues.append(
            _issue(
                IssueCode.DUPLICATE_SELECTION,
                f"Modifier group {group.name} has the same option selected more than once",
                menu_item_guid=menu_item_guid,
                group_id=group.modifier_group_guid,
            )
        )
    return issues


def _resolve_options(
    menu_item_guid: str,
    group: CatalogModifierGroup,
    selected: List[str],
    options_by_guid: Dict[str, CatalogModifierOption],
) -> Tuple[Decimal, List[ModifierOptionDetail], List[CompilationIssue]]:
    total = Decimal("0")
    details: List[ModifierOptionDetail] = []
    issues: List[CompilationIssue] = []

    for option_guid in dict.fromkeys(selected):
        option = options_by_guid.get(option_guid)
        if option is None:
            issues.append(
                _issue(
                    IssueCode.MODIFIER_OPTION_NOT_FOUND,
                    f"Modifier option not found: {option_guid}",
                    menu_item_guid=menu_item_guid,
                    group_id=group.modifier_group_guid,
                    option_id=option_guid,
                )
            )
            continue

        if option.modifier_group_id != group.id:
            issues.append(
                _issue(
                    IssueCode.MODIFIER_OPTION_NOT_IN_GROUP,
                    f"Modifier option {option_guid} does not belong to group {group.modifier_group_guid}",
                    menu_item_guid=menu_item_guid,
                    group_id=group.modifier_group_guid,
                    option_id=option_guid,
                )
            )
            continue

        price = parse_money(option.price)
        if price is None:
            issues.append(
                _issue(
                    IssueCode.INVALID_PRICE,
                    f"Modifier option {option_guid} has an invalid price",
                    menu_item_guid=menu_item_guid,
                    group_id=group.modifier_group_guid,
                    option_id=option_guid,
                )
            )
            price = Decimal("0")

        total += price
        details.append(
            ModifierOptionDetail(
                option_id=option.modifier_option_guid,
                option_name=option.name,
                option_price=f"{price:.2f}",
            )
        )

    return total, details, issues


def _issue(code: IssueCode, message: str, **context: Optional[str]) -> CompilationIssue:
    return CompilationIssue(severity=ISSUE_SEVERITY[code], code=code, message=message, **context)
