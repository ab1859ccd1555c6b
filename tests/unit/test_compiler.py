"""Unit tests for canonical order compilation."""
import pytest
from decimal import Decimal
from pydantic import ValidationError

from concierge.services.ordering.compiler import (
    compile_order_payload,
    compile_order_with_catalog,
    derive_status,
    parse_money,
    selection_bounds,
)
from concierge.services.ordering.models import (
    Catalog,
    CatalogMenuItem,
    CatalogModifierGroup,
    CatalogModifierOption,
    CompileStatus,
    IssueCode,
    IssueSeverity,
    MAX_QUANTITY,
    OrderRequestItem,
)
from catalog_ids import (
    ADDONS_GROUP,
    AVOCADO,
    BACON,
    CHEESEBURGER,
    DONENESS_GROUP,
    FRENCH_FRIES,
    MEDIUM,
    WELL_DONE,
)

UNKNOWN_GUID = "99999999-0000-4000-8000-000000000000"
PIZZA = "50000000-0000-4000-8000-000000000001"
TOPPINGS_GROUP = "50000000-0000-4000-8000-000000000002"
TOPPINGS = [f"50000000-0000-4000-8000-00000000010{n}" for n in range(4)]


def burger(quantity=1, **selected):
    return OrderRequestItem(
        menu_item_guid=CHEESEBURGER, quantity=quantity, selected_modifiers=selected
    )


def codes(result):
    return [issue.code for issue in result.issues]


def pizza_catalog(**group_fields):
    """Pizza with one toppings group and four toppings."""
    return Catalog(
        menu_items=[CatalogMenuItem(id=1, menu_item_guid=PIZZA, name="Pizza", price="12.00")],
        modifier_groups=[
            CatalogModifierGroup(
                id=10, modifier_group_guid=TOPPINGS_GROUP, menu_item_id=1, name="Toppings", **group_fields
            )
        ],
        modifier_options=[
            CatalogModifierOption(
                id=100 + n, modifier_option_guid=guid, modifier_group_id=10, name=f"Topping {n}", price="1.00"
            )
            for n, guid in enumerate(TOPPINGS)
        ],
    )


def pizza(*toppings):
    return OrderRequestItem(
        menu_item_guid=PIZZA, quantity=1, selected_modifiers={TOPPINGS_GROUP: list(toppings)}
    )


class TestCompileOrderWithCatalog:
    """Test compiling request items against a catalog snapshot."""

    def test_valid_order_is_ready(self, burger_catalog):
        result = compile_order_with_catalog(
            [burger(2, **{DONENESS_GROUP: [MEDIUM], ADDONS_GROUP: [BACON]})], burger_catalog
        )

        assert result.status == CompileStatus.READY_TO_EXECUTE
        assert result.issues == []
        assert result.subtotal == 24.0

        item = result.items[0]
        assert item.item_name == "Cheeseburger"
        assert item.base_price == 10.0
        assert item.modifier_price == 2.0
        assert item.unit_price == 12.0
        assert item.quantity == 2
        assert item.total_price == 24.0

    def test_modifier_details_follow_catalog_group_order(self, burger_catalog):
        result = compile_order_with_catalog(
            [burger(**{ADDONS_GROUP: [AVOCADO, BACON], DONENESS_GROUP: [WELL_DONE]})],
            burger_catalog,
        )

        details = result.items[0].modifier_details
        assert [group.group_name for group in details] == ["Doneness", "Add-ons"]
        assert [option.option_name for option in details[1].options] == ["Avocado", "Bacon"]
        assert [option.option_price for option in details[1].options] == ["1.50", "2.00"]
        assert details[0].options[0].option_price == "0.00"
        assert result.items[0].unit_price == 13.5

    def test_missing_required_modifier_needs_user_input(self, burger_catalog):
        result = compile_order_with_catalog([burger()], burger_catalog)

        assert result.status == CompileStatus.NEEDS_USER_INPUT
        assert codes(result) == [IssueCode.REQUIRED_MODIFIER_MISSING]
        assert result.issues[0].group_id == DONENESS_GROUP
        assert result.items == []
        assert result.subtotal == 0.0

    def test_option_from_another_group_is_unfulfillable(self, burger_catalog):
        result = compile_order_with_catalog([burger(**{DONENESS_GROUP: [BACON]})], burger_catalog)

        assert result.status == CompileStatus.UNFULFILLABLE
        assert IssueCode.MODIFIER_OPTION_NOT_IN_GROUP in codes(result)
        issue = result.issues[0]
        assert issue.severity == IssueSeverity.UNFULFILLABLE
        assert issue.option_id == BACON

    def test_unknown_option(self, burger_catalog):
        result = compile_order_with_catalog(
            [burger(**{DONENESS_GROUP: [UNKNOWN_GUID]})], burger_catalog
        )

        assert result.status == CompileStatus.UNFULFILLABLE
        assert codes(result) == [IssueCode.MODIFIER_OPTION_NOT_FOUND]

    def test_unknown_group(self, burger_catalog):
        result = compile_order_with_catalog(
            [burger(**{DONENESS_GROUP: [MEDIUM], UNKNOWN_GUID: [BACON]})], burger_catalog
        )

        assert result.status == CompileStatus.UNFULFILLABLE
        assert codes(result) == [IssueCode.MODIFIER_GROUP_NOT_FOUND]
        assert result.issues[0].group_id == UNKNOWN_GUID

    def test_group_of_another_item_is_not_found(self, burger_catalog):
        fries = OrderRequestItem(
            menu_item_guid=FRENCH_FRIES, quantity=1, selected_modifiers={DONENESS_GROUP: [MEDIUM]}
        )

        result = compile_order_with_catalog([fries], burger_catalog)

        assert codes(result) == [IssueCode.MODIFIER_GROUP_NOT_FOUND]

    def test_too_many_selections_for_single_select(self, burger_catalog):
        result = compile_order_with_catalog(
            [burger(**{DONENESS_GROUP: [MEDIUM, WELL_DONE]})], burger_catalog
        )

        assert result.status == CompileStatus.NEEDS_USER_INPUT
        assert codes(result) == [IssueCode.SELECTION_COUNT_OUT_OF_RANGE]

    def test_too_few_selections_for_multi_select(self):
        catalog = pizza_catalog(is_multi_select=True, min_selections=2, max_selections=3)

        result = compile_order_with_catalog([pizza(TOPPINGS[0])], catalog)

        assert result.status == CompileStatus.NEEDS_USER_INPUT
        assert codes(result) == [IssueCode.SELECTION_COUNT_OUT_OF_RANGE]
        assert result.issues[0].group_id == TOPPINGS_GROUP
        assert result.items == []

    def test_too_many_selections_for_multi_select(self):
        catalog = pizza_catalog(is_multi_select=True, min_selections=2, max_selections=3)

        result = compile_order_with_catalog([pizza(*TOPPINGS)], catalog)

        assert result.status == CompileStatus.NEEDS_USER_INPUT
        assert codes(result) == [IssueCode.SELECTION_COUNT_OUT_OF_RANGE]

    def test_multi_select_within_bounds(self):
        catalog = pizza_catalog(is_multi_select=True, min_selections=2, max_selections=3)

        result = compile_order_with_catalog([pizza(*TOPPINGS[:3])], catalog)

        assert result.status == CompileStatus.READY_TO_EXECUTE
        assert result.subtotal == 15.0

    @pytest.mark.parametrize(
        "group_fields",
        [
            {"min_selections": 2},
            {"is_required": True, "max_selections": 0},
            {"is_multi_select": True, "min_selections": 3, "max_selections": 2},
        ],
    )
    def test_unsatisfiable_group_is_unfulfillable(self, group_fields):
        result = compile_order_with_catalog([pizza(TOPPINGS[0])], pizza_catalog(**group_fields))

        assert result.status == CompileStatus.UNFULFILLABLE
        assert codes(result) == [IssueCode.MODIFIER_GROUP_MISCONFIGURED]
        assert result.issues[0].severity == IssueSeverity.UNFULFILLABLE

    def test_duplicate_selection(self, burger_catalog):
        result = compile_order_with_catalog(
            [burger(**{DONENESS_GROUP: [MEDIUM], ADDONS_GROUP: [BACON, BACON]})], burger_catalog
        )

        assert result.status == CompileStatus.NEEDS_USER_INPUT
        assert codes(result) == [IssueCode.DUPLICATE_SELECTION]

    def test_unknown_item_does_not_stop_other_items(self, burger_catalog):
        result = compile_order_with_catalog(
            [
                OrderRequestItem(menu_item_guid=UNKNOWN_GUID, quantity=1),
                OrderRequestItem(menu_item_guid=FRENCH_FRIES, quantity=3),
            ],
            burger_catalog,
        )

        assert result.status == CompileStatus.UNFULFILLABLE
        assert codes(result) == [IssueCode.MENU_ITEM_NOT_FOUND]
        assert result.issues[0].menu_item_guid == UNKNOWN_GUID
        assert [item.item_name for item in result.items] == ["French Fries"]
        assert result.subtotal == 12.0

    def test_unfulfillable_wins_over_needs_user_input(self, burger_catalog):
        result = compile_order_with_catalog(
            [burger(), OrderRequestItem(menu_item_guid=UNKNOWN_GUID, quantity=1)],
            burger_catalog,
        )

        assert result.status == CompileStatus.UNFULFILLABLE
        assert set(codes(result)) == {
            IssueCode.REQUIRED_MODIFIER_MISSING,
            IssueCode.MENU_ITEM_NOT_FOUND,
        }

    def test_invalid_item_price(self):
        catalog = Catalog(
            menu_items=[
                CatalogMenuItem(id=1, menu_item_guid=FRENCH_FRIES, name="French Fries", price="abc")
            ]
        )

        result = compile_order_with_catalog(
            [OrderRequestItem(menu_item_guid=FRENCH_FRIES, quantity=1)], catalog
        )

        assert result.status == CompileStatus.UNFULFILLABLE
        assert codes(result) == [IssueCode.INVALID_PRICE]
        assert result.items == []

    def test_missing_price_is_free(self):
        catalog = Catalog(
            menu_items=[CatalogMenuItem(id=1, menu_item_guid=FRENCH_FRIES, name="Water")]
        )

        result = compile_order_with_catalog(
            [OrderRequestItem(menu_item_guid=FRENCH_FRIES, quantity=2)], catalog
        )

        assert result.status == CompileStatus.READY_TO_EXECUTE
        assert result.items[0].total_price == 0.0

    def test_prices_round_half_up_to_cents(self):
        catalog = Catalog(
            menu_items=[
                CatalogMenuItem(id=1, menu_item_guid=FRENCH_FRIES, name="Fries", price=Decimal("2.675"))
            ]
        )

        result = compile_order_with_catalog(
            [OrderRequestItem(menu_item_guid=FRENCH_FRIES, quantity=3)], catalog
        )

        assert result.items[0].base_price == 2.68
        assert result.items[0].total_price == 8.04
        assert result.subtotal == 8.04

    def test_unroundable_price_is_invalid(self):
        catalog = Catalog(
            menu_items=[CatalogMenuItem(id=1, menu_item_guid=FRENCH_FRIES, name="Fries", price="1e30")]
        )

        result = compile_order_with_catalog(
            [OrderRequestItem(menu_item_guid=FRENCH_FRIES, quantity=1)], catalog
        )

        assert result.status == CompileStatus.UNFULFILLABLE
        assert codes(result) == [IssueCode.INVALID_PRICE]

    def test_line_total_overflow_is_reported(self):
        catalog = Catalog(
            menu_items=[
                CatalogMenuItem(id=1, menu_item_guid=CHEESEBURGER, name="Gold Burger", price="1e25"),
                CatalogMenuItem(id=2, menu_item_guid=FRENCH_FRIES, name="Fries", price="4.00"),
            ]
        )

        result = compile_order_with_catalog(
            [
                OrderRequestItem(menu_item_guid=CHEESEBURGER, quantity=50),
                OrderRequestItem(menu_item_guid=FRENCH_FRIES, quantity=2),
            ],
            catalog,
        )

        assert result.status == CompileStatus.UNFULFILLABLE
        assert codes(result) == [IssueCode.INVALID_PRICE]
        assert result.issues[0].menu_item_guid == CHEESEBURGER
        assert [item.item_name for item in result.items] == ["Fries"]
        assert result.subtotal == 8.0

    def test_quantity_above_maximum_is_rejected(self):
        with pytest.raises(ValidationError):
            OrderRequestItem(menu_item_guid=FRENCH_FRIES, quantity=MAX_QUANTITY + 1)

    def test_optional_group_may_be_skipped(self, burger_catalog):
        result = compile_order_with_catalog(
            [burger(**{DONENESS_GROUP: [MEDIUM]})], burger_catalog
        )

        assert result.status == CompileStatus.READY_TO_EXECUTE
        assert [group.group_name for group in result.items[0].modifier_details] == ["Doneness"]

    def test_empty_request(self, burger_catalog):
        result = compile_order_with_catalog([], burger_catalog)

        assert result.status == CompileStatus.UNFULFILLABLE
        assert codes(result) == [IssueCode.INVALID_PAYLOAD]


class TestCompileOrderPayload:
    """Test compiling untrusted payloads."""

    @pytest.mark.parametrize(
        "payload",
        [
            None,
            "cheeseburger",
            [],
            [{"menuItemGuid": CHEESEBURGER, "quantity": 0}],
            [{"menuItemGuid": CHEESEBURGER, "quantity": 10**29}],
            [{"menuItemGuid": "", "quantity": 1}],
            [{"quantity": 1}],
            [{"menuItemGuid": CHEESEBURGER, "quantity": 1, "selectedModifiers": {"g": "not-a-list"}}],
        ],
    )
    def test_invalid_payload(self, payload, burger_catalog):
        result = compile_order_payload(payload, burger_catalog)

        assert result.status == CompileStatus.UNFULFILLABLE
        assert codes(result) == [IssueCode.INVALID_PAYLOAD]
        assert result.items == []

    def test_camel_case_payload(self, burger_catalog):
        payload = [
            {
                "menuItemGuid": CHEESEBURGER,
                "quantity": 1,
                "selectedModifiers": {DONENESS_GROUP: [WELL_DONE]},
            }
        ]

        result = compile_order_payload(payload, burger_catalog)

        assert result.status == CompileStatus.READY_TO_EXECUTE
        assert result.subtotal == 10.0


class TestHelpers:
    """Test compiler helpers."""

    def test_parse_money(self):
        assert parse_money(None) == Decimal("0")
        assert parse_money("4.5") == Decimal("4.50")
        assert parse_money(" 1.005 ") == Decimal("1.01")
        assert parse_money("abc") is None
        assert parse_money("NaN") is None
        assert parse_money("Infinity") is None
        assert parse_money("1e25") == Decimal("1e25")
        assert parse_money("1e30") is None

    def test_selection_bounds(self):
        def group(**kwargs):
            return CatalogModifierGroup(
                id=1, modifier_group_guid=DONENESS_GROUP, menu_item_id=1, name="G", **kwargs
            )

        assert selection_bounds(group()) == (0, 1)
        assert selection_bounds(group(is_required=True)) == (1, 1)
        assert selection_bounds(group(is_multi_select=True)) == (0, None)
        assert selection_bounds(group(is_multi_select=True, min_selections=2, max_selections=4)) == (2, 4)
        assert selection_bounds(group(max_selections=3)) == (0, 1)

    def test_derive_status(self, burger_catalog):
        assert derive_status([]) == CompileStatus.READY_TO_EXECUTE
        needs_input = compile_order_with_catalog([burger()], burger_catalog).issues
        assert derive_status(needs_input) == CompileStatus.NEEDS_USER_INPUT
