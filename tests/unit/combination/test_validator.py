from itertools import permutations

from coupon_runtime.domain.combination import rules
from coupon_runtime.domain.combination.models import (
    CombinationConfig,
    CombinationRules,
    Coupon,
    Store,
    ValidationResult,
)
from coupon_runtime.domain.combination.partners import build_affiliation
from coupon_runtime.domain.combination.validator import validate


def make_coupon(
    coupon_id: str,
    category: str | None = "single-item",
    store_id: str = "s1",
    title: str | None = None,
    **kwargs,
) -> Coupon:
    """Helper to create a Coupon for testing."""
    return Coupon.new(
        id=coupon_id,
        category=category,
        store_id=store_id,
        title=title or f"Coupon {coupon_id}",
        **kwargs,
    )


def test_empty_selection_is_valid():
    result = validate([])

    assert result == ValidationResult()
    assert result.to_dict() == {
        "valid": True,
        "conflicts": [],
        "warnings": [],
        "recommendations": [],
        "codes": [],
    }


def test_single_non_combinable_coupon_is_valid():
    result = validate([make_coupon("a", is_combinable=False)])

    assert result.valid is True
    assert result.conflicts == []


def test_non_combinable_coupon_conflicts_with_others():
    coupons = [
        make_coupon("a", category="single-item", is_combinable=False, title="Coffee 5x"),
        make_coupon("b", category="product-group", product_group_id="dairy"),
    ]

    result = validate(coupons)

    assert result.valid is False
    assert len(result.conflicts) == 1
    assert '"Coffee 5x"' in result.conflicts[0]
    assert rules.RULE_NON_COMBINABLE in result.codes


def test_two_whole_purchase_coupons_conflict_once():
    coupons = [make_coupon("a", category="whole-purchase"), make_coupon("b", category="whole-purchase")]

    result = validate(coupons)

    assert result.valid is False
    assert result.codes.count(rules.RULE_WHOLE_PURCHASE_EXCLUSIVE) == 1
    assert len(result.conflicts) == 1


def test_three_whole_purchase_coupons_produce_one_summary_conflict():
    coupons = [make_coupon(coupon_id, category="whole-purchase") for coupon_id in ("a", "b", "c")]

    result = validate(coupons)

    assert len(result.conflicts) == 1
    for coupon_id in ("a", "b", "c"):
        assert f'"Coupon {coupon_id}"' in result.conflicts[0]


def test_product_group_duplicate_names_the_group():
    coupons = [
        make_coupon("a", category="product-group", product_group_id="dairy"),
        make_coupon("b", category="product-group", product_group_id="dairy"),
    ]

    result = validate(coupons)

    assert result.valid is False
    assert result.codes == [rules.RULE_PRODUCT_GROUP_DUPLICATE]
    assert '"dairy"' in result.conflicts[0]


def test_product_group_duplicate_prefers_group_display_name():
    coupons = [
        make_coupon("a", category="product-group", product_group_id="g1", product_group_name="Dairy products"),
        make_coupon("b", category="product-group", product_group_id="g1", product_group_name="Dairy products"),
    ]

    result = validate(coupons)

    assert '"Dairy products"' in result.conflicts[0]


def test_product_group_name_does_not_depend_on_input_order():
    named = make_coupon("a", category="product-group", product_group_id="g1", product_group_name="Dairy")
    unnamed = make_coupon("b", category="product-group", product_group_id="g1")
    renamed = make_coupon("c", category="product-group", product_group_id="g1", product_group_name="Cheese")

    forward = validate([named, unnamed, renamed])
    backward = validate([renamed, unnamed, named])

    assert set(forward.conflicts) == set(backward.conflicts)
    assert '"Cheese"' in forward.conflicts[0]


def test_different_product_groups_do_not_conflict():
    coupons = [
        make_coupon("a", category="product-group", product_group_id="dairy"),
        make_coupon("b", category="product-group", product_group_id="bakery"),
    ]

    assert validate(coupons).valid is True


def test_product_group_coupons_without_group_id_never_collide():
    coupons = [make_coupon("a", category="product-group"), make_coupon("b", category="product-group")]

    assert validate(coupons).valid is True


def test_single_item_duplicate_conflicts():
    coupons = [
        make_coupon("a", category="single-item", item_id="4001234"),
        make_coupon("b", category="single-item", item_id="4001234"),
    ]

    result = validate(coupons)

    assert result.valid is False
    assert result.codes == [rules.RULE_SINGLE_ITEM_DUPLICATE]


def test_single_item_coupons_without_item_id_are_distinct_items():
    coupons = [make_coupon("a", category="single-item"), make_coupon("b", category="single-item")]

    assert validate(coupons).valid is True


def test_store_mismatch_conflicts():
    result = validate([make_coupon("a", store_id="s1")], target_store_id="s2")

    assert result.valid is False
    assert result.codes == [rules.RULE_STORE_MISMATCH]
    assert "same store" in result.conflicts[0]


def test_matching_store_passes():
    result = validate([make_coupon("a", store_id="s1"), make_coupon("b", store_id="s1")], target_store_id="s1")

    assert result.valid is True


def test_max_per_transaction_exceeded():
    coupons = [
        make_coupon("a", title="Solo deal", combination_rules=CombinationRules(max_per_transaction=1)),
        make_coupon("b"),
    ]

    result = validate(coupons)

    assert result.valid is False
    assert result.codes == [rules.RULE_MAX_PER_TRANSACTION]
    assert '"Solo deal"' in result.conflicts[0]
    assert "at most 1 coupon" in result.conflicts[0]


def test_max_per_transaction_within_limit():
    coupons = [make_coupon("a", combination_rules=CombinationRules(max_per_transaction=1))]

    assert validate(coupons).valid is True


def test_declared_incompatible_product_group():
    coupons = [
        make_coupon(
            "a",
            category="whole-purchase",
            title="Baby bonus",
            combination_rules=CombinationRules(incompatible_categories=("alcohol",)),
        ),
        make_coupon("b", category="product-group", product_group_id="alcohol"),
    ]

    result = validate(coupons)

    assert result.valid is False
    assert result.codes == [rules.RULE_INCOMPATIBLE_GROUP]
    assert '"Baby bonus"' in result.conflicts[0]


def test_incompatible_group_ignores_the_declaring_coupon_itself():
    coupons = [
        make_coupon(
            "a",
            category="product-group",
            product_group_id="alcohol",
            combination_rules=CombinationRules(incompatible_categories=("alcohol",)),
        ),
        make_coupon("b", category="single-item"),
    ]

    assert validate(coupons).valid is True


def test_declared_combinable_categories():
    whole_purchase = make_coupon("a", category="whole-purchase", combinable_with_categories=["single-item"])

    rejected = validate([whole_purchase, make_coupon("b", category="product-group", product_group_id="g1")])
    accepted = validate([whole_purchase, make_coupon("c", category="single-item")])

    assert rejected.codes == [rules.RULE_CATEGORY_NOT_COMBINABLE]
    assert accepted.valid is True


def test_volume_warning_at_threshold():
    coupons = [make_coupon(str(i), category="single-item") for i in range(5)]

    result = validate(coupons)

    assert result.valid is True
    assert result.codes == [rules.RULE_SINGLE_ITEM_VOLUME]
    assert len(result.warnings) == 1


def test_no_volume_warning_below_threshold():
    coupons = [make_coupon(str(i), category="single-item") for i in range(4)]

    assert validate(coupons).warnings == []


def test_volume_threshold_is_configurable():
    coupons = [make_coupon(str(i), category="single-item") for i in range(3)]

    result = validate(coupons, config=CombinationConfig(volume_warning_threshold=3))

    assert len(result.warnings) == 1


def test_high_value_combination_recommended():
    coupons = [
        make_coupon("a", category="whole-purchase"),
        make_coupon("b", category="product-group", product_group_id="dairy"),
        make_coupon("c", category="product-group", product_group_id="bakery"),
    ]

    result = validate(coupons)

    assert result.valid is True
    assert result.recommendations
    assert rules.RULE_HIGH_VALUE_COMBINATION in result.codes


def test_end_to_end_example():
    coupons = [
        Coupon.new(id="c1", category="whole-purchase", is_combinable=True, store_id="s1"),
        Coupon.new(id="c2", category="product-group", product_group_id="g1", is_combinable=True, store_id="s1"),
    ]

    result = validate(coupons, target_store_id="s1")

    assert result.valid is True
    assert result.conflicts == []
    assert result.warnings == []
    assert result.recommendations == []


def test_unknown_category_only_skips_category_rules():
    coupons = [
        make_coupon("a", category="mystery"),
        make_coupon("b", category="mystery", is_combinable=False),
    ]

    result = validate(coupons)

    assert coupons[0].category is None
    assert result.codes == [rules.RULE_NON_COMBINABLE]


def test_all_checks_are_collected():
    coupons = [
        make_coupon("a", category="whole-purchase", is_combinable=False),
        make_coupon("b", category="whole-purchase", store_id="s2"),
    ]

    result = validate(coupons, target_store_id="s1")

    assert result.codes == [
        rules.RULE_NON_COMBINABLE,
        rules.RULE_STORE_MISMATCH,
        rules.RULE_WHOLE_PURCHASE_EXCLUSIVE,
    ]


def test_valid_reflects_conflicts_only():
    coupons = [make_coupon(str(i), category="single-item") for i in range(6)]

    result = validate(coupons)

    assert result.warnings
    assert result.valid is (len(result.conflicts) == 0)


def test_validation_is_idempotent():
    coupons = [
        make_coupon("a", category="whole-purchase"),
        make_coupon("b", category="whole-purchase"),
        make_coupon("c", category="product-group", product_group_id="dairy"),
    ]

    assert validate(coupons) == validate(coupons)


def test_validation_is_order_independent():
    coupons = [
        make_coupon("a", category="whole-purchase", is_combinable=False),
        make_coupon("b", category="whole-purchase"),
        make_coupon("c", category="product-group", product_group_id="dairy"),
        make_coupon("d", category="product-group", product_group_id="dairy"),
        make_coupon("e", category="single-item", combination_rules=CombinationRules(max_per_transaction=2)),
    ]
    baseline = validate(coupons, target_store_id="s1")

    for ordering in permutations(coupons):
        result = validate(list(ordering), target_store_id="s1")
        assert result.valid == baseline.valid
        assert sorted(result.conflicts) == sorted(baseline.conflicts)
        assert sorted(result.warnings) == sorted(baseline.warnings)
        assert sorted(result.recommendations) == sorted(baseline.recommendations)


def test_input_is_not_mutated():
    coupons = [make_coupon("a", category="whole-purchase"), make_coupon("b", category="whole-purchase")]
    snapshot = list(coupons)

    validate(coupons)

    assert coupons == snapshot


def test_partner_rules_need_detected_affiliation():
    coupons = [
        make_coupon("a", title="Diesel 10x points"),
        make_coupon("b", title="Benzin 5x points"),
    ]

    without_affiliation = validate(coupons, target_store_id="s1")
    affiliation = build_affiliation([Store(id="s1", chain_code="ARAL")], target_store_id="s1")
    with_affiliation = validate(coupons, target_store_id="s1", affiliation=affiliation)

    assert without_affiliation.valid is True
    assert with_affiliation.codes == [rules.RULE_PARTNER_LIMIT]
    assert with_affiliation.conflicts[0].startswith("Aral:")
