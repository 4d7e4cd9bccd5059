"""Unit tests for CombinationService."""

from __future__ import annotations

from unittest.mock import Mock

import pytest

from coupon_runtime.adapters.memory.in_memory_repository import InMemoryCouponStore
from coupon_runtime.application.combination_service import CombinationService
from coupon_runtime.application.errors import (
    CouponsNotFoundError,
    EmptySelectionError,
    RedemptionLookupError,
)
from coupon_runtime.domain.combination import rules
from coupon_runtime.domain.combination.guidance import MaxCombinable
from coupon_runtime.domain.combination.models import Coupon, Store


@pytest.fixture
def store() -> InMemoryCouponStore:
    return InMemoryCouponStore(
        coupons=[
            Coupon.new(id="wp", category="whole-purchase", store_id="aral-1", title="10% on everything"),
            Coupon.new(id="diesel", category="single-item", store_id="aral-1", title="Diesel 10x"),
            Coupon.new(id="benzin", category="single-item", store_id="aral-1", title="Benzin 5x"),
            Coupon.new(id="milk", category="product-group", product_group_id="dairy", store_id="rewe-1"),
        ],
        stores=[
            Store(id="aral-1", name="Aral Hauptstr.", chain_code="ARAL"),
            Store(id="rewe-1", name="Rewe City", chain_code="REWE"),
        ],
        redemptions=[("wp", "acct-1")],
    )


@pytest.fixture
def service(store: InMemoryCouponStore) -> CombinationService:
    return CombinationService(coupon_repo=store, store_repo=store, redemption_repo=store)


def test_empty_selection_rejected(service: CombinationService) -> None:
    with pytest.raises(EmptySelectionError):
        service.validate_selection([])


def test_missing_coupons_reported(service: CombinationService) -> None:
    with pytest.raises(CouponsNotFoundError) as exc_info:
        service.validate_selection(["wp", "nope", "gone"])

    assert exc_info.value.missing_ids == ["nope", "gone"]


def test_valid_selection(service: CombinationService) -> None:
    result = service.validate_selection(["wp", "diesel"], store_id="aral-1")

    assert result.valid is True


def test_partner_rules_apply_to_detected_partner_store(service: CombinationService) -> None:
    result = service.validate_selection(["diesel", "benzin"], store_id="aral-1")

    assert result.valid is False
    assert result.codes == [rules.RULE_PARTNER_LIMIT]


def test_partner_rules_skip_non_partner_target(service: CombinationService) -> None:
    result = service.validate_selection(["diesel", "benzin"], store_id="rewe-1")

    assert rules.RULE_PARTNER_LIMIT not in result.codes
    assert rules.RULE_STORE_MISMATCH in result.codes


def test_repeated_coupon_id_is_rejected(service: CombinationService) -> None:
    with pytest.raises(CouponsNotFoundError) as exc_info:
        service.validate_selection(["diesel", "wp", "diesel"])

    assert exc_info.value.missing_ids == []
    assert exc_info.value.repeated_ids == ["diesel"]


def test_store_lookup_failure_degrades_to_no_partner(store: InMemoryCouponStore) -> None:
    failing_stores = Mock()
    failing_stores.get_stores_by_ids.side_effect = RuntimeError("store table offline")
    service = CombinationService(coupon_repo=store, store_repo=failing_stores)

    result = service.validate_selection(["diesel", "benzin"], store_id="aral-1")

    assert result.valid is True


def test_capacity(service: CombinationService) -> None:
    assert service.capacity(["wp", "diesel", "benzin", "milk"]) == MaxCombinable(
        whole_purchase=1, product_group=1, single_item=2
    )


def test_account_usage_already_redeemed(service: CombinationService) -> None:
    result = service.check_account_usage("wp", "acct-1")

    assert result.valid is False
    assert result.codes == [rules.RULE_ALREADY_REDEEMED]


def test_account_usage_not_redeemed(service: CombinationService) -> None:
    assert service.check_account_usage("wp", "acct-2").valid is True


def test_account_usage_lookup_failure(store: InMemoryCouponStore) -> None:
    redemptions = Mock()
    redemptions.has_redemption.side_effect = RuntimeError("timeout")
    service = CombinationService(coupon_repo=store, store_repo=store, redemption_repo=redemptions)

    with pytest.raises(RedemptionLookupError):
        service.check_account_usage("wp", "acct-1")


def test_account_usage_without_repository(store: InMemoryCouponStore) -> None:
    service = CombinationService(coupon_repo=store, store_repo=store)

    with pytest.raises(RedemptionLookupError):
        service.check_account_usage("wp", "acct-1")
