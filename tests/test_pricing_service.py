import math

import pytest

from domain.models import GoldCategory, GoldCondition, ItemType
from services.pricing_service import (
    adjust_weight,
    build_custom_item,
    build_standard_item,
    compute_net,
    compute_subtotal,
    deposit_totals,
    recompute,
    resolve_shrinkage,
    suggest_price_per_gram,
    validate_custom_item,
    validate_standard_item,
)


@pytest.fixture
def category():
    return GoldCategory(id=7, name="Emas 24K", code="24K", purity=99.9, buy_price=1_000_000)


def test_net_weight_and_subtotal_example():
    net = compute_net(10.5, 2)
    assert net == 10.29
    assert compute_subtotal(net, 1_000_000) == pytest.approx(10_290_000)


def test_net_weight_is_rounded_to_three_decimals():
    assert compute_net(1.23456, 0) == 1.235
    assert compute_net(3.3333, 10) == 3.0


def test_shrinkage_is_clamped_not_rejected():
    assert compute_net(10, -5) == 10.0
    assert compute_net(10, 150) == 0.0


def test_non_positive_or_malformed_gross_weight_is_zero():
    assert compute_net(-3, 2) == 0.0
    assert compute_net(0, 2) == 0.0
    assert compute_net(float("nan"), 2) == 0.0
    assert compute_net(None, 2) == 0.0


def test_net_weight_non_increasing_in_shrinkage():
    nets = [compute_net(12.345, s) for s in range(0, 101, 5)]
    assert all(a >= b for a, b in zip(nets, nets[1:]))
    assert nets[-1] == 0.0


def test_subtotal_keeps_full_precision():
    assert compute_subtotal(1.001, 333.3) == 1.001 * 333.3


def test_subtotal_with_nan_price_is_zero():
    assert compute_subtotal(2.0, float("nan")) == 0.0


def test_blank_shrinkage_uses_condition_default():
    assert resolve_shrinkage("", GoldCondition.SCRATCHED) == 3.0
    assert resolve_shrinkage(None, GoldCondition.DAMAGED) == 5.0
    assert resolve_shrinkage("  ", GoldCondition.NEW) == 1.0
    assert resolve_shrinkage("2.5", GoldCondition.NEW) == 2.5
    assert resolve_shrinkage(0, GoldCondition.DAMAGED) == 0.0


def test_build_standard_item(category):
    item = build_standard_item(category, 10.5, 950_000, GoldCondition.LIKE_NEW, "", "cincin")

    assert item.item_type is ItemType.STANDARD
    assert item.shrinkage_percent == 2.0
    assert item.weight_net == 10.29
    assert item.original_price_per_gram == 1_000_000
    assert item.price_per_gram == 950_000
    assert item.subtotal == pytest.approx(10.29 * 950_000)
    assert item.gold_category_id == 7
    assert item.gold_category_code == "24K"
    assert item.purity == 99.9


def test_build_custom_item_default_notes():
    item = build_custom_item(5, 75, 800_000, 750_000, GoldCondition.NEW)

    assert item.item_type is ItemType.CUSTOM
    assert item.notes == "Emas 75%"
    assert item.shrinkage_percent == 1.0
    assert item.weight_net == 4.95
    assert item.original_price_per_gram == 800_000
    assert item.gold_category_id is None


def test_price_override_does_not_touch_category(category):
    item = build_standard_item(category, 10, suggest_price_per_gram(category))
    changed = recompute(item, price_per_gram=900_000)

    assert changed.price_per_gram == 900_000
    assert changed.original_price_per_gram == 1_000_000
    assert category.buy_price == 1_000_000


def test_suggest_price_without_category():
    assert suggest_price_per_gram(None) == 0.0


def test_recompute_derives_from_gross_weight(category):
    item = build_standard_item(category, 10.5, 1_000_000, shrinkage_input=2)

    edited = item
    for s in (3, 7.5, 1, 99, 2):
        edited = recompute(edited, shrinkage_percent=s)

    assert edited.weight_gross == 10.5
    assert edited.weight_net == compute_net(10.5, 2) == item.weight_net
    assert edited.subtotal == item.subtotal


def test_recompute_is_idempotent(category):
    item = build_standard_item(category, 7.777, 1_000_000, shrinkage_input=3.3)
    once = recompute(item, shrinkage_percent=3.3)
    twice = recompute(once, shrinkage_percent=3.3)
    assert once == twice


def test_recompute_clamps_inputs(category):
    item = build_standard_item(category, 5, 1_000_000)
    assert recompute(item, shrinkage_percent=-10).shrinkage_percent == 0.0
    assert recompute(item, weight_gross=-1).weight_net == 0.0


def test_adjust_weight_steps_and_floors(category):
    item = build_standard_item(category, 1.0, 1_000_000, shrinkage_input=0)

    up = adjust_weight(item, 0.1)
    assert up.weight_gross == 1.1
    assert up.weight_net == 1.1

    small = recompute(item, weight_gross=0.15)
    assert adjust_weight(small, -0.1).weight_gross == 0.1
    assert adjust_weight(small, -5).weight_gross == 0.1


def test_deposit_totals(category):
    items = [
        build_standard_item(category, 10, 1_000_000, shrinkage_input=0),
        build_custom_item(5, 75, 800_000, 700_000, shrinkage_input=10),
    ]
    totals = deposit_totals(items)

    assert totals["total_weight_gross"] == 15
    assert totals["total_weight_net"] == pytest.approx(14.5)
    assert totals["total_amount"] == pytest.approx(10_000_000 + 4.5 * 700_000)


def test_deposit_totals_empty():
    assert deposit_totals([]) == {"total_weight_gross": 0.0, "total_weight_net": 0.0, "total_amount": 0.0}


@pytest.mark.parametrize(
    "weight, price, expected",
    [
        (0, 1000, "Berat harus lebih dari 0"),
        (1, 0, "Harga beli kita harus lebih dari 0"),
        (1, 1000, ""),
    ],
)
def test_validate_standard_item(category, weight, price, expected):
    ok, message = validate_standard_item(category, weight, price)
    assert ok is (expected == "")
    assert message == expected


def test_validate_standard_item_requires_category():
    assert validate_standard_item(None, 1, 1) == (False, "Pilih kategori emas")


@pytest.mark.parametrize(
    "purity, ref_price, expected",
    [
        (0, 1000, "Kadar harus 1-100%"),
        (101, 1000, "Kadar harus 1-100%"),
        (75, 0, "Harga surat harus lebih dari 0"),
        (75, 1000, ""),
    ],
)
def test_validate_custom_item(purity, ref_price, expected):
    ok, message = validate_custom_item(2, purity, ref_price, 900)
    assert ok is (expected == "")
    assert message == expected


def test_validate_custom_item_rejects_nan_weight():
    ok, message = validate_custom_item(math.nan, 75, 1000, 900)
    assert not ok
    assert message == "Berat harus lebih dari 0"
