# nota/services/pricing_service.py

import logging
import uuid
from dataclasses import replace
from typing import Dict, Iterable, Optional, Tuple

from domain.models import DepositLineItem, GoldCategory, GoldCondition, ItemType
from utils.formatting import safe_number

logger = logging.getLogger(__name__)

NET_WEIGHT_DECIMALS = 3
MIN_STEP_WEIGHT = 0.1


def clamp_gross_weight(gross_weight) -> float:
    return max(0.0, safe_number(gross_weight))


def clamp_shrinkage(shrinkage_percent) -> float:
    return min(100.0, max(0.0, safe_number(shrinkage_percent)))


def compute_net(gross_weight, shrinkage_percent) -> float:
    """
    Net (billable) weight after susut, rounded to 3 decimals.
    Out-of-range input is clamped, never rejected.
    """
    gross = clamp_gross_weight(gross_weight)
    shrinkage = clamp_shrinkage(shrinkage_percent)
    return round(gross * (1 - shrinkage / 100), NET_WEIGHT_DECIMALS)


def compute_subtotal(net_weight, price_per_gram) -> float:
    # Not rounded: display formatting takes care of it.
    return safe_number(net_weight) * safe_number(price_per_gram)


def resolve_shrinkage(shrinkage_input, condition: GoldCondition) -> float:
    """Blank input falls back to the condition's default susut."""
    if shrinkage_input is None or (isinstance(shrinkage_input, str) and not shrinkage_input.strip()):
        return condition.default_shrinkage
    return clamp_shrinkage(shrinkage_input)


def suggest_price_per_gram(category: Optional[GoldCategory]) -> float:
    """
    Suggested buy price for a category. The value is copied, so editing it in
    the form never touches the category's own price.
    """
    if category is None:
        return 0.0
    return float(category.buy_price)


def validate_standard_item(
        category: Optional[GoldCategory],
        weight_gross,
        buy_price,
) -> Tuple[bool, str]:
    if category is None:
        return False, "Pilih kategori emas"
    if safe_number(weight_gross) <= 0:
        return False, "Berat harus lebih dari 0"
    if safe_number(buy_price) <= 0:
        return False, "Harga beli kita harus lebih dari 0"
    return True, ""


def validate_custom_item(
        weight_gross,
        purity,
        reference_price,
        buy_price,
) -> Tuple[bool, str]:
    if safe_number(weight_gross) <= 0:
        return False, "Berat harus lebih dari 0"
    purity_val = safe_number(purity)
    if purity_val <= 0 or purity_val > 100:
        return False, "Kadar harus 1-100%"
    if safe_number(reference_price) <= 0:
        return False, "Harga surat harus lebih dari 0"
    if safe_number(buy_price) <= 0:
        return False, "Harga beli kita harus lebih dari 0"
    return True, ""


def build_standard_item(
        category: GoldCategory,
        weight_gross,
        buy_price,
        condition: GoldCondition = GoldCondition.LIKE_NEW,
        shrinkage_input=None,
        notes: str = "",
) -> DepositLineItem:
    """
    Build a deposit row for a price-list category. Callers validate first
    with `validate_standard_item`.
    """
    gross = clamp_gross_weight(weight_gross)
    shrinkage = resolve_shrinkage(shrinkage_input, condition)
    net = compute_net(gross, shrinkage)
    price = safe_number(buy_price)

    return DepositLineItem(
        id=str(uuid.uuid4()),
        item_type=ItemType.STANDARD,
        weight_gross=gross,
        shrinkage_percent=shrinkage,
        weight_net=net,
        original_price_per_gram=suggest_price_per_gram(category),
        price_per_gram=price,
        condition=condition,
        subtotal=compute_subtotal(net, price),
        notes=notes,
        gold_category_id=category.id,
        gold_category_name=category.name,
        gold_category_code=category.code,
        purity=category.purity,
    )


def build_custom_item(
        weight_gross,
        purity,
        reference_price,
        buy_price,
        condition: GoldCondition = GoldCondition.LIKE_NEW,
        shrinkage_input=None,
        notes: str = "",
) -> DepositLineItem:
    """
    Build a deposit row for gold outside the price list; `purity` is a
    percentage typed by the operator.
    """
    gross = clamp_gross_weight(weight_gross)
    shrinkage = resolve_shrinkage(shrinkage_input, condition)
    net = compute_net(gross, shrinkage)
    price = safe_number(buy_price)
    purity_val = safe_number(purity)

    return DepositLineItem(
        id=str(uuid.uuid4()),
        item_type=ItemType.CUSTOM,
        weight_gross=gross,
        shrinkage_percent=shrinkage,
        weight_net=net,
        original_price_per_gram=safe_number(reference_price),
        price_per_gram=price,
        condition=condition,
        subtotal=compute_subtotal(net, price),
        notes=notes or f"Emas {purity_val:g}%",
        purity=purity_val,
    )


def recompute(
        item: DepositLineItem,
        *,
        weight_gross=None,
        shrinkage_percent=None,
        price_per_gram=None,
) -> DepositLineItem:
    """
    Return a copy of `item` with any of the inputs changed. Net weight and
    subtotal are always derived again from gross weight, never from the
    previous net weight.
    """
    gross = item.weight_gross if weight_gross is None else clamp_gross_weight(weight_gross)
    shrinkage = item.shrinkage_percent if shrinkage_percent is None else clamp_shrinkage(shrinkage_percent)
    price = item.price_per_gram if price_per_gram is None else safe_number(price_per_gram)
    net = compute_net(gross, shrinkage)

    return replace(
        item,
        weight_gross=gross,
        shrinkage_percent=shrinkage,
        price_per_gram=price,
        weight_net=net,
        subtotal=compute_subtotal(net, price),
    )


def adjust_weight(item: DepositLineItem, delta: float) -> DepositLineItem:
    """
    Step gross weight by `delta` grams (2 decimals), never below 0.1 g.
    """
    stepped = round(item.weight_gross + safe_number(delta), 2)
    return recompute(item, weight_gross=max(MIN_STEP_WEIGHT, stepped))


def deposit_totals(items: Iterable[DepositLineItem]) -> Dict[str, float]:
    totals = {"total_weight_gross": 0.0, "total_weight_net": 0.0, "total_amount": 0.0}
    for item in items:
        totals["total_weight_gross"] += item.weight_gross
        totals["total_weight_net"] += item.weight_net
        totals["total_amount"] += item.subtotal
    return totals
