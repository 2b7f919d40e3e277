# nota/services/transaction_service.py

import logging
import os
import re
from datetime import datetime, tzinfo
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

from domain.models import (
    Customer,
    DepositLineItem,
    LineItem,
    PaymentSummary,
    Transaction,
)
from services.pricing_service import deposit_totals
from utils.formatting import safe_number

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "Asia/Jakarta"

# Postgres trims trailing zeros from fractional seconds and may print "+07"
_FRACTION_RE = re.compile(r"\.(\d+)")
_SHORT_OFFSET_RE = re.compile(r"(:\d{2}(?:\.\d+)?[+-]\d{2})$")


def get_store_timezone() -> tzinfo:
    """Timezone the store's nota dates are printed in (NOTA_TIMEZONE)."""
    load_dotenv()
    name = os.getenv("NOTA_TIMEZONE", DEFAULT_TIMEZONE).strip() or DEFAULT_TIMEZONE
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown NOTA_TIMEZONE %r, using %s", name, DEFAULT_TIMEZONE)
        return ZoneInfo(DEFAULT_TIMEZONE)


def _optional_number(value) -> Optional[float]:
    return None if value is None else safe_number(value)


def normalize_purity(value) -> Optional[float]:
    """
    Purity as a 0-1 fraction. Stored records use percentages (91.6); values
    already in 0-1 pass through unchanged.
    """
    if value is None or value == "":
        return None
    purity = safe_number(value)
    if purity <= 0:
        return None
    return purity / 100 if purity > 1 else purity


def _normalize_iso(text: str) -> str:
    text = text.strip().replace("Z", "+00:00")
    text = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    return _SHORT_OFFSET_RE.sub(r"\1:00", text)


def parse_transaction_date(value) -> datetime:
    """
    Parse a stored timestamp. Aware values are shifted to the store's
    timezone so the printed calendar date is the local one; naive values are
    taken as already local.
    """
    if isinstance(value, datetime):
        parsed = value
    elif not value:
        return datetime.now(get_store_timezone())
    else:
        parsed = datetime.fromisoformat(_normalize_iso(str(value)))

    if parsed.tzinfo is None:
        return parsed
    return parsed.astimezone(get_store_timezone())


def line_item_from_record(item: Dict[str, Any]) -> LineItem:
    """
    Map one stored transaction item to a printable line.
    Name falls back item_name -> product.name -> stock.product.name ->
    gold_category.name -> "Item".
    """
    product = item.get("product") or {}
    stock_product = (item.get("stock") or {}).get("product") or {}
    category = item.get("gold_category") or {}

    name = (
        item.get("item_name")
        or product.get("name")
        or stock_product.get("name")
        or category.get("name")
        or "Item"
    )
    purity = item.get("purity")
    if purity in (None, ""):
        purity = category.get("purity")

    return LineItem(
        quantity=int(safe_number(item.get("quantity"))) or 1,
        name=name,
        weight=safe_number(item.get("weight")),
        price=safe_number(item.get("sub_total") or item.get("unit_price")),
        karat=category.get("name") or "",
        category_code=category.get("code") or "",
        purity=normalize_purity(purity),
    )


def transaction_from_record(record: Dict[str, Any]) -> Transaction:
    """
    Build a Transaction from a stored transaction row (with member, location
    and items embedded).
    """
    member = record.get("member") or {}
    items = [line_item_from_record(i) for i in record.get("items") or []]

    grand_total = record.get("grand_total")
    if grand_total is None:
        grand_total = sum(i.price for i in items)

    return Transaction(
        transaction_code=record["transaction_code"],
        date=parse_transaction_date(record.get("transaction_date") or record.get("created_at")),
        customer=Customer(
            name=member.get("name") or record.get("customer_name"),
            address=member.get("address"),
        ),
        items=items,
        payment=PaymentSummary(
            grand_total=safe_number(grand_total),
            subtotal=_optional_number(record.get("subtotal")),
            discount=_optional_number(record.get("discount")),
            paid_amount=_optional_number(record.get("paid_amount")),
            change_amount=_optional_number(record.get("change_amount")),
            method=record.get("payment_method"),
        ),
        transaction_type=record.get("type") or "sale",
        location_name=(record.get("location") or {}).get("name"),
    )


def deposit_item_name(item: DepositLineItem) -> str:
    if item.gold_category_name:
        return item.gold_category_name
    return f"Emas {safe_number(item.purity):g}%"


def line_item_from_deposit(item: DepositLineItem) -> LineItem:
    return LineItem(
        quantity=1,
        name=deposit_item_name(item),
        weight=item.weight_net,
        price=item.subtotal,
        karat=item.gold_category_name or "",
        category_code=item.gold_category_code or "",
        purity=normalize_purity(item.purity),
    )


def transaction_from_deposit(
        transaction_code: str,
        items: List[DepositLineItem],
        customer: Optional[Customer] = None,
        payment_method: Optional[str] = None,
        date: Optional[datetime] = None,
        location_name: Optional[str] = None,
) -> Transaction:
    """Printable Transaction for a Setor Emas session that was just saved."""
    total = deposit_totals(items)["total_amount"]
    return Transaction(
        transaction_code=transaction_code,
        date=date or datetime.now(),
        customer=customer or Customer(),
        items=[line_item_from_deposit(i) for i in items],
        payment=PaymentSummary(grand_total=total, subtotal=total, method=payment_method),
        transaction_type="purchase",
        location_name=location_name,
    )


def build_purchase_payload(
        location_id: int,
        items: List[DepositLineItem],
        member_id: Optional[int] = None,
        payment_method: str = "cash",
        notes: str = "",
        save_as_raw_material: bool = False,
) -> Dict[str, Any]:
    """Row sent to the purchase-transaction store for a Setor Emas session."""
    return {
        "location_id": location_id,
        "member_id": member_id,
        "payment_method": payment_method,
        "notes": notes,
        "save_as_raw_material": save_as_raw_material,
        "items": [
            {
                "gold_category_id": i.gold_category_id,
                "weight_gross": i.weight_gross,
                "shrinkage_percent": i.shrinkage_percent,
                "weight": i.weight_net,
                "price_per_gram": i.price_per_gram,
                "purity": "" if i.purity is None else f"{i.purity:g}",
                "condition": i.condition.value,
                "notes": i.notes,
            }
            for i in items
        ],
    }
