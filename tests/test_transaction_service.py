from datetime import datetime, timedelta, timezone

import pytest

from domain.models import Customer, GoldCategory, GoldCondition
from services.pricing_service import build_custom_item, build_standard_item
from services.transaction_service import (
    build_purchase_payload,
    get_store_timezone,
    line_item_from_record,
    normalize_purity,
    parse_transaction_date,
    transaction_from_deposit,
    transaction_from_record,
)
from utils.formatting import format_date_long


@pytest.fixture
def record():
    return {
        "transaction_code": "TRX-001",
        "transaction_date": "2026-10-19T03:30:00Z",
        "created_at": "2026-10-18T00:00:00Z",
        "type": "sale",
        "member": {"name": "Siti", "address": "Jl. Sudirman 5"},
        "customer_name": "Walk-in",
        "location": {"name": "Toko Pusat"},
        "subtotal": 5_500_000,
        "discount": 500_000,
        "grand_total": 5_000_000,
        "paid_amount": 6_000_000,
        "change_amount": 1_000_000,
        "payment_method": "cash",
        "items": [
            {
                "item_name": "Kalung Rantai",
                "quantity": 1,
                "weight": 3.2,
                "sub_total": 3_000_000,
                "gold_category": {"name": "22K", "code": "22K", "purity": 91.6},
            },
            {
                "product": {"name": "Anting"},
                "weight": 1.5,
                "unit_price": 2_500_000,
                "purity": "75",
            },
        ],
    }


def test_transaction_from_record(record):
    tx = transaction_from_record(record)

    assert tx.transaction_code == "TRX-001"
    assert tx.date == datetime(2026, 10, 19, 3, 30, tzinfo=timezone.utc)
    assert tx.customer == Customer(name="Siti", address="Jl. Sudirman 5")
    assert tx.location_name == "Toko Pusat"
    assert tx.payment.grand_total == 5_000_000
    assert tx.payment.discount == 500_000
    assert tx.payment.method == "cash"

    first, second = tx.items
    assert first.name == "Kalung Rantai"
    assert first.karat == "22K"
    assert first.purity == pytest.approx(0.916)
    assert first.price == 3_000_000
    assert second.name == "Anting"
    assert second.quantity == 1
    assert second.price == 2_500_000
    assert second.purity == 0.75


def test_record_without_member_uses_customer_name(record):
    record["member"] = None
    record["grand_total"] = None
    tx = transaction_from_record(record)

    assert tx.customer.name == "Walk-in"
    assert tx.customer.address is None
    assert tx.payment.grand_total == 5_500_000


@pytest.mark.parametrize(
    "item, expected",
    [
        ({"stock": {"product": {"name": "Gelang"}}}, "Gelang"),
        ({"gold_category": {"name": "Emas 24K"}}, "Emas 24K"),
        ({}, "Item"),
    ],
)
def test_line_item_name_fallbacks(item, expected):
    line = line_item_from_record(item)
    assert line.name == expected
    assert line.weight == 0.0
    assert line.price == 0.0


@pytest.mark.parametrize(
    "value, expected",
    [(91.6, 0.916), ("75", 0.75), (0.999, 0.999)],
)
def test_normalize_purity(value, expected):
    assert normalize_purity(value) == pytest.approx(expected)


@pytest.mark.parametrize("value", [None, "", 0, -5])
def test_normalize_purity_missing(value):
    assert normalize_purity(value) is None


def test_parse_transaction_date_falls_back_to_now():
    assert isinstance(parse_transaction_date(None), datetime)
    stamp = datetime(2026, 1, 1)
    assert parse_transaction_date(stamp) is stamp


def test_transaction_from_deposit():
    category = GoldCategory(id=1, name="Emas 24K", code="24K", purity=99.9, buy_price=1_000_000)
    items = [
        build_standard_item(category, 10.5, 1_000_000, shrinkage_input=2),
        build_custom_item(4, 75, 800_000, 700_000, shrinkage_input=0),
    ]
    tx = transaction_from_deposit(
        "SE-0001",
        items,
        customer=Customer(name="Andi"),
        payment_method="transfer",
        date=datetime(2026, 10, 19),
    )

    assert tx.transaction_type == "purchase"
    assert tx.payment.grand_total == pytest.approx(10_290_000 + 2_800_000)
    assert tx.payment.method == "transfer"

    standard, custom = tx.items
    assert standard.name == "Emas 24K"
    assert standard.weight == 10.29
    assert standard.price == pytest.approx(10_290_000)
    assert standard.purity == pytest.approx(0.999)
    assert custom.name == "Emas 75%"
    assert custom.purity == 0.75
    assert custom.karat == ""


def test_build_purchase_payload():
    item = build_custom_item(4, 75, 800_000, 700_000, GoldCondition.DENTED)
    payload = build_purchase_payload(location_id=3, items=[item], payment_method="card", notes="x")

    assert payload["location_id"] == 3
    assert payload["member_id"] is None
    assert payload["payment_method"] == "card"
    assert payload["save_as_raw_material"] is False
    (row,) = payload["items"]
    assert row == {
        "gold_category_id": None,
        "weight_gross": 4,
        "shrinkage_percent": 4.0,
        "weight": 3.84,
        "price_per_gram": 700_000,
        "purity": "75",
        "condition": "dented",
        "notes": "Emas 75%",
    }


@pytest.fixture
def jakarta(monkeypatch):
    monkeypatch.setenv("NOTA_TIMEZONE", "Asia/Jakarta")


def test_utc_evening_prints_next_local_day(jakarta):
    tx = transaction_from_record(
        {"transaction_code": "TRX-9", "transaction_date": "2026-10-19T20:00:00+00:00", "items": []}
    )

    assert tx.date.utcoffset() == timedelta(hours=7)
    assert (tx.date.day, tx.date.hour) == (20, 3)
    assert format_date_long(tx.date) == "20 Oktober 2026"


@pytest.mark.parametrize(
    "value, microsecond",
    [
        ("2026-10-19T03:30:00.1+00:00", 100_000),
        ("2026-10-19T03:30:00.12+00:00", 120_000),
        ("2026-10-19T03:30:00.1234+00:00", 123_400),
        ("2026-10-19T03:30:00.12345+00:00", 123_450),
        ("2026-10-19T03:30:00.123456Z", 123_456),
        ("2026-10-19 03:30:00.12345+00", 123_450),
    ],
)
def test_parse_postgres_timestamps(jakarta, value, microsecond):
    parsed = parse_transaction_date(value)

    assert parsed.microsecond == microsecond
    assert (parsed.day, parsed.hour, parsed.minute) == (19, 10, 30)


def test_naive_timestamp_is_kept_as_local():
    parsed = parse_transaction_date("2026-10-19T23:15:00")
    assert parsed == datetime(2026, 10, 19, 23, 15)
    assert parsed.tzinfo is None


def test_store_timezone_falls_back_on_unknown_name(monkeypatch):
    monkeypatch.setenv("NOTA_TIMEZONE", "Mars/Olympus")
    assert str(get_store_timezone()) == "Asia/Jakarta"

    monkeypatch.setenv("NOTA_TIMEZONE", "Asia/Makassar")
    assert str(get_store_timezone()) == "Asia/Makassar"
