"""
Shared fixtures for nota tests.

Provides sample transactions, a fake QR encoder that records call order,
and a recording DocumentSink.
"""

from datetime import datetime

import pytest

from domain.models import Customer, LineItem, PaymentSummary, PrintOutcome, Transaction

BASE_URL = "https://toko.example.com"


class RecordingSink:
    """DocumentSink test double that keeps every presented document."""

    def __init__(self, outcome=PrintOutcome.STARTED):
        self.outcome = outcome
        self.calls = []

    def present(self, markup, stylesheet, title="Cetak Nota"):
        self.calls.append({"markup": markup, "stylesheet": stylesheet, "title": title})
        return self.outcome


class FakeEncoder:
    """Async QR encoder stand-in; returns the URL bytes and logs call order."""

    def __init__(self):
        self.calls = []

    async def __call__(self, url, size_px):
        self.calls.append((url, size_px))
        return url.encode("utf-8")


def make_items(n):
    return [
        LineItem(
            quantity=1,
            name=f"Cincin {i + 1}",
            weight=2.5 + i,
            price=1_000_000 * (i + 1),
            karat="24K",
            category_code="24K",
            purity=0.999,
        )
        for i in range(n)
    ]


def make_transaction(n, code="TRX-001"):
    items = make_items(n)
    total = sum(i.price for i in items)
    return Transaction(
        transaction_code=code,
        date=datetime(2026, 10, 19, 10, 30),
        customer=Customer(name="Budi Santoso", address="Jl. Merdeka No. 1"),
        items=items,
        payment=PaymentSummary(grand_total=total, subtotal=total, discount=0, method="cash"),
    )


@pytest.fixture
def transaction_factory():
    return make_transaction


@pytest.fixture
def four_item_transaction():
    return make_transaction(4)


@pytest.fixture
def one_item_transaction():
    return make_transaction(1)


@pytest.fixture
def recording_sink():
    return RecordingSink()


@pytest.fixture
def fake_encoder():
    return FakeEncoder()
