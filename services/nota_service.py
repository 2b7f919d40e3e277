# nota/services/nota_service.py

import logging
import math
from dataclasses import replace
from typing import List, Optional, Sequence

from domain.models import (
    LineItem,
    Page,
    PaymentSummary,
    PrintableDocument,
    PrintMode,
    PrintOutcome,
    RenderedNota,
    Transaction,
)
from services.nota_renderer import render_page, render_stylesheet
from services.print_service import DocumentSink, dispatch
from services.validation_service import (
    DEFAULT_QR_SIZE_PX,
    QrEncoder,
    build_validation_targets,
    build_validation_url,
    item_code,
    render_qr,
    render_validation_rasters,
)
from utils.nota_layout import PAGE_CAPACITY
from utils.qr import png_to_data_url

logger = logging.getLogger(__name__)


class NotaError(Exception):
    """Base error for nota printing."""


class EmptyTransactionError(NotaError):
    """Raised when a transaction without items is sent to print."""


class PrintModeRequiredError(NotaError):
    """Raised when a multi-item transaction is printed without a chosen mode."""


# ---------- mode gate ----------

def needs_mode_choice(items: Sequence[LineItem]) -> bool:
    """Only a transaction with more than one item offers a choice of mode."""
    return len(items) > 1


def resolve_print_mode(
        items: Sequence[LineItem],
        chosen: Optional[PrintMode] = None,
) -> PrintMode:
    if not items:
        raise EmptyTransactionError("Transaksi tidak memiliki item untuk dicetak")
    if not needs_mode_choice(items):
        return PrintMode.SINGLE
    if chosen is None:
        raise PrintModeRequiredError(
            f"Pilih mode cetak untuk {len(items)} item"
        )
    return PrintMode(chosen)


# ---------- pagination ----------

def paginate(items: Sequence[LineItem], mode: PrintMode) -> List[Page]:
    """
    Split items over nota pages.

    single:   ceil(n / PAGE_CAPACITY) pages in original order; only the final
              page is marked last and carries the payment block.
    per-item: n pages of exactly one item, every one of them a complete nota.
    """
    if not items:
        raise EmptyTransactionError("Transaksi tidak memiliki item untuk dicetak")

    mode = PrintMode(mode)
    n = len(items)

    if mode is PrintMode.PER_ITEM:
        return [
            Page(
                items=[item],
                page_index=i + 1,
                total_pages=n,
                is_last_page=True,
                mode=mode,
            )
            for i, item in enumerate(items)
        ]

    total_pages = math.ceil(n / PAGE_CAPACITY)
    pages = []
    for k in range(1, total_pages + 1):
        start = (k - 1) * PAGE_CAPACITY
        end = min(k * PAGE_CAPACITY, n)
        pages.append(
            Page(
                items=list(items[start:end]),
                page_index=k,
                total_pages=total_pages,
                is_last_page=k == total_pages,
                mode=mode,
            )
        )
    return pages


# ---------- documents ----------

def build_documents(
        transaction: Transaction,
        mode: PrintMode,
        base_url: Optional[str] = None,
) -> List[PrintableDocument]:
    """
    One document for a single print, or one standalone document per item with
    its own suffixed code and a total equal to that item's own price.
    """
    customer = transaction.customer
    code = transaction.transaction_code

    if PrintMode(mode) is PrintMode.SINGLE:
        return [
            PrintableDocument(
                transaction_code=code,
                date=transaction.date,
                items=list(transaction.items),
                customer_name=customer.name,
                customer_address=customer.address,
                validation_url=build_validation_url(base_url, code),
                payment=transaction.payment,
            )
        ]

    documents = []
    for i, item in enumerate(transaction.items):
        documents.append(
            PrintableDocument(
                transaction_code=item_code(code, i),
                date=transaction.date,
                items=[item],
                customer_name=customer.name,
                customer_address=customer.address,
                validation_url=build_validation_url(base_url, code, i),
                payment=PaymentSummary(
                    grand_total=item.price,
                    subtotal=item.price,
                    method=transaction.payment.method,
                ),
            )
        )
    return documents


async def render_nota(
        transaction: Transaction,
        mode: PrintMode,
        base_url: Optional[str] = None,
        encoder: QrEncoder = render_qr,
        qr_size_px: int = DEFAULT_QR_SIZE_PX,
) -> RenderedNota:
    """
    Build the complete print for a transaction: pages, QR rasters and the
    shared stylesheet. Rasters are rendered in item order before any page is
    finalized.
    """
    items = transaction.items
    if not items:
        raise EmptyTransactionError("Transaksi tidak memiliki item untuk dicetak")

    mode = PrintMode(mode)
    code = transaction.transaction_code

    targets = build_validation_targets(base_url, code, len(items), mode)
    rasters = await render_validation_rasters(targets, qr_size_px, encoder)
    qr_urls = [png_to_data_url(png) if png else None for png in rasters]

    documents = build_documents(transaction, mode, base_url)
    pages = paginate(items, mode)

    rendered: List[str] = []
    for page_number, page in enumerate(pages):
        if mode is PrintMode.SINGLE:
            document, qr_url = documents[0], qr_urls[0]
        else:
            document, qr_url = documents[page_number], qr_urls[page_number]
        rendered.append(render_page(replace(page, document=document), qr_url))

    logger.info(
        "Rendered nota %s: mode=%s pages=%d qr=%s",
        code,
        mode.value,
        len(rendered),
        "yes" if any(qr_urls) else "no",
    )

    return RenderedNota(
        title=f"Cetak Nota - {code}",
        pages=rendered,
        stylesheet=render_stylesheet(len(pages)),
    )


async def print_transaction(
        transaction: Transaction,
        sink: DocumentSink,
        mode: Optional[PrintMode] = None,
        base_url: Optional[str] = None,
        encoder: QrEncoder = render_qr,
        qr_size_px: int = DEFAULT_QR_SIZE_PX,
) -> PrintOutcome:
    """
    Resolve the mode, build the nota and hand it to `sink`. A single-item
    transaction always prints in single mode.
    """
    resolved = resolve_print_mode(transaction.items, mode)
    nota = await render_nota(transaction, resolved, base_url, encoder, qr_size_px)
    return dispatch(nota.markup, nota.stylesheet, sink, title=nota.title)
