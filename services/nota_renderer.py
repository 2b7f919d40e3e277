# nota/services/nota_renderer.py

import html
from typing import List, Optional

from domain.models import LineItem, Page
from utils.formatting import (
    format_date_long,
    format_percent,
    format_rupiah,
    format_weight,
    safe_number,
)
from utils.nota_layout import (
    ITEM_COLUMNS,
    NOTA_FIELDS,
    PAGE_HEIGHT_CM,
    PAGE_MARGIN_CM,
    PAGE_WIDTH_CM,
    NotaField,
)


def _cm(value: float) -> str:
    return f"{value:g}cm"


def _text(value) -> str:
    return html.escape(str(value)) if value else ""


# ---------- stylesheet ----------

def field_rule(field: NotaField) -> str:
    """
    One absolute-positioned CSS rule for a layout record.
    """
    decls = ["position: absolute;"]
    for prop in ("top", "right", "bottom", "left", "width", "height"):
        value = getattr(field, prop)
        if value is not None:
            decls.append(f"{prop}: {_cm(value)};")
    if field.max_width is not None:
        decls.append(f"max-width: {_cm(field.max_width)};")
        decls.append("overflow: hidden;")
        decls.append("white-space: nowrap;")
        decls.append("text-overflow: ellipsis;")
    if field.align:
        decls.append(f"text-align: {field.align};")

    body = "\n  ".join(decls)
    return f".{field.name} {{\n  {body}\n}}"


def render_stylesheet(total_pages: int) -> str:
    """
    Stylesheet shared by every page of one print. The @page size makes the
    print dialog default to the physical form size.
    """
    rules = [
        f"@page {{\n  size: {_cm(PAGE_WIDTH_CM)} {_cm(PAGE_HEIGHT_CM)};\n  margin: {PAGE_MARGIN_CM};\n}}",
        "* {\n  margin: 0;\n  padding: 0;\n  box-sizing: border-box;\n}",
        "body {\n  font-family: Arial, sans-serif;\n  font-size: 10pt;\n}",
        (
            ".nota-page {\n"
            "  position: relative;\n"
            f"  width: {_cm(PAGE_WIDTH_CM)};\n"
            f"  height: {_cm(PAGE_HEIGHT_CM)};\n"
            "  overflow: hidden;\n"
            "  page-break-after: always;\n"
            "  break-after: page;\n"
            "}"
        ),
        (
            f".nota-page:nth-of-type({max(total_pages, 1)}) {{\n"
            "  page-break-after: auto;\n"
            "  break-after: auto;\n"
            "}"
        ),
    ]
    rules.extend(field_rule(field) for field in NOTA_FIELDS)
    rules.append(
        ".items-table table {\n  width: 100%;\n  border-collapse: collapse;\n  table-layout: fixed;\n}"
    )
    rules.append(
        ".items-table td {\n  padding: 2px 4px;\n  vertical-align: top;\n"
        "  font-size: 9pt;\n  overflow: hidden;\n  white-space: nowrap;\n}"
    )
    for column in ITEM_COLUMNS:
        rules.append(f".{column.name} {{ width: {_cm(column.width)}; text-align: {column.align}; }}")
    rules.append(
        ".qr-code img {\n  display: block;\n  width: 100%;\n  height: 100%;\n  image-rendering: pixelated;\n}"
    )
    rules.append(
        "@media print {\n  body {\n    -webkit-print-color-adjust: exact;\n"
        "    print-color-adjust: exact;\n  }\n}"
    )
    return "\n\n".join(rules)


# ---------- page markup ----------

def item_display_name(item: LineItem) -> str:
    # "Cincin 24K 3.50gr"
    return f"{item.name} {format_weight(item.weight)}gr"


def render_item_row(item: LineItem) -> str:
    cells = [
        ("col-qty", str(int(safe_number(item.quantity)))),
        ("col-name", _text(item_display_name(item))),
        ("col-karat", format_percent(item.purity)),
        ("col-weight", format_weight(item.weight)),
        ("col-price", format_rupiah(item.price)),
    ]
    tds = "".join(f'<td class="{css}">{value}</td>' for css, value in cells)
    return f"<tr>{tds}</tr>"


def render_page(page: Page, qr_data_url: Optional[str] = None) -> str:
    """
    Markup for one physical nota. The payment block only appears on the last
    page, the page indicator only on multi-page single prints, and the QR
    block only when a raster is available.
    """
    doc = page.document
    rows = "\n        ".join(render_item_row(item) for item in page.items)

    parts: List[str] = [
        '<div class="nota-page">',
        f'  <div class="header-info tanggal">{_text(format_date_long(doc.date))}</div>',
        f'  <div class="header-info nama-pembeli">{_text(doc.customer_name)}</div>',
        f'  <div class="header-info alamat-pembeli">{_text(doc.customer_address)}</div>',
        '  <div class="items-table">',
        "    <table>",
        "      <tbody>",
        f"        {rows}",
        "      </tbody>",
        "    </table>",
        "  </div>",
    ]

    if page.is_last_page and doc.payment is not None:
        parts.append(
            f'  <div class="payment-block"><span class="grand-total">'
            f"{format_rupiah(doc.payment.grand_total)}</span></div>"
        )

    if page.show_page_indicator:
        parts.append(f'  <div class="page-indicator">{page.page_label}</div>')

    if qr_data_url:
        parts.append(f'  <div class="qr-code"><img src="{qr_data_url}" alt="QR Validasi" /></div>')

    parts.append("</div>")
    return "\n".join(parts)
