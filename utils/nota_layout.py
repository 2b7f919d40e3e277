# nota/utils/nota_layout.py
#
# Positions of every printed field on the pre-printed nota paper, measured
# from the physical form. All values are centimetres relative to the page box.

from dataclasses import dataclass
from typing import Optional, Tuple

PAGE_WIDTH_CM = 16.5
PAGE_HEIGHT_CM = 10.5
PAGE_MARGIN_CM = 0
PAGE_CAPACITY = 3  # item rows printable on one form

ITEM_TABLE_INSET_CM = 1.0


@dataclass(frozen=True)
class NotaField:
    name: str
    top: Optional[float] = None
    right: Optional[float] = None
    bottom: Optional[float] = None
    left: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None
    max_width: Optional[float] = None
    align: Optional[str] = None


@dataclass(frozen=True)
class NotaColumn:
    name: str
    width: float
    align: str


DATE_FIELD = NotaField("tanggal", top=1.0, right=2.5, align="left")
CUSTOMER_NAME_FIELD = NotaField("nama-pembeli", top=1.5, right=2.5, align="left")
CUSTOMER_ADDRESS_FIELD = NotaField("alamat-pembeli", top=2.0, right=2.5, max_width=8.0, align="left")
ITEM_TABLE_FIELD = NotaField(
    "items-table",
    top=5.2,
    left=ITEM_TABLE_INSET_CM,
    right=ITEM_TABLE_INSET_CM,
    width=PAGE_WIDTH_CM - 2 * ITEM_TABLE_INSET_CM,
)
PAYMENT_FIELD = NotaField("payment-block", bottom=2.8, right=1.0, width=5.5, align="right")
PAGE_INDICATOR_FIELD = NotaField("page-indicator", bottom=0.5, left=1.0, align="left")
QR_FIELD = NotaField("qr-code", bottom=1.0, right=5.0, width=1.5, height=1.5)

NOTA_FIELDS: Tuple[NotaField, ...] = (
    DATE_FIELD,
    CUSTOMER_NAME_FIELD,
    CUSTOMER_ADDRESS_FIELD,
    ITEM_TABLE_FIELD,
    PAYMENT_FIELD,
    PAGE_INDICATOR_FIELD,
    QR_FIELD,
)

ITEM_COLUMNS: Tuple[NotaColumn, ...] = (
    NotaColumn("col-qty", 1.0, "center"),
    NotaColumn("col-name", 6.0, "left"),
    NotaColumn("col-karat", 1.5, "center"),
    NotaColumn("col-weight", 2.0, "right"),
    NotaColumn("col-price", 2.5, "right"),
)
