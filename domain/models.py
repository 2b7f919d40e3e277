# nota/domain/models.py

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


class PrintMode(str, Enum):
    SINGLE = "single"
    PER_ITEM = "per-item"


class PrintOutcome(str, Enum):
    STARTED = "started"
    BLOCKED = "blocked"


class ItemType(str, Enum):
    STANDARD = "standard"
    CUSTOM = "custom"


class GoldCondition(str, Enum):
    """
    Physical condition of deposited gold. Each condition carries the
    default shrinkage (susut) applied when the operator leaves it blank.
    """
    NEW = "new"
    LIKE_NEW = "like_new"
    SCRATCHED = "scratched"
    DENTED = "dented"
    DAMAGED = "damaged"

    @property
    def label(self) -> str:
        return CONDITION_LABELS[self]

    @property
    def default_shrinkage(self) -> float:
        return CONDITION_SHRINKAGE[self]


CONDITION_LABELS = {
    GoldCondition.NEW: "Baru/Segel",
    GoldCondition.LIKE_NEW: "Mulus",
    GoldCondition.SCRATCHED: "Ada Goresan",
    GoldCondition.DENTED: "Penyok",
    GoldCondition.DAMAGED: "Rusak",
}

CONDITION_SHRINKAGE = {
    GoldCondition.NEW: 1.0,
    GoldCondition.LIKE_NEW: 2.0,
    GoldCondition.SCRATCHED: 3.0,
    GoldCondition.DENTED: 4.0,
    GoldCondition.DAMAGED: 5.0,
}

PAYMENT_METHOD_LABELS = {
    "cash": "Tunai",
    "transfer": "Transfer",
    "card": "Kartu",
}


@dataclass
class GoldCategory:
    """
    One row of the gold price list (kategori emas).
    `purity` is a percentage as stored in the price list, e.g. 91.6.
    """
    id: int
    name: str
    code: str
    purity: float
    buy_price: float
    sell_price: float = 0.0
    is_active: bool = True


@dataclass(frozen=True)
class LineItem:
    """
    Printable unit of a transaction. `purity` is a fraction (0-1).
    """
    quantity: int
    name: str
    weight: float  # net grams
    price: float  # line price
    karat: str = ""
    category_code: str = ""
    purity: Optional[float] = None


@dataclass(frozen=True)
class DepositLineItem:
    """
    One editable row of a Setor Emas session, before it becomes a transaction.
    `weight_gross` stays the source of truth for every recomputation.
    """
    id: str
    item_type: ItemType
    weight_gross: float
    shrinkage_percent: float
    weight_net: float
    original_price_per_gram: float  # harga surat / category reference
    price_per_gram: float  # our negotiated buy price
    condition: GoldCondition
    subtotal: float
    notes: str = ""
    gold_category_id: Optional[int] = None
    gold_category_name: Optional[str] = None
    gold_category_code: Optional[str] = None
    purity: Optional[float] = None  # percentage, e.g. 75.0


@dataclass
class Customer:
    name: Optional[str] = None
    address: Optional[str] = None


@dataclass
class PaymentSummary:
    grand_total: float
    subtotal: Optional[float] = None
    discount: Optional[float] = None
    paid_amount: Optional[float] = None
    change_amount: Optional[float] = None
    method: Optional[str] = None


@dataclass
class Transaction:
    """
    A committed transaction as handed over by the surrounding system.
    """
    transaction_code: str
    date: datetime
    customer: Customer
    items: List[LineItem]
    payment: PaymentSummary
    transaction_type: str = "sale"
    location_name: Optional[str] = None


@dataclass
class PrintableDocument:
    """
    Built fresh for every print invocation and discarded afterwards.
    """
    transaction_code: str
    date: datetime
    items: List[LineItem]
    customer_name: Optional[str] = None
    customer_address: Optional[str] = None
    validation_url: Optional[str] = None
    payment: Optional[PaymentSummary] = None


@dataclass
class Page:
    items: List[LineItem]
    page_index: int  # 1-based
    total_pages: int
    is_last_page: bool
    mode: PrintMode = PrintMode.SINGLE
    document: Optional[PrintableDocument] = None

    @property
    def show_page_indicator(self) -> bool:
        return self.mode is PrintMode.SINGLE and self.total_pages > 1

    @property
    def page_label(self) -> str:
        return f"Hal. {self.page_index}/{self.total_pages}"


@dataclass
class ValidationTarget:
    """
    (index, url) pair computed before any raster is rendered; `index` is the
    0-based position of the source item, or None for a whole-document code.
    """
    index: Optional[int]
    code: str
    url: Optional[str]


@dataclass
class RenderedNota:
    """
    Final output of document assembly: page blocks plus one shared stylesheet.
    """
    title: str
    pages: List[str] = field(default_factory=list)
    stylesheet: str = ""

    @property
    def markup(self) -> str:
        return "\n".join(self.pages)
