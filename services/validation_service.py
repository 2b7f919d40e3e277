# nota/services/validation_service.py

import logging
import os
from typing import Awaitable, Callable, List, Optional

from dotenv import load_dotenv

from domain.models import PrintMode, ValidationTarget
from utils.qr import make_qr_png

logger = logging.getLogger(__name__)

DEFAULT_QR_SIZE_PX = 120

QrEncoder = Callable[[str, int], Awaitable[bytes]]


def get_validation_base_url() -> Optional[str]:
    load_dotenv()
    base_url = (os.getenv("VALIDATION_BASE_URL") or "").strip()
    return base_url or None


def get_qr_size_px() -> int:
    load_dotenv()
    raw = os.getenv("NOTA_QR_SIZE_PX")
    if not raw:
        return DEFAULT_QR_SIZE_PX
    try:
        size = int(raw)
    except ValueError:
        logger.warning("Invalid NOTA_QR_SIZE_PX=%r, using %d", raw, DEFAULT_QR_SIZE_PX)
        return DEFAULT_QR_SIZE_PX
    return size if size > 0 else DEFAULT_QR_SIZE_PX


def item_code(transaction_code: str, item_index: Optional[int]) -> str:
    # TRX-001 + index 0 -> TRX-001-1
    if item_index is None:
        return transaction_code
    return f"{transaction_code}-{item_index + 1}"


def build_validation_url(
        base_url: Optional[str],
        transaction_code: str,
        item_index: Optional[int] = None,
) -> Optional[str]:
    """
    `{base_url}/validate/{code}`, or `{base_url}/validate/{code}-{i+1}` for
    one item of a per-item print. Returns None when there is no base URL.
    """
    if not base_url:
        return None
    return f"{base_url.rstrip('/')}/validate/{item_code(transaction_code, item_index)}"


def build_validation_targets(
        base_url: Optional[str],
        transaction_code: str,
        item_count: int,
        mode: PrintMode,
) -> List[ValidationTarget]:
    """
    All (index, url) pairs for one print, computed up front. The list order is
    what ties suffix `-{i+1}` to item i.
    """
    if mode is PrintMode.SINGLE:
        return [
            ValidationTarget(
                index=None,
                code=transaction_code,
                url=build_validation_url(base_url, transaction_code),
            )
        ]

    return [
        ValidationTarget(
            index=i,
            code=item_code(transaction_code, i),
            url=build_validation_url(base_url, transaction_code, i),
        )
        for i in range(item_count)
    ]


async def render_qr(url: str, size_px: int = DEFAULT_QR_SIZE_PX) -> bytes:
    return make_qr_png(url, size_px)


async def render_validation_rasters(
        targets: List[ValidationTarget],
        size_px: int = DEFAULT_QR_SIZE_PX,
        encoder: QrEncoder = render_qr,
) -> List[Optional[bytes]]:
    """
    Render one PNG per target, strictly one after another. Targets without a
    URL yield None and their page prints without a QR block.
    """
    rasters: List[Optional[bytes]] = []
    for target in targets:
        if not target.url:
            logger.warning("No validation URL for %s, QR omitted", target.code)
            rasters.append(None)
            continue
        rasters.append(await encoder(target.url, size_px))
    return rasters
