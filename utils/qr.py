# nota/utils/qr.py

import base64
import io

import qrcode
from PIL import Image


def make_qr_png(data: str, size_px: int) -> bytes:
    """
    Encode `data` as a square black-on-white QR PNG of exactly
    `size_px` x `size_px`, with no quiet zone.
    """
    qr = qrcode.QRCode(border=0)
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white").get_image()
    img = img.convert("RGB").resize((size_px, size_px), Image.Resampling.NEAREST)

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def png_to_data_url(png: bytes) -> str:
    return "data:image/png;base64," + base64.b64encode(png).decode("ascii")
