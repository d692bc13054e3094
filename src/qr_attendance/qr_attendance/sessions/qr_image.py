from __future__ import annotations

import io

import qrcode
from PIL import Image, UnidentifiedImageError

from ..core.exceptions import MalformedToken


def render_png(data: str) -> bytes:
    """Encode ``data`` verbatim as a QR code PNG."""
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=2,
    )
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def decode_image(stream) -> str:
    """Read the first QR code found in an uploaded photo."""
    try:
        img = Image.open(stream).convert("RGB")
    except (UnidentifiedImageError, OSError):
        raise MalformedToken("Uploaded file is not an image")

    # libzbar is loaded on import; only image scans need it
    from pyzbar.pyzbar import decode as pyzbar_decode

    decoded = pyzbar_decode(img)
    if not decoded:
        raise MalformedToken("No QR code found in the image")
    try:
        return decoded[0].data.decode("utf-8").strip()
    except UnicodeDecodeError:
        raise MalformedToken("Invalid QR code format")
