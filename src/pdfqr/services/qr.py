"""QR code rendering for retrieval links."""

import io

import qrcode
from qrcode.constants import ERROR_CORRECT_M


def render_qr_png(data: str, box_size: int = 10, border: int = 4) -> bytes:
    """Encode ``data`` as a black-on-white QR code PNG."""
    qr = qrcode.QRCode(error_correction=ERROR_CORRECT_M, box_size=box_size, border=border)
    qr.add_data(data)
    qr.make(fit=True)

    image = qr.make_image(fill_color="black", back_color="white")
    buffer = io.BytesIO()
    image.save(buffer)
    return buffer.getvalue()
