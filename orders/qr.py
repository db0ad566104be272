import base64
import io
from urllib.parse import quote

import qrcode
from django.conf import settings

QR_SIZE = 300
QR_BORDER = 2


def menu_base_url(request=None):
    base = getattr(settings, 'PUBLIC_MENU_BASE_URL', '') or ''
    if not base and request is not None:
        base = request.build_absolute_uri('/menu')
    return base.rstrip('/')


def table_menu_url(table, request=None):
    """Customer menu link carrying the table's scan code."""
    return f"{menu_base_url(request)}/?table={quote(table.qr_code, safe='')}"


def qr_data_url(data, size=QR_SIZE):
    """Render ``data`` as a PNG QR code and return it as a base64 data URL."""
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_H,
        box_size=10,
        border=QR_BORDER,
    )
    qr.add_data(data)
    qr.make(fit=True)
    # Scale modules so the rendered image lands close to the requested size
    qr.box_size = max(1, size // (qr.modules_count + 2 * QR_BORDER))

    img = qr.make_image(fill_color="black", back_color="white")
    buffer = io.BytesIO()
    img.save(buffer, format='PNG')
    encoded = base64.b64encode(buffer.getvalue()).decode('utf-8')
    return f"data:image/png;base64,{encoded}"
