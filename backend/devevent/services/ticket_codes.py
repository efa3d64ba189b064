"""
Ticket code generation.

Codes look like DE-3F9A1C02: a fixed prefix and the first segment of a
random UUID4, uppercased. Eight hex characters are easy to read out at a
check-in desk. Uniqueness is guaranteed by the unique constraint on
bookings.ticket_code, not here; the booking engine retries on a collision.
"""

import base64
import io
import uuid
from typing import Optional

import qrcode

from devevent.core.config import get_settings


def generate_ticket_code(prefix: Optional[str] = None) -> str:
    prefix = prefix or get_settings().TICKET_CODE_PREFIX
    suffix = str(uuid.uuid4()).split("-")[0].upper()
    return f"{prefix}-{suffix}"


def ticket_qr_data_url(ticket_code: str) -> str:
    """Render a ticket code as a PNG QR code embedded in a data URL."""
    image = qrcode.make(ticket_code)
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
    return f"data:image/png;base64,{encoded}"
