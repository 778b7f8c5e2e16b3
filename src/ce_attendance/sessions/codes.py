from __future__ import annotations

import io
import secrets

import qrcode

from ..core import constants


class CodeGenerator:
    """Short human-readable session codes.

    The alphabet leaves out I, O, 0 and 1 so codes read back unambiguously.
    """

    def __init__(self, *, length: int = constants.CODE_LENGTH, alphabet: str = constants.CODE_ALPHABET):
        self._length = int(length)
        self._alphabet = alphabet

    def new_code(self) -> str:
        return "".join(secrets.choice(self._alphabet) for _ in range(self._length))


class QrRenderer:
    def __init__(self, *, box_size: int = 10, border: int = 2):
        self._box_size = box_size
        self._border = border

    def render_png(self, payload: str) -> bytes:
        qr = qrcode.QRCode(
            version=None,
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=self._box_size,
            border=self._border,
        )
        qr.add_data(payload)
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")
        buf = io.BytesIO()
        img.save(buf, format="PNG")
        return buf.getvalue()
