"""
QR encoder.

Thin wrapper over the `qrcode` library. The batch code only needs
`QREngine.write_file`, which either leaves an image file at the destination
or raises EncodeError.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Union
import logging
import os

import qrcode
from PIL import Image

from .config import ERROR_LEVELS, Settings
from .errors import EncodeError

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]

JPEG_EXTENSIONS = {".jpg", ".jpeg"}


# =============================================================================
# CONFIGURATION
# =============================================================================
@dataclass(frozen=True)
class QRStyle:
    box_size: int = 10
    border: int = 4
    fill_color: str = "#000000"
    back_color: str = "#ffffff"

    @classmethod
    def from_settings(cls, settings: Settings) -> "QRStyle":
        return cls(
            box_size=settings.box_size,
            border=settings.border,
            fill_color=settings.fill_color,
            back_color=settings.back_color,
        )


# =============================================================================
# QR GENERATOR ENGINE
# =============================================================================
class QREngine:
    """Stateless QR generation: payload in, square image out."""

    def __init__(self, style: QRStyle = QRStyle()):
        self.style = style

    def generate(self, payload: str, error_correction: str, pixel_size: int) -> Image.Image:
        if not payload:
            raise EncodeError("Content cannot be empty")
        ecc = ERROR_LEVELS.get(error_correction.upper())
        if ecc is None:
            raise EncodeError(f"Unknown error correction level {error_correction!r}")

        qr = qrcode.QRCode(
            version=None,
            error_correction=ecc,
            box_size=self.style.box_size,
            border=self.style.border,
        )
        try:
            qr.add_data(payload)
            qr.make(fit=True)
        except Exception as e:
            # payload too long for any QR version
            raise EncodeError(f"Cannot encode payload: {e}") from e

        img = qr.make_image(
            fill_color=self.style.fill_color,
            back_color=self.style.back_color,
        ).convert("RGB")

        # Below one pixel per module the code is unreadable; keep the native size
        min_size = qr.modules_count + 2 * self.style.border
        if pixel_size < min_size:
            logger.warning(f"pixel size {pixel_size} is below the {min_size} modules of this code, "
                           f"writing {img.size[0]}px instead")
        # Modules stay crisp under nearest-neighbour scaling
        elif img.size != (pixel_size, pixel_size):
            img = img.resize((pixel_size, pixel_size), Image.Resampling.NEAREST)
        return img

    def write_file(self, payload: str, error_correction: str, pixel_size: int,
                   destination: PathLike) -> None:
        """Encode `payload` and save it at `destination` (JPEG for .jpg/.jpeg, PNG otherwise)."""
        img = self.generate(payload, error_correction, pixel_size)
        path = Path(destination)
        try:
            if path.suffix.lower() in JPEG_EXTENSIONS:
                img.save(str(path), "JPEG", quality=95)
            else:
                img.save(str(path), "PNG")
        except OSError as e:
            raise EncodeError(f"Cannot save {path}: {e}") from e

    # Encoder callables are invoked as encoder(payload, level, size, path)
    __call__ = write_file
