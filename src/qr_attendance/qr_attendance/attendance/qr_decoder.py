from __future__ import annotations

from typing import BinaryIO

from PIL import Image, UnidentifiedImageError

from ..core.exceptions import InvalidScan


def decode_user_id(stream: BinaryIO) -> str:
    """Read the member id printed as a QR code in an uploaded image."""
    # pyzbar loads the zbar shared library on import.
    from pyzbar.pyzbar import decode as pyzbar_decode

    try:
        img = Image.open(stream).convert("RGB")
    except (UnidentifiedImageError, OSError) as e:
        raise InvalidScan("Uploaded file is not a readable image") from e

    decoded = pyzbar_decode(img)
    if not decoded:
        raise InvalidScan("No QR code found in image")

    user_id = decoded[0].data.decode("utf-8", errors="replace").strip()
    if not user_id:
        raise InvalidScan("QR code is empty")
    return user_id
