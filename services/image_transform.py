"""Image rotation service.

Small wrapper around Pillow used to correct the orientation of frames from
cameras mounted sideways or upside down. Output is always JPEG.

Example:
    rotator = ImageRotator(quality=90)
    upright = rotator.rotate(jpeg_bytes, 180)
"""
from __future__ import annotations

import asyncio
import io

from PIL import Image

from utils.errors import UpstreamError


class ImageRotator:
    """Rotate JPEG frames by an arbitrary angle.

    Args:
        quality: JPEG quality used when re-encoding the rotated frame.
    """

    def __init__(self, quality: int = 90):
        self.quality = quality

    def rotate(self, image_bytes: bytes, degrees: int) -> bytes:
        """Rotate the image counter-clockwise by ``degrees``.

        Returns:
            JPEG bytes of the rotated image. Zero rotation returns the input
            unchanged.

        Raises:
            UpstreamError: If the bytes cannot be decoded or re-encoded.
        """
        if degrees % 360 == 0:
            return image_bytes

        try:
            src = Image.open(io.BytesIO(image_bytes))
            src.load()
        except Exception as exc:
            raise UpstreamError("Decoded bytes are not a supported image format") from exc

        if src.mode != "RGB":
            src = src.convert("RGB")

        try:
            rotated = src.rotate(degrees, expand=True)
            out_io = io.BytesIO()
            rotated.save(out_io, format="JPEG", quality=self.quality)
        except Exception as exc:
            raise UpstreamError("Failed to re-encode rotated image") from exc
        return out_io.getvalue()

    async def rotate_async(self, image_bytes: bytes, degrees: int) -> bytes:
        # Pillow work is blocking -> run in thread
        return await asyncio.to_thread(self.rotate, image_bytes, degrees)
