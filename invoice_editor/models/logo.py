"""Logo data model: an image held as a data URI next to the invoice."""

from __future__ import annotations

import base64
import binascii
import io
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from PIL import Image, UnidentifiedImageError

_DATA_URI = re.compile(
    r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?"
    r"(?P<params>(?:;[\w.+-]+=[\w.+-]+)*)"
    r"(?P<b64>;base64)?,(?P<payload>.*)$",
    re.DOTALL,
)


class LogoError(Exception):
    """Raised when a logo payload is not a usable image."""
    pass


def _sniff_image_mime(data: bytes) -> str:
    """Detect the image MIME type with Pillow.

    Raises:
        LogoError: If the bytes are not an image Pillow can identify
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            image_format = img.format
    except (UnidentifiedImageError, OSError) as e:
        raise LogoError(f"Not a recognised image: {e}") from e

    mime = Image.MIME.get(image_format or "")
    if not mime:
        raise LogoError(f"Unsupported image format: {image_format}")
    return mime


@dataclass(frozen=True)
class Logo:
    """An encoded image payload usable as a display source or embedded in a PDF.

    Attributes:
        data_uri: "data:<mime>;base64,<payload>"
    """

    data_uri: str

    def __post_init__(self):
        """Validate that the payload is a base64 image data URI."""
        match = _DATA_URI.match(self.data_uri or "")
        if not match or not match.group("b64"):
            raise LogoError("Logo must be a base64 data URI (data:image/...;base64,...)")
        mime = match.group("mime") or ""
        if not mime.startswith("image/"):
            raise LogoError(f"Logo must be an image, got MIME type {mime or 'none'!r}")

    @property
    def mime_type(self) -> str:
        return _DATA_URI.match(self.data_uri).group("mime")

    def decode(self) -> bytes:
        """Decode the payload to raw image bytes.

        Raises:
            LogoError: If the base64 payload is corrupt
        """
        payload = _DATA_URI.match(self.data_uri).group("payload")
        try:
            return base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise LogoError(f"Corrupt logo payload: {e}") from e

    def to_image(self) -> Image.Image:
        """Open the payload as a Pillow image (fully loaded).

        Raises:
            LogoError: If the payload cannot be decoded as an image
        """
        data = self.decode()
        try:
            img = Image.open(io.BytesIO(data))
            img.load()
        except (UnidentifiedImageError, OSError) as e:
            raise LogoError(f"Logo could not be decoded as an image: {e}") from e
        return img

    @classmethod
    def from_bytes(cls, data: bytes, mime_type: Optional[str] = None) -> Logo:
        """Encode raw bytes as a data URI.

        Args:
            data: Raw file content
            mime_type: MIME type reported by the upload; sniffed with Pillow if None

        Raises:
            LogoError: If data is empty or not an image
        """
        if not data:
            raise LogoError("Logo file is empty")
        if mime_type is None:
            mime_type = _sniff_image_mime(data)
        encoded = base64.b64encode(data).decode("ascii")
        return cls(f"data:{mime_type};base64,{encoded}")

    @classmethod
    def from_data_uri(cls, data_uri: str) -> Logo:
        return cls(data_uri.strip())

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> Logo:
        """Read an image file into a Logo (MIME type sniffed from content).

        Raises:
            FileNotFoundError: If path does not exist
            LogoError: If the file is not an image
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Logo file not found: {path}")
        return cls.from_bytes(path.read_bytes())
