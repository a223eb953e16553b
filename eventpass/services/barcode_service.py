#
# barcode_service.py
# Packs team data into a delimited string and renders it as a Code 128 barcode
#

import io
import logging
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

from barcode import Code128
from PIL import Image, ImageDraw

from eventpass.config import get_settings
from eventpass.core.exceptions import BarcodeGenerationError
from eventpass.schemas.pass_data import PassData

logger = logging.getLogger(__name__)

MM_PER_INCH = 25.4


@dataclass
class BarcodeResult:
    """Outcome of a barcode attempt. ``image_bytes`` is None when it failed."""
    payload: str
    image_bytes: Optional[bytes] = None
    size: Optional[Tuple[int, int]] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.image_bytes is not None


class BarcodeService:
    """Encodes pass data as a scannable Code 128 symbol."""

    DELIMITER = "|"
    DEFAULT_PAYMENT_STATUS = "PAID"

    # Character caps for the payload. With only the required fields filled
    # the symbol fits the 600px pass slot at 1px/module; full captain
    # details make it wider than that. Re-derive the caps if the symbology
    # or the slot changes.
    TEAM_NAME_MAX = 15
    CAPTAIN_NAME_MAX = 12
    CAPTAIN_EMAIL_MAX = 20
    CAPTAIN_PHONE_MAX = 10
    EVENT_NAME_MAX = 10

    def __init__(
        self,
        module_width: Optional[float] = None,
        module_height: Optional[float] = None,
        quiet_zone: Optional[float] = None,
        dpi: Optional[int] = None,
    ):
        settings = get_settings()
        self.module_width = module_width if module_width is not None else settings.BARCODE_MODULE_WIDTH_MM
        self.module_height = module_height if module_height is not None else settings.BARCODE_MODULE_HEIGHT_MM
        self.quiet_zone = quiet_zone if quiet_zone is not None else settings.BARCODE_QUIET_ZONE_MM
        self.dpi = dpi if dpi is not None else settings.BARCODE_DPI

    def build_payload(self, data: PassData) -> str:
        """
        Join the barcode fields in fixed order.

        Format: ID|Team|Captain|Email|Phone|Event|Status
        Truncation is a plain character cutoff, applied before joining.
        """
        parts = [
            data.team_id,
            (data.team_name or "")[: self.TEAM_NAME_MAX],
            (data.captain_name or "")[: self.CAPTAIN_NAME_MAX],
            (data.captain_email or "")[: self.CAPTAIN_EMAIL_MAX],
            (data.captain_phone or "")[: self.CAPTAIN_PHONE_MAX],
            (data.event_name or "")[: self.EVENT_NAME_MAX],
            data.payment_status or self.DEFAULT_PAYMENT_STATUS,
        ]
        return self.DELIMITER.join(parts)

    @property
    def module_pixels(self) -> int:
        """Pixels per module at the configured density."""
        return max(1, int(round(self.module_width * self.dpi / MM_PER_INCH)))

    @property
    def bar_height_pixels(self) -> int:
        return max(1, int(round(self.module_height * self.dpi / MM_PER_INCH)))

    @property
    def quiet_zone_modules(self) -> int:
        return int(round(self.quiet_zone / self.module_width))

    def fit_module_pixels(self, modules: int, max_width: int) -> int:
        """
        Largest whole number of pixels per module, up to the configured
        density, that keeps ``modules`` plus quiet zones within ``max_width``.

        Never goes below 1px; a symbol that still doesn't fit comes back
        wider than ``max_width``.
        """
        total = modules + 2 * self.quiet_zone_modules
        return max(1, min(self.module_pixels, max_width // total))

    def encode(self, payload: str) -> str:
        """Module pattern for ``payload``, one character per module ("1" is a bar)."""
        if not payload:
            raise BarcodeGenerationError("Barcode payload is empty")

        try:
            return Code128(payload).build()[0]
        except Exception as e:
            raise BarcodeGenerationError(
                f"Failed to encode barcode: {e}",
                details={"error": str(e), "payload_length": len(payload)},
            ) from e

    def render(self, payload: str, max_width: Optional[int] = None) -> bytes:
        """
        Render ``payload`` as a black-on-white PNG without human-readable text.

        Every module is a whole number of pixels wide. With ``max_width`` the
        density drops until the symbol fits, so it can be placed without
        horizontal resampling.
        """
        modules = self.encode(payload)

        pixels = self.module_pixels
        if max_width:
            pixels = self.fit_module_pixels(len(modules), max_width)
        quiet = self.quiet_zone_modules * pixels
        height = self.bar_height_pixels

        image = Image.new("L", (len(modules) * pixels + 2 * quiet, height), 255)
        draw = ImageDraw.Draw(image)
        for start, length in _bar_runs(modules):
            left = quiet + start * pixels
            draw.rectangle((left, 0, left + length * pixels - 1, height - 1), fill=0)

        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        return buffer.getvalue()

    def generate(self, data: PassData, max_width: Optional[int] = None) -> BarcodeResult:
        """Build and render the barcode for ``data``. Never raises."""
        payload = ""
        try:
            payload = self.build_payload(data)
            image_bytes = self.render(payload, max_width=max_width)
            with Image.open(io.BytesIO(image_bytes)) as img:
                size = img.size
            return BarcodeResult(payload=payload, image_bytes=image_bytes, size=size)
        except Exception as e:
            logger.exception(f"Barcode generation failed for team {data.team_id}: {e}")
            return BarcodeResult(payload=payload, error=str(e))


def _bar_runs(modules: str) -> Iterator[Tuple[int, int]]:
    """Yield (start, length) for each run of bar modules."""
    start = None
    for i, module in enumerate(modules):
        if module == "1" and start is None:
            start = i
        elif module != "1" and start is not None:
            yield start, i - start
            start = None
    if start is not None:
        yield start, len(modules) - start
