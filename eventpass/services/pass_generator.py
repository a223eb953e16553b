#
# pass_generator.py
# Composites team details and a barcode onto the event pass template
#

import base64
import io
import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple, Union

from PIL import Image, ImageColor, ImageDraw

from eventpass.config import get_settings
from eventpass.core.exceptions import (
    TemplateLoadError,
    TemplateMismatchError,
    TemplateNotFoundError,
)
from eventpass.core.fonts import FontRegistry, ResolvedFont, get_font_registry
from eventpass.schemas.pass_data import PassData
from eventpass.services.barcode_service import BarcodeResult, BarcodeService
from eventpass.services.layout_registry import BarcodeSlot, PassLayout, TextField, get_layout

logger = logging.getLogger(__name__)

PassInput = Union[PassData, Mapping[str, Any]]


@dataclass
class PassRenderResult:
    """Rendered pass plus whether the barcode made it onto the image."""
    image_bytes: bytes
    width: int
    height: int
    layout_version: str
    barcode_drawn: bool
    barcode_error: Optional[str] = None

    def as_base64(self) -> str:
        return base64.b64encode(self.image_bytes).decode("ascii")


class PassGenerator:
    """Builds event pass images from a template, a layout and team data."""

    IMAGE_FORMAT = "JPEG"

    def __init__(
        self,
        layout: Optional[PassLayout] = None,
        template_path: Optional[Union[str, Path]] = None,
        barcode_service: Optional[BarcodeService] = None,
        font_registry: Optional[FontRegistry] = None,
        jpeg_quality: Optional[int] = None,
        validate_template_size: Optional[bool] = None,
    ):
        settings = get_settings()
        self.layout = layout or get_layout(settings.PASS_LAYOUT_VERSION)
        self.template_path = Path(template_path) if template_path else settings.template_path(self.layout.template_file)
        self.barcode_service = barcode_service or BarcodeService()
        self.font_registry = font_registry or get_font_registry()
        self.jpeg_quality = jpeg_quality or settings.PASS_JPEG_QUALITY
        self.validate_template_size = (
            settings.PASS_VALIDATE_TEMPLATE_SIZE if validate_template_size is None else validate_template_size
        )

    def _load_template(self) -> Image.Image:
        """Read the template from disk. Any problem here is a deployment error."""
        if not self.template_path.is_file():
            raise TemplateNotFoundError(
                f"Template not found at {self.template_path}",
                details={"path": str(self.template_path)},
            )

        try:
            with Image.open(self.template_path) as img:
                template = img.convert("RGBA")
        except (OSError, ValueError) as e:
            raise TemplateLoadError(
                f"Failed to load template: {e}",
                details={"path": str(self.template_path), "error": str(e)},
            ) from e

        if template.size != self.layout.canvas_size:
            if self.validate_template_size:
                raise TemplateMismatchError(
                    f"Template is {template.width}x{template.height}, layout {self.layout.version} "
                    f"expects {self.layout.canvas_width}x{self.layout.canvas_height}",
                    details={
                        "path": str(self.template_path),
                        "template_size": list(template.size),
                        "canvas_size": list(self.layout.canvas_size),
                        "layout_version": self.layout.version,
                    },
                )
            logger.warning(
                f"Template size {template.size} does not match layout {self.layout.version}, stretching"
            )
            template = template.resize(self.layout.canvas_size, Image.Resampling.LANCZOS)

        return template

    def _draw_text(self, canvas: Image.Image, text: str, text_field: TextField) -> Image.Image:
        resolved = self.font_registry.get_font(text_field.font_size, text_field.font_weight)

        if not text_field.rotation:
            draw = ImageDraw.Draw(canvas)
            draw.text(
                (text_field.x, text_field.y),
                text,
                font=resolved.font,
                fill=text_field.color,
                anchor="lm",
                stroke_width=resolved.stroke_width,
                stroke_fill=text_field.color,
            )
            return canvas

        return _composite(canvas, *_rotated_text_layer(text, text_field, resolved))

    def _draw_barcode(self, canvas: Image.Image, barcode_bytes: bytes) -> None:
        slot: BarcodeSlot = self.layout.barcode_slot
        with Image.open(io.BytesIO(barcode_bytes)) as img:
            barcode = img.convert("RGBA")

        # Bar widths are whole pixels already; only the bar height is stretched
        width = barcode.width
        if width > slot.width:
            logger.warning(
                f"Barcode is {width}px wide, squeezing into {slot.width}px slot; it may not scan"
            )
            width = slot.width
        barcode = barcode.resize((width, slot.height), Image.Resampling.NEAREST)

        if slot.rotation:
            barcode = barcode.rotate(-slot.rotation, resample=Image.Resampling.NEAREST, expand=True)

        left = int(round(slot.x - barcode.width / 2))
        top = int(round(slot.y - barcode.height / 2))
        canvas.paste(barcode, (left, top), barcode)

    def compose(self, data: PassInput) -> Tuple[Image.Image, BarcodeResult]:
        """Build the pass as an RGB image, without serializing it."""
        pass_data = _as_pass_data(data)
        template = self._load_template()

        # Fresh canvas per call, nothing shared between passes
        canvas = Image.new("RGBA", self.layout.canvas_size, (0, 0, 0, 255))
        canvas.alpha_composite(template)

        for text_field in self.layout.text_fields:
            value = getattr(pass_data, text_field.source) or ""
            canvas = self._draw_text(canvas, value, text_field)

        barcode = self.barcode_service.generate(pass_data, max_width=self.layout.barcode_slot.width)
        if barcode.success:
            self._draw_barcode(canvas, barcode.image_bytes)
        else:
            logger.warning(f"Pass for team {pass_data.team_id} generated without barcode: {barcode.error}")

        return canvas.convert("RGB"), barcode

    def render(self, data: PassInput) -> PassRenderResult:
        image, barcode = self.compose(data)

        buffer = io.BytesIO()
        image.save(buffer, format=self.IMAGE_FORMAT, quality=self.jpeg_quality)

        return PassRenderResult(
            image_bytes=buffer.getvalue(),
            width=image.width,
            height=image.height,
            layout_version=self.layout.version,
            barcode_drawn=barcode.success,
            barcode_error=barcode.error,
        )

    def generate(self, data: PassInput) -> bytes:
        """Return the pass as JPEG bytes."""
        return self.render(data).image_bytes

    def generate_as_text(self, data: PassInput) -> str:
        """Return the pass JPEG base64-encoded, for text-only attachment APIs."""
        return self.render(data).as_base64()


def _as_pass_data(data: PassInput) -> PassData:
    if isinstance(data, PassData):
        return data
    return PassData.model_validate(data)


def _rotated_text_layer(
    text: str, text_field: TextField, resolved: ResolvedFont
) -> Tuple[Image.Image, Tuple[int, int]]:
    """Render text rotated about its own anchor point.

    The text is drawn on a tight layer, the layer is rotated about its
    centre, and the anchor is followed through the rotation so the returned
    offset puts it back on (x, y).
    """
    pad = 2
    left, top, right, bottom = resolved.font.getbbox(
        text, anchor="lm", stroke_width=resolved.stroke_width
    )
    width = int(math.ceil(right - left)) + pad * 2
    height = int(math.ceil(bottom - top)) + pad * 2
    anchor_x = pad - left
    anchor_y = pad - top

    # Transparent pixels carry the text colour so rotation doesn't darken edges
    rgb = ImageColor.getrgb(text_field.color)[:3]
    layer = Image.new("RGBA", (width, height), rgb + (0,))
    ImageDraw.Draw(layer).text(
        (anchor_x, anchor_y),
        text,
        font=resolved.font,
        fill=text_field.color,
        anchor="lm",
        stroke_width=resolved.stroke_width,
        stroke_fill=text_field.color,
    )

    # PIL rotates counter-clockwise, canvas rotation is clockwise
    angle = -text_field.rotation
    rotated = layer.rotate(angle, resample=Image.Resampling.BICUBIC, expand=True)

    radians = math.radians(angle)
    dx = anchor_x - width / 2
    dy = anchor_y - height / 2
    new_x = rotated.width / 2 + dx * math.cos(radians) + dy * math.sin(radians)
    new_y = rotated.height / 2 - dx * math.sin(radians) + dy * math.cos(radians)

    return rotated, (int(round(text_field.x - new_x)), int(round(text_field.y - new_y)))


def _composite(canvas: Image.Image, layer: Image.Image, position: Tuple[int, int]) -> Image.Image:
    """Alpha-blend ``layer`` onto ``canvas`` at ``position`` (may be negative)."""
    overlay = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
    overlay.paste(layer, position)
    return Image.alpha_composite(canvas, overlay)


def generate_pass(data: PassInput) -> bytes:
    """Generate an event pass JPEG with the configured template and layout."""
    return PassGenerator().generate(data)


def generate_pass_as_text(data: PassInput) -> str:
    """Generate an event pass and return it base64-encoded, e.g. for email attachments."""
    return PassGenerator().generate_as_text(data)
