"""Tests for barcode payload packing and Code 128 rendering."""
import io
from unittest.mock import patch

import pytest
from barcode import Code128
from PIL import Image

from eventpass.core.exceptions import BarcodeGenerationError
from eventpass.schemas.pass_data import PassData
from eventpass.services.barcode_service import BarcodeService


@pytest.fixture
def service() -> BarcodeService:
    return BarcodeService()


def test_payload_for_reference_team(service: BarcodeService, pass_data: PassData):
    """Optional fields omitted: empty segments and a PAID status."""
    assert service.build_payload(pass_data) == "GT-2026-4496|RoboWarriors||||Robo Race|PAID"


def test_payload_has_seven_fields_in_order(service: BarcodeService, full_pass_data: PassData):
    fields = service.build_payload(full_pass_data).split("|")

    assert fields == [
        "GT-2026-0001",
        "The Extraordina",
        "Alexandria M",
        "alexandria.montgomer",
        "+91-987654",
        "Autonomous",
        "PENDING",
    ]


@pytest.mark.parametrize(
    "attribute,limit,index",
    [
        ("team_name", 15, 1),
        ("captain_name", 12, 2),
        ("captain_email", 20, 3),
        ("captain_phone", 10, 4),
        ("event_name", 10, 5),
    ],
)
def test_truncation_keeps_first_n_characters(service: BarcodeService, pass_data: PassData, attribute, limit, index):
    long_value = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123"  # 30 characters
    data = pass_data.model_copy(update={attribute: long_value})

    fields = service.build_payload(data).split("|")

    assert len(fields) == 7
    assert fields[index] == long_value[:limit]


def test_short_values_are_not_padded(service: BarcodeService, pass_data: PassData):
    data = pass_data.model_copy(update={"captain_phone": "123"})

    assert service.build_payload(data).split("|")[4] == "123"


def test_team_id_and_status_are_never_truncated(service: BarcodeService, pass_data: PassData):
    team_id = "GT-2026-4496-EXTENDED-SUFFIX"
    data = pass_data.model_copy(update={"team_id": team_id, "payment_status": "PAID-VIA-BANK-TRANSFER"})

    fields = service.build_payload(data).split("|")

    assert fields[0] == team_id
    assert fields[6] == "PAID-VIA-BANK-TRANSFER"


def test_missing_optionals_never_render_as_none(service: BarcodeService, pass_data: PassData):
    payload = service.build_payload(pass_data)

    assert "None" not in payload
    assert "null" not in payload


def test_render_returns_png_black_on_white(service: BarcodeService, pass_data: PassData):
    png = service.render(service.build_payload(pass_data))

    image = Image.open(io.BytesIO(png))
    assert image.format == "PNG"

    gray = image.convert("L")
    colors = {value for _, value in gray.getcolors(maxcolors=256)}
    assert colors == {0, 255}
    assert gray.getpixel((0, 0)) == 255  # quiet zone


def test_render_has_no_text_below_bars(service: BarcodeService, pass_data: PassData):
    """Every column is a solid bar or solid space from top to bottom."""
    png = service.render(service.build_payload(pass_data))
    gray = Image.open(io.BytesIO(png)).convert("L")

    width, height = gray.size
    top_row = [gray.getpixel((x, 0)) for x in range(width)]
    bottom_row = [gray.getpixel((x, height - 1)) for x in range(width)]
    assert top_row == bottom_row


def _expected_row(modules: str, pixels: int, quiet_modules: int = 10):
    quiet = [255] * (quiet_modules * pixels)
    bars = [0 if module == "1" else 255 for module in modules for _ in range(pixels)]
    return quiet + bars + quiet


def test_render_draws_code128_bar_pattern(service: BarcodeService, pass_data: PassData):
    """3px per module at the default density, quiet zone of 10 modules each side."""
    payload = service.build_payload(pass_data)
    modules = Code128(payload).build()[0]

    gray = Image.open(io.BytesIO(service.render(payload))).convert("L")
    row = [gray.getpixel((x, gray.height // 2)) for x in range(gray.width)]

    assert row == _expected_row(modules, 3)
    assert gray.height == 118  # 10mm at 300dpi


def test_render_fits_max_width_with_whole_pixel_modules(service: BarcodeService, pass_data: PassData):
    payload = service.build_payload(pass_data)
    modules = Code128(payload).build()[0]

    gray = Image.open(io.BytesIO(service.render(payload, max_width=600))).convert("L")
    row = [gray.getpixel((x, gray.height // 2)) for x in range(gray.width)]

    assert gray.width == len(modules) + 20 <= 600
    assert row == _expected_row(modules, 1)


def test_render_max_width_never_exceeds_configured_density(service: BarcodeService, pass_data: PassData):
    payload = service.build_payload(pass_data)
    modules = Code128(payload).build()[0]

    wide = Image.open(io.BytesIO(service.render(payload, max_width=10_000)))

    assert wide.width == 3 * (len(modules) + 20)


@pytest.mark.parametrize(
    "modules,max_width,expected",
    [
        (508, 600, 1),
        (200, 600, 2),
        (100, 600, 3),
        (1000, 600, 1),
    ],
)
def test_fit_module_pixels(service: BarcodeService, modules, max_width, expected):
    assert service.fit_module_pixels(modules, max_width) == expected


def test_render_is_deterministic(service: BarcodeService, pass_data: PassData):
    payload = service.build_payload(pass_data)

    assert service.render(payload) == service.render(payload)


def test_render_rejects_empty_payload(service: BarcodeService):
    with pytest.raises(BarcodeGenerationError):
        service.render("")


def test_render_wraps_library_errors(service: BarcodeService):
    with patch("eventpass.services.barcode_service.Code128", side_effect=ValueError("bad char")):
        with pytest.raises(BarcodeGenerationError) as exc_info:
            service.render("GT-1")

    assert exc_info.value.details["error"] == "bad char"


def test_generate_success(service: BarcodeService, pass_data: PassData):
    result = service.generate(pass_data, max_width=600)

    assert result.success
    assert result.error is None
    assert result.payload == "GT-2026-4496|RoboWarriors||||Robo Race|PAID"
    assert result.size == (Image.open(io.BytesIO(result.image_bytes)).width, 118)
    assert result.size[0] <= 600


def test_generate_swallows_and_logs_failures(failing_barcode_service: BarcodeService, pass_data: PassData, caplog):
    with caplog.at_level("ERROR", logger="eventpass.services.barcode_service"):
        result = failing_barcode_service.generate(pass_data)

    assert not result.success
    assert result.image_bytes is None
    assert result.size is None
    assert result.error == "forced failure"
    assert result.payload == "GT-2026-4496|RoboWarriors||||Robo Race|PAID"
    assert "GT-2026-4496" in caplog.text


def test_decoded_barcode_matches_payload(service: BarcodeService, full_pass_data: PassData):
    zxingcpp = pytest.importorskip("zxingcpp")

    payload = service.build_payload(full_pass_data)
    image = Image.open(io.BytesIO(service.render(payload))).convert("L")

    decoded = zxingcpp.read_barcodes(image)

    assert len(decoded) == 1
    assert decoded[0].format == zxingcpp.BarcodeFormat.Code128
    assert decoded[0].text == payload
    assert len(decoded[0].text.split("|")) == 7
