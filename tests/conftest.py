from pathlib import Path
from unittest.mock import MagicMock

import pytest
from PIL import Image

from eventpass.config import get_settings
from eventpass.core.exceptions import BarcodeGenerationError
from eventpass.core.fonts import FontRegistry
from eventpass.schemas.pass_data import PassData
from eventpass.services.barcode_service import BarcodeService
from eventpass.services.layout_registry import get_layout
from eventpass.services.pass_generator import PassGenerator


# Dark background close to the real template, so overlays are easy to spot
TEMPLATE_COLOR = (20, 24, 34)


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Settings are cached per process; reset around each test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def layout():
    return get_layout()


@pytest.fixture
def template_path(tmp_path: Path, layout) -> Path:
    """A plain template image matching the reference layout canvas."""
    path = tmp_path / "pass-template.png"
    Image.new("RGB", layout.canvas_size, TEMPLATE_COLOR).save(path, format="PNG")
    return path


@pytest.fixture
def font_registry(tmp_path: Path) -> FontRegistry:
    """Registry with no usable font files, so Pillow's default font is used."""
    return FontRegistry(tmp_path / "fonts" / "Inter.ttf", fallback_paths=[])


@pytest.fixture
def pass_data() -> PassData:
    return PassData(
        team_id="GT-2026-4496",
        team_name="RoboWarriors",
        event_name="Robo Race",
        college_name="SRM College of Engineering",
    )


@pytest.fixture
def full_pass_data() -> PassData:
    return PassData(
        team_id="GT-2026-0001",
        team_name="The Extraordinary Circuit Breakers",
        event_name="Autonomous Line Follower",
        college_name="National Institute of Technology",
        captain_name="Alexandria Montgomery",
        captain_email="alexandria.montgomery@example.com",
        captain_phone="+91-9876543210",
        payment_status="PENDING",
    )


@pytest.fixture
def generator(template_path: Path, font_registry: FontRegistry) -> PassGenerator:
    return PassGenerator(template_path=template_path, font_registry=font_registry)


@pytest.fixture
def failing_barcode_service() -> BarcodeService:
    """Barcode service whose renderer always blows up."""
    service = BarcodeService()
    service.render = MagicMock(side_effect=BarcodeGenerationError("forced failure"))
    return service
