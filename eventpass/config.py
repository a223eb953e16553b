from pathlib import Path
from pydantic_settings import BaseSettings
from pydantic import field_validator
from functools import lru_cache
from typing import Optional, List


class Settings(BaseSettings):
    # Assets
    PASS_ASSETS_DIR: str = "assets"
    PASS_TEMPLATE_PATH: Optional[str] = None  # Defaults to <assets>/images/<layout template>
    PASS_FONT_PATH: Optional[str] = None  # Defaults to <assets>/fonts/Inter.ttf
    PASS_FALLBACK_FONT_PATHS: List[str] = [
        "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
        "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
        "C:\\Windows\\Fonts\\arial.ttf",
    ]

    # Layout / output
    PASS_LAYOUT_VERSION: str = "2026-v1"
    PASS_JPEG_QUALITY: int = 85
    PASS_VALIDATE_TEMPLATE_SIZE: bool = True  # Refuse templates that don't match the layout canvas

    # Code 128 rendering, millimetres at BARCODE_DPI
    BARCODE_MODULE_WIDTH_MM: float = 0.254  # 3px per module at 300 dpi, the upper bound
    BARCODE_MODULE_HEIGHT_MM: float = 10.0
    BARCODE_QUIET_ZONE_MM: float = 2.54  # 10 modules
    BARCODE_DPI: int = 300

    @field_validator("PASS_JPEG_QUALITY")
    @classmethod
    def validate_jpeg_quality(cls, v: int) -> int:
        """Pillow treats quality above 95 as near-lossless, which defeats the point."""
        if not 1 <= v <= 95:
            raise ValueError("PASS_JPEG_QUALITY must be between 1 and 95")
        return v

    def template_path(self, template_file: str) -> Path:
        if self.PASS_TEMPLATE_PATH:
            return Path(self.PASS_TEMPLATE_PATH)
        return Path(self.PASS_ASSETS_DIR) / "images" / template_file

    @property
    def font_path(self) -> Path:
        if self.PASS_FONT_PATH:
            return Path(self.PASS_FONT_PATH)
        return Path(self.PASS_ASSETS_DIR) / "fonts" / "Inter.ttf"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Allow extra env variables to be ignored


@lru_cache()
def get_settings() -> Settings:
    return Settings()
