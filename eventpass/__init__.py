from eventpass.schemas.pass_data import PassData
from eventpass.services.barcode_service import BarcodeResult, BarcodeService
from eventpass.services.layout_registry import PassLayout, get_layout
from eventpass.services.pass_generator import (
    PassGenerator,
    PassRenderResult,
    generate_pass,
    generate_pass_as_text,
)

__all__ = [
    "PassData",
    "BarcodeResult",
    "BarcodeService",
    "PassLayout",
    "get_layout",
    "PassGenerator",
    "PassRenderResult",
    "generate_pass",
    "generate_pass_as_text",
]
