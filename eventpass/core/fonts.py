"""
Process-wide font registry for pass text.

All pass text uses one font family. The bundled font is tried first, then
the fallback paths in order, then Pillow's built-in default font. A missing
font never fails a pass; it only changes how the text looks.

Resolution happens once per process, lazily, under a lock, so concurrent
first calls don't race. Loaded fonts are cached per (size, weight).
"""

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from PIL import ImageFont

from eventpass.config import get_settings

logger = logging.getLogger(__name__)

BOLD = "bold"
NORMAL = "normal"


@dataclass(frozen=True)
class ResolvedFont:
    """A loaded font plus the stroke needed to fake bold, if any."""
    font: ImageFont.FreeTypeFont
    stroke_width: int = 0


class FontRegistry:
    """Resolves the pass font family once and hands out cached font objects."""

    def __init__(self, font_path: Optional[Path], fallback_paths: Sequence[str] = ()):
        self.font_path = Path(font_path) if font_path else None
        self.fallback_paths = list(fallback_paths)
        self.registrations = 0
        self._lock = threading.Lock()
        self._resolved = False
        self._family_path: Optional[str] = None
        self._cache: Dict[Tuple[int, str], ResolvedFont] = {}

    @property
    def family_path(self) -> Optional[str]:
        """Path of the registered font file, None when using Pillow's default."""
        self.ensure_registered()
        return self._family_path

    def _candidates(self) -> List[str]:
        candidates = []
        if self.font_path is not None:
            candidates.append(str(self.font_path))
        candidates.extend(self.fallback_paths)
        return candidates

    def _register(self) -> None:
        for index, path in enumerate(self._candidates()):
            if not Path(path).is_file():
                if index == 0 and self.font_path is not None:
                    logger.warning(f"Bundled pass font not found at {path}")
                continue
            try:
                ImageFont.truetype(path, 12)
            except OSError as e:
                logger.warning(f"Could not load font {path}: {e}")
                continue
            self._family_path = path
            logger.info(f"Registered pass font from: {path}")
            break
        else:
            logger.warning("No pass font available, using Pillow's default font")

        self.registrations += 1
        self._resolved = True

    def ensure_registered(self) -> None:
        """Resolve the font family. Only the first call does any work."""
        if self._resolved:
            return
        with self._lock:
            if not self._resolved:
                self._register()

    def _load(self, size: int, weight: str) -> ResolvedFont:
        if self._family_path is None:
            font = ImageFont.load_default(size)
            return ResolvedFont(font, _synthetic_stroke(size) if weight == BOLD else 0)

        font = ImageFont.truetype(self._family_path, size)
        if weight != BOLD:
            return ResolvedFont(font)

        # Variable fonts (Inter) carry a real bold instance
        try:
            font.set_variation_by_name("Bold")
            return ResolvedFont(font)
        except (OSError, ValueError):
            return ResolvedFont(font, _synthetic_stroke(size))

    def get_font(self, size: int, weight: str = NORMAL) -> ResolvedFont:
        self.ensure_registered()
        key = (size, weight)
        with self._lock:
            if key not in self._cache:
                self._cache[key] = self._load(size, weight)
            return self._cache[key]


def _synthetic_stroke(size: int) -> int:
    return max(1, size // 28)


_registry: Optional[FontRegistry] = None
_registry_lock = threading.Lock()


def get_font_registry() -> FontRegistry:
    """Return the process-wide registry, creating it on first use."""
    global _registry
    with _registry_lock:
        if _registry is None:
            settings = get_settings()
            _registry = FontRegistry(settings.font_path, settings.PASS_FALLBACK_FONT_PATHS)
        return _registry
