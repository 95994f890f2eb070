from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from functools import lru_cache
import logging
import os
from pathlib import Path
import sys
import threading
from typing import Protocol

from PIL import ImageFont

from twstock_chart.raster.draw_text import PillowFont


LOGGER = logging.getLogger(__name__)
FONT_SUFFIXES = (".ttf", ".otf", ".ttc")


class FontStrategy(Protocol):
    def locate(self, candidate: str) -> Path | None: ...


def _is_loadable(path: Path) -> bool:
    try:
        ImageFont.truetype(str(path), size=12)
    except OSError as exc:
        LOGGER.debug("font file rejected: %s (%s)", path, exc)
        return False
    return True


class FilePathStrategy:
    """Treat each candidate as a direct path to a font file."""

    def locate(self, candidate: str) -> Path | None:
        path = Path(candidate).expanduser()
        if not path.is_file():
            return None
        return path if _is_loadable(path) else None


class DirectoryStrategy:
    """Match candidates as family names against font files under `dirs`."""

    def __init__(self, dirs: Iterable[str | Path]) -> None:
        self.dirs = tuple(Path(d).expanduser() for d in dirs)
        self._index: list[Path] | None = None

    def _font_files(self) -> list[Path]:
        if self._index is None:
            files: list[Path] = []
            for base in self.dirs:
                try:
                    if not base.is_dir():
                        continue
                    found = sorted(p for p in base.rglob("*") if p.suffix.lower() in FONT_SUFFIXES)
                except OSError as exc:
                    LOGGER.debug("font directory skipped: %s (%s)", base, exc)
                    continue
                files.extend(found)
            self._index = files
        return self._index

    def locate(self, candidate: str) -> Path | None:
        wanted = _normalize_name(candidate)
        if not wanted:
            return None
        exact: list[Path] = []
        partial: list[Path] = []
        for path in self._font_files():
            stem = _normalize_name(path.stem)
            if stem == wanted:
                exact.append(path)
            elif wanted in stem:
                partial.append(path)
        for path in exact + partial:
            if _is_loadable(path):
                return path
        return None


class SystemFontStrategy(DirectoryStrategy):
    def __init__(self, environ: Mapping[str, str] | None = None, platform: str | None = None) -> None:
        super().__init__(system_font_dirs(os.environ if environ is None else environ, platform or sys.platform))


def system_font_dirs(environ: Mapping[str, str], platform: str) -> list[Path]:
    dirs: list[Path] = []
    home = environ.get("HOME") or environ.get("USERPROFILE")
    if platform.startswith("win"):
        windir = environ.get("WINDIR") or environ.get("SystemRoot")
        if windir:
            dirs.append(Path(windir) / "Fonts")
        local = environ.get("LOCALAPPDATA")
        if local:
            dirs.append(Path(local) / "Microsoft" / "Windows" / "Fonts")
        return dirs
    if platform == "darwin":
        if home:
            dirs.append(Path(home) / "Library" / "Fonts")
        dirs.extend(Path(root) / "Library" / "Fonts" for root in ("/", "/System"))
        return dirs
    data_home = environ.get("XDG_DATA_HOME") or (str(Path(home) / ".local" / "share") if home else None)
    if data_home:
        dirs.append(Path(data_home) / "fonts")
    if home:
        dirs.append(Path(home) / ".fonts")
    data_dirs = environ.get("XDG_DATA_DIRS") or os.pathsep.join(("/usr/local/share", "/usr/share"))
    dirs.extend(Path(d) / "fonts" for d in data_dirs.split(os.pathsep) if d)
    return dirs


def _normalize_name(name: str) -> str:
    return "".join(ch for ch in name.lower() if ch.isalnum())


@dataclass(frozen=True)
class ResolvedFont:
    path: Path | None
    is_fallback: bool = False

    def at(self, size_px: float) -> PillowFont:
        return _load_font(self.path, max(1, int(round(size_px))))


@lru_cache(maxsize=64)
def _load_font(path: Path | None, size: int) -> PillowFont:
    if path is None:
        return ImageFont.load_default(size=size)
    return ImageFont.truetype(str(path), size=size)


class GlyphSource:
    """Resolve a usable typeface from ordered candidates, caching the result.

    Strategies are consulted in order; each one sees every candidate before the
    next strategy is tried. When nothing matches, Pillow's embedded font is
    returned, so `resolve` never fails.
    """

    def __init__(self, strategies: Sequence[FontStrategy] | None = None) -> None:
        if strategies is None:
            strategies = (FilePathStrategy(), SystemFontStrategy())
        self.strategies = tuple(strategies)
        self._cache: dict[tuple[str, ...], ResolvedFont] = {}
        self._lock = threading.Lock()

    def resolve(self, candidates: Iterable[str]) -> ResolvedFont:
        key = tuple(candidates)
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        with self._lock:
            cached = self._cache.get(key)
            if cached is None:
                cached = self._probe(key)
                self._cache[key] = cached
        return cached

    def _probe(self, candidates: tuple[str, ...]) -> ResolvedFont:
        for strategy in self.strategies:
            for candidate in candidates:
                path = strategy.locate(candidate)
                if path is not None:
                    LOGGER.debug("font %r resolved to %s via %s", candidate, path, type(strategy).__name__)
                    return ResolvedFont(path=path)
                LOGGER.debug("font %r not found via %s", candidate, type(strategy).__name__)
        return ResolvedFont(path=None, is_fallback=True)


_DEFAULT_SOURCE: GlyphSource | None = None
_DEFAULT_SOURCE_LOCK = threading.Lock()


def default_glyph_source() -> GlyphSource:
    global _DEFAULT_SOURCE
    if _DEFAULT_SOURCE is None:
        with _DEFAULT_SOURCE_LOCK:
            if _DEFAULT_SOURCE is None:
                _DEFAULT_SOURCE = GlyphSource()
    return _DEFAULT_SOURCE
