"""
fluxforge.job_builder
~~~~~~~~~~~~~~~~~~~~~
Turns a FileQueue, the tool page's raw options and the AppConfig into one
immutable JobDescriptor.

Checks run in this order:
  1. the queue is not empty                         → NoInputError
  2. a typed page selection contains pages          → EmptyPageSelectionError
  3. numeric options are inside their ranges        → clamped, with a warning

Formats the backend does not know, and a GIF clip that ends before it
starts, raise InvalidOptionError. Building a job never touches the
filesystem or the backend; only create_export_folders writes to disk.
"""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path

from fluxforge import page_range
from fluxforge.errors import EmptyPageSelectionError, InvalidOptionError, NoInputError
from fluxforge.file_queue import FileQueue
from fluxforge.models import (
    AppConfig, ArchiveExtractOptions, CompressOptions, ExtractOptions, GifOptions,
    ImageExportOptions, JobDescriptor, JobKind, JobOptions, MergeOptions, PageMode,
    SplitOptions, SvgExportOptions, ToolOptions,
)
from fluxforge.paths import default_export_root
from fluxforge.tools import ARCHIVE_FORMATS, DPI_PRESETS, TOOL_PROFILES, profile_for

logger = logging.getLogger(__name__)

QUALITY_RANGE = (1, 5)
FPS_RANGE     = (5, 30)
WIDTH_RANGE   = (1, 7680)
HEIGHT_RANGE  = (1, 4320)

DEFAULT_IMAGE_FORMAT   = "jpg"
DEFAULT_ARCHIVE_FORMAT = "zip"
DEFAULT_GIF_WIDTH      = 480
DEFAULT_GIF_HEIGHT     = 270
DEFAULT_GIF_FPS        = 15
DEFAULT_GIF_QUALITY    = 3
DEFAULT_CLIP_SECONDS   = 60.0

DEFAULT_OUTPUT_NAMES = {
    JobKind.PDF_MERGE:        "merged",
    JobKind.PDF_EXTRACT:      "extracted",
    JobKind.ARCHIVE_COMPRESS: "archive",
}

RASTER_FORMATS = ("jpg", "png", "webp")


# ── Public API ────────────────────────────────────────────────────────────────

def build(
    kind: JobKind,
    queue: FileQueue,
    options: ToolOptions,
    config: AppConfig,
    today: date | None = None,
) -> JobDescriptor:
    """
    Validate and resolve everything needed to run one job.

    *today* fixes the date subfolder; it defaults to the current local date.
    """
    if len(queue) == 0:
        raise NoInputError()

    kind = JobKind(kind)
    if kind is JobKind.PDF_TO_IMAGE and _normalize_format(options.format) == "svg":
        kind = JobKind.PDF_TO_SVG

    inputs = queue.paths()
    job_options = _build_options(kind, inputs, options, config)

    return JobDescriptor(
        kind=kind,
        inputs=inputs,
        options=job_options,
        output_folder=resolve_output_folder(kind, config, today),
    )


def resolve_output_folder(kind: JobKind, config: AppConfig, today: date | None = None) -> Path:
    """
    <export root>/<export folder name>/<category>[/<YYYY-MM-DD>]

    Example:
        export_folder = "/home/ana/Documents", name = "FluxForge", GIF job
        → /home/ana/Documents/FluxForge/GIF/2026-10-18
    """
    folder = _export_root(config) / config.export_folder_name / profile_for(kind).category_folder
    if config.auto_create_date_folders:
        folder = folder / (today or date.today()).strftime("%Y-%m-%d")
    return folder


def create_export_folders(config: AppConfig) -> Path:
    """
    Create <export root>/<export folder name> and one folder per category.
    Returns the export base folder. OSError propagates.
    """
    base = _export_root(config) / config.export_folder_name
    for category in sorted({p.category_folder for p in TOOL_PROFILES.values()}):
        (base / category).mkdir(parents=True, exist_ok=True)
    logger.info("Export folders ready under '%s'", base)
    return base


# ── Per-kind options ──────────────────────────────────────────────────────────

def _build_options(
    kind: JobKind,
    inputs: tuple[Path, ...],
    options: ToolOptions,
    config: AppConfig,
) -> JobOptions:
    if kind is JobKind.PDF_TO_IMAGE:
        pages = _optional_pages(options)
        fmt = _normalize_format(options.format) or DEFAULT_IMAGE_FORMAT
        if fmt not in RASTER_FORMATS:
            raise InvalidOptionError(f"Unsupported image format: {fmt}")
        dpi = options.dpi if options.dpi is not None else config.default_pdf_dpi
        return ImageExportOptions(format=fmt, dpi=snap_dpi(dpi), pages=pages)

    if kind is JobKind.PDF_TO_SVG:
        return SvgExportOptions(pages=_optional_pages(options))

    if kind is JobKind.PDF_MERGE:
        return MergeOptions(output_name=_output_name(options.output_name, kind, ".pdf"))

    if kind is JobKind.PDF_SPLIT:
        return SplitOptions(split_points=_required_pages(options.split_points))

    if kind is JobKind.PDF_EXTRACT:
        return ExtractOptions(
            pages=_required_pages(options.page_range),
            output_name=_output_name(options.output_name, kind, ".pdf"),
        )

    if kind is JobKind.ARCHIVE_COMPRESS:
        fmt = _normalize_format(options.archive_format) or DEFAULT_ARCHIVE_FORMAT
        if fmt not in ARCHIVE_FORMATS:
            raise InvalidOptionError(f"Unsupported archive format: {fmt}")
        return CompressOptions(
            format=fmt,
            output_name=_output_name(options.output_name, kind, f".{fmt}"),
            password=options.password or None,
        )

    if kind is JobKind.ARCHIVE_EXTRACT:
        return ArchiveExtractOptions(password=options.password or None)

    if kind is JobKind.VIDEO_TO_GIF:
        return _gif_options(inputs, options)

    raise InvalidOptionError(f"Unknown job kind: {kind}")


def _gif_options(inputs: tuple[Path, ...], options: ToolOptions) -> GifOptions:
    start = max(0.0, float(options.start_time))
    end = options.end_time if options.end_time is not None else start + DEFAULT_CLIP_SECONDS
    if end <= start:
        raise InvalidOptionError(
            f"The clip must end after it starts (start={start:g}s, end={end:g}s)."
        )

    name = options.output_name
    if not name or not name.strip():
        name = inputs[0].stem

    return GifOptions(
        start_time=start,
        end_time=float(end),
        width=clamp("width", _or(options.width, DEFAULT_GIF_WIDTH), *WIDTH_RANGE),
        height=clamp("height", _or(options.height, DEFAULT_GIF_HEIGHT), *HEIGHT_RANGE),
        fps=clamp("fps", _or(options.fps, DEFAULT_GIF_FPS), *FPS_RANGE),
        quality=clamp("quality", _or(options.quality, DEFAULT_GIF_QUALITY), *QUALITY_RANGE),
        output_name=_with_suffix(name.strip(), ".gif"),
    )


# ── Numeric guards ────────────────────────────────────────────────────────────

def clamp(name: str, value: int, low: int, high: int) -> int:
    clamped = min(max(int(value), low), high)
    if clamped != value:
        logger.warning("Clamped %s=%s to %s (allowed %s-%s)", name, value, clamped, low, high)
    return clamped


def snap_dpi(dpi: int) -> int:
    """Nearest recognized DPI; on a tie the lower value wins."""
    snapped = min(DPI_PRESETS, key=lambda preset: (abs(preset - dpi), preset))
    if snapped != dpi:
        logger.warning("Snapped dpi=%s to %s", dpi, snapped)
    return snapped


# ── Internal helpers ──────────────────────────────────────────────────────────

def _export_root(config: AppConfig) -> Path:
    return Path(config.export_folder) if config.export_folder else default_export_root()


def _optional_pages(options: ToolOptions) -> tuple[int, ...] | None:
    """None means all pages: either "all" mode or no selection text typed."""
    if options.page_mode is not PageMode.SELECT or not options.page_range:
        return None
    return _required_pages(options.page_range)


def _required_pages(text: str | None) -> tuple[int, ...]:
    pages = page_range.parse(text)
    if not pages:
        raise EmptyPageSelectionError(text or "")
    return pages


def _output_name(raw: str | None, kind: JobKind, suffix: str) -> str:
    name = (raw or "").strip() or DEFAULT_OUTPUT_NAMES[kind]
    return _with_suffix(name, suffix)


def _with_suffix(name: str, suffix: str) -> str:
    return name if name.lower().endswith(suffix) else name + suffix


def _normalize_format(fmt: str | None) -> str | None:
    return fmt.strip().lower().lstrip(".") if fmt else None


def _or(value, default):
    return default if value is None else value
