"""
fluxforge.models
~~~~~~~~~~~~~~~~
Pure dataclasses: no Qt and no I/O.
These travel freely between the worker threads and the ui.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


# ── Enums ─────────────────────────────────────────────────────────────────────

class Theme(str, Enum):
    DARK  = "dark"
    LIGHT = "light"


class JobKind(str, Enum):
    PDF_TO_IMAGE     = "pdf_to_image"
    PDF_TO_SVG       = "pdf_to_svg"
    PDF_MERGE        = "pdf_merge"
    PDF_SPLIT        = "pdf_split"
    PDF_EXTRACT      = "pdf_extract"
    ARCHIVE_COMPRESS = "archive_compress"
    ARCHIVE_EXTRACT  = "archive_extract"
    VIDEO_TO_GIF     = "video_to_gif"


class PageMode(str, Enum):
    ALL    = "all"
    SELECT = "select"


# ── Application config ────────────────────────────────────────────────────────

@dataclass(frozen=True)
class AppConfig:
    """
    User settings. Replaced as a whole through ConfigStore.save(), never
    mutated in place.

    An empty `export_folder` means "use the OS default export root".
    """
    export_folder: str = ""
    export_folder_name: str = "FluxForge"
    theme: Theme = Theme.DARK
    default_pdf_dpi: int = 150
    auto_create_date_folders: bool = True
    cloud_sync_folder: str | None = None


# ── Queue items and probe replies ─────────────────────────────────────────────

@dataclass
class FileItem:
    """
    One file accepted into a FileQueue.

    `token` is stable for the item's lifetime and unique within its queue;
    late probe results are matched on it because indices shift on removal.
    Only `page_count` changes after creation (probe backfill).
    """
    path: Path
    name: str
    size: int = 0
    page_count: int = 1
    token: int = field(default=0, compare=False)


@dataclass(frozen=True)
class PdfInfo:
    path: Path
    page_count: int
    file_size: int


@dataclass(frozen=True)
class VideoInfo:
    path: Path
    duration_seconds: float
    width: int
    height: int
    fps: float


@dataclass(frozen=True)
class GifEstimate:
    """Projected GIF output. Derived on every input change, never stored."""
    estimated_size_mb: float
    duration_seconds: float
    frame_count: int
    is_large: bool = False        # above the share-time warning threshold


# ── Job options (one per JobKind) ─────────────────────────────────────────────

@dataclass(frozen=True)
class ImageExportOptions:
    format: str                            # "jpg", "png", "webp"
    dpi: int
    pages: tuple[int, ...] | None = None   # None = all pages


@dataclass(frozen=True)
class SvgExportOptions:
    pages: tuple[int, ...] | None = None


@dataclass(frozen=True)
class MergeOptions:
    output_name: str


@dataclass(frozen=True)
class SplitOptions:
    split_points: tuple[int, ...]


@dataclass(frozen=True)
class ExtractOptions:
    pages: tuple[int, ...]
    output_name: str


@dataclass(frozen=True)
class CompressOptions:
    format: str                  # "zip", "7z"
    output_name: str
    password: str | None = None


@dataclass(frozen=True)
class ArchiveExtractOptions:
    password: str | None = None


@dataclass(frozen=True)
class GifOptions:
    start_time: float
    end_time: float
    width: int
    height: int
    fps: int
    quality: int                 # 1-5
    output_name: str


JobOptions = (
    ImageExportOptions | SvgExportOptions | MergeOptions | SplitOptions
    | ExtractOptions | CompressOptions | ArchiveExtractOptions | GifOptions
)


# ── Raw user state ────────────────────────────────────────────────────────────

@dataclass
class ToolOptions:
    """
    Whatever the tool page currently shows: typed strings, slider values,
    toggles. Anything left as None is resolved by the JobBuilder.
    """
    format: str | None = None
    dpi: int | None = None
    page_mode: PageMode = PageMode.ALL
    page_range: str | None = None
    split_points: str | None = None
    output_name: str | None = None
    archive_format: str | None = None
    password: str | None = None
    start_time: float = 0.0
    end_time: float | None = None
    width: int | None = None
    height: int | None = None
    fps: int | None = None
    quality: int | None = None


# ── Job descriptor ────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class JobDescriptor:
    """
    A fully resolved conversion job. Holds no reference back into the
    queue or the config, so it can be handed to a worker thread as-is.
    """
    kind: JobKind
    inputs: tuple[Path, ...]
    options: JobOptions
    output_folder: Path


# ── Convert result ────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ConvertResult:
    success: bool
    output_files: tuple[Path, ...] = ()
    output_folder: Path | None = None
    message: str = ""
    partial: bool = False        # files came out but the backend reported a failure

    def __post_init__(self):
        if self.success and not self.output_files:
            raise ValueError("A successful ConvertResult must list its output files.")
