# fluxforge/tools.py

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from fluxforge.models import JobKind


class ToolKind(str, Enum):
    PDF_CONVERT      = "pdf_convert"
    PDF_OPERATIONS   = "pdf_operations"
    ARCHIVE_EXTRACT  = "archive_extract"
    ARCHIVE_COMPRESS = "archive_compress"
    VIDEO_TO_GIF     = "video_to_gif"


@dataclass(frozen=True)
class ToolProfile:
    display_name: str
    extensions: frozenset[str] | None   # None accepts any file
    category_folder: str
    single_file: bool = False           # a new file replaces the queued one
    probes_pages: bool = False
    probes_video: bool = False          # read clip duration and size on add

    def accepts(self, path: Path) -> bool:
        if self.extensions is None:
            return True
        return path.suffix.lower() in self.extensions


PDF_EXTENSIONS     = frozenset({".pdf"})
ARCHIVE_EXTENSIONS = frozenset({".zip", ".7z", ".rar"})
VIDEO_EXTENSIONS   = frozenset({".mp4", ".avi", ".mov", ".webm"})

TOOL_PROFILES: dict[ToolKind, ToolProfile] = {
    ToolKind.PDF_CONVERT: ToolProfile(
        display_name="PDF to Image",
        extensions=PDF_EXTENSIONS,
        category_folder="PDF_Images",
        probes_pages=True,
    ),
    ToolKind.PDF_OPERATIONS: ToolProfile(
        display_name="PDF Operations",
        extensions=PDF_EXTENSIONS,
        category_folder="PDF_Operations",
        probes_pages=True,
    ),
    ToolKind.ARCHIVE_EXTRACT: ToolProfile(
        display_name="Extract Archive",
        extensions=ARCHIVE_EXTENSIONS,
        category_folder="Archives",
        single_file=True,
    ),
    ToolKind.ARCHIVE_COMPRESS: ToolProfile(
        display_name="Compress Files",
        extensions=None,
        category_folder="Archives",
    ),
    ToolKind.VIDEO_TO_GIF: ToolProfile(
        display_name="Video to GIF",
        extensions=VIDEO_EXTENSIONS,
        category_folder="GIF",
        single_file=True,
        probes_video=True,
    ),
}

JOB_TOOLS: dict[JobKind, ToolKind] = {
    JobKind.PDF_TO_IMAGE:     ToolKind.PDF_CONVERT,
    JobKind.PDF_TO_SVG:       ToolKind.PDF_CONVERT,
    JobKind.PDF_MERGE:        ToolKind.PDF_OPERATIONS,
    JobKind.PDF_SPLIT:        ToolKind.PDF_OPERATIONS,
    JobKind.PDF_EXTRACT:      ToolKind.PDF_OPERATIONS,
    JobKind.ARCHIVE_COMPRESS: ToolKind.ARCHIVE_COMPRESS,
    JobKind.ARCHIVE_EXTRACT:  ToolKind.ARCHIVE_EXTRACT,
    JobKind.VIDEO_TO_GIF:     ToolKind.VIDEO_TO_GIF,
}

IMAGE_FORMATS   = ["jpg", "png", "webp", "svg"]
ARCHIVE_FORMATS = ["zip", "7z"]
DPI_PRESETS     = [72, 150, 300, 600]

# (label, width, height)
RESOLUTION_PRESETS = [
    ("Original (1920×1080)", 1920, 1080),
    ("Half (960×540)",        960,  540),
    ("Quarter (480×270)",     480,  270),
]


def profile_for(kind: ToolKind | JobKind) -> ToolProfile:
    if isinstance(kind, JobKind):
        kind = JOB_TOOLS[kind]
    return TOOL_PROFILES[kind]
