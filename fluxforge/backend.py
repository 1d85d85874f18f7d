"""
fluxforge.backend
~~~~~~~~~~~~~~~~~
The converter capability the job layer talks to, and the implementation
that drives the external backend executable.

Every request is one process run:

    fluxforge-backend <operation> <json-request>

and the backend answers with one JSON object on stdout. A non-zero exit,
a missing executable or a reply that is not JSON becomes ConversionError
(or ProbeError for the info calls).

Keeping command construction separate means you can log the exact command
before running it and unit-test request payloads without a process.
"""

from __future__ import annotations

import json
import logging
import subprocess
import sys
from pathlib import Path
from typing import Any, Protocol, Sequence

from fluxforge.errors import ConversionError, ProbeError
from fluxforge.models import (
    ConvertResult, GifOptions, ImageExportOptions, PdfInfo, VideoInfo,
)
from fluxforge.paths import backend_bin
from fluxforge.results import normalize

logger = logging.getLogger(__name__)


class ConverterBackend(Protocol):
    """One method per backend operation. Convert calls raise ConversionError."""

    def get_pdf_info(self, path: Path) -> PdfInfo:
        ...

    def get_video_info(self, path: Path) -> VideoInfo:
        ...

    def convert_pdf_to_images(
        self, paths: Sequence[Path], options: ImageExportOptions, output_folder: Path,
    ) -> ConvertResult:
        ...

    def convert_pdf_to_svg(
        self, paths: Sequence[Path], pages: Sequence[int] | None, output_folder: Path,
    ) -> ConvertResult:
        ...

    def merge_pdfs(self, paths: Sequence[Path], output_name: str, output_folder: Path) -> ConvertResult:
        ...

    def split_pdf(self, path: Path, split_points: Sequence[int], output_folder: Path) -> ConvertResult:
        ...

    def extract_pdf_pages(
        self, path: Path, pages: Sequence[int], output_name: str, output_folder: Path,
    ) -> ConvertResult:
        ...

    def extract_archive(self, path: Path, password: str | None, output_folder: Path) -> ConvertResult:
        ...

    def create_archive(
        self, paths: Sequence[Path], output_name: str, format: str,
        password: str | None, output_folder: Path,
    ) -> ConvertResult:
        ...

    def convert_video_to_gif(self, path: Path, options: GifOptions, output_folder: Path) -> ConvertResult:
        ...

    def open_folder(self, path: Path) -> None:
        ...


# ── Command construction ──────────────────────────────────────────────────────

def build_backend_command(operation: str, request: dict[str, Any], binary: Path | None = None) -> list[str]:
    """
    Example output:
        ['/app/bin/fluxforge-backend', 'merge_pdfs',
         '{"paths": ["/in/a.pdf", "/in/b.pdf"], "output_name": "merged.pdf", ...}']
    """
    return [str(binary or backend_bin()), operation, json.dumps(request)]


def command_as_string(cmd: list[str]) -> str:
    """Human-readable version of the command for logging."""
    return " ".join(cmd)


def open_folder_command(path: Path) -> list[str]:
    if sys.platform == "win32":
        return ["explorer", str(path)]
    if sys.platform == "darwin":
        return ["open", str(path)]
    return ["xdg-open", str(path)]


# ── Executable-backed implementation ──────────────────────────────────────────

class CommandBackend:

    def __init__(self, binary: Path | None = None, timeout: float | None = None):
        self._binary = binary
        self._timeout = timeout

    # ── Probes ────────────────────────────────────────────────────────────────

    def get_pdf_info(self, path: Path) -> PdfInfo:
        try:
            data = self._call("get_pdf_info", {"path": str(path)})
            return PdfInfo(
                path=Path(data.get("path", path)),
                page_count=int(data["page_count"]),
                file_size=int(data.get("file_size", 0)),
            )
        except (ConversionError, KeyError, TypeError, ValueError) as exc:
            raise ProbeError(f"Could not read PDF info for {Path(path).name}: {exc}") from exc

    def get_video_info(self, path: Path) -> VideoInfo:
        try:
            data = self._call("get_video_info", {"path": str(path)})
            return VideoInfo(
                path=Path(data.get("path", path)),
                duration_seconds=float(data.get("duration_seconds", 0.0)),
                width=int(data.get("width", 0)),
                height=int(data.get("height", 0)),
                fps=float(data.get("fps", 0.0)),
            )
        except (ConversionError, TypeError, ValueError) as exc:
            raise ProbeError(f"Could not read video info for {Path(path).name}: {exc}") from exc

    # ── Conversions ───────────────────────────────────────────────────────────

    def convert_pdf_to_images(self, paths, options, output_folder):
        return self._convert("convert_pdf_to_images", {
            "paths": [str(p) for p in paths],
            "options": {
                "format": options.format,
                "dpi": options.dpi,
                "pages": _page_list(options.pages),
            },
            "output_folder": str(output_folder),
        })

    def convert_pdf_to_svg(self, paths, pages, output_folder):
        return self._convert("convert_pdf_to_svg", {
            "paths": [str(p) for p in paths],
            "pages": _page_list(pages),
            "output_folder": str(output_folder),
        })

    def merge_pdfs(self, paths, output_name, output_folder):
        return self._convert("merge_pdfs", {
            "paths": [str(p) for p in paths],
            "output_name": output_name,
            "output_folder": str(output_folder),
        })

    def split_pdf(self, path, split_points, output_folder):
        return self._convert("split_pdf", {
            "path": str(path),
            "split_points": list(split_points),
            "output_folder": str(output_folder),
        })

    def extract_pdf_pages(self, path, pages, output_name, output_folder):
        return self._convert("extract_pdf_pages", {
            "path": str(path),
            "pages": list(pages),
            "output_name": output_name,
            "output_folder": str(output_folder),
        })

    def extract_archive(self, path, password, output_folder):
        return self._convert("extract_archive", {
            "path": str(path),
            "password": password,
            "output_folder": str(output_folder),
        })

    def create_archive(self, paths, output_name, format, password, output_folder):
        return self._convert("create_archive", {
            "paths": [str(p) for p in paths],
            "output_name": output_name,
            "options": {"format": format, "password": password},
            "output_folder": str(output_folder),
        })

    def convert_video_to_gif(self, path, options, output_folder):
        return self._convert("convert_video_to_gif", {
            "path": str(path),
            "options": {
                "start_time": options.start_time,
                "end_time": options.end_time,
                "width": options.width,
                "height": options.height,
                "fps": options.fps,
                "quality": options.quality,
                "output_name": options.output_name,
            },
            "output_folder": str(output_folder),
        })

    # ── Desktop integration ───────────────────────────────────────────────────

    def open_folder(self, path: Path) -> None:
        """Best effort: failures are logged, never raised."""
        cmd = open_folder_command(path)
        try:
            subprocess.Popen(cmd, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
        except OSError as exc:
            logger.warning("Failed to open folder %s: %s", path, exc)

    # ── Internal ──────────────────────────────────────────────────────────────

    def _convert(self, operation: str, request: dict[str, Any]) -> ConvertResult:
        # A reported failure that still wrote files comes back as a partial result.
        result = normalize(self._call(operation, request))
        if not result.output_files:
            raise ConversionError(result.message)
        return result

    def _call(self, operation: str, request: dict[str, Any]) -> dict[str, Any]:
        cmd = build_backend_command(operation, request, self._binary)
        logger.info("Backend command: %s", command_as_string(cmd))

        try:
            result = subprocess.run(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                timeout=self._timeout,
            )
        except (OSError, subprocess.TimeoutExpired) as exc:
            raise ConversionError(f"Backend could not be run for {operation}: {exc}") from exc

        if result.returncode != 0:
            raise ConversionError(
                f"{operation} failed (exit {result.returncode}): {result.stderr.strip()}"
            )

        try:
            data = json.loads(result.stdout)
        except json.JSONDecodeError as exc:
            raise ConversionError(f"{operation} returned unreadable output: {exc}") from exc
        if not isinstance(data, dict):
            raise ConversionError(f"{operation} returned {type(data).__name__}, expected an object")
        return data


def _page_list(pages: Sequence[int] | None) -> list[int] | None:
    return None if pages is None else list(pages)
