from __future__ import annotations

from pathlib import Path

import pytest

from fluxforge.errors import ConversionError, ProbeError
from fluxforge.models import ConvertResult, PdfInfo, VideoInfo


class FakeBackend:
    """In-memory ConverterBackend that records every call."""

    def __init__(self, page_counts=None, failing=()):
        self.calls: list[tuple] = []
        self.page_counts = page_counts or {}
        self.failing = {Path(p).name for p in failing}
        self.opened: list[Path] = []

    def _result(self, name: str, folder: Path, *outputs: str) -> ConvertResult:
        if name in self.failing:
            raise ConversionError(f"cannot convert {name}")
        return ConvertResult(True, tuple(folder / o for o in outputs), folder, "done")

    def get_pdf_info(self, path):
        self.calls.append(("get_pdf_info", path))
        if path.name not in self.page_counts:
            raise ProbeError(f"no info for {path.name}")
        return PdfInfo(path, self.page_counts[path.name], 0)

    def get_video_info(self, path):
        self.calls.append(("get_video_info", path))
        return VideoInfo(path, 12.0, 1920, 1080, 30.0)

    def convert_pdf_to_images(self, paths, options, output_folder):
        self.calls.append(("convert_pdf_to_images", tuple(paths), options))
        path = paths[0]
        pages = options.pages or (1,)
        return self._result(
            path.name, output_folder, *(f"{path.stem}_{p}.{options.format}" for p in pages)
        )

    def convert_pdf_to_svg(self, paths, pages, output_folder):
        self.calls.append(("convert_pdf_to_svg", tuple(paths), pages))
        path = paths[0]
        return self._result(path.name, output_folder, *(f"{path.stem}_{p}.svg" for p in pages or (1,)))

    def merge_pdfs(self, paths, output_name, output_folder):
        self.calls.append(("merge_pdfs", tuple(paths), output_name))
        return self._result(output_name, output_folder, output_name)

    def split_pdf(self, path, split_points, output_folder):
        self.calls.append(("split_pdf", path, tuple(split_points)))
        parts = [f"{path.stem}_part{i + 1}.pdf" for i in range(len(split_points) + 1)]
        return self._result(path.name, output_folder, *parts)

    def extract_pdf_pages(self, path, pages, output_name, output_folder):
        self.calls.append(("extract_pdf_pages", path, tuple(pages), output_name))
        return self._result(path.name, output_folder, output_name)

    def extract_archive(self, path, password, output_folder):
        self.calls.append(("extract_archive", path, password))
        return self._result(path.name, output_folder, path.stem)

    def create_archive(self, paths, output_name, format, password, output_folder):
        self.calls.append(("create_archive", tuple(paths), output_name, format, password))
        return self._result(output_name, output_folder, output_name)

    def convert_video_to_gif(self, path, options, output_folder):
        self.calls.append(("convert_video_to_gif", path, options))
        return self._result(path.name, output_folder, options.output_name)

    def open_folder(self, path):
        self.opened.append(path)


class MemoryPersistence:
    def __init__(self, record=None, fail_read=False, fail_write=False):
        self.record = record
        self.fail_read = fail_read
        self.fail_write = fail_write
        self.writes: list[dict] = []

    def read(self):
        if self.fail_read:
            raise OSError("disk unavailable")
        return self.record

    def write(self, record):
        if self.fail_write:
            raise OSError("read-only filesystem")
        self.writes.append(record)
        self.record = record


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture(scope="session")
def qapp():
    from PySide6.QtCore import QCoreApplication
    return QCoreApplication.instance() or QCoreApplication([])
