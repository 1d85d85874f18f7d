"""
fluxforge.session
~~~~~~~~~~~~~~~~~
ToolSession owns the file queue of the active tool, the metadata probes
running for it, and at most one conversion job at a time.

Probe results come back out of order relative to the user's edits, so they
are matched by item token; a result for an item that has since been removed
is dropped. A submission while a job is still running is rejected.

For the GIF tool the probe reads the clip instead of a page count. Until a
new clip replaces it, its duration and size fill in the clip end and output
size the user left unset.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import Iterable

from PySide6.QtCore import QObject, Signal

from fluxforge import gif_estimator, job_builder
from fluxforge.backend import ConverterBackend
from fluxforge.config import ConfigStore
from fluxforge.errors import JobInFlightError
from fluxforge.file_queue import FileQueue
from fluxforge.models import (
    AppConfig, ConvertResult, FileItem, GifEstimate, JobDescriptor, JobKind,
    PdfInfo, ToolOptions, VideoInfo,
)
from fluxforge.tools import ToolKind, profile_for
from fluxforge.worker import JobWorker, ProbeWorker

logger = logging.getLogger(__name__)


class ToolSession(QObject):

    queue_changed = Signal()
    item_updated  = Signal(object)          # FileItem whose page count arrived
    clip_probed   = Signal(object)          # VideoInfo of the queued clip
    files_rejected = Signal(int)            # how many dropped files were refused
    job_started   = Signal(object)          # JobDescriptor
    job_finished  = Signal(object)          # ConvertResult
    busy_changed  = Signal(bool)

    def __init__(
        self,
        backend: ConverterBackend,
        config_store: ConfigStore,
        tool: ToolKind = ToolKind.PDF_CONVERT,
        parent=None,
    ):
        super().__init__(parent)
        self._backend = backend
        self._config  = config_store
        self._tool    = tool
        self._queue   = FileQueue(profile_for(tool))
        self._probes: dict[int, ProbeWorker] = {}
        self._clip: tuple[int, VideoInfo] | None = None
        self._job_worker: JobWorker | None = None
        self._last_result: ConvertResult | None = None

    # ── Queue management ──────────────────────────────────────────────────────

    @property
    def tool(self) -> ToolKind:
        return self._tool

    @property
    def queue(self) -> FileQueue:
        return self._queue

    @property
    def busy(self) -> bool:
        return self._job_worker is not None

    @property
    def last_result(self) -> ConvertResult | None:
        return self._last_result

    @property
    def clip(self) -> VideoInfo | None:
        """Probe result for the clip currently queued, if it has arrived."""
        if self._clip is None or self._queue.find(self._clip[0]) is None:
            return None
        return self._clip[1]

    def set_tool(self, tool: ToolKind) -> None:
        """Switching tools starts from an empty queue."""
        if tool == self._tool:
            return
        logger.info("Tool %s → %s", self._tool.value, tool.value)
        self._tool = tool
        self._queue = FileQueue(profile_for(tool))
        self.queue_changed.emit()

    def add_files(self, files: Iterable[Path | str]) -> list[FileItem]:
        files = list(files)
        rejected = self._queue.rejects(files)
        accepted = self._queue.add(files)
        if rejected:
            logger.info("Rejected %d file(s) not accepted by %s", len(rejected), self._queue.profile.display_name)
            self.files_rejected.emit(len(rejected))
        if accepted:
            self.queue_changed.emit()
        profile = self._queue.profile
        if profile.probes_pages or profile.probes_video:
            for item in accepted:
                self._start_probe(item)
        return accepted

    def remove_at(self, index: int) -> FileItem | None:
        item = self._queue.remove_at(index)
        if item is not None:
            self.queue_changed.emit()
        return item

    def clear(self) -> None:
        self._queue.clear()
        self.queue_changed.emit()

    # ── GIF defaults and estimate ─────────────────────────────────────────────

    def gif_defaults(self, start_time: float = 0.0) -> ToolOptions:
        """
        Clip end and output size a GIF job gets when the user sets none.

        Without a probed clip these are the fixed defaults. With one, the
        end stops at the clip's duration and the height follows the clip's
        aspect ratio at the default width (never wider than the clip).
        """
        start = max(0.0, start_time)
        end = start + job_builder.DEFAULT_CLIP_SECONDS
        width, height = job_builder.DEFAULT_GIF_WIDTH, job_builder.DEFAULT_GIF_HEIGHT

        clip = self.clip
        if clip is not None:
            if clip.duration_seconds > start:
                end = min(end, clip.duration_seconds)
            if clip.width > 0 and clip.height > 0:
                width = min(width, clip.width)
                height = max(1, round(width * clip.height / clip.width))

        return ToolOptions(start_time=start, end_time=end, width=width, height=height)

    def gif_estimate(self, options: ToolOptions) -> GifEstimate:
        """Live size estimate for the GIF page, from the values the job would get."""
        options = self._with_gif_defaults(options)
        return gif_estimator.estimate(
            job_builder.clamp("width", options.width, *job_builder.WIDTH_RANGE),
            job_builder.clamp("height", options.height, *job_builder.HEIGHT_RANGE),
            job_builder.clamp("fps", options.fps, *job_builder.FPS_RANGE),
            max(0.0, options.start_time),
            options.end_time,
        )

    def _with_gif_defaults(self, options: ToolOptions) -> ToolOptions:
        defaults = self.gif_defaults(options.start_time)
        return replace(
            options,
            end_time=options.end_time if options.end_time is not None else defaults.end_time,
            width=options.width if options.width is not None else defaults.width,
            height=options.height if options.height is not None else defaults.height,
            fps=options.fps if options.fps is not None else job_builder.DEFAULT_GIF_FPS,
        )

    # ── Jobs ──────────────────────────────────────────────────────────────────

    def submit(self, kind: JobKind, options: ToolOptions) -> JobDescriptor:
        """
        Build and start a job.

        Raises:
            JobInFlightError  – a job from this session is still running
            ValidationError   – the queue or options cannot make a job
        """
        if self.busy:
            raise JobInFlightError()

        if kind is JobKind.VIDEO_TO_GIF:
            options = self._with_gif_defaults(options)
        job = job_builder.build(kind, self._queue, options, self._config.current())
        self._start_job(job)
        return job

    def open_output_folder(self) -> None:
        if self._last_result and self._last_result.output_folder:
            self._backend.open_folder(self._last_result.output_folder)

    # ── Settings ──────────────────────────────────────────────────────────────

    def save_settings(self, config: AppConfig) -> Path:
        """
        Apply and persist *config*, then make sure the export folders exist.

        Raises PersistError if the settings could not be written (they stay
        applied for this run), or OSError if the folders could not be created.
        """
        self._config.save(config)
        return job_builder.create_export_folders(config)

    # ── Worker lifecycle ──────────────────────────────────────────────────────

    def _start_probe(self, item: FileItem) -> None:
        worker = ProbeWorker(self._backend, item, video=self._queue.profile.probes_video, parent=self)
        worker.probed.connect(self._on_probed)
        worker.probe_failed.connect(self._on_probe_failed)
        worker.finished.connect(self._reap_probes)
        self._probes[item.token] = worker
        worker.start()

    def _reap_probes(self) -> None:
        for token, worker in list(self._probes.items()):
            if worker.isFinished():
                del self._probes[token]
                worker.deleteLater()

    def _on_probed(self, token: int, info: PdfInfo | VideoInfo) -> None:
        if isinstance(info, VideoInfo):
            if self._queue.find(token) is None:
                logger.debug("Discarding clip info for removed item (token=%d)", token)
                return
            self._clip = (token, info)
            self.clip_probed.emit(info)
            return

        if not self._queue.backfill_page_count(token, info.page_count):
            logger.debug("Discarding probe result for removed item (token=%d)", token)
            return
        self.item_updated.emit(self._queue.find(token))

    def _on_probe_failed(self, token: int, reason: str) -> None:
        logger.warning("Probe failed (token=%d), using defaults: %s", token, reason)
        if self._queue.backfill_page_count(token, 1):
            self.item_updated.emit(self._queue.find(token))

    def _start_job(self, job: JobDescriptor) -> None:
        worker = JobWorker(self._backend, job, parent=self)
        worker.job_finished.connect(self._on_job_finished)
        self._job_worker = worker
        self.busy_changed.emit(True)
        self.job_started.emit(job)
        worker.start()

    def _on_job_finished(self, result: ConvertResult) -> None:
        logger.info("Job finished: %s", result.message)
        worker, self._job_worker = self._job_worker, None
        if worker is not None:
            worker.wait()
            worker.deleteLater()
        self._last_result = result
        self.busy_changed.emit(False)
        self.job_finished.emit(result)
