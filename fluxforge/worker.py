"""
fluxforge.worker
~~~~~~~~~~~~~~~~
QThreads that run one blocking backend call each and report back through
signals, so the UI thread never waits on the converter.

ProbeWorker signals
-------------------
probed(int, object)        item token, PdfInfo or VideoInfo
probe_failed(int, str)     item token, human-readable reason

JobWorker signals
-----------------
job_finished(object)       the folded ConvertResult (always emitted once)
"""

from __future__ import annotations

import logging

from PySide6.QtCore import QThread, Signal

from fluxforge.backend import ConverterBackend
from fluxforge.models import ConvertResult, FileItem, JobDescriptor
from fluxforge.runner import run_job

logger = logging.getLogger(__name__)


class ProbeWorker(QThread):

    probed       = Signal(int, object)
    probe_failed = Signal(int, str)

    def __init__(self, backend: ConverterBackend, item: FileItem, video: bool = False, parent=None):
        super().__init__(parent)
        self._backend = backend
        self._video   = video
        # Copy what the thread needs; the FileItem itself stays on the UI side.
        self._token = item.token
        self._path  = item.path

    def run(self):
        logger.debug("Probing '%s' (token=%d)", self._path.name, self._token)
        try:
            if self._video:
                info = self._backend.get_video_info(self._path)
            else:
                info = self._backend.get_pdf_info(self._path)
        except Exception as exc:
            self.probe_failed.emit(self._token, str(exc))
            return
        self.probed.emit(self._token, info)


class JobWorker(QThread):

    job_finished = Signal(object)

    def __init__(self, backend: ConverterBackend, job: JobDescriptor, parent=None):
        super().__init__(parent)
        self._backend = backend
        self._job     = job

    def run(self):
        try:
            result = run_job(self._job, self._backend)
        except Exception as exc:
            logger.exception("Job %s crashed", self._job.kind.value)
            result = ConvertResult(False, (), self._job.output_folder, str(exc))
        self.job_finished.emit(result)
