"""
fluxforge.runner
~~~~~~~~~~~~~~~~
Executes a JobDescriptor against a ConverterBackend.

Per-file tools (image/SVG export, split, extract, archive extract, GIF)
make one backend call per input so one bad file cannot sink the batch;
merge and compress make a single call with every input. Either way the
outcomes are folded by fluxforge.results.aggregate.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from fluxforge.backend import ConverterBackend
from fluxforge.errors import ConversionError
from fluxforge.models import ConvertResult, JobDescriptor, JobKind
from fluxforge.results import Outcome, aggregate

logger = logging.getLogger(__name__)


def run_job(job: JobDescriptor, backend: ConverterBackend) -> ConvertResult:
    """Run *job* to completion and return the folded result. Never raises ConversionError."""
    logger.info("Running %s on %d input(s) → '%s'", job.kind.value, len(job.inputs), job.output_folder)

    try:
        job.output_folder.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        logger.error("Could not create output folder '%s': %s", job.output_folder, exc)
        return aggregate(
            ConversionError(f"Could not create output folder {job.output_folder}: {exc}"),
            job.output_folder,
        )

    if job.kind in (JobKind.PDF_MERGE, JobKind.ARCHIVE_COMPRESS):
        outcomes = [_attempt(lambda: _call_batch(job, backend))]
    else:
        outcomes = [_attempt(lambda p=path: _call_one(job, backend, p)) for path in job.inputs]

    result = aggregate(outcomes, job.output_folder)
    logger.info("Finished %s: success=%s, %d file(s)", job.kind.value, result.success, len(result.output_files))
    return result


# ── Dispatch ──────────────────────────────────────────────────────────────────

def _call_batch(job: JobDescriptor, backend: ConverterBackend) -> ConvertResult:
    opts = job.options
    if job.kind is JobKind.PDF_MERGE:
        return backend.merge_pdfs(job.inputs, opts.output_name, job.output_folder)
    return backend.create_archive(
        job.inputs, opts.output_name, opts.format, opts.password, job.output_folder,
    )


def _call_one(job: JobDescriptor, backend: ConverterBackend, path: Path) -> ConvertResult:
    opts = job.options
    folder = job.output_folder
    kind = job.kind

    if kind is JobKind.PDF_TO_IMAGE:
        return backend.convert_pdf_to_images([path], opts, folder)
    if kind is JobKind.PDF_TO_SVG:
        return backend.convert_pdf_to_svg([path], opts.pages, folder)
    if kind is JobKind.PDF_SPLIT:
        return backend.split_pdf(path, opts.split_points, folder)
    if kind is JobKind.PDF_EXTRACT:
        name = opts.output_name if len(job.inputs) == 1 else f"{path.stem}_{opts.output_name}"
        return backend.extract_pdf_pages(path, opts.pages, name, folder)
    if kind is JobKind.ARCHIVE_EXTRACT:
        return backend.extract_archive(path, opts.password, folder)
    if kind is JobKind.VIDEO_TO_GIF:
        return backend.convert_video_to_gif(path, opts, folder)
    raise ConversionError(f"No backend operation for {kind.value}")


def _attempt(call: Callable[[], Outcome]) -> Outcome:
    """Run one backend call; a failure becomes an outcome instead of propagating."""
    try:
        return call()
    except Exception as exc:
        logger.warning("Backend call failed: %s", exc)
        return exc
