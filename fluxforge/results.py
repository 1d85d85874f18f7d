"""
fluxforge.results
~~~~~~~~~~~~~~~~~
Folds converter outcomes into the single ConvertResult shown to the user.

An outcome is whatever one backend call produced:
  - a ConvertResult
  - the backend's raw mapping {success, output_files, output_folder, message}
  - the exception the call raised

Output files keep the order of the outcomes, which is the order of the
input files. Success means at least one file came out, whatever the
backend reported. An outcome that failed but still produced files is
"partial": its files are kept and it is counted as a failure in the message.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Iterable, Mapping

from fluxforge.models import ConvertResult

logger = logging.getLogger(__name__)

Outcome = ConvertResult | Mapping[str, Any] | BaseException


def aggregate(
    outcomes: Outcome | Iterable[Outcome],
    output_folder: Path | None = None,
) -> ConvertResult:
    """
    Fold one or many outcomes into one ConvertResult.

    *output_folder* is used when no outcome names a folder of its own.
    """
    if isinstance(outcomes, (ConvertResult, Mapping, BaseException)):
        outcomes = [outcomes]
    results = [normalize(o) for o in outcomes]

    files: list[Path] = []
    failures: list[ConvertResult] = []
    for result in results:
        files.extend(result.output_files)
        if not result.success or result.partial:
            failures.append(result)

    folder = next((r.output_folder for r in results if r.output_folder), output_folder)

    if not results:
        return ConvertResult(False, (), folder, "Nothing was converted.")
    if len(results) == 1:
        only = results[0]
        return ConvertResult(bool(files), tuple(files), folder, only.message, only.partial)

    return ConvertResult(
        success=bool(files),
        output_files=tuple(files),
        output_folder=folder,
        message=_compose_message(len(results), files, failures),
        partial=bool(files) and bool(failures),
    )


def normalize(outcome: Outcome) -> ConvertResult:
    """Turn any single outcome into a ConvertResult with success == bool(files)."""
    if isinstance(outcome, BaseException):
        return ConvertResult(False, (), None, str(outcome) or type(outcome).__name__)

    if isinstance(outcome, ConvertResult):
        if outcome.output_files and not outcome.success:
            return replace(outcome, success=True, partial=True)
        return outcome

    files = tuple(Path(f) for f in outcome.get("output_files") or ())
    folder = outcome.get("output_folder")
    message = str(outcome.get("message") or "")
    reported = bool(outcome.get("success"))
    if reported and not files:
        logger.warning("Backend reported success without output files")
        message = message or "The converter reported success but produced no files."
    if not reported and files:
        logger.warning("Backend reported a failure but produced %d file(s)", len(files))
        message = message or "Some pages or files could not be converted."
    if not files and not message:
        message = "Conversion failed."
    return ConvertResult(
        success=bool(files),
        output_files=files,
        output_folder=Path(folder) if folder else None,
        message=message,
        partial=bool(files) and not reported,
    )


def _compose_message(total: int, files: list[Path], failures: list[ConvertResult]) -> str:
    succeeded = total - len(failures)
    if not failures:
        return f"Converted {total} inputs into {len(files)} files."
    detail = failures[0].message
    if not files:
        return f"All {total} inputs failed. First error: {detail}"
    return (
        f"Converted {succeeded} of {total} inputs into {len(files)} files; "
        f"{len(failures)} failed. First error: {detail}"
    )
