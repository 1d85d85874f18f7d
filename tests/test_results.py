from pathlib import Path

import pytest

from fluxforge.errors import ConversionError
from fluxforge.models import ConvertResult
from fluxforge.results import aggregate, normalize

OUT = Path("/out")


def ok(*names: str) -> ConvertResult:
    return ConvertResult(True, tuple(OUT / n for n in names), OUT, "done")


def test_three_successes_and_one_failure() -> None:
    result = aggregate([ok("a.png"), ConversionError("broken file"), ok("b.png"), ok("c.png")])
    assert result.success is True
    assert [p.name for p in result.output_files] == ["a.png", "b.png", "c.png"]
    assert "1 failed" in result.message
    assert "broken file" in result.message
    assert result.output_folder == OUT


def test_output_order_follows_outcome_order() -> None:
    result = aggregate([ok("z_1.png", "z_2.png"), ok("a_1.png")])
    assert [p.name for p in result.output_files] == ["z_1.png", "z_2.png", "a_1.png"]
    assert result.success is True
    assert "failed" not in result.message


def test_all_failures() -> None:
    result = aggregate([ConversionError("x"), ConversionError("y")], output_folder=OUT)
    assert result.success is False
    assert result.output_files == ()
    assert result.output_folder == OUT
    assert "All 2 inputs failed" in result.message


def test_single_outcome_keeps_its_message() -> None:
    assert aggregate(ok("a.gif")).message == "done"
    failed = aggregate(ConversionError("ffmpeg exploded"))
    assert failed.success is False
    assert failed.message == "ffmpeg exploded"


def test_backend_mapping_is_normalized() -> None:
    result = normalize({
        "success": True,
        "output_files": ["/out/a.zip"],
        "output_folder": "/out",
        "message": "compressed",
    })
    assert result == ConvertResult(True, (Path("/out/a.zip"),), Path("/out"), "compressed")


def test_success_without_files_counts_as_failure() -> None:
    result = normalize({"success": True, "output_files": [], "output_folder": "/out"})
    assert result.success is False
    assert result.message


def test_failure_mapping_gets_a_message() -> None:
    assert normalize({"success": False}).message == "Conversion failed."


def test_no_outcomes() -> None:
    result = aggregate([], output_folder=OUT)
    assert result.success is False
    assert result.message


def test_convert_result_invariant() -> None:
    with pytest.raises(ValueError):
        ConvertResult(True, (), OUT, "nothing")


def test_single_partial_reply_keeps_its_files() -> None:
    result = aggregate({
        "success": False,
        "output_files": ["/out/a_1.png", "/out/a_2.png"],
        "output_folder": "/out",
        "message": "1 of 3 pages failed",
    })
    assert result.success is True
    assert result.partial is True
    assert [p.name for p in result.output_files] == ["a_1.png", "a_2.png"]
    assert result.message == "1 of 3 pages failed"


def test_partial_reply_in_a_batch_is_kept_and_counted() -> None:
    partial = {"success": False, "output_files": ["/out/a_1.png"], "message": "page 2 unreadable"}
    result = aggregate([partial, ok("b.png")])
    assert [p.name for p in result.output_files] == ["a_1.png", "b.png"]
    assert result.success is True
    assert result.partial is True
    assert "1 failed" in result.message
    assert "page 2 unreadable" in result.message


def test_failed_result_with_files_is_normalized_to_partial() -> None:
    result = normalize(ConvertResult(False, (OUT / "a.png",), OUT, "late failure"))
    assert result.success is True
    assert result.partial is True
