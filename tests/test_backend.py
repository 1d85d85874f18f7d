import json
import subprocess
from pathlib import Path

import pytest

from fluxforge import backend as backend_module
from fluxforge.backend import CommandBackend, build_backend_command, open_folder_command
from fluxforge.errors import ConversionError, ProbeError
from fluxforge.models import ImageExportOptions

BIN = Path("/opt/fluxforge-backend")


class FakeRun:
    def __init__(self, stdout="", returncode=0, stderr="", exc=None):
        self.stdout = stdout
        self.returncode = returncode
        self.stderr = stderr
        self.exc = exc
        self.commands: list[list[str]] = []

    def __call__(self, cmd, **kwargs):
        self.commands.append(cmd)
        if self.exc:
            raise self.exc
        return subprocess.CompletedProcess(cmd, self.returncode, self.stdout, self.stderr)


@pytest.fixture
def fake_run(monkeypatch):
    def install(**kwargs) -> FakeRun:
        run = FakeRun(**kwargs)
        monkeypatch.setattr(backend_module.subprocess, "run", run)
        return run
    return install


def test_build_backend_command() -> None:
    cmd = build_backend_command("split_pdf", {"path": "/a.pdf", "split_points": [3]}, BIN)
    assert cmd[:2] == [str(BIN), "split_pdf"]
    assert json.loads(cmd[2]) == {"path": "/a.pdf", "split_points": [3]}


def test_backend_bin_env_override(monkeypatch) -> None:
    monkeypatch.setenv("FLUXFORGE_BACKEND", "/custom/backend")
    assert build_backend_command("x", {})[0] == str(Path("/custom/backend"))


def test_convert_pdf_to_images_request_and_reply(fake_run) -> None:
    run = fake_run(stdout=json.dumps({
        "success": True,
        "output_files": ["/out/a_1.jpg", "/out/a_2.jpg"],
        "output_folder": "/out",
        "message": "ok",
    }))
    result = CommandBackend(BIN).convert_pdf_to_images(
        [Path("/in/a.pdf")], ImageExportOptions("jpg", 150, (1, 2)), Path("/out"),
    )
    request = json.loads(run.commands[0][2])
    assert request["options"] == {"format": "jpg", "dpi": 150, "pages": [1, 2]}
    assert request["output_folder"] == str(Path("/out"))
    assert result.output_files == (Path("/out/a_1.jpg"), Path("/out/a_2.jpg"))


def test_reported_failure_raises_conversion_error(fake_run) -> None:
    fake_run(stdout=json.dumps({"success": False, "message": "encrypted PDF"}))
    with pytest.raises(ConversionError, match="encrypted PDF"):
        CommandBackend(BIN).merge_pdfs([Path("a.pdf")], "m.pdf", Path("/out"))


def test_non_zero_exit_raises_conversion_error(fake_run) -> None:
    fake_run(returncode=2, stderr="boom\n")
    with pytest.raises(ConversionError, match="exit 2"):
        CommandBackend(BIN).extract_archive(Path("a.zip"), None, Path("/out"))


def test_missing_executable_raises_conversion_error(fake_run) -> None:
    fake_run(exc=FileNotFoundError("no such file"))
    with pytest.raises(ConversionError):
        CommandBackend(BIN).split_pdf(Path("a.pdf"), [2], Path("/out"))


def test_garbage_output_raises_conversion_error(fake_run) -> None:
    fake_run(stdout="not json")
    with pytest.raises(ConversionError):
        CommandBackend(BIN).create_archive([Path("a")], "a.zip", "zip", None, Path("/out"))


def test_pdf_info_parsed(fake_run) -> None:
    fake_run(stdout=json.dumps({"path": "/in/a.pdf", "page_count": 7, "file_size": 1024}))
    info = CommandBackend(BIN).get_pdf_info(Path("/in/a.pdf"))
    assert info.page_count == 7
    assert info.file_size == 1024


def test_pdf_info_failure_is_a_probe_error(fake_run) -> None:
    fake_run(returncode=1, stderr="cannot open")
    with pytest.raises(ProbeError):
        CommandBackend(BIN).get_pdf_info(Path("/in/a.pdf"))


def test_pdf_info_without_page_count_is_a_probe_error(fake_run) -> None:
    fake_run(stdout=json.dumps({"path": "/in/a.pdf"}))
    with pytest.raises(ProbeError):
        CommandBackend(BIN).get_pdf_info(Path("/in/a.pdf"))


def test_open_folder_failure_is_only_logged(monkeypatch) -> None:
    def explode(*args, **kwargs):
        raise OSError("no file manager")
    monkeypatch.setattr(backend_module.subprocess, "Popen", explode)
    CommandBackend(BIN).open_folder(Path("/out"))


def test_open_folder_command_targets_the_path() -> None:
    assert open_folder_command(Path("/out"))[-1] == str(Path("/out"))


def test_reported_failure_with_files_is_returned_as_partial(fake_run) -> None:
    fake_run(stdout=json.dumps({
        "success": False,
        "output_files": ["/out/a_1.png"],
        "output_folder": "/out",
        "message": "1 of 2 pages failed",
    }))
    result = CommandBackend(BIN).convert_pdf_to_images(
        [Path("/in/a.pdf")], ImageExportOptions("png", 150, (1, 2)), Path("/out"),
    )
    assert result.success is True
    assert result.partial is True
    assert result.output_files == (Path("/out/a_1.png"),)
