from pathlib import Path

import pytest

from fluxforge.config import ConfigStore
from fluxforge.errors import JobInFlightError, NoInputError, PersistError
from fluxforge.models import AppConfig, ConvertResult, JobKind, PdfInfo, ToolOptions, VideoInfo
from fluxforge.session import ToolSession
from fluxforge.tools import ToolKind

from conftest import MemoryPersistence


@pytest.fixture
def session(qapp, backend, monkeypatch):
    store = ConfigStore(MemoryPersistence())
    store.load()
    s = ToolSession(backend, store)
    # Threads are not started in tests; probes and jobs are driven by hand.
    s.started_probes = []
    s.started_jobs = []
    monkeypatch.setattr(s, "_start_probe", s.started_probes.append)
    monkeypatch.setattr(s, "_start_job", s.started_jobs.append)
    return s


def test_add_files_starts_one_probe_per_accepted_pdf(session) -> None:
    rejected = []
    session.files_rejected.connect(lambda n: rejected.append(n))
    accepted = session.add_files(["a.pdf", "b.txt", "c.pdf"])
    assert [i.name for i in session.started_probes] == ["a.pdf", "c.pdf"]
    assert accepted == session.queue.items()
    assert rejected == [1]


def test_late_probe_for_removed_item_is_discarded(session) -> None:
    a, b = session.add_files(["a.pdf", "b.pdf"])
    updated = []
    session.item_updated.connect(lambda item: updated.append(item))

    session.remove_at(0)
    session._on_probed(a.token, PdfInfo(Path("a.pdf"), 9, 0))
    session._on_probed(b.token, PdfInfo(Path("b.pdf"), 4, 0))

    assert [i.page_count for i in session.queue.items()] == [4]
    assert [i.name for i in updated] == ["b.pdf"]


def test_probe_failure_falls_back_to_one_page(session) -> None:
    (item,) = session.add_files(["a.pdf"])
    session._on_probe_failed(item.token, "corrupt")
    assert session.queue.items()[0].page_count == 1


def test_switching_tool_clears_queue(session) -> None:
    session.add_files(["a.pdf"])
    session.set_tool(ToolKind.VIDEO_TO_GIF)
    assert len(session.queue) == 0
    session.add_files(["clip.mp4"])
    assert [i.name for i in session.queue.items()] == ["clip.mp4"]


def test_submit_with_empty_queue_raises_and_starts_nothing(session, backend) -> None:
    with pytest.raises(NoInputError):
        session.submit(JobKind.PDF_TO_IMAGE, ToolOptions())
    assert session.started_jobs == []
    assert backend.calls == []


def test_second_submit_while_busy_is_rejected(session) -> None:
    session.add_files(["a.pdf"])
    # Mimic a running worker.
    session._job_worker = object()
    with pytest.raises(JobInFlightError):
        session.submit(JobKind.PDF_TO_IMAGE, ToolOptions())


def test_submit_builds_job_from_current_config(session) -> None:
    session.add_files(["a.pdf"])
    job = session.submit(JobKind.PDF_TO_IMAGE, ToolOptions())
    assert session.started_jobs == [job]
    assert job.options.dpi == AppConfig().default_pdf_dpi


def test_job_finished_clears_busy_and_opens_folder(session, backend) -> None:
    states, results = [], []
    session.busy_changed.connect(lambda busy: states.append(busy))
    session.job_finished.connect(lambda r: results.append(r))
    session._job_worker = None
    result = ConvertResult(True, (Path("/out/a.gif"),), Path("/out"), "done")

    session._on_job_finished(result)
    session.open_output_folder()

    assert session.busy is False
    assert states == [False]
    assert results == [result]
    assert backend.opened == [Path("/out")]


def test_gif_estimate_uses_job_defaults(session) -> None:
    est = session.gif_estimate(ToolOptions())
    assert est.frame_count == 900


def test_replaced_clips_are_not_reported_as_rejected(session) -> None:
    session.set_tool(ToolKind.VIDEO_TO_GIF)
    rejected = []
    session.files_rejected.connect(lambda n: rejected.append(n))

    session.add_files(["a.mp4", "b.mov", "c.webm"])
    assert rejected == []
    assert [i.name for i in session.queue.items()] == ["c.webm"]

    session.add_files(["d.mp4", "readme.txt"])
    assert rejected == [1]


def test_clip_info_is_requested_on_add(session) -> None:
    session.set_tool(ToolKind.VIDEO_TO_GIF)
    (item,) = session.add_files(["clip.mp4"])
    assert session.started_probes == [item]


def test_clip_info_sets_gif_defaults(session) -> None:
    session.set_tool(ToolKind.VIDEO_TO_GIF)
    (item,) = session.add_files(["clip.mp4"])
    clips = []
    session.clip_probed.connect(lambda info: clips.append(info))

    info = VideoInfo(Path("clip.mp4"), 12.0, 1280, 720, 30.0)
    session._on_probed(item.token, info)

    assert clips == [info]
    defaults = session.gif_defaults()
    assert (defaults.end_time, defaults.width, defaults.height) == (12.0, 480, 270)

    job = session.submit(JobKind.VIDEO_TO_GIF, ToolOptions(start_time=2))
    assert job.options.end_time == 12.0
    assert (job.options.width, job.options.height) == (480, 270)


def test_clip_narrower_than_default_width_keeps_its_aspect(session) -> None:
    session.set_tool(ToolKind.VIDEO_TO_GIF)
    (item,) = session.add_files(["phone.mp4"])
    session._on_probed(item.token, VideoInfo(Path("phone.mp4"), 90.0, 360, 640, 30.0))
    defaults = session.gif_defaults()
    assert (defaults.end_time, defaults.width, defaults.height) == (60.0, 360, 640)


def test_clip_info_for_replaced_clip_is_discarded(session) -> None:
    session.set_tool(ToolKind.VIDEO_TO_GIF)
    (old,) = session.add_files(["old.mp4"])
    session.add_files(["new.mp4"])
    session._on_probed(old.token, VideoInfo(Path("old.mp4"), 5.0, 640, 480, 25.0))
    assert session.clip is None
    assert session.gif_defaults().end_time == 60.0


def test_gif_estimate_matches_the_clamped_job(session) -> None:
    est = session.gif_estimate(ToolOptions(width=0, height=10, fps=120, end_time=1))
    assert est.frame_count == 30
    assert est == session.gif_estimate(ToolOptions(width=1, height=10, fps=30, end_time=1))


class _StubWorker:
    def __init__(self, finished: bool):
        self.finished = finished
        self.deleted = False

    def isFinished(self) -> bool:
        return self.finished

    def deleteLater(self) -> None:
        self.deleted = True


def test_finished_metadata_workers_are_released(session) -> None:
    done, running = _StubWorker(True), _StubWorker(False)
    session._probes = {1: done, 2: running}
    session._reap_probes()
    assert session._probes == {2: running}
    assert done.deleted is True
    assert running.deleted is False


def test_save_settings_persists_and_creates_export_tree(qapp, backend, tmp_path) -> None:
    persistence = MemoryPersistence()
    store = ConfigStore(persistence)
    store.load()
    session = ToolSession(backend, store)
    config = AppConfig(export_folder=str(tmp_path), auto_create_date_folders=False, default_pdf_dpi=300)

    base = session.save_settings(config)

    assert store.current() == config
    assert persistence.writes[-1]["default_pdf_dpi"] == 300
    assert base == tmp_path / "FluxForge"
    assert (base / "PDF_Images").is_dir()
    assert (base / "GIF").is_dir()


def test_save_settings_failure_keeps_settings_applied(qapp, backend, tmp_path) -> None:
    store = ConfigStore(MemoryPersistence(fail_write=True))
    store.load()
    session = ToolSession(backend, store)
    config = AppConfig(export_folder=str(tmp_path))

    with pytest.raises(PersistError):
        session.save_settings(config)
    assert store.current() == config
