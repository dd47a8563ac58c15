import io

from hanzikit.downloader import FileDownloader
from hanzikit.pipeline import MessageLevel, Pipeline


class _Response(io.BytesIO):
    def __init__(self, data, headers=None, on_read=None):
        super().__init__(data)
        self.headers = headers or {}
        self.on_read = on_read

    def read(self, size=-1):
        chunk = super().read(size)
        if self.on_read is not None:
            self.on_read()
        return chunk


def _watch(job):
    finished, messages = [], []
    job.finished_listeners.append(finished.append)
    job.message_listeners.append(lambda level, text: messages.append((level, text)))
    return finished, messages


def test_download_from_file_url(tmp_path):
    source = tmp_path / "source.bin"
    payload = bytes(range(256)) * 10
    source.write_bytes(payload)
    dest = tmp_path / "dest.bin"
    job = FileDownloader(source.as_uri(), dest)
    finished, messages = _watch(job)
    job.start()
    assert finished == [True]
    assert dest.read_bytes() == payload
    texts = [text for _, text in messages]
    assert texts[0] == "Temporary file created."
    assert texts[1] == "Download started."
    assert texts[-1] == "Download Finished"


def test_referer_header_uses_scheme_and_host(tmp_path):
    seen = []

    def opener(request):
        seen.append(request.get_header("Referer"))
        return _Response(b"data")

    job = FileDownloader("http://pinyin.sogou.com/dict/x?id=1", tmp_path / "d", opener)
    job.start()
    assert seen == ["http://pinyin.sogou.com"]
    assert (tmp_path / "d").read_bytes() == b"data"


def test_unwritable_destination_fails(tmp_path):
    job = FileDownloader("http://example.com/x", tmp_path / "no" / "such" / "file")
    finished, messages = _watch(job)
    job.start()
    assert finished == [False]
    assert messages == [(MessageLevel.WARNING, "Create temporary file failed.")]


def test_request_failure_fails(tmp_path):
    def opener(request):
        raise OSError("unreachable")

    job = FileDownloader("http://example.com/x", tmp_path / "d", opener)
    finished, messages = _watch(job)
    job.start()
    assert finished == [False]
    assert messages[-1] == (MessageLevel.WARNING, "Failed to create request.")


def test_progress_reported_in_steps():
    job = FileDownloader("http://example.com/x", "unused")
    _, messages = _watch(job)
    job.update_progress(5, 0)
    job.update_progress(5, 100)
    assert messages == []
    job.update_progress(50, 100)
    job.update_progress(55, 100)
    assert [text for _, text in messages] == ["50% Downloaded."]
    job.update_progress(300, 100)
    assert job.progress == 100


def test_abort_stops_without_finishing(tmp_path):
    dest = tmp_path / "d"
    job = FileDownloader("http://example.com/x", dest)
    response = _Response(b"x" * 200_000, on_read=job.abort)
    job.opener = lambda request: response
    finished, _ = _watch(job)
    job.start()
    assert finished == []
    assert 0 < dest.stat().st_size < 200_000


def test_clean_up_removes_file(tmp_path):
    dest = tmp_path / "d"
    dest.write_bytes(b"left over")
    job = FileDownloader("http://example.com/x", dest)
    job.clean_up()
    assert not dest.exists()
    job.clean_up()
    assert not dest.exists()


def test_runs_in_pipeline(tmp_path):
    source = tmp_path / "s"
    source.write_bytes(b"abc")
    results = []
    pipeline = Pipeline(on_finished=results.append)
    pipeline.add_job(FileDownloader(source.as_uri(), tmp_path / "d"))
    pipeline.start()
    assert results == [True]
    # clean-up after the pipeline removes the downloaded temporary file
    assert not (tmp_path / "d").exists()