"""A pipeline job that downloads a URL into a file."""

from __future__ import annotations

import os
import urllib.request
from pathlib import Path
from typing import Any, Callable, Optional, Union
from urllib.parse import urlsplit

from .pipeline import MessageLevel, PipelineJob

_CHUNK_SIZE = 64 * 1024


def _default_opener(request: urllib.request.Request) -> Any:
    return urllib.request.urlopen(request, timeout=60)


class FileDownloader(PipelineJob):
    """Fetch ``url`` into ``dest``, reporting progress in steps of 10%."""

    def __init__(
        self,
        url: str,
        dest: Union[str, "os.PathLike[str]"],
        opener: Optional[Callable[[urllib.request.Request], Any]] = None,
    ) -> None:
        super().__init__()
        self.url = url
        self.dest = Path(dest)
        self.opener = opener or _default_opener
        self.progress = 0
        self._aborted = False

    def start(self) -> None:
        self._aborted = False
        self.progress = 0
        try:
            out = open(self.dest, "wb")
        except OSError:
            self.emit_message(MessageLevel.WARNING, "Create temporary file failed.")
            self.finish(False)
            return
        with out:
            self.emit_message(MessageLevel.INFORMATION, "Temporary file created.")
            parts = urlsplit(self.url)
            request = urllib.request.Request(
                self.url,
                headers={"Referer": f"{parts.scheme}://{parts.hostname or ''}"},
            )
            try:
                response = self.opener(request)
            except (OSError, ValueError):
                self.emit_message(
                    MessageLevel.WARNING, "Failed to create request."
                )
                self.finish(False)
                return
            self.emit_message(MessageLevel.INFORMATION, "Download started.")
            with response:
                total = _content_length(response)
                downloaded = 0
                while not self._aborted:
                    chunk = response.read(_CHUNK_SIZE)
                    if not chunk:
                        break
                    out.write(chunk)
                    downloaded += len(chunk)
                    self.update_progress(downloaded, total)
        if self._aborted:
            return
        self.emit_message(MessageLevel.INFORMATION, "Download Finished")
        self.finish(True)

    def abort(self) -> None:
        self._aborted = True

    def clean_up(self) -> None:
        self.dest.unlink(missing_ok=True)

    def update_progress(self, downloaded: int, total: int) -> None:
        """Report the percentage once it has grown by at least ten."""
        if total <= 0:
            return
        percent = min(int(downloaded / total * 100), 100)
        if percent >= self.progress + 10:
            self.emit_message(MessageLevel.INFORMATION, f"{percent}% Downloaded.")
            self.progress = percent


def _content_length(response: Any) -> int:
    headers = getattr(response, "headers", None)
    if headers is None:
        return -1
    value = headers.get("Content-Length")
    try:
        return int(value) if value is not None else -1
    except ValueError:
        return -1