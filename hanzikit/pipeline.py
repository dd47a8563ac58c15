"""A chain of jobs run one after another, stopping at the first failure."""

from __future__ import annotations

import enum
import os
from abc import ABC, abstractmethod
from typing import Callable, Optional, Union


class MessageLevel(enum.Enum):
    INFORMATION = "information"
    WARNING = "warning"
    CRITICAL = "critical"


class PipelineJob(ABC):
    """A step that reports completion through :meth:`finish`."""

    def __init__(self) -> None:
        self.finished_listeners: list[Callable[[bool], None]] = []
        self.message_listeners: list[Callable[[MessageLevel, str], None]] = []

    @abstractmethod
    def start(self) -> None:
        """Begin the work; call :meth:`finish` when it is done."""

    @abstractmethod
    def abort(self) -> None:
        """Stop work in progress."""

    @abstractmethod
    def clean_up(self) -> None:
        """Remove what the job left behind."""

    def finish(self, success: bool) -> None:
        for listener in list(self.finished_listeners):
            listener(success)

    def emit_message(self, level: MessageLevel, text: str) -> None:
        for listener in list(self.message_listeners):
            listener(level, text)


class RenameFile(PipelineJob):
    """Move a file into place."""

    def __init__(
        self,
        source: Union[str, "os.PathLike[str]"],
        target: Union[str, "os.PathLike[str]"],
    ) -> None:
        super().__init__()
        self.source = source
        self.target = target

    def start(self) -> None:
        try:
            os.replace(self.source, self.target)
        except OSError:
            # A failed rename is reported but never finishes the pipeline.
            self.emit_message(MessageLevel.CRITICAL, "Converter crashed.")
            return
        self.finish(True)

    def abort(self) -> None:
        pass

    def clean_up(self) -> None:
        pass


class Pipeline:
    """Runs its jobs in order and reports the overall outcome."""

    def __init__(
        self,
        on_finished: Optional[Callable[[bool], None]] = None,
        on_message: Optional[Callable[[MessageLevel, str], None]] = None,
    ) -> None:
        self.on_finished = on_finished
        self.on_message = on_message
        self._jobs: list[PipelineJob] = []
        self._index = -1

    @property
    def jobs(self) -> list[PipelineJob]:
        return list(self._jobs)

    def add_job(self, job: PipelineJob) -> None:
        self._jobs.append(job)
        job.finished_listeners.append(self._job_finished)
        job.message_listeners.append(self._job_message)

    def _job_finished(self, success: bool) -> None:
        if success:
            self._start_next()
        else:
            self._emit_finished(False)

    def _job_message(self, level: MessageLevel, text: str) -> None:
        if self.on_message is not None:
            self.on_message(level, text)

    def start(self) -> None:
        if not self._jobs:
            raise RuntimeError("pipeline has no jobs")
        self._index = -1
        self._start_next()

    def abort(self) -> None:
        if self._index < 0:
            return
        self._jobs[self._index].abort()
        self._index = -1

    def reset(self) -> None:
        self.abort()
        for job in self._jobs:
            job.finished_listeners.remove(self._job_finished)
            job.message_listeners.remove(self._job_message)
        self._jobs.clear()

    def _start_next(self) -> None:
        if self._index + 1 == len(self._jobs):
            self._emit_finished(True)
            return
        self._index += 1
        self._jobs[self._index].start()

    def _emit_finished(self, result: bool) -> None:
        for job in self._jobs:
            job.clean_up()
        if self.on_finished is not None:
            self.on_finished(result)