"""Managing the pinyin dictionaries installed for the user.

Dictionaries are imported through a :class:`~hanzikit.pipeline.Pipeline`:
an optional download, one or two conversion steps, then a rename of the
converted temporary file into the dictionary directory. The conversion steps
are plain callables ``converter(input_path, output_path)``. A converter
reports failure by returning ``False`` and a crash by raising.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Any, Callable, Iterable, Optional, Union

from .dictfiles import DICT_SUFFIX, DictionaryFileList
from .downloader import FileDownloader
from .pipeline import MessageLevel, Pipeline, PipelineJob, RenameFile

PathLike = Union[str, "os.PathLike[str]"]
Converter = Callable[[str, str], Any]

DICTIONARY_SUBDIR = "pinyin/dictionaries"
_TEMPLATE_MARK = "XXXXXX"


class DictManagerError(Exception):
    """A dictionary operation could not be carried out."""


def default_import_name(path: PathLike, suffix: str) -> str:
    """File name of ``path`` with ``suffix`` stripped when it ends with it."""
    name = Path(path).name
    if suffix and name.endswith(suffix):
        name = name[: -len(suffix)]
    return name


class _ConverterJob(PipelineJob):
    """Runs a converter and removes its output file on clean-up."""

    def __init__(self, converter: Converter, source: str, output: str) -> None:
        super().__init__()
        self.converter = converter
        self.source = source
        self.output = output

    def start(self) -> None:
        try:
            result = self.converter(self.source, self.output)
        except Exception:
            self.emit_message(MessageLevel.CRITICAL, "Converter crashed.")
            self.finish(False)
            return
        if result is False:
            self.emit_message(MessageLevel.WARNING, "Convert failed.")
            self.finish(False)
            return
        self.finish(True)

    def abort(self) -> None:
        pass

    def clean_up(self) -> None:
        try:
            os.remove(self.output)
        except OSError:
            pass


class PinyinDictManager:
    """Imports, removes and enables the user's pinyin dictionaries."""

    def __init__(
        self,
        user_data_dir: PathLike,
        system_data_dirs: Iterable[PathLike] = (),
        runtime_dir: Optional[PathLike] = None,
        opener: Optional[Callable[..., Any]] = None,
        on_reload: Optional[Callable[[], None]] = None,
        on_message: Optional[Callable[[MessageLevel, str], None]] = None,
    ) -> None:
        self.user_data_dir = Path(user_data_dir)
        self.system_data_dirs = [Path(d) for d in system_data_dirs]
        self.runtime_dir = Path(runtime_dir) if runtime_dir else None
        self.opener = opener
        self.on_reload = on_reload
        self.on_message = on_message
        self.messages: list[tuple[MessageLevel, str]] = []
        self.changed = False
        self.model = DictionaryFileList(
            self.user_dictionary_dir,
            [d / DICTIONARY_SUBDIR for d in self.system_data_dirs],
            on_changed=self._model_changed,
        )
        self.pipeline = Pipeline(
            on_finished=self._pipeline_finished, on_message=self._record_message
        )
        self._last_result: Optional[bool] = None

    @property
    def user_dictionary_dir(self) -> Path:
        return self.user_data_dir / DICTIONARY_SUBDIR

    def _model_changed(self) -> None:
        self.changed = True

    def _record_message(self, level: MessageLevel, text: str) -> None:
        self.messages.append((level, text))
        if self.on_message is not None:
            self.on_message(level, text)

    def _pipeline_finished(self, result: bool) -> None:
        self._last_result = result
        self.reload()

    def _run(self, jobs: list[PipelineJob]) -> bool:
        self.pipeline.reset()
        for job in jobs:
            self.pipeline.add_job(job)
        self._last_result = None
        self.pipeline.start()
        return self._last_result is True

    def prepare_directory(self) -> Path:
        """Create the user dictionary directory and return it."""
        directory = self.user_dictionary_dir
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise DictManagerError(
                "Create directory failed. Please check the permission or disk space."
            ) from exc
        return directory

    def prepare_temp_file(self, template: PathLike) -> Path:
        """Create a file named after ``template`` whose trailing XXXXXX is random."""
        template = str(template)
        if template.endswith(_TEMPLATE_MARK):
            template = template[: -len(_TEMPLATE_MARK)]
        directory, prefix = os.path.split(template)
        try:
            fd, name = tempfile.mkstemp(prefix=prefix, dir=directory or None)
        except OSError as exc:
            raise DictManagerError(
                "Creating temp file failed. Please check the permission or disk space."
            ) from exc
        os.close(fd)
        return Path(name)

    def check_overwrite_file(
        self,
        directory: PathLike,
        import_name: str,
        confirm: Optional[Callable[[str], bool]] = None,
    ) -> Optional[Path]:
        """Target path for ``import_name``, or None if overwriting is declined."""
        fullname = Path(directory) / (import_name + DICT_SUFFIX)
        if fullname.exists():
            if confirm is None or not confirm(import_name):
                return None
        return fullname

    def import_from_file(
        self,
        source: PathLike,
        import_name: Optional[str] = None,
        converter: Optional[Converter] = None,
    ) -> bool:
        """Convert a text dictionary into the dictionary directory."""
        if converter is None:
            raise DictManagerError("no converter given")
        if import_name is None:
            import_name = default_import_name(source, ".txt")
        if not import_name:
            raise DictManagerError("empty dictionary name")
        directory = self.prepare_directory()
        fullname = directory / (import_name + DICT_SUFFIX)
        temp_file = self.prepare_temp_file(str(fullname) + "_" + _TEMPLATE_MARK)
        return self._run(
            [
                _ConverterJob(converter, str(source), str(temp_file)),
                RenameFile(temp_file, fullname),
            ]
        )

    def import_from_url(
        self,
        url: str,
        import_name: str,
        scel_converter: Converter,
        converter: Converter,
        confirm: Optional[Callable[[str], bool]] = None,
    ) -> bool:
        """Download a cell dictionary, convert it twice and install it."""
        if not import_name:
            raise DictManagerError("empty dictionary name")
        directory = self.prepare_directory()
        if self.runtime_dir is None:
            raise DictManagerError("Failed to get runtime directory")
        fullname = self.check_overwrite_file(directory, import_name, confirm)
        if fullname is None:
            return False

        created: list[Path] = []
        try:
            for template in (
                str(fullname) + "_" + _TEMPLATE_MARK,
                self.runtime_dir / ("scel_txt_" + _TEMPLATE_MARK),
                self.runtime_dir / ("scel_" + _TEMPLATE_MARK),
            ):
                created.append(self.prepare_temp_file(template))
        except DictManagerError:
            for path in created:
                path.unlink(missing_ok=True)
            raise
        temp_file, txt_file, scel_file = created

        return self._run(
            [
                FileDownloader(url, scel_file, opener=self.opener),
                _ConverterJob(scel_converter, str(scel_file), str(txt_file)),
                _ConverterJob(converter, str(txt_file), str(temp_file)),
                RenameFile(temp_file, fullname),
            ]
        )

    def _locate(self, file_name: str) -> Optional[Path]:
        for base in [self.user_data_dir, *self.system_data_dirs]:
            candidate = base / DICTIONARY_SUBDIR / file_name
            if candidate.exists():
                return candidate
        return None

    def remove_dict(self, file_name: str) -> None:
        """Delete the dictionary file ``file_name`` and reload the list."""
        path = self._locate(file_name)
        try:
            if path is None:
                raise FileNotFoundError(file_name)
            path.unlink()
        except OSError as exc:
            display = default_import_name(file_name, DICT_SUFFIX)
            raise DictManagerError(f"Error while deleting {display}.") from exc
        self.reload()

    def remove_all_dicts(self) -> None:
        """Delete every listed dictionary that can be deleted."""
        for row in range(self.model.row_count()):
            path = self._locate(self.model.file_name(row))
            if path is None:
                continue
            try:
                path.unlink()
            except OSError:
                pass
        self.reload()

    def reload(self) -> None:
        """Rescan the dictionaries and notify that they changed."""
        self.model.load_file_list()
        if self.on_reload is not None:
            self.on_reload()

    def save(self) -> None:
        """Write the enabled state of every dictionary."""
        self.model.save()
        self.changed = False