# hanzikit

A library for the data files behind a Chinese pinyin input method. It
handles custom phrase files and the set of pinyin dictionaries installed for
a user.

- `hanzikit.customphrase`: reads and writes custom phrase files made of
  `key,order=value` lines and evaluates dynamic phrases.
- `hanzikit.phrasemodel`: an editable row/column table over a custom phrase
  file. It tracks unsaved changes.
- `hanzikit.pipeline`: jobs that run one after another and stop at the first
  failure.
- `hanzikit.dictfiles`, `hanzikit.sogou`, `hanzikit.downloader`,
  `hanzikit.dictmanager`: list the installed `.dict` files and enable or
  disable them. They also recognise cell dictionary download links, download
  files and import dictionaries into the user directory.

The package has no dependencies outside the standard library.

## Installation

```
pip install .
```

## Custom phrases

A custom phrase file holds lines of the form `key,order=value`:

- The key is made of ASCII letters only.
- The order is a non-zero integer. A negative order marks a disabled phrase.
- Lines starting with `#` or `;` are comments.
- An empty value starts a multi-line value. It runs until the next phrase
  line.
- A value in double quotes may use the escapes `\n`, `\\` and `\"`.

```python
import io
from hanzikit.customphrase import CustomPhraseDict

text = """\
# comment
sj,1=#$fullhour:$minute
hi,1=hello
hi,2="line one\\nline two"
"""

phrases = CustomPhraseDict()
phrases.load(io.StringIO(text))

for phrase in phrases.lookup("hi"):
    print(phrase.order, phrase.value)

out = io.StringIO()
phrases.save(out)
print(out.getvalue())
```

Loading details:

- `load(stream, load_disabled=False)` skips disabled phrases unless
  `load_disabled` is true.
- After loading, the enabled orders under each key are sorted and made
  strictly increasing.

Other operations:

- `add_phrase`, `pin_phrase` and `remove_phrase` change the dictionary.
- `items()` yields each key with its phrases, keys in sorted order.
- `save` writes keys in sorted order. It quotes and escapes any value that
  needs it.

A phrase whose value starts with `#` is dynamic. `CustomPhrase.evaluate`
replaces `$name` and `${name}` using a function you supply. `$$` gives a
literal `$`.

```python
from hanzikit.customphrase import CustomPhrase

phrase = CustomPhrase(1, "#${a} and $b")
print(phrase.evaluate(lambda name: {"a": "x", "b": "y"}.get(name, "")))  # x and y
```

`builtin_evaluator(key, now=None)` supplies the built-in date and time
variables for a given `datetime`, or for the current local time if `now` is
not given:

- `year`, `year_yy`, `month`, `month_mm`, `day`, `day_dd`, `weekday`
- `fullhour`, `halfhour`, `ampm`, `minute`, `second`
- the Chinese forms `year_cn`, `year_yy_cn`, `month_cn`, `day_cn`,
  `weekday_cn`, `fullhour_cn`, `halfhour_cn`, `ampm_cn`, `minute_cn`,
  `second_cn`

Unknown names give an empty string.

```python
from datetime import datetime
from functools import partial
from hanzikit.customphrase import CustomPhrase, builtin_evaluator

now = datetime(2023, 7, 11, 23, 16, 6)
phrase = CustomPhrase(1, "#$year_cn年$month_cn月")
print(phrase.evaluate(partial(builtin_evaluator, now=now)))  # 二〇二三年七月
```

## Editing a phrase file

`CustomPhraseModel(path)` holds one `CustomPhraseItem` row per phrase, with
the columns given by `Column` (`ENABLE`, `KEY`, `PHRASE`, `ORDER`).

- `load()` reads the file. Disabled phrases are included, shown with
  `enabled=False`.
- `data`, `set_data`, `add_item`, `delete_item` and `delete_all_items` read
  and change the rows.
- `need_save` reports unsaved changes. `on_need_save_changed` is called
  whenever that flag changes.
- `save()` writes the rows back with a commented help header. It replaces
  the file atomically.

The module-level functions `parse_file(path)` and `save_file(path, items)`
do the same reading and writing without a model.

## Pipelines

A `Pipeline` runs `PipelineJob`s in order:

- A job signals completion by calling `finish(success)`. The next job starts
  only after success.
- When the pipeline ends, every job's `clean_up()` is called, and then
  `on_finished(result)`.
- Messages from jobs are passed to `on_message(level, text)`.

`RenameFile(source, target)` is a job that moves a file into place.

```python
from hanzikit.pipeline import Pipeline, RenameFile

pipeline = Pipeline(on_finished=lambda ok: print("finished:", ok))
pipeline.add_job(RenameFile("work.tmp", "result.dict"))
pipeline.start()
```

If the rename fails, `RenameFile` reports a critical message and does not
finish. The pipeline then stays unfinished.

## Pinyin dictionaries

`DictionaryFileList(user_directory, system_directories)` lists the `*.dict`
files found in those directories, sorted by name. A dictionary is disabled
by a `<name>.dict.disable` marker file. `set_enabled` changes a row, and
`save()` creates or removes the markers in the user directory.

`hanzikit.sogou.classify_link(url)` returns a `LinkResult` with one of these
actions:

- `LinkAction.ACCEPT`: a cell dictionary download link that carries an `id`
  and a `name`. The decoded `name` is set on the result.
- `LinkAction.ALLOW`: another page on the dictionary site.
- `LinkAction.REDIRECT_HOME`: anything off-site. The result's `url` is the
  site's home page.

`FileDownloader(url, dest, opener=None)` is a pipeline job that downloads a
URL into a file and reports progress in steps of 10%. Pass `opener` to
replace `urllib.request.urlopen`.

`PinyinDictManager(user_data_dir, system_data_dirs, runtime_dir)` works on
`pinyin/dictionaries` under those data directories. Its import methods
return `True` when the pipeline succeeds:

- `import_from_file(source, import_name, converter)` converts a file into
  the dictionary directory.
- `import_from_url(url, import_name, scel_converter, converter, confirm)`
  downloads, converts twice and installs. It needs a `runtime_dir`.
  `confirm(name)` is asked before an existing dictionary is overwritten.

Other methods:

- `remove_dict(file_name)` and `remove_all_dicts()` delete dictionary files.
- `save()` writes the enabled state.

Failures raise `DictManagerError`.

## What the package does not do

- It has no graphical editor and no command-line program. It is a library.
- It does not contain a converter that turns text or cell dictionary files
  into binary `.dict` files. The conversion steps of `PinyinDictManager` are
  callables that you supply as `converter(input_path, output_path)`. Such a
  callable reports failure by returning `False` and a crash by raising.
- It does not use dictionaries for input; it only manages their files.

## Running the tests

```
pip install .[test]
pytest
```