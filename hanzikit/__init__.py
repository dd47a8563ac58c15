"""Custom phrase dictionaries, job pipelines and pinyin dictionary file management."""

__version__ = "0.1.0"