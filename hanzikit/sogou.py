"""Recognising download links of the Sogou cell dictionary site."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Union
from urllib.parse import unquote, unquote_to_bytes, urlsplit

DOWNLOAD_HOST_BASE = "download.pinyin.sogou.com"
HOST_BASE = "pinyin.sogou.com"
URL_BASE = "http://" + HOST_BASE + "/dict/"

_DOWNLOAD_PATH_SUFFIX = "/dict/download_cell.php"


class LinkAction(enum.Enum):
    ACCEPT = "accept"
    ALLOW = "allow"
    REDIRECT_HOME = "redirect_home"


@dataclass(frozen=True)
class LinkResult:
    """What to do with a link; name is set for a dictionary download."""

    action: LinkAction
    url: str
    name: str = ""


def decode_name(data: Union[bytes, str]) -> str:
    """Percent-decode ``data`` and read it as UTF-8."""
    if isinstance(data, str):
        data = data.encode("latin-1", errors="replace")
    return unquote_to_bytes(data).decode("utf-8", errors="replace")


def _raw_query_value(query: str, name: str) -> str:
    for part in query.split("&"):
        key, _, value = part.partition("=")
        if key == name:
            return value
    return ""


def classify_link(url: str) -> LinkResult:
    """Decide whether a link is a download, a page to browse, or off-site."""
    parts = urlsplit(url)
    host = parts.hostname or ""
    if host in (DOWNLOAD_HOST_BASE, HOST_BASE) and parts.path.endswith(
        _DOWNLOAD_PATH_SUFFIX
    ):
        dict_id = unquote(_raw_query_value(parts.query, "id"))
        name = decode_name(_raw_query_value(parts.query, "name"))
        if dict_id and name:
            return LinkResult(LinkAction.ACCEPT, url, name)
    if host != HOST_BASE:
        return LinkResult(LinkAction.REDIRECT_HOME, URL_BASE)
    return LinkResult(LinkAction.ALLOW, url)