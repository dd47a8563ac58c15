from urllib.parse import quote

import pytest

from hanzikit.sogou import (
    HOST_BASE,
    URL_BASE,
    LinkAction,
    classify_link,
    decode_name,
)


def test_home_page_is_browsed():
    result = classify_link("http://pinyin.sogou.com/dict/")
    assert result.action is LinkAction.ALLOW
    assert result.url == URL_BASE
    assert result.name == ""


@pytest.mark.parametrize("text", ["你好", "plain", "a b/c", "植物词汇"])
def test_decode_name_round_trip(text):
    assert decode_name(quote(text)) == text
    assert decode_name(quote(text).encode("ascii")) == text


def test_decode_name_keeps_plus():
    assert decode_name("a+b") == "a+b"


@pytest.mark.parametrize(
    "host", ["download.pinyin.sogou.com", "pinyin.sogou.com"]
)
@pytest.mark.parametrize("prefix", ["/dict", "/d/dict"])
def test_download_link_is_accepted(host, prefix):
    name = "词库"
    url = f"http://{host}{prefix}/download_cell.php?id=15207&name={quote(name)}"
    result = classify_link(url)
    assert result.action is LinkAction.ACCEPT
    assert result.name == name
    assert result.url == url


def test_download_link_without_id_on_main_host_is_browsed():
    url = f"http://{HOST_BASE}/dict/download_cell.php?name={quote('x')}"
    result = classify_link(url)
    assert result.action is LinkAction.ALLOW
    assert result.url == url


def test_download_link_without_name_on_download_host_goes_home():
    url = "http://download.pinyin.sogou.com/dict/download_cell.php?id=1"
    result = classify_link(url)
    assert result.action is LinkAction.REDIRECT_HOME
    assert result.url == URL_BASE


def test_page_on_main_host_is_browsed():
    url = "http://pinyin.sogou.com/dict/cate/index/1"
    assert classify_link(url).action is LinkAction.ALLOW


def test_other_site_goes_home():
    result = classify_link("http://www.example.com/dict/download_cell.php?id=1&name=x")
    assert result.action is LinkAction.REDIRECT_HOME
    assert result.name == ""