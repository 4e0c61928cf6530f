import pytest

from tweet_video_api.core.identifier import is_supported_url, resolve_id


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://twitter.com/jack/status/20", "20"),
        ("https://x.com/user/status/1234567890123456789?s=20", "1234567890123456789"),
        ("https://twitter.com/user/status/42/video/1", "42"),
        ("https://x.com/a/status/7/status/8", "7"),
        ("https://twitter.com/user", None),
        ("https://twitter.com/user/status/", None),
        ("", None),
    ],
)
def test_resolve_id(url, expected):
    assert resolve_id(url) == expected


def test_resolve_id_is_deterministic():
    url = "https://x.com/someone/status/99887766"
    assert resolve_id(url) == resolve_id(url) == "99887766"


def test_is_supported_url():
    assert is_supported_url("https://twitter.com/jack/status/20")
    assert is_supported_url("https://x.com/jack/status/20")
    assert not is_supported_url("https://example.com/jack/status/20")
    assert not is_supported_url("twitter.com")
