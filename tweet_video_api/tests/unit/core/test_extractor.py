import pytest

from tweet_video_api.core.extractor import TwitsaveExtractor, classify_quality, parse_resolution
from tweet_video_api.tests.samples import EMPTY_HTML, SAMPLE_HTML, STATUS_URL


@pytest.fixture
def extractor():
    return TwitsaveExtractor("https://twitsave.com")


def test_extract_sample_page(extractor):
    result = extractor.extract(SAMPLE_HTML, STATUS_URL)

    assert result.twitter_url == STATUS_URL
    assert result.tweet_info.author == "Jack Dorsey"
    assert result.tweet_info.text == "just setting up my twttr"
    assert result.tweet_info.date == "Mar 21, 2006"
    assert result.tweet_info.tweet_url == "https://twitter.com/jack/status/20"
    assert result.thumbnail == "https://pbs.twimg.com/thumb.jpg"
    assert result.video_preview == "https://video.twimg.com/preview.mp4"

    assert result.total_videos_found == 2
    assert [link.quality for link in result.download_links] == ["hd", "sd"]
    assert [link.resolution for link in result.download_links] == ["1280x720", "640x360"]
    assert result.download_links[0].url == "https://twitsave.com/download?file=aGQ"
    assert all(link.type == "mp4" and link.source == "twitsave" for link in result.download_links)


def test_extract_page_without_links(extractor):
    result = extractor.extract(EMPTY_HTML, STATUS_URL)

    assert result.total_videos_found == 0
    assert result.tweet_info.author == "Unknown"
    assert result.tweet_info.tweet_url == STATUS_URL
    assert result.thumbnail is None
    assert result.video_preview is None


def test_label_falls_back_to_anchor_text(extractor):
    html = '<a href="/download?file=x">Download 480x270 MP4</a>'
    result = extractor.extract(html, STATUS_URL)

    assert result.download_links[0].resolution == "480x270"
    assert result.download_links[0].quality == "low"


def test_unlabelled_link_is_unknown(extractor):
    html = '<a href="/download?file=x"><span class="truncate">Download</span></a>'
    link = extractor.extract(html, STATUS_URL).download_links[0]

    assert link.resolution == "unknown"
    assert link.quality == "unknown"


@pytest.mark.parametrize(
    "label, expected",
    [
        ("Resolution: 1920x1080", "1920x1080"),
        ("resolution:844x360", "844x360"),
        ("MP4 632x270", "632x270"),
        ("1x2 then Resolution: 1280x720", "1280x720"),
        ("HD", "unknown"),
    ],
)
def test_parse_resolution(label, expected):
    assert parse_resolution(label) == expected


@pytest.mark.parametrize(
    "resolution, expected",
    [
        ("1688x720", "hd"),
        ("1280x720", "hd"),
        ("1920x1080", "hd"),
        ("844x360", "sd"),
        ("640x360", "sd"),
        ("632x270", "low"),
        ("480x270", "low"),
        ("720x1280", "unknown"),
        ("unknown", "unknown"),
    ],
)
def test_classify_quality(resolution, expected):
    assert classify_quality(resolution) == expected
