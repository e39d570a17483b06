from unittest.mock import MagicMock

import pytest
import requests

from errors import FetchFailure
from scraper import PageFetcher, parse_page

HTML = """
<html>
  <head>
    <title>Page Title</title>
    <link rel="shortcut icon" href="/static/fav.png">
    <script>var x = 1;</script>
  </head>
  <body>
    <nav><p>Menu item</p></nav>
    <main>
      <h1>Heading</h1>
      <p>First paragraph.</p>
      <p>Second paragraph.</p>
    </main>
    <footer><p>Copyright</p></footer>
  </body>
</html>
"""


class TestParsePage:

    def test_extracts_title_text_favicon(self):
        page = parse_page(HTML, "https://a.example/x/y", 10000)
        assert page.title == "Page Title"
        assert page.favicon == "https://a.example/static/fav.png"
        assert page.text == "Heading\nFirst paragraph.\nSecond paragraph."

    def test_og_title_preferred(self):
        html = '<html><head><meta property="og:title" content="OG"><title>T</title></head><body><p>x</p></body></html>'
        assert parse_page(html, "https://a.example", 100).title == "OG"

    def test_no_favicon(self):
        page = parse_page("<html><body><p>text</p></body></html>", "https://a.example", 100)
        assert page.favicon is None
        assert page.title == "https://a.example"

    def test_truncates(self):
        page = parse_page("<p>" + "a" * 500 + "</p>", "https://a.example", 100)
        assert len(page.text) == 100


def _fetcher(response=None, error=None):
    session = MagicMock()
    if error:
        session.get.side_effect = error
    else:
        session.get.return_value = response
    return PageFetcher(timeout=1, max_chars=1000, session=session), session


class TestPageFetcher:

    def test_fetch(self):
        fetcher, session = _fetcher(MagicMock(status_code=200, text=HTML))
        page = fetcher.fetch("https://a.example/x")
        assert page.title == "Page Title"
        assert session.get.call_args.kwargs["timeout"] == 1

    def test_http_error(self):
        fetcher, _ = _fetcher(MagicMock(status_code=404, text="nope"))
        with pytest.raises(FetchFailure):
            fetcher.fetch("https://a.example/missing")

    def test_network_error(self):
        fetcher, _ = _fetcher(error=requests.Timeout("slow"))
        with pytest.raises(FetchFailure):
            fetcher.fetch("https://a.example/slow")

    def test_empty_page(self):
        fetcher, _ = _fetcher(MagicMock(status_code=200, text="<html><body></body></html>"))
        with pytest.raises(FetchFailure):
            fetcher.fetch("https://a.example/blank")
