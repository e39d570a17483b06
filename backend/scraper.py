# scraper.py
import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urljoin

import requests
from bs4 import BeautifulSoup

import config
from errors import FetchFailure

logger = logging.getLogger(__name__)

# Browser-like headers so sites don't block us
HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "Cache-Control": "no-cache",
}

NOISE_TAGS = ["script", "style", "noscript", "nav", "header", "footer", "aside", "form", "svg"]


@dataclass
class PageContent:
    title: str
    text: str
    favicon: Optional[str]


class PageFetcher:
    def __init__(self, timeout: float = None, max_chars: int = None, session: requests.Session = None):
        self.timeout = timeout or config.FETCH_TIMEOUT
        self.max_chars = max_chars or config.MAX_PAGE_CHARS
        self.session = session or requests.Session()
        self.session.headers.update(HEADERS)

    def _fetch(self, url: str) -> str:
        try:
            resp = self.session.get(url, timeout=self.timeout, allow_redirects=True)
        except requests.RequestException as e:
            raise FetchFailure(f"Failed to fetch {url}: {e}")
        if resp.status_code != 200:
            raise FetchFailure(f"Failed to fetch {url}: HTTP {resp.status_code}")
        return resp.text

    def fetch(self, url: str) -> PageContent:
        html = self._fetch(url)
        page = parse_page(html, url, self.max_chars)
        if not page.text:
            raise FetchFailure(f"No readable text at {url}")
        logger.info("Fetched %s (%d chars)", url, len(page.text))
        return page


def _title(soup: BeautifulSoup, url: str) -> str:
    og = soup.find("meta", attrs={"property": "og:title"})
    if og and og.get("content", "").strip():
        return og["content"].strip()
    if soup.title and soup.title.get_text(strip=True):
        return soup.title.get_text(strip=True)
    h1 = soup.find("h1")
    if h1 and h1.get_text(strip=True):
        return h1.get_text(strip=True)
    return url


def _favicon(soup: BeautifulSoup, url: str) -> Optional[str]:
    for link in soup.find_all("link", href=True):
        rel = [r.lower() for r in (link.get("rel") or [])]
        if "icon" in rel:
            return urljoin(url, link["href"])
    return None


def parse_page(html: str, url: str, max_chars: int) -> PageContent:
    soup = BeautifulSoup(html, "html.parser")

    title = _title(soup, url)
    favicon = _favicon(soup, url)

    for tag in soup(NOISE_TAGS):
        tag.decompose()

    content = soup.find("main") or soup.find("article") or soup.body or soup

    # Gather paragraphs + headings + list items
    parts = []
    for el in content.select("h1, h2, h3, h4, p, li"):
        text = el.get_text(" ", strip=True)
        if text:
            parts.append(text)
    text_blob = "\n".join(parts)
    if not text_blob:
        text_blob = content.get_text("\n", strip=True)

    if len(text_blob) > max_chars:
        text_blob = text_blob[:max_chars]

    return PageContent(title=title, text=text_blob, favicon=favicon)
