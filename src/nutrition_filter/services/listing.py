"""Discovery of item detail links on listing pages."""

from dataclasses import dataclass
from urllib.parse import urldefrag, urljoin

from bs4 import BeautifulSoup, Tag

from nutrition_filter.adapters.page_client import PageClient

CARD_SELECTORS = (
    'article[class*="product"]',
    'div[class*="product-card"]',
    'a[href*="/product/"]',
    '[data-testid*="product"]',
)


def discover_source_ids(markup: str, base_url: str) -> list[str]:
    """Return item links from the first card selector that matches."""
    soup = BeautifulSoup(markup, "html.parser")
    cards: list[Tag] = []
    for selector in CARD_SELECTORS:
        cards = soup.select(selector)
        if cards:
            break

    source_ids = []
    for card in cards:
        href = _card_href(card)
        if href:
            source_ids.append(urldefrag(urljoin(base_url, href)).url)
    return source_ids


def _card_href(card: Tag) -> str | None:
    href = card.get("href")
    if isinstance(href, str) and href.strip():
        return href.strip()
    link = card.find("a", href=True)
    if link is None:
        return None
    href = link.get("href")
    return href.strip() if isinstance(href, str) and href.strip() else None


@dataclass
class ListingService:
    """Enumerates candidate items from a listing page."""

    page_client: PageClient

    async def list_source_ids(self, listing_url: str) -> list[str]:
        """Fetch a listing page and return its item links in page order."""
        markup = await self.page_client.fetch_markup(listing_url)
        return discover_source_ids(markup, listing_url)
