"""Team-aware prioritisation and normalisation of ESPN news articles."""

import logging
import re
from datetime import datetime, timezone
from typing import Any, Optional

from integrations.exceptions import IntegrationError

logger = logging.getLogger(__name__)

# Terms at least this long match as substrings; shorter ones need word boundaries.
PHRASE_MATCH_MIN_LENGTH = 5
MIN_TERM_LENGTH = 2

ESPN_WEB_ORIGIN = "https://www.espn.com"

_SEARCH_FIELDS = ("headline", "title", "name", "description", "summary", "byline")


def build_team_terms(team: Optional[dict]) -> list[str]:
    """Search terms identifying a team in article text.

    Uses the team's names, location and abbreviation, plus every word of
    the display name longer than three characters ("Padres" from
    "San Diego Padres").
    """
    if not team:
        return []

    terms: list[str] = []
    for field in ("displayName", "name", "shortDisplayName", "location", "abbreviation"):
        value = team.get(field)
        if value:
            terms.append(value)

    display_name = team.get("displayName") or ""
    terms.extend(part for part in display_name.split(" ") if len(part) > 3)
    return terms


def _search_text(article: dict) -> str:
    return " ".join(str(article.get(field) or "") for field in _SEARCH_FIELDS).lower()


def term_matches(term: str, text: str) -> bool:
    """Match one term against lowercase article text."""
    needle = term.lower().strip()
    if len(needle) < MIN_TERM_LENGTH:
        return False
    if len(needle) >= PHRASE_MATCH_MIN_LENGTH:
        return needle in text
    return re.search(rf"\b{re.escape(needle)}\b", text, re.IGNORECASE) is not None


def is_about_team(article: dict, terms: list[str]) -> bool:
    if not terms:
        return False
    text = _search_text(article)
    return any(term_matches(term, text) for term in terms)


def prioritize_articles(
    articles: list[dict], terms: list[str], limit: Optional[int] = None
) -> list[dict]:
    """Team-related articles first, then the rest; upstream order kept within each."""
    team_articles: list[dict] = []
    other_articles: list[dict] = []
    for article in articles:
        if is_about_team(article, terms):
            team_articles.append(article)
        else:
            other_articles.append(article)

    logger.debug(
        "News partition: %d team-related, %d other", len(team_articles), len(other_articles)
    )
    ordered = team_articles + other_articles
    if limit is not None:
        ordered = ordered[: max(limit, 0)]
    return ordered


def _link(value: Any) -> Optional[str]:
    if isinstance(value, dict):
        return value.get("href")
    return value or None


def _article_url(article: dict, sport: str, league: str) -> str:
    url = article.get("url")
    links = article.get("links")
    if not url and isinstance(links, dict):
        url = _link(links.get("web")) or _link(links.get("espn"))
    url = url or article.get("link") or article.get("href")

    if url and not str(url).startswith("http"):
        url = str(url)
        url = f"{ESPN_WEB_ORIGIN}{url if url.startswith('/') else '/' + url}"
    if not url and article.get("id"):
        url = f"{ESPN_WEB_ORIGIN}/{sport}/{league}/story/_/id/{article['id']}"
    return url or "#"


def _image_url(value: Any) -> Optional[str]:
    if isinstance(value, dict):
        return value.get("url") or value.get("href")
    return value or None


def _article_image(article: dict) -> Optional[str]:
    images = article.get("images")
    if isinstance(images, list) and images:
        return _image_url(images[0])
    if article.get("image"):
        return _image_url(article["image"])
    if article.get("thumbnail"):
        return _image_url(article["thumbnail"])
    return None


def normalize_article(
    article: dict, sport: str, league: str, now: Optional[datetime] = None
) -> dict:
    published = (
        article.get("published")
        or article.get("publishedAt")
        or article.get("date")
        or article.get("createdAt")
        or article.get("lastModified")
        or (now or datetime.now(timezone.utc)).isoformat()
    )
    return {
        "title": article.get("headline") or article.get("title") or article.get("name") or "Untitled",
        "description": article.get("description") or article.get("summary") or "",
        "url": _article_url(article, sport, league),
        "publishedAt": published,
        "image": _article_image(article),
        "byline": article.get("byline") or "",
    }


def get_team_news(
    espn,
    sport: str,
    league: str,
    team_id: Optional[str] = None,
    limit: Optional[int] = None,
) -> list[dict]:
    """News for a league, with articles about ``team_id`` first.

    Team lookup failures are logged and the league news is returned
    unprioritised.
    """
    terms: list[str] = []
    if team_id:
        try:
            terms = build_team_terms(espn.get_team(sport, league, team_id))
        except IntegrationError as e:
            logger.warning("News: team %s lookup failed, skipping prioritisation: %s", team_id, e)

    articles = espn.get_news(sport, league, team_id)
    ordered = prioritize_articles(articles, terms, limit)
    return [normalize_article(article, sport, league) for article in ordered]
