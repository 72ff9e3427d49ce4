"""Sports widget helpers: team keys, colours, records, and game status."""

import logging
import re
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from integrations.parsing_utils import parse_iso_datetime

logger = logging.getLogger(__name__)

DEFAULT_PRIMARY_COLOR = "#EAB308"
DEFAULT_SECONDARY_COLOR = "#F97316"
DEFAULT_PRIMARY_RGB = (234, 179, 8)
DARK_TEXT = "dark"
LIGHT_TEXT = "light"
LUMINANCE_THRESHOLD = 128

# ESPN status.type.id for a game in progress
LIVE_STATUS_ID = "2"
LIVE_INDICATORS = ("live", "in progress", "qtr", "quarter", "inning", "period", "halftime")
NOT_STARTED_OR_DONE = ("final", "scheduled", "postponed")

_HEX_RE = re.compile(r"^([0-9a-f]{2})([0-9a-f]{2})([0-9a-f]{2})$", re.IGNORECASE)


def team_key(team_id: Any, sport: str, league: str) -> str:
    """Composite ``{id}-{sport}-{league}`` key."""
    return f"{team_id}-{sport}-{league}"


def normalize_hex_color(color: Optional[str], default: str = DEFAULT_PRIMARY_COLOR) -> str:
    """Ensure a leading ``#``; blank or missing colours become ``default``."""
    if color is None or not color.strip():
        return default
    trimmed = color.strip()
    return trimmed if trimmed.startswith("#") else f"#{trimmed}"


def hex_to_rgb(color: Optional[str]) -> tuple[int, int, int]:
    """Parse ``#rgb`` / ``#rrggbb``; unparseable input maps to the default colour."""
    clean = (color or "").strip().lstrip("#")
    if len(clean) == 3:
        clean = "".join(ch * 2 for ch in clean)
    match = _HEX_RE.match(clean)
    if not match:
        return DEFAULT_PRIMARY_RGB
    return tuple(int(part, 16) for part in match.groups())  # type: ignore[return-value]


def text_color_for(color: Optional[str]) -> str:
    """``dark`` text on bright backgrounds, ``light`` text otherwise."""
    r, g, b = hex_to_rgb(normalize_hex_color(color))
    brightness = 0.299 * r + 0.587 * g + 0.114 * b
    return DARK_TEXT if brightness > LUMINANCE_THRESHOLD else LIGHT_TEXT


def team_colors(team: dict) -> dict:
    primary = normalize_hex_color(team.get("color"), DEFAULT_PRIMARY_COLOR)
    secondary = normalize_hex_color(team.get("alternateColor"), DEFAULT_SECONDARY_COLOR)
    return {"primary": primary, "secondary": secondary, "text": text_color_for(primary)}


def extract_record(team: Optional[dict]) -> Optional[dict]:
    """Season record from ``team.record.items[0]``."""
    items = ((team or {}).get("record") or {}).get("items") or []
    if not items:
        return None
    item = items[0]
    stats = {s.get("name"): s.get("value") for s in item.get("stats") or [] if isinstance(s, dict)}
    wins = int(stats.get("wins") or 0)
    losses = int(stats.get("losses") or 0)
    ties = int(stats["ties"]) if stats.get("ties") else None
    display = item.get("summary") or f"{wins}-{losses}" + (f"-{ties}" if ties else "")
    return {"wins": wins, "losses": losses, "ties": ties, "displayValue": display}


def _status_type(competition: dict) -> dict:
    return ((competition.get("status") or {}).get("type")) or {}


def _score(competitor: dict) -> Optional[int]:
    value = competitor.get("score")
    if isinstance(value, dict):
        value = value.get("value") or value.get("displayValue")
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return None


def is_game_live(event: dict) -> bool:
    """Heuristic in-progress check for an ESPN scoreboard/schedule event."""
    competition = (event.get("competitions") or [{}])[0]
    status = _status_type(competition) or _status_type(event)

    if str(status.get("id")) == LIVE_STATUS_ID or status.get("state") == "in":
        return True

    description = " ".join(
        str(status.get(field) or "") for field in ("description", "detail", "shortDetail", "name")
    ).lower()
    if status.get("completed") is True or "final" in description:
        return False
    if any(indicator in description for indicator in LIVE_INDICATORS):
        return True
    if re.search(r"\bend\b", description):
        return True

    if any(word in description for word in NOT_STARTED_OR_DONE) or status.get("state") in ("pre", "post"):
        return False
    scores = [_score(c) for c in competition.get("competitors") or []]
    return any(score for score in scores)


def summarize_game(event: dict) -> dict:
    """Home/away summary of one event; scores only for live games."""
    competition = (event.get("competitions") or [{}])[0]
    competitors = competition.get("competitors") or []
    home = next((c for c in competitors if c.get("homeAway") == "home"), {})
    away = next((c for c in competitors if c.get("homeAway") == "away"), {})
    status = _status_type(competition)
    live = is_game_live(event)

    def _name(comp: dict) -> str:
        team = comp.get("team") or {}
        return team.get("displayName") or team.get("name") or "TBD"

    return {
        "eventId": event.get("id"),
        "date": event.get("date"),
        "homeTeam": _name(home),
        "awayTeam": _name(away),
        "homeScore": _score(home) if live else None,
        "awayScore": _score(away) if live else None,
        "status": status.get("description") or status.get("shortDetail") or "Scheduled",
        "isLive": live,
    }


def _involves_team(event: dict, team_id: str) -> bool:
    competition = (event.get("competitions") or [{}])[0]
    return any(
        str((c.get("team") or {}).get("id")) == str(team_id)
        for c in competition.get("competitors") or []
    )


def find_current_game(
    scoreboard: Optional[dict],
    schedule: Optional[dict],
    team_id: str,
    now: Optional[datetime] = None,
) -> Optional[dict]:
    """Today's game from the scoreboard, else the next scheduled game."""
    for event in (scoreboard or {}).get("events") or []:
        if _involves_team(event, team_id):
            return summarize_game(event)

    now = now or datetime.now(timezone.utc)
    for event in (schedule or {}).get("events") or []:
        when = parse_iso_datetime(event.get("date"))
        if when is not None and when >= now:
            return summarize_game(event)
    return None


def sort_teams(teams: Iterable[dict], favorite_keys: Iterable[str]) -> list[dict]:
    """Favourites first, then alphabetical by name."""
    favorites = set(favorite_keys)
    return sorted(teams, key=lambda t: (t.get("id") not in favorites, (t.get("name") or "").lower()))


def any_live(teams: Iterable[dict]) -> bool:
    return any((team.get("game") or {}).get("isLive") for team in teams)
