"""
Conference-Hall export loader.
Parses the JSON export of a CFP into an Event and its ProposalRecords.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo

from .errors import InvalidInputError
from .geo import Locator
from .proposal import Event, ProposalRecord

logger = logging.getLogger(__name__)

AUDIENCE_LEVELS = {
    "beginner": "Débutant",
    "intermediate": "Intermédiaire",
    "advanced": "Avancé",
}

LANGUAGES = {
    "French": "🇫🇷",
    "français": "🇫🇷",
    "Frafra": "🇫🇷",
    "English": "🇬🇧",
    "English or French (any preferences?)": "🇫🇷/🇬🇧",
}


def parse_language(language: Optional[str]) -> str:
    """Flag for the talk language. French when the speaker left it empty."""
    if not language or not language.strip():
        return LANGUAGES["French"]
    if language not in LANGUAGES:
        raise InvalidInputError(f"{language} is not a known language")
    return LANGUAGES[language]


def speaker_label(speaker: dict, locate: Locator) -> str:
    """Name, city and company of a speaker, e.g. "Anne Course - Lormont, France 🍷"."""
    label = speaker.get("displayName") or speaker.get("email", "")
    label += " -"

    address = speaker.get("address")
    if not address:
        label += " 🗺️"
    else:
        lat_lng = address.get("latLng") or {}
        location = locate(
            float(lat_lng.get("lat") or 0),
            float(lat_lng.get("lng") or 0),
            address.get("formattedAddress") or "",
        )
        label += f" {location.city}"
        # Speakers from the Gironde area should be identified clearly, a glass of wine should do the trick
        if location.is_in_gironde():
            label += " 🍷"

    if speaker.get("company"):
        label += f" ({speaker['company']})"
    return label


def parse_organizer_messages(threads: list[dict], timezone: str = "Europe/Paris") -> tuple[str, ...]:
    """Organizer messages, newest first, signed and dated."""
    tz = ZoneInfo(timezone)
    ordered = sorted(threads, key=lambda t: t.get("date", {}).get("_seconds", 0), reverse=True)

    messages = []
    for thread in ordered:
        date = thread.get("date", {})
        timestamp = date.get("_seconds", 0) + date.get("_nanoseconds", 0) / 1e9
        when = datetime.fromtimestamp(timestamp, tz).strftime("le %d/%m à %Hh%M")
        messages.append(f"{thread.get('message', '')}\n--\n**{thread.get('displayName', '')}** _{when}_")
    return tuple(messages)


def parse_export(data: dict, locate: Locator, timezone: str = "Europe/Paris") -> Event:
    """Build the Event of a Conference-Hall export.

    Unknown category or format ids give an empty label; an unknown speaker
    or language raises InvalidInputError.
    """
    categories = {c["id"]: c["name"] for c in data.get("categories", [])}
    formats = {f["id"]: f["name"] for f in data.get("formats", [])}
    speakers = {s["uid"]: speaker_label(s, locate) for s in data.get("speakers", [])}

    proposals = []
    for talk in data.get("talks", []):
        speaker_labels = []
        for uid in talk.get("speakers", []):
            if uid not in speakers:
                raise InvalidInputError(f"Speaker {uid} of talk {talk.get('id')} not found in speakers")
            speaker_labels.append(speakers[uid])

        proposals.append(ProposalRecord(
            id=talk["id"],
            title=(talk.get("title") or "").strip(" "),
            category=categories.get(talk.get("categories"), ""),
            format=formats.get(talk.get("formats"), ""),
            abstract=talk.get("abstract") or "",
            audience_level=AUDIENCE_LEVELS.get(talk.get("level"), ""),
            language=parse_language(talk.get("language")),
            speakers=" / ".join(speaker_labels),
            rating=float(talk.get("rating") or 0),
            loves=int(talk.get("loves") or 0),
            hates=int(talk.get("hates") or 0),
            private_message=talk.get("comments") or "",
            organizer_messages=parse_organizer_messages(talk.get("organizersThread") or [], timezone),
        ))

    return Event(
        name=data.get("name", ""),
        proposals=tuple(proposals),
        formats=tuple(sorted(formats.values())),
        categories=tuple(sorted(categories.values())),
    )


def load_event(path: str, locate: Locator, timezone: str = "Europe/Paris") -> Event:
    """Read and parse a Conference-Hall export file."""
    logger.info(f"Parsing CFP export from {path}...")
    try:
        with open(Path(path), encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise InvalidInputError(f"Could not read CFP export {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise InvalidInputError(f"CFP export {path} is not valid JSON: {e}") from e

    event = parse_export(data, locate, timezone)
    logger.info(f"Parsed {len(event.proposals)} proposals for event {event.name}")
    return event
