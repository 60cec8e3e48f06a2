"""Tests for the Conference-Hall export loader."""
import json
import pytest
from pathlib import Path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from cfp_trello.cfp_loader import (
    load_event,
    parse_export,
    parse_language,
    parse_organizer_messages,
    speaker_label,
)
from cfp_trello.errors import InvalidInputError
from cfp_trello.geo import Location, fallback_location


def fake_locate(lat, lon, address):
    """Known places only, like a lookup service would."""
    if address.startswith("Lormont"):
        return Location("Lormont", "33249")
    if address.startswith("Nantes"):
        return Location("Nantes", "44109")
    return fallback_location(address)


def sample_export() -> dict:
    return {
        "name": "BDX I/O 2026",
        "categories": [
            {"id": "cat-front", "name": "Front-end"},
            {"id": "cat-back", "name": "Back-end"},
        ],
        "formats": [
            {"id": "fmt-conf", "name": "Conférence"},
            {"id": "fmt-tools", "name": "Atelier"},
        ],
        "speakers": [
            {
                "uid": "s1",
                "displayName": "Anne Course",
                "company": "Bordeaux Tech",
                "address": {"formattedAddress": "Lormont, France", "latLng": {"lat": 44.88, "lng": -0.52}},
            },
            {
                "uid": "s2",
                "displayName": "Jean Bon",
                "address": {"formattedAddress": "Nantes, France", "latLng": {"lat": 47.21, "lng": -1.55}},
            },
            {"uid": "s3", "email": "ghost@example.com"},
        ],
        "talks": [
            {
                "id": "t1",
                "title": " Go for Java developers ",
                "state": "submitted",
                "level": "intermediate",
                "abstract": "Goroutines everywhere",
                "categories": "cat-back",
                "formats": "fmt-conf",
                "speakers": ["s1", "s2"],
                "comments": "Needs a projector",
                "language": "English",
                "rating": 3.75,
                "loves": 2,
                "hates": 1,
                "organizersThread": [
                    {"displayName": "Orga One", "message": "First", "date": {"_seconds": 1591000000, "_nanoseconds": 0}},
                    {"displayName": "Orga Two", "message": "Second", "date": {"_seconds": 1591003600, "_nanoseconds": 0}},
                ],
            },
            {
                "id": "t2",
                "title": "CSS is awesome",
                "state": "submitted",
                "level": "beginner",
                "abstract": "Flexbox",
                "categories": "cat-front",
                "formats": "fmt-tools",
                "speakers": ["s3"],
                "language": "",
            },
        ],
    }


def test_languages():
    """Languages are shown as flags, French by default."""
    assert parse_language("English") == "🇬🇧"
    assert parse_language("français") == "🇫🇷"
    assert parse_language("") == "🇫🇷"
    assert parse_language(None) == "🇫🇷"


def test_unknown_language():
    """An unknown language is invalid input."""
    with pytest.raises(InvalidInputError, match="Klingon"):
        parse_language("Klingon")


def test_speaker_from_gironde():
    """Local speakers get a glass of wine."""
    speaker = sample_export()["speakers"][0]
    assert speaker_label(speaker, fake_locate) == "Anne Course - Lormont 🍷 (Bordeaux Tech)"


def test_speaker_without_address():
    """Speakers without address show a map and fall back to their email."""
    assert speaker_label({"email": "ghost@example.com"}, fake_locate) == "ghost@example.com - 🗺️"


def test_speaker_with_null_coordinates():
    """Null coordinates are looked up as 0,0 instead of failing the load."""
    calls = []

    def locate(lat, lon, address):
        calls.append((lat, lon, address))
        return fallback_location(address)

    speaker = {
        "displayName": "Anne Course",
        "address": {"formattedAddress": "Somewhere", "latLng": {"lat": None, "lng": None}},
    }

    assert speaker_label(speaker, locate) == "Anne Course - 🗺️ Somewhere"
    assert calls == [(0.0, 0.0, "Somewhere")]


def test_export_with_null_coordinates():
    """An export with null coordinates still loads."""
    data = sample_export()
    data["speakers"][1]["address"]["latLng"] = {"lat": None, "lng": None}

    event = parse_export(data, fake_locate, "UTC")

    assert event.proposals[0].speakers.endswith(" / Jean Bon - Nantes")


def test_organizer_messages_newest_first():
    """Messages are sorted newest first and signed."""
    threads = sample_export()["talks"][0]["organizersThread"]

    messages = parse_organizer_messages(threads, "UTC")

    assert messages == (
        "Second\n--\n**Orga Two** _le 01/06 à 09h26_",
        "First\n--\n**Orga One** _le 01/06 à 08h26_",
    )


def test_parse_export():
    """Talks become proposals with resolved categories, formats and speakers."""
    event = parse_export(sample_export(), fake_locate, "UTC")

    assert event.name == "BDX I/O 2026"
    assert event.formats == ("Atelier", "Conférence")
    assert event.categories == ("Back-end", "Front-end")

    talk = event.proposals[0]
    assert talk.id == "t1"
    assert talk.title == "Go for Java developers"
    assert talk.category == "Back-end"
    assert talk.format == "Conférence"
    assert talk.audience_level == "Intermédiaire"
    assert talk.language == "🇬🇧"
    assert talk.speakers == "Anne Course - Lormont 🍷 (Bordeaux Tech) / Jean Bon - Nantes"
    assert talk.rating == 3.75
    assert (talk.loves, talk.hates) == (2, 1)
    assert talk.private_message == "Needs a projector"
    assert len(talk.organizer_messages) == 2

    other = event.proposals[1]
    assert other.rating == 0.0
    assert other.language == "🇫🇷"
    assert other.organizer_messages == ()
    assert event.get_proposals("Atelier") == [other]


def test_unknown_speaker():
    """A talk referencing a missing speaker is invalid input."""
    data = sample_export()
    data["talks"][1]["speakers"] = ["nobody"]
    with pytest.raises(InvalidInputError, match="nobody"):
        parse_export(data, fake_locate)


def test_load_event(tmp_path):
    """Exports are read from a JSON file."""
    path = tmp_path / "export.json"
    path.write_text(json.dumps(sample_export()), encoding="utf-8")

    event = load_event(str(path), fake_locate, "UTC")

    assert len(event.proposals) == 2


def test_load_missing_file(tmp_path):
    """A missing export is invalid input."""
    with pytest.raises(InvalidInputError):
        load_event(str(tmp_path / "missing.json"), fake_locate)


def test_load_invalid_json(tmp_path):
    """A corrupt export is invalid input."""
    path = tmp_path / "export.json"
    path.write_text("{", encoding="utf-8")
    with pytest.raises(InvalidInputError):
        load_event(str(path), fake_locate)
