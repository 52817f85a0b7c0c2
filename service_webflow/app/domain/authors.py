"""
Author profiles derived from the Webflow authors collection.

When a profile carries no explicit tone-of-voice or specialties they are
guessed from keywords in the bio and position fields.
"""

import copy
from typing import Any, Dict, List, Optional


BASE_TOV = "Apropos stil"

# (keywords, label) pairs, checked in order
TOV_KEYWORDS = (
    (("analytisk",), "analytisk"),
    (("ironi", "ironisk"), "ironisk"),
    (("humor", "humoristisk"), "humoristisk"),
    (("nysgerrig",), "nysgerrig"),
    (("reflekteret",), "reflekteret"),
    (("nøgtern",), "nøgtern"),
    (("sprogligt præcis",), "sprogligt præcis"),
)

SPECIALTY_KEYWORDS = (
    ("kultur", "Kultur"),
    ("anmeld", "Anmeldelser"),
    ("film", "Film"),
    ("musik", "Musik"),
    ("gaming", "Gaming"),
    ("tech", "Tech"),
    ("skribent", "Skribent"),
    ("redaktør", "Redaktion"),
)

DEFAULT_SPECIALTIES = ["Generel"]

FALLBACK_AUTHORS: List[Dict[str, Any]] = [
    {
        "id": "frederik-kragh",
        "name": "Frederik Kragh",
        "slug": "frederik-kragh",
        "bio": "Chefredaktør og grundlægger af Apropos Magazine",
        "tov": "Analytisk, nysgerrig, med et skarpt øje for detaljer og en passion for at fortælle gode historier.",
        "specialties": ["Gaming", "Tech", "Kultur"],
    },
    {
        "id": "martin-kongstad",
        "name": "Martin Kongstad",
        "slug": "martin-kongstad",
        "bio": "Senior journalist med fokus på gaming og underholdning",
        "tov": "Humoristisk, ironisk, med en let tilgang til komplekse emner og en kærlighed for popkultur.",
        "specialties": ["Gaming", "Anmeldelser", "Interviews"],
    },
    {
        "id": "casper-christensen",
        "name": "Casper Christensen",
        "slug": "casper-christensen",
        "bio": "Kulturjournalist og filmkritiker",
        "tov": "Reflekteret, dybdegående, med en passion for at udforske kulturelle fænomener.",
        "specialties": ["Film", "Kultur", "Anmeldelser"],
    },
]


def fallback_authors() -> List[Dict[str, Any]]:
    return copy.deepcopy(FALLBACK_AUTHORS)


def tov_from_bio(bio: Optional[str]) -> str:
    """Tone-of-voice summary from traits mentioned in a bio."""
    if not bio:
        return BASE_TOV

    text = bio.lower()
    traits = [label for keywords, label in TOV_KEYWORDS if any(k in text for k in keywords)]
    return ", ".join([BASE_TOV] + traits)


def specialties_from_position(position: Optional[str]) -> List[str]:
    if not position:
        return list(DEFAULT_SPECIALTIES)

    text = position.lower()
    specialties = [label for keyword, label in SPECIALTY_KEYWORDS if keyword in text]
    return specialties or list(DEFAULT_SPECIALTIES)


def normalize_author(item: Dict[str, Any]) -> Dict[str, Any]:
    """Map a raw authors-collection item onto an author profile."""
    field_data = item.get("fieldData") or {}
    photo = field_data.get("photo")

    return {
        "id": item.get("id"),
        "name": field_data.get("name") or "Unknown Author",
        "slug": field_data.get("slug") or item.get("id"),
        "bio": field_data.get("bio"),
        "avatar": photo.get("url") if isinstance(photo, dict) else None,
        "email": field_data.get("e-mail"),
        "social": {
            "twitter": field_data.get("twitter"),
            "instagram": field_data.get("instagram"),
            "linkedin": field_data.get("linkedin"),
        },
        "tov": (
            field_data.get("tov")
            or field_data.get("toneOfVoice")
            or tov_from_bio(field_data.get("bio"))
        ),
        "specialties": field_data.get("specialties") or specialties_from_position(field_data.get("position")),
    }
