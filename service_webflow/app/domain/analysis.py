"""
Per-field editorial guidance for the Webflow articles collection.
"""

from typing import Any, Dict, List, Optional


REQUIRED_TIP = "Påkrævet felt – AI bør altid udfylde dette."
OPTIONAL_TIP = "Valgfrit felt – udfyld hvis relevant."

FIELD_TIPS: Dict[str, str] = {
    "name": "Brug en kort, fængende titel; max ~60 tegn for SEO.",
    "title": "Brug en kort, fængende titel; max ~60 tegn for SEO.",
    "post-body": "HTML med overskrifter (h2/h3), korte afsnit, citater og links; undgå raw iframes.",
    "excerpt": "1-2 sætninger som teaser; 140–160 tegn anbefalet.",
    "description": "1-2 sætninger som teaser; 140–160 tegn anbefalet.",
    "slug": "kebab-case, ingen specialtegn; genereres fra titel men kan tilpasses.",
    "seo-title": "Hold den under 60 tegn; inkluder primært keyword og brand hvis plads.",
    "seo-description": "Meta-beskrivelse 140–160 tegn; aktiv stemme og call-to-action.",
    "publish-date": "ISO dato; brug nuværende tidspunkt ved udgivelse, eller planlagt tidspunkt.",
    "author": "Reference til forfatterens itemId i Authors collection; vælg automatisk ud fra TOV.",
    "tags": "3–6 tags; små bogstaver; undgå duplikater.",
    "category": "En af de tilladte kategorier; match AI-tema til taxonomy.",
    "featured-image": "URL til billede i 1200x630; web-optimeret; alt-tekst fra titel.",
}


def tip_for_field(slug: Optional[str], required: bool = False) -> str:
    """Editorial tip for a Webflow field slug."""
    tip = FIELD_TIPS.get((slug or "").lower())
    if tip:
        return tip
    return REQUIRED_TIP if required else OPTIONAL_TIP


def build_guidance(fields: List[Dict[str, Any]], mapping: Dict[str, Any]) -> List[Dict[str, Any]]:
    """
    Combine the collection schema with the saved mapping.

    Each field yields ``{slug, type, required, suggestedInternal, tip}`` where
    ``suggestedInternal`` is the first internal field mapped onto the slug.
    """
    suggestions: Dict[str, str] = {}
    for entry in mapping.get("entries") or []:
        if isinstance(entry, dict) and entry.get("webflowSlug"):
            suggestions.setdefault(entry["webflowSlug"], entry.get("internal"))

    guidance = []
    for field in fields:
        required = bool(field.get("required"))
        guidance.append({
            "slug": field.get("slug"),
            "type": field.get("type"),
            "required": required,
            "suggestedInternal": suggestions.get(field.get("slug")),
            "tip": tip_for_field(field.get("slug"), required),
        })
    return guidance
