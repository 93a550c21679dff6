"""Task name generation from prompts or random words."""

from __future__ import annotations

import re
import secrets

_ADJECTIVES = (
    "ancient", "bright", "calm", "dark", "eager",
    "fading", "gentle", "hidden", "iron", "jade",
    "keen", "lone", "misty", "noble", "pale",
    "quick", "rare", "silent", "thin", "vast",
    "warm", "young", "bold", "crisp", "deep",
    "swift", "wild", "cold", "soft", "still",
)

_NOUNS = (
    "autumn", "bloom", "cedar", "dawn", "ember",
    "flame", "grove", "heron", "iris", "jewel",
    "kite", "lake", "moon", "night", "ocean",
    "pine", "quail", "river", "stone", "thorn",
    "dusk", "vale", "willow", "cloud", "ridge",
    "frost", "crane", "spark", "drift", "storm",
    "dream", "light", "shade", "brook", "trail",
    "lark", "reef", "snow", "wind", "tide",
)

_STOP_WORDS = frozenset(
    """
    a an the and or but in on at to for of with by from
    is are was were be been being have has had do does did will would
    could should may might must shall can need that which who whom
    this these those it its i we you they me him her us them
    my our your their not no so if then than when where how what
    all each every both few more most some any also just about into
    through during before after above below between same up out as very
    there here please make sure
    """.split()
)

_NON_ALNUM = re.compile(r"[^a-z0-9 ]+")
_MAX_SLUG = 40


def generate_name() -> str:
    """Return a random name such as "silent-dawn-frost"."""
    adjective = secrets.choice(_ADJECTIVES)
    first = secrets.choice(_NOUNS)
    second = secrets.choice(_NOUNS)
    while second == first:
        second = secrets.choice(_NOUNS)
    return f"{adjective}-{first}-{second}"


def generate_name_from_prompt(prompt: str) -> str:
    """Build a kebab-case name from prompt keywords, or a random one."""
    return extract_keywords(prompt, 4) or generate_name()


def extract_keywords(prompt: str, max_words: int) -> str:
    """Join up to max_words meaningful prompt words with hyphens."""
    normalized = _NON_ALNUM.sub(" ", prompt.lower())
    keywords: list[str] = []
    for word in normalized.split():
        if word in _STOP_WORDS or len(word) < 2:
            continue
        keywords.append(word)
        if len(keywords) >= max_words:
            break

    slug = "-".join(keywords)
    if len(slug) > _MAX_SLUG:
        slug = slug[:_MAX_SLUG]
        cut = slug.rfind("-")
        if cut > 5:
            slug = slug[:cut]
    return slug