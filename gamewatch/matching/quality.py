"""Release quality tiers."""

from typing import Optional, Tuple

QUALITY_GOG = "GOG"
QUALITY_DRM_FREE = "DRM-Free"
QUALITY_REPACK = "Repack"
QUALITY_SCENE = "Scene"

# Lowest to highest.
QUALITY_RANKING: Tuple[str, ...] = (QUALITY_SCENE, QUALITY_REPACK, QUALITY_DRM_FREE, QUALITY_GOG)

# Checked in order against the lower-cased title; first hit wins.
_QUALITY_TRIGGERS: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("gog",), QUALITY_GOG),
    (("drm free", "drm-free"), QUALITY_DRM_FREE),
    (("repack",), QUALITY_REPACK),
    (("scene",), QUALITY_SCENE),
)


def classify_quality(title: str) -> Optional[str]:
    """Return the quality tier a release title advertises, or None.

    Examples:
        >>> classify_quality("Witcher.3.GOTY-GOG")
        'GOG'
        >>> classify_quality("Some Game [FitGirl Repack]")
        'Repack'
    """
    lowered = (title or "").lower()
    for needles, tier in _QUALITY_TRIGGERS:
        if any(needle in lowered for needle in needles):
            return tier
    return None


def quality_rank(tier: Optional[str]) -> int:
    """Position in ``QUALITY_RANKING``; -1 for None or unknown tiers."""
    try:
        return QUALITY_RANKING.index(tier)
    except ValueError:
        return -1


def is_better_quality(new_quality: Optional[str], current_quality: Optional[str]) -> bool:
    """True if ``new_quality`` is present and outranks ``current_quality``.

    A known tier always beats a missing current tier; a missing new tier never
    wins.
    """
    if not new_quality:
        return False
    if not current_quality:
        return True
    return quality_rank(new_quality) > quality_rank(current_quality)
