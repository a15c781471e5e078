"""Default lane titles and colors for tier lists, and merging user overrides."""
from typing import Dict, Optional

from albumboard.models.tier_list import RANKED_TIER_IDS, TierStyle

TIER_DEFINITIONS = {
    "s": (
        "S Tier – Essentials",
        "Keep your absolute must-hear picks at the top and let the bold gradients do the bragging.",
    ),
    "a": (
        "A Tier – Heavy Rotation",
        "Use the notes panel to mark why these albums never leave your queue.",
    ),
    "b": (
        "B Tier – Solid Finds",
        "Perfect home for niche mood boosters. Mention the mood so friends know when to spin them.",
    ),
    "c": (
        "C Tier – Revisit Later",
        "Toggle off decorations for a clean checklist and leave yourself listening reminders.",
    ),
}

# (panel color, text color) per ranked lane
TIER_PALETTE = {
    "s": ("#123624", "#d4ffe9"),
    "a": ("#0d2138", "#d7e8ff"),
    "b": ("#3a320f", "#fff4c2"),
    "c": ("#2f1c08", "#ffe0c2"),
}

TIER_COLOR_CHOICES = (
    "#F6E05E",
    "#F4C542",
    "#F2A541",
    "#FFB347",
    "#FF6F61",
    "#E63946",
    "#B91C1C",
    "#7F1D1D",
    "#0B3954",
    "#1D4ED8",
    "#3B82F6",
    "#1E3A8A",
    "#22D3EE",
    "#10B981",
    "#0D9488",
    "#14532D",
    "#F8F7F4",
    "#E2E8F0",
    "#94A3B8",
    "#111827",
)

TIER_TEXT_COLOR_CHOICES = ("#f8fafc", "#e2e8f0", "#475569", "#0f172a")


def default_tier_metadata() -> Dict[str, TierStyle]:
    out = {}
    for tier_id in RANKED_TIER_IDS:
        title, subheading = TIER_DEFINITIONS[tier_id]
        color, text_color = TIER_PALETTE[tier_id]
        out[tier_id] = TierStyle(title=title, created_by=subheading, color=color, text_color=text_color)
    return out


def _non_blank(value) -> bool:
    return isinstance(value, str) and value.strip() != ""


def merge_tier_metadata(raw: Optional[dict]) -> Dict[str, TierStyle]:
    """Overlay user styling on the defaults.

    Titles must be non-blank strings; colors must come from the palette
    choices. Anything else keeps the default.
    """
    base = default_tier_metadata()
    if not isinstance(raw, dict):
        return base
    for tier_id in RANKED_TIER_IDS:
        entry = raw.get(tier_id)
        if not isinstance(entry, dict):
            continue
        current = base[tier_id]
        base[tier_id] = TierStyle(
            title=entry["title"] if _non_blank(entry.get("title")) else current.title,
            created_by=entry["created_by"] if _non_blank(entry.get("created_by")) else current.created_by,
            color=entry["color"] if entry.get("color") in TIER_COLOR_CHOICES else current.color,
            text_color=(
                entry["text_color"]
                if entry.get("text_color") in TIER_TEXT_COLOR_CHOICES
                else current.text_color
            ),
        )
    return base
