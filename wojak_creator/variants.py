"""Label parsing for grouped trait variants.

Asset labels are free-text file names. Parsing is conservative: a label is
only grouped when its trailing token resolves against a known vocabulary.
Each asset is classified once, when the manifest is loaded, into one of the
trait kinds below.
"""
import re
from dataclasses import dataclass
from typing import Optional, Union

from wojak_creator.config import (
    ADDON_COLORS,
    ADDON_TOKENS,
    COLOR_HEX,
    SUIT_ACCESSORY_TYPES,
    SUIT_COLORS,
)


@dataclass(frozen=True)
class Plain:
    """Ungrouped trait."""


@dataclass(frozen=True)
class ColorVariant:
    base: str
    color: str
    hex: str


@dataclass(frozen=True)
class SuitVariant:
    suit_color: str
    accessory_type: str
    accessory_color: str


@dataclass(frozen=True)
class AddonVariant:
    color: str


@dataclass(frozen=True)
class OverlayProxy:
    """One of two renditions of a trait, picked by another layer's occupancy."""

    normal_path: str
    alternate_path: str
    trigger_layer: str


TraitKind = Union[Plain, ColorVariant, SuitVariant, AddonVariant, OverlayProxy]

_PAREN_RE = re.compile(r"^(.+?)\s*\(([^()]+)\)\s*$")
_COMMA_RE = re.compile(r"^(.+?)\s*,\s*([^,]+?)\s*$")
_NEON_RE = re.compile(r"^(.+?)\s+(neon\s+green)\s*$", re.IGNORECASE)
_LAST_TOKEN_RE = re.compile(r"^(.+?)\s+(\S+)\s*$")
_SUIT_RE = re.compile(r"^suit\s+(\w+)\s+(\w+)\s+(\w+)\s*$", re.IGNORECASE)
_TOKEN_SPLIT_RE = re.compile(r"[^a-z0-9]+")


def lookup_color(name: str) -> Optional[str]:
    """Return the hex value for a colour name, case-insensitively."""
    key = " ".join(name.lower().split())
    return COLOR_HEX.get(key)


def parse_color_variant(label: str) -> Optional[ColorVariant]:
    """Parse ``"Name (Color)"``, ``"Name, Color"``, ``"Name neon green"`` or
    ``"Name Color"``.

    Patterns are tried in that order; the first one that matches and whose
    colour token is in the colour table wins.

    Args:
        label: Raw asset label

    Returns:
        The parsed variant, or None when the label is ungrouped
    """
    if not label:
        return None
    text = label.strip()

    for pattern in (_PAREN_RE, _COMMA_RE, _NEON_RE, _LAST_TOKEN_RE):
        match = pattern.match(text)
        if not match:
            continue
        base, color = match.group(1).strip(), match.group(2).strip()
        hex_value = lookup_color(color)
        if base and hex_value is not None:
            return ColorVariant(base=base, color=" ".join(color.lower().split()), hex=hex_value)
    return None


def parse_suit_variant(label: str) -> Optional[SuitVariant]:
    """Parse ``suit <suitColor> <accessoryColor> <tie|bow>`` labels."""
    if not label:
        return None
    match = _SUIT_RE.match(label.strip())
    if not match:
        return None
    suit_color, accessory_color, accessory_type = (g.lower() for g in match.groups())
    if suit_color not in SUIT_COLORS or accessory_type not in SUIT_ACCESSORY_TYPES:
        return None
    return SuitVariant(
        suit_color=suit_color,
        accessory_type=accessory_type,
        accessory_color=accessory_color,
    )


def _tokens(text: str) -> list:
    return [t for t in _TOKEN_SPLIT_RE.split((text or "").lower()) if t]


def parse_addon_color_variant(path: str, label: str) -> Optional[AddonVariant]:
    """Parse the overlay addon family, e.g. ``"Chia Farmer blue"``.

    Both addon tokens must appear in the path or the label, and the colour is
    taken from the trailing token of the label (falling back to the path stem).
    """
    label_tokens = _tokens(label)
    path_tokens = _tokens(path.rsplit("/", 1)[-1].rsplit(".", 1)[0] if path else "")
    pool = set(label_tokens) | set(_tokens(path))
    if not all(token in pool for token in ADDON_TOKENS):
        return None

    for tokens in (label_tokens, path_tokens):
        if tokens and tokens[-1] in ADDON_COLORS:
            return AddonVariant(color=tokens[-1])
    return None


def classify(path: str, label: str) -> TraitKind:
    """Resolve the trait kind of an asset.

    Precedence is suit, then addon colour, then generic colour, then plain.
    """
    suit = parse_suit_variant(label)
    if suit is not None:
        return suit
    addon = parse_addon_color_variant(path, label)
    if addon is not None:
        return addon
    color = parse_color_variant(label)
    if color is not None:
        return color
    return Plain()


def normalize_key(text: str) -> str:
    """Lower-case, strip punctuation and whitespace for loose name matching."""
    if not text:
        return ""
    return re.sub(r"[^a-z0-9]", "", text.lower())
