"""Human-facing text derived from a selection.

Display labels for pickers, deterministic export file names and the
natural-language description of a portrait.
"""
import re
from typing import List, Optional

from wojak_creator.config import FILENAME_MAX_LENGTH, FILENAME_PREFIX, PICKER_LAYERS
from wojak_creator.variants import AddonVariant, SuitVariant, parse_color_variant

LABEL_OVERRIDES = {
    "stach": "Stache",
    "numb": "Numb",
    "screeming": "Screaming",
    "neckbeard": "Neckbeard",
}

# Tokens are dropped from the end in this order when a file name is too long
FILENAME_DROP_ORDER = [
    "Background",
    "Clothes",
    "Mask",
    "FacialHair",
    "MouthItem",
    "MouthBase",
    "Base",
    "Eyes",
    "Head",
]

_CHIA_RE = re.compile(r"chia[- ]?farmer[- ]?(\w+)", re.IGNORECASE)


def title_case(text: str) -> str:
    """Capitalize the first letter of each word, lower-case the rest."""
    if not text:
        return ""
    return " ".join(word[:1].upper() + word[1:].lower() for word in text.split())


def format_display_label(raw_label: str) -> str:
    """Format a raw asset label for a picker."""
    if not raw_label:
        return raw_label

    # Cashtags stay upper case
    if raw_label.startswith("$"):
        return raw_label.upper()

    chia = _CHIA_RE.search(raw_label)
    if chia:
        return f"Chia Farmer ({chia.group(1).capitalize()})"

    lower = raw_label.lower()
    if "mom" in lower and "basement" in lower:
        return "Mom Basement"
    if re.search(r"nyse\s+dump", raw_label, re.IGNORECASE):
        return "NYSE Dump"
    if re.search(r"nyse\s+pump", raw_label, re.IGNORECASE):
        return "NYSE Pump"

    key = lower.strip()
    if key in LABEL_OVERRIDES:
        return LABEL_OVERRIDES[key]
    for word, replacement in LABEL_OVERRIDES.items():
        pattern = re.compile(rf"\b{word}\b", re.IGNORECASE)
        if pattern.search(raw_label):
            return pattern.sub(replacement, raw_label)

    return " ".join(word[:1].upper() + word[1:].lower() if word else word for word in raw_label.split(" "))


def _filename_token(text: str) -> str:
    token = re.sub(r"\s+", "-", text)
    token = re.sub(r"\(([^)]+)\)", r"-\1", token)
    token = re.sub(r"-+", "-", token)
    return token.strip("-")


def _display_label(manifest, layer: str, path: str) -> Optional[str]:
    if not path:
        return None
    basename = path.rsplit("/", 1)[-1]
    if "none" in basename.lower():
        return None
    asset = manifest.get(path)
    if asset is None or asset.layer != layer:
        return None
    label = format_display_label(asset.raw_label)
    if not label or label.lower() == "none":
        return None
    return label


def _layer_token(manifest, layer: str, selection) -> Optional[str]:
    path = selection[layer]
    label = _display_label(manifest, layer, path)
    if label is None:
        return None

    if layer == "Clothes":
        addon = manifest.get(selection["ClothesAddon"])
        if addon is not None and isinstance(addon.kind, AddonVariant):
            return f"ChiaFarmer-{title_case(addon.kind.color)}"
        kind = manifest.get(path).kind
        if isinstance(kind, SuitVariant):
            return "-".join(
                ["Suit", title_case(kind.suit_color), title_case(kind.accessory_type), title_case(kind.accessory_color)]
            )

    parsed = parse_color_variant(label)
    if parsed is not None:
        return f"{_filename_token(title_case(parsed.base.strip()))}-{_filename_token(title_case(parsed.color))}"
    return _filename_token(title_case(label)) or None


def export_filename(manifest, selection) -> str:
    """Deterministic ``Wojak_<trait>_..._<trait>.png`` name for an export.

    Tokens follow the picker order. Names longer than the limit drop tokens
    from the least identifying layers first and are finally truncated with
    an ``_etc`` suffix.
    """
    tokens = []
    for layer in PICKER_LAYERS:
        token = _layer_token(manifest, layer, selection)
        if token:
            tokens.append((layer, token))

    def base_name(items) -> str:
        if not items:
            return FILENAME_PREFIX
        return "_".join([FILENAME_PREFIX] + [token for _, token in items])

    name = base_name(tokens)
    if len(name) > FILENAME_MAX_LENGTH:
        remaining = list(tokens)
        for layer in FILENAME_DROP_ORDER:
            remaining = [item for item in remaining if item[0] != layer]
            name = base_name(remaining)
            if len(name) <= FILENAME_MAX_LENGTH:
                break
        if len(name) > FILENAME_MAX_LENGTH:
            name = name[: FILENAME_MAX_LENGTH - len("_etc")].rstrip("-_") + "_etc"

    return re.sub(r"[-_]+$", "", name) + ".png"


DESCRIPTION_TEMPLATES = {
    "Head": "with {} on their head",
    "Eyes": "with {} eyes",
    "MouthBase": "with {} mouth",
    "MouthItem": "holding {} in their mouth",
    "FacialHair": "with {}",
    "Mask": "wearing {}",
    "Clothes": "{}",
    "Background": "with {} background",
}


def _layer_description(manifest, layer: str, selection) -> Optional[str]:
    path = selection[layer]
    label = _display_label(manifest, layer, path)
    if label is None:
        return None

    if layer == "Clothes":
        addon = manifest.get(selection["ClothesAddon"])
        if addon is not None and isinstance(addon.kind, AddonVariant):
            return f"wearing a {addon.kind.color} Chia Farmer outfit"
        kind = manifest.get(path).kind
        if isinstance(kind, SuitVariant):
            return f"wearing a {kind.suit_color} suit with {kind.accessory_type} in {kind.accessory_color}"

    parsed = parse_color_variant(label)
    if parsed is not None:
        description = f"{parsed.base.strip().lower()} in {parsed.color.lower()}"
    else:
        description = label.lower()
    if layer == "Clothes":
        return f"wearing {description}"
    return description


def describe_selection(manifest, selection) -> str:
    """Natural-language description of a portrait, e.g. for image prompts."""
    base = _layer_description(manifest, "Base", selection)
    parts: List[str] = []
    for layer in PICKER_LAYERS:
        if layer == "Base":
            continue
        description = _layer_description(manifest, layer, selection)
        if description:
            parts.append(DESCRIPTION_TEMPLATES[layer].format(description))

    text = f"A {base} wojak character" if base else "A wojak character"
    if parts:
        text += " " + ", ".join(parts)
    return text + "."
