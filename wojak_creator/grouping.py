"""Collapse raw assets into the grouped choices a picker shows.

A group bundles assets that differ along one dimension (colour, suit
matrix, addon colour). Groups are a pure view over the manifest and the
currently disabled options, so they are rebuilt after every selection
change instead of being updated in place.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from wojak_creator.config import (
    ADDON_GROUP_NAME,
    ALWAYS_GROUP,
    SUIT_ACCESSORY_TYPES,
    SUIT_CANONICAL,
    SUIT_COLORS,
    SUIT_GROUP_NAME,
)
from wojak_creator.labels import format_display_label
from wojak_creator.manifest import Asset, AssetManifest
from wojak_creator.rules import RuleOutcome, resolve
from wojak_creator.selection import Selection
from wojak_creator.variants import AddonVariant, ColorVariant, SuitVariant

ADDON_NEEDS_BASE_HINT = "ⓘ choose tee or tank top first"
ADDON_UNDERWEAR_HINT = "<------ Chia Farmer underwear"

COLOR_GROUP = "color"
SUIT_GROUP = "suit"
ADDON_GROUP = "addon"


@dataclass(frozen=True)
class Variant:
    path: str
    label: str
    color: Optional[str] = None
    hex: Optional[str] = None
    suit_color: Optional[str] = None
    accessory_type: Optional[str] = None
    accessory_color: Optional[str] = None
    is_base: bool = False
    disabled: bool = False


@dataclass(frozen=True)
class VariantGroup:
    base_name: str
    kind: str
    variants: tuple
    default_variant_path: str
    disabled: bool = False

    def variant_for(self, path: str) -> Optional[Variant]:
        for variant in self.variants:
            if variant.path == path:
                return variant
        return None

    @property
    def paths(self) -> List[str]:
        return [v.path for v in self.variants]


@dataclass(frozen=True)
class GroupRef:
    base_name: str
    variant: Variant


@dataclass(frozen=True)
class Ungrouped:
    path: str
    label: str
    disabled: bool = False


@dataclass
class GroupedLayer:
    layer: str
    groups: List[VariantGroup] = field(default_factory=list)
    ungrouped: List[Ungrouped] = field(default_factory=list)
    path_to_group: Dict[str, GroupRef] = field(default_factory=dict)
    order: Dict[str, int] = field(default_factory=dict)

    def group(self, base_name: str) -> Optional[VariantGroup]:
        for group in self.groups:
            if group.base_name == base_name:
                return group
        return None

    def group_for_path(self, path: str) -> Optional[VariantGroup]:
        ref = self.path_to_group.get(path)
        return self.group(ref.base_name) if ref else None


@dataclass(frozen=True)
class OptionView:
    """One picker entry: a plain asset, a group, or the empty choice."""

    value: str
    label: str
    disabled: bool = False
    group: Optional[VariantGroup] = None
    active: bool = False
    active_variant: Optional[Variant] = None


def _space_insensitive(text: str) -> str:
    return "".join(text.lower().split())


def _variant_from(asset: Asset, disabled: bool, is_base: bool = False) -> Variant:
    kind = asset.kind
    if isinstance(kind, ColorVariant):
        return Variant(asset.path, asset.raw_label, color=kind.color, hex=kind.hex, disabled=disabled)
    if isinstance(kind, SuitVariant):
        return Variant(
            asset.path,
            asset.raw_label,
            suit_color=kind.suit_color,
            accessory_type=kind.accessory_type,
            accessory_color=kind.accessory_color,
            disabled=disabled,
        )
    if isinstance(kind, AddonVariant):
        return Variant(asset.path, asset.raw_label, color=kind.color, disabled=disabled)
    return Variant(asset.path, asset.raw_label, is_base=is_base, disabled=disabled)


def _suit_sort_key(variant: Variant):
    return (
        SUIT_COLORS.index(variant.suit_color),
        SUIT_ACCESSORY_TYPES.index(variant.accessory_type),
        variant.accessory_color,
    )


def suit_default(variants: List[Variant]) -> Variant:
    """Canonical combination if present, else the first by matrix order."""
    suit_color, accessory_type, accessory_color = SUIT_CANONICAL
    for variant in variants:
        if (variant.suit_color, variant.accessory_type, variant.accessory_color) == (
            suit_color,
            accessory_type,
            accessory_color,
        ):
            return variant
    return sorted(variants, key=_suit_sort_key)[0]


def _make_group(base_name: str, kind: str, variants: List[Variant]) -> VariantGroup:
    if kind == SUIT_GROUP:
        default = suit_default(variants)
    else:
        base_entries = [v for v in variants if v.is_base]
        default = base_entries[0] if base_entries else variants[0]
    return VariantGroup(
        base_name=base_name,
        kind=kind,
        variants=tuple(variants),
        default_variant_path=default.path,
        disabled=all(v.disabled for v in variants),
    )


def build_groups(
    manifest: AssetManifest,
    layer: str,
    selection: Selection = None,
    outcome: RuleOutcome = None,
) -> GroupedLayer:
    """Group a layer's assets into picker choices.

    Args:
        manifest: Asset catalogue
        layer: Picker layer; the Clothes picker also holds the addon assets
        selection: Current selection, used to compute disabled options
        outcome: Pre-computed rule outcome for ``selection``

    Returns:
        Groups, ungrouped choices and the reverse ``path_to_group`` index
    """
    if outcome is None:
        outcome = resolve(manifest, selection or Selection())

    assets = manifest.selectable(layer)
    if layer == "Clothes":
        assets += manifest.assets("ClothesAddon")
    order = {asset.path: index for index, asset in enumerate(assets)}

    def disabled(asset: Asset) -> bool:
        return outcome.is_option_disabled(asset.layer, asset.path)

    suits, addons, plain = [], [], []
    buckets: Dict[str, List[Variant]] = {}
    for asset in assets:
        kind = asset.kind
        if isinstance(kind, SuitVariant):
            suits.append(_variant_from(asset, disabled(asset)))
        elif isinstance(kind, AddonVariant):
            addons.append(_variant_from(asset, disabled(asset)))
        elif isinstance(kind, ColorVariant):
            buckets.setdefault(kind.base, []).append(_variant_from(asset, disabled(asset)))
        else:
            plain.append(asset)

    # Second pass: a plain label equal to a group's base name is its base entry
    bases = {_space_insensitive(base): base for base in buckets}
    ungrouped_assets = []
    for asset in plain:
        base = bases.get(_space_insensitive(asset.raw_label))
        if base is not None:
            buckets[base].insert(0, _variant_from(asset, disabled(asset), is_base=True))
        else:
            ungrouped_assets.append(asset)

    always = {_space_insensitive(name) for name in ALWAYS_GROUP}
    candidates = [(base, COLOR_GROUP, variants) for base, variants in buckets.items()]
    if suits:
        candidates.append((SUIT_GROUP_NAME, SUIT_GROUP, suits))
    if addons:
        candidates.append((ADDON_GROUP_NAME, ADDON_GROUP, addons))

    result = GroupedLayer(layer=layer, order=order)
    ungrouped = [Ungrouped(a.path, a.raw_label, disabled(a)) for a in ungrouped_assets]
    for base, kind, variants in candidates:
        if len(variants) == 1 and _space_insensitive(base) not in always:
            only = variants[0]
            ungrouped.append(Ungrouped(only.path, only.label, only.disabled))
            continue
        group = _make_group(base, kind, variants)
        result.groups.append(group)
        for variant in group.variants:
            result.path_to_group[variant.path] = GroupRef(base, variant)

    result.groups.sort(key=lambda g: min(order[p] for p in g.paths))
    result.ungrouped = sorted(ungrouped, key=lambda u: order[u.path])
    return result


def _selected_paths(manifest: AssetManifest, selection: Selection, layer: str) -> List[str]:
    """Paths that count as "selected" for a picker.

    The alternate rendition of a companion pair counts as its normal path.
    """
    paths = []
    layers = [layer, "ClothesAddon"] if layer == "Clothes" else [layer]
    for name in layers:
        asset = manifest.get(selection[name])
        if asset is None:
            continue
        paths.append(asset.path)
        if asset.is_alternate:
            paths.append(asset.kind.normal_path)
    return paths


def option_views(
    manifest: AssetManifest,
    layer: str,
    selection: Selection,
    outcome: RuleOutcome = None,
) -> List[OptionView]:
    """Picker entries for a layer, in manifest order.

    The empty choice comes first except for Base, which can never be empty.
    A group's value is its active variant when one of its members is
    selected, else its default (or first enabled) variant.
    """
    if outcome is None:
        outcome = resolve(manifest, selection)
    grouped = build_groups(manifest, layer, selection, outcome)
    selected = _selected_paths(manifest, selection, layer)

    addon_worn = selection.occupied("ClothesAddon")
    clothes = manifest.get(selection["Clothes"])
    base_ok = clothes is not None and clothes.has_family("tee")

    entries = []
    for group in grouped.groups:
        active_variant = next((v for v in group.variants if v.path in selected), None)
        if active_variant is not None:
            value = active_variant.path
        else:
            default = group.variant_for(group.default_variant_path)
            if default.disabled:
                default = next((v for v in group.variants if not v.disabled), default)
            value = default.path
        label = format_display_label(group.base_name)
        if layer == "Clothes" and group.kind == ADDON_GROUP and group.disabled and not base_ok:
            label = f"{label} {ADDON_NEEDS_BASE_HINT}"
        elif layer == "Clothes" and addon_worn and group.kind != ADDON_GROUP:
            if any(manifest.get(p).has_family("tee") for p in group.paths):
                label = f"{label} {ADDON_UNDERWEAR_HINT}"
        entries.append(
            (
                min(grouped.order[p] for p in group.paths),
                OptionView(
                    value=value,
                    label=label,
                    disabled=group.disabled,
                    group=group,
                    active=active_variant is not None,
                    active_variant=active_variant,
                ),
            )
        )

    for item in grouped.ungrouped:
        label = format_display_label(item.label)
        asset = manifest.get(item.path)
        if layer == "Clothes" and asset.layer == "ClothesAddon" and item.disabled and not base_ok:
            label = f"{label} {ADDON_NEEDS_BASE_HINT}"
        elif layer == "Clothes" and addon_worn and asset.has_family("tee"):
            label = f"{label} {ADDON_UNDERWEAR_HINT}"
        entries.append(
            (
                grouped.order[item.path],
                OptionView(
                    value=item.path,
                    label=label,
                    disabled=item.disabled,
                    active=item.path in selected,
                ),
            )
        )

    entries.sort(key=lambda entry: entry[0])
    views = [view for _, view in entries]
    if layer != "Base":
        views.insert(0, OptionView(value="", label="None", active=not selected))
    return views
