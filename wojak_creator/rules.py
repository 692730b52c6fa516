"""Cross-trait compatibility rules.

Every rule looks at one selection snapshot and reports its effects: layers
or options to disable, layers to clear and layers to force to a specific
asset. ``evaluate`` runs the ordered catalogue once and merges the effects;
``resolve`` repeats that until a pass changes nothing.

Merge policy:

* disabled layers and options are unions over all rules;
* a clear of a layer always beats a force of the same layer;
* when two rules force the same layer, the earlier rule in ``RULES`` wins.
"""
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Optional

from wojak_creator.config import (
    DEFAULT_ADDON_BASE,
    MASK_HEAD_CONFLICTS,
    MAX_RULE_PASSES,
)
from wojak_creator.errors import RuleCycleError
from wojak_creator.manifest import Asset, AssetManifest
from wojak_creator.selection import Selection, sanitize
from wojak_creator.variants import OverlayProxy

logger = logging.getLogger(__name__)

ADDON_NEEDS_BASE_REASON = "Choose Tee or Tank Top first"


@dataclass
class RuleEffect:
    disabled_layers: List[str] = field(default_factory=list)
    disabled_options: Dict[str, List[str]] = field(default_factory=dict)
    clear: List[str] = field(default_factory=list)
    force: Dict[str, str] = field(default_factory=dict)
    reasons: Dict[str, str] = field(default_factory=dict)

    def disable_layer(self, layer: str, reason: str = None) -> None:
        if layer not in self.disabled_layers:
            self.disabled_layers.append(layer)
        if reason:
            self.reasons[layer] = reason

    def disable_options(self, layer: str, paths) -> None:
        bucket = self.disabled_options.setdefault(layer, [])
        for path in paths:
            if path not in bucket:
                bucket.append(path)


@dataclass
class RuleOutcome:
    """Merged effects of the rule catalogue over one selection."""

    selection: Selection
    disabled_layers: List[str] = field(default_factory=list)
    disabled_options: Dict[str, List[str]] = field(default_factory=dict)
    clear_selections: List[str] = field(default_factory=list)
    force_selections: Dict[str, str] = field(default_factory=dict)
    reasons: Dict[str, str] = field(default_factory=dict)
    passes: int = 1

    @property
    def changed(self) -> bool:
        return bool(self.clear_selections or self.force_selections)

    def applied(self) -> Selection:
        """The selection with clears and forces applied."""
        changes = {layer: "" for layer in self.clear_selections}
        for layer, path in self.force_selections.items():
            if layer not in changes:
                changes[layer] = path
        return self.selection.update(changes)

    def is_option_disabled(self, layer: str, path: str) -> bool:
        return path in self.disabled_options.get(layer, ())

    def reason(self, layer: str) -> Optional[str]:
        return self.reasons.get(layer)


Rule = Callable[[AssetManifest, Selection], RuleEffect]


def default_addon_base(manifest: AssetManifest) -> Optional[Asset]:
    """The canonical Tee the addon rule inserts when the base is missing."""
    preferred = manifest.find_label("Clothes", DEFAULT_ADDON_BASE)
    if preferred is not None and preferred.has_family("tee"):
        return preferred
    tees = [a for a in manifest.selectable("Clothes") if a.has_family("tee")]
    return tees[0] if tees else None


def addon_requires_base(manifest: AssetManifest, selection: Selection) -> RuleEffect:
    """The Chia Farmer addon is only worn over a Tee or Tank Top."""
    effect = RuleEffect()
    clothes = manifest.get(selection["Clothes"])
    base_ok = clothes is not None and clothes.has_family("tee")

    if selection.occupied("ClothesAddon"):
        effect.disable_options(
            "Clothes",
            [a.path for a in manifest.selectable("Clothes") if not a.has_family("tee")],
        )
        if not base_ok:
            base = default_addon_base(manifest)
            if base is not None:
                effect.force["Clothes"] = base.path
            else:
                effect.clear.append("ClothesAddon")
    elif not base_ok:
        effect.disable_layer("ClothesAddon", ADDON_NEEDS_BASE_REASON)
        effect.disable_options("ClothesAddon", [a.path for a in manifest.assets("ClothesAddon")])
    return effect


def mask_head_conflicts(manifest: AssetManifest, selection: Selection) -> RuleEffect:
    """Hairstyle masks rule out hats that would sit on the hair."""
    effect = RuleEffect()
    mask = manifest.get(selection["Mask"])
    if mask is None:
        return effect

    for mask_family, head_families in MASK_HEAD_CONFLICTS.items():
        if not mask.has_family(mask_family):
            continue
        losers = [
            a.path
            for a in manifest.assets("Head")
            if any(a.has_family(family) for family in head_families)
        ]
        effect.disable_options("Head", losers)
        if selection["Head"] in losers:
            effect.clear.append("Head")
    return effect


def companion_switch(manifest: AssetManifest, selection: Selection) -> RuleEffect:
    """Swap companion traits to the rendition matching their trigger layer."""
    effect = RuleEffect()
    for layer in selection:
        asset = manifest.get(selection[layer])
        if asset is None or not isinstance(asset.kind, OverlayProxy):
            continue
        proxy = asset.kind
        wanted = proxy.alternate_path if selection.occupied(proxy.trigger_layer) else proxy.normal_path
        if wanted != asset.path:
            effect.force[layer] = wanted
        # Alternate renditions are never offered directly
        effect.disable_options(layer, [proxy.alternate_path])
    return effect


RULES: List[Rule] = [
    addon_requires_base,
    mask_head_conflicts,
    companion_switch,
]


def evaluate(
    manifest: AssetManifest, selection: Mapping[str, str], rules: List[Rule] = None
) -> RuleOutcome:
    """Run every rule once against a snapshot and merge their effects.

    Unknown paths are treated as empty. Only effective changes are reported:
    clearing an empty layer or forcing a layer to its current value is not a
    change.
    """
    snapshot = sanitize(manifest, selection)
    outcome = RuleOutcome(selection=snapshot)

    for rule in RULES if rules is None else rules:
        effect = rule(manifest, snapshot)
        for layer in effect.disabled_layers:
            if layer not in outcome.disabled_layers:
                outcome.disabled_layers.append(layer)
        for layer, paths in effect.disabled_options.items():
            bucket = outcome.disabled_options.setdefault(layer, [])
            bucket.extend(p for p in paths if p not in bucket)
        outcome.reasons.update(effect.reasons)
        for layer in effect.clear:
            if snapshot.occupied(layer) and layer not in outcome.clear_selections:
                outcome.clear_selections.append(layer)
        for layer, path in effect.force.items():
            if snapshot[layer] != path and layer not in outcome.force_selections:
                outcome.force_selections[layer] = path

    for layer in outcome.clear_selections:
        outcome.force_selections.pop(layer, None)
    return outcome


def resolve(
    manifest: AssetManifest,
    selection: Mapping[str, str],
    rules: List[Rule] = None,
    max_passes: int = MAX_RULE_PASSES,
) -> RuleOutcome:
    """Apply the rules until a pass produces no clears or forces.

    The returned outcome is relative to the (sanitized) input: its clears
    and forces are the net changes, ``applied()`` is the settled selection
    and the disabled layers/options are those of the settled selection.

    Raises:
        RuleCycleError: the rules kept changing the selection after
            ``max_passes`` passes
    """
    start = sanitize(manifest, selection)
    current = start
    for passes in range(1, max_passes + 1):
        outcome = evaluate(manifest, current, rules)
        if not outcome.changed:
            return _net_outcome(start, outcome, passes)
        logger.debug(
            f"Rule pass {passes}: clear {outcome.clear_selections}, force {outcome.force_selections}"
        )
        current = outcome.applied()

    changes = dict(outcome.force_selections)
    changes.update({layer: "" for layer in outcome.clear_selections})
    raise RuleCycleError(max_passes, changes)


def _net_outcome(start: Selection, settled: RuleOutcome, passes: int) -> RuleOutcome:
    final = settled.selection
    clears = [layer for layer in start if start.occupied(layer) and not final.occupied(layer)]
    forces = {
        layer: final[layer]
        for layer in start
        if final.occupied(layer) and final[layer] != start[layer]
    }
    return RuleOutcome(
        selection=start,
        disabled_layers=settled.disabled_layers,
        disabled_options=settled.disabled_options,
        clear_selections=clears,
        force_selections=forces,
        reasons=settled.reasons,
        passes=passes,
    )
