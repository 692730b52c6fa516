"""Expand a selection into the ordered list of bitmaps to paint.

Some traits must paint outside their own layer's slot to occlude
correctly, so the compositor moves them into virtual slots:

* Astronaut clothes paint above the face (``Astronaut``).
* The Hannibal mask paints above the eyes (``HannibalMask``).
* The Tyson tattoo paints under any mask (``TysonTattoo``), and in the
  normal Eyes slot when no mask is worn.
* Ninja turtle eyes paint under covering masks only (``NinjaEyes``).
"""
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from wojak_creator.config import LAYER_NAMES, Z_ORDER
from wojak_creator.errors import CompositionError
from wojak_creator.manifest import Asset, AssetManifest
from wojak_creator.selection import Selection, sanitize

Z_INDEX = {name: index for index, name in enumerate(Z_ORDER)}


@dataclass(frozen=True)
class PaintEntry:
    layer: str
    path: str
    z_index: int


def _astronaut_slot(asset: Asset, selection: Selection, manifest: AssetManifest) -> Optional[str]:
    return "Astronaut" if asset.has_family("astronaut") else None


def _hannibal_slot(asset: Asset, selection: Selection, manifest: AssetManifest) -> Optional[str]:
    return "HannibalMask" if asset.has_family("hannibal") else None


def _tyson_slot(asset: Asset, selection: Selection, manifest: AssetManifest) -> Optional[str]:
    if asset.has_family("tyson") and selection.occupied("Mask"):
        return "TysonTattoo"
    return None


def _ninja_slot(asset: Asset, selection: Selection, manifest: AssetManifest) -> Optional[str]:
    if not asset.has_family("ninja_eyes"):
        return None
    mask = manifest.get(selection["Mask"])
    if mask is not None and mask.has_family("covering_mask"):
        return "NinjaEyes"
    return None


SlotRule = Callable[[Asset, Selection, AssetManifest], Optional[str]]

# Virtual slot predicates per source layer, checked in order
VIRTUAL_SLOTS: Dict[str, List[SlotRule]] = {
    "Clothes": [_astronaut_slot],
    "Mask": [_hannibal_slot],
    "Eyes": [_tyson_slot, _ninja_slot],
}


def slot_for(asset: Asset, selection: Selection, manifest: AssetManifest) -> str:
    """Paint slot of a selected asset: a virtual slot if one claims it, else its layer."""
    for rule in VIRTUAL_SLOTS.get(asset.layer, []):
        slot = rule(asset, selection, manifest)
        if slot is not None:
            return slot
    return asset.layer


def build_paint_list(manifest: AssetManifest, selection: Selection) -> List[PaintEntry]:
    """Ordered (bottom to top) paint entries for a selection.

    Each selected asset lands in exactly one slot.

    Raises:
        CompositionError: a selected asset has no slot in the paint order, or
            two assets claim the same slot
    """
    selection = sanitize(manifest, selection)
    claimed: Dict[str, Tuple[str, str]] = {}

    for layer in LAYER_NAMES:
        asset = manifest.get(selection[layer])
        if asset is None:
            continue
        slot = slot_for(asset, selection, manifest)
        if slot not in Z_INDEX:
            raise CompositionError(f"No paint slot {slot!r} for {asset.path} ({layer})")
        if slot in claimed:
            raise CompositionError(
                f"Paint slot {slot!r} claimed by both {claimed[slot][1]} and {asset.path}"
            )
        claimed[slot] = (layer, asset.path)

    entries = [PaintEntry(slot, path, Z_INDEX[slot]) for slot, (_, path) in claimed.items()]
    entries.sort(key=lambda entry: entry.z_index)
    return entries
