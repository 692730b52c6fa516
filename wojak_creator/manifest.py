"""Static catalogue of trait assets.

The manifest is built once at startup, either by scanning the layer
directories under ``ASSETS_PATH`` or from an in-memory mapping, and is
read-only afterwards. Every asset is classified into its trait kind and
tagged with its families at this point so nothing downstream has to look
at raw strings again.
"""
import logging
import pathlib
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from wojak_creator.config import ASSETS_PATH, COMPANIONS, FAMILIES, LAYERS
from wojak_creator.errors import ManifestError
from wojak_creator.variants import OverlayProxy, TraitKind, classify, normalize_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Asset:
    layer: str
    raw_label: str
    path: str
    kind: TraitKind
    families: frozenset = field(default_factory=frozenset)

    def has_family(self, family: str) -> bool:
        return family in self.families

    @property
    def is_alternate(self) -> bool:
        """True for the alternate rendition of a companion pair."""
        return isinstance(self.kind, OverlayProxy) and self.kind.alternate_path == self.path


def label_from_filename(filename: str) -> str:
    """Derive a raw display label from an asset file name."""
    stem = pathlib.PurePosixPath(filename).stem
    return " ".join(stem.replace("_", " ").replace("-", " ").split())


def _families_for(layer: str, path: str, label: str) -> frozenset:
    haystack = f"{path} {label}".lower()
    return frozenset(
        family
        for family, (family_layer, needles) in FAMILIES.items()
        if family_layer == layer and any(needle in haystack for needle in needles)
    )


class AssetManifest:
    """Per-layer asset lists plus a global path index."""

    def __init__(self, assets: Iterable[Asset]):
        self._by_layer: Dict[str, List[Asset]] = {name: [] for name, _, _ in LAYERS}
        self._by_path: Dict[str, Asset] = {}

        for asset in assets:
            if asset.path in self._by_path:
                raise ManifestError(f"Duplicate asset path: {asset.path}")
            self._by_path[asset.path] = asset
            self._by_layer.setdefault(asset.layer, []).append(asset)

    @classmethod
    def from_mapping(cls, entries: Mapping[str, Iterable[Tuple[str, str]]]) -> "AssetManifest":
        """Build a manifest from ``{layer: [(raw_label, path), ...]}``.

        Companion pairs from the config are linked into ``OverlayProxy``
        kinds once both renditions are known.
        """
        raw = []
        for layer, items in entries.items():
            for label, path in items:
                raw.append((layer, label, path))

        proxies = _link_companions(raw)

        assets = []
        for layer, label, path in raw:
            kind = proxies.get(path) or classify(path, label)
            assets.append(
                Asset(
                    layer=layer,
                    raw_label=label,
                    path=path,
                    kind=kind,
                    families=_families_for(layer, path, label),
                )
            )
        return cls(assets)

    @property
    def layers(self) -> List[str]:
        return list(self._by_layer)

    def assets(self, layer: str) -> List[Asset]:
        return list(self._by_layer.get(layer, []))

    def get(self, path: str) -> Optional[Asset]:
        if not path:
            return None
        return self._by_path.get(path)

    def contains(self, layer: str, path: str) -> bool:
        asset = self.get(path)
        return asset is not None and asset.layer == layer

    def find_label(self, layer: str, label: str) -> Optional[Asset]:
        """Find an asset of a layer by label, ignoring case and punctuation."""
        key = normalize_key(label)
        for asset in self._by_layer.get(layer, []):
            if normalize_key(asset.raw_label) == key:
                return asset
        return None

    def with_family(self, layer: str, family: str) -> List[Asset]:
        return [a for a in self._by_layer.get(layer, []) if family in a.families]

    def selectable(self, layer: str) -> List[Asset]:
        """Assets a picker or the randomizer may offer (no alternate renditions)."""
        return [a for a in self._by_layer.get(layer, []) if not a.is_alternate]

    def __len__(self) -> int:
        return len(self._by_path)

    def __contains__(self, path: str) -> bool:
        return path in self._by_path


def _link_companions(raw: List[Tuple[str, str, str]]) -> Dict[str, OverlayProxy]:
    proxies = {}
    for layer, normal_label, alternate_label, trigger in COMPANIONS:
        normal = _find_raw(raw, layer, normal_label)
        alternate = _find_raw(raw, layer, alternate_label)
        if normal is None or alternate is None:
            if normal is not None or alternate is not None:
                logger.warning(
                    f"Companion pair {normal_label!r}/{alternate_label!r} in {layer} "
                    f"is incomplete, treating it as plain traits"
                )
            continue
        proxy = OverlayProxy(normal_path=normal, alternate_path=alternate, trigger_layer=trigger)
        proxies[normal] = proxy
        proxies[alternate] = proxy
    return proxies


def _find_raw(raw, layer: str, label: str) -> Optional[str]:
    key = normalize_key(label)
    for item_layer, item_label, path in raw:
        if item_layer == layer and normalize_key(item_label) == key:
            return path
    return None


def load_manifest(assets_path: pathlib.Path = ASSETS_PATH) -> AssetManifest:
    """Scan the layer directories and build the manifest.

    Paths are stored relative to ``assets_path`` in POSIX form and are the
    identity keys used by selections and the bitmap loader.
    """
    assets_path = pathlib.Path(assets_path)
    entries = {}
    for name, directory, required in LAYERS:
        layer_path = assets_path / directory
        if not layer_path.exists():
            raise ManifestError(f"Layer directory not found: {layer_path}")

        # Get trait files sorted by name
        files = sorted(layer_path.glob("*.png"))
        if required and not files:
            raise ManifestError(f"Required layer {name} has no assets in {layer_path}")
        entries[name] = [
            (label_from_filename(f.name), f.relative_to(assets_path).as_posix()) for f in files
        ]
        logger.debug(f"Loaded {len(files)} assets for layer {name}")

    manifest = AssetManifest.from_mapping(entries)
    logger.info(f"Asset manifest ready: {len(manifest)} assets")
    return manifest
