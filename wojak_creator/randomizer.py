"""Weighted random portraits.

Each layer gets a declarative weight table (see ``RANDOM_WEIGHTS``) turned
into a cumulative distribution. One uniform draw per layer is mapped to an
option by inverse transform sampling, and the draft selection is then
passed through the rule resolver so the result is always consistent.
"""
import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional

import numpy as np
from scipy.stats import qmc

from wojak_creator.config import LAYER_NAMES, RANDOM_WEIGHTS
from wojak_creator.manifest import AssetManifest
from wojak_creator.rules import resolve
from wojak_creator.selection import Selection
from wojak_creator.variants import SuitVariant

logger = logging.getLogger(__name__)

NONE_OPTION = ""


@dataclass
class WeightTable:
    layer: str
    options: List[str]
    weights: np.ndarray
    cum_weights: np.ndarray

    def distribution(self) -> Dict[str, float]:
        return {option: float(w) for option, w in zip(self.options, self.weights)}


def _check_share(layer: str, name: str, share: float) -> float:
    if not 0.0 <= share <= 1.0:
        raise ValueError(f"Invalid {name} weight for {layer}: {share}")
    return float(share)


def build_weight_table(manifest: AssetManifest, layer: str, spec: Optional[Mapping] = None) -> WeightTable:
    """Turn a layer's weight spec into normalized option weights.

    Args:
        manifest: Asset catalogue
        layer: Layer to build the table for
        spec: ``{"none": p, "traits": {label: p}, "suit": p}``; every key is
            optional. Mass not pinned by ``none``/``traits`` is spread
            uniformly over the remaining options, split between the suit
            matrix and everything else when ``suit`` is given.

    Returns:
        The weight table, with ``""`` standing for the empty option
    """
    spec = spec or {}
    assets = manifest.selectable(layer)

    weights: Dict[str, float] = {}
    none_share = _check_share(layer, "none", spec.get("none", 0.0))
    if none_share > 0 or not assets:
        weights[NONE_OPTION] = none_share if assets else 1.0

    for label, share in spec.get("traits", {}).items():
        asset = manifest.find_label(layer, label)
        if asset is None:
            logger.warning(f"Weighted trait {label!r} not found in {layer}, ignoring")
            continue
        weights[asset.path] = _check_share(layer, label, share)

    remaining = 1.0 - sum(weights.values())
    if remaining < -1e-9:
        raise ValueError(f"Weights for {layer} add up to more than 1")
    remaining = max(remaining, 0.0)

    others = [a for a in assets if a.path not in weights]
    pools = [others]
    shares = [1.0]
    if "suit" in spec:
        suit_share = _check_share(layer, "suit", spec["suit"])
        suits = [a for a in others if isinstance(a.kind, SuitVariant)]
        rest = [a for a in others if not isinstance(a.kind, SuitVariant)]
        if suits and rest:
            pools, shares = [suits, rest], [suit_share, 1.0 - suit_share]
    for pool, share in zip(pools, shares):
        for asset in pool:
            weights[asset.path] = remaining * share / len(pool)

    options = list(weights)
    values = np.array([weights[o] for o in options], dtype=float)
    total = values.sum()
    if total <= 0:
        # All mass pinned to zero: fall back to uniform
        values = np.ones(len(options))
        total = values.sum()
    values = values / total
    return WeightTable(layer=layer, options=options, weights=values, cum_weights=np.cumsum(values))


def weighted_index(cum_weights: np.ndarray, uniforms) -> np.ndarray:
    """Inverse CDF sampling: map uniform values in [0, 1) to option indices."""
    indices = np.searchsorted(cum_weights, uniforms, side="right")
    return np.minimum(indices, len(cum_weights) - 1)


class Randomizer:
    """Draw complete, rule-consistent selections."""

    def __init__(
        self,
        manifest: AssetManifest,
        weights: Mapping[str, Mapping] = None,
        rng: np.random.Generator = None,
        layers: List[str] = None,
    ):
        self.manifest = manifest
        self.rng = rng if rng is not None else np.random.default_rng()
        weights = RANDOM_WEIGHTS if weights is None else weights
        self.tables = [
            build_weight_table(manifest, layer, weights.get(layer))
            for layer in (layers or LAYER_NAMES)
        ]

    def table(self, layer: str) -> WeightTable:
        for table in self.tables:
            if table.layer == layer:
                return table
        raise KeyError(layer)

    def draft(self, uniforms) -> Selection:
        """Selection from one uniform value per table, before rule repair."""
        values = {}
        for table, u in zip(self.tables, uniforms):
            index = int(weighted_index(table.cum_weights, u))
            values[table.layer] = table.options[index]
        return Selection(values)

    def _finish(self, draft: Selection) -> Selection:
        return resolve(self.manifest, draft).applied()

    def randomize(self) -> Selection:
        return self._finish(self.draft(self.rng.random(len(self.tables))))

    def randomize_many(self, count: int, quasi: bool = False) -> List[Selection]:
        """Draw ``count`` selections.

        With ``quasi`` the uniforms come from a scrambled Halton sequence,
        which spreads a batch more evenly over the weight tables.
        """
        num_layers = len(self.tables)
        if quasi:
            sampler = qmc.Halton(d=num_layers, seed=self.rng)
            matrix = sampler.random(n=count)
        else:
            matrix = self.rng.random((count, num_layers))

        indices = np.zeros((count, num_layers), dtype=int)
        for layer_idx, table in enumerate(self.tables):
            indices[:, layer_idx] = weighted_index(table.cum_weights, matrix[:, layer_idx])

        result = []
        for row in indices:
            draft = Selection(
                {table.layer: table.options[i] for table, i in zip(self.tables, row)}
            )
            result.append(self._finish(draft))
        return result
