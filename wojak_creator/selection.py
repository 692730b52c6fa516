import logging
from typing import Dict, Iterator, Mapping, Optional

from wojak_creator.config import LAYER_NAMES

logger = logging.getLogger(__name__)

NONE_VALUES = ("", "None", None)


class Selection(Mapping):
    """Immutable snapshot of the chosen asset path per layer.

    Every stored layer is always present; an empty string means nothing is
    selected. Mutators return a new Selection.
    """

    __slots__ = ("_values",)

    def __init__(self, values: Optional[Mapping[str, str]] = None):
        data = {name: "" for name in LAYER_NAMES}
        for layer, path in (values or {}).items():
            if layer not in data:
                raise KeyError(f"Unknown layer: {layer}")
            data[layer] = "" if path in NONE_VALUES else path
        self._values: Dict[str, str] = data

    def __getitem__(self, layer: str) -> str:
        return self._values[layer]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other) -> bool:
        if isinstance(other, Selection):
            return self._values == other._values
        if isinstance(other, Mapping):
            if any(layer not in self._values for layer in other):
                return False
            return self._values == Selection(other)._values
        return NotImplemented

    def __hash__(self) -> int:
        return hash(tuple(sorted(self._values.items())))

    def __repr__(self) -> str:
        chosen = {k: v for k, v in self._values.items() if v}
        return f"Selection({chosen})"

    def occupied(self, layer: str) -> bool:
        return bool(self._values.get(layer))

    def with_(self, **changes: str) -> "Selection":
        return self.update(changes)

    def update(self, changes: Mapping[str, str]) -> "Selection":
        data = dict(self._values)
        data.update(changes)
        return Selection(data)

    def cleared(self, *layers: str) -> "Selection":
        return self.update({layer: "" for layer in layers})

    def to_dict(self) -> Dict[str, str]:
        return dict(self._values)


def sanitize(manifest, selection: Mapping[str, str]) -> Selection:
    """Drop values that are not assets of their layer.

    Stale references are treated as an empty choice rather than an error.
    """
    values = {}
    for layer, path in dict(selection).items():
        if layer not in LAYER_NAMES:
            logger.debug(f"Ignoring unknown layer {layer!r}")
            continue
        if path in NONE_VALUES:
            values[layer] = ""
        elif manifest.contains(layer, path):
            values[layer] = path
        else:
            logger.debug(f"Ignoring unknown asset {path!r} for layer {layer}")
            values[layer] = ""
    return Selection(values)
