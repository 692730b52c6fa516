"""The composition session the UI layer talks to.

A session owns one current ``Selection``. Every mutation goes through the
rule resolver and the settled selection replaces the current one in a
single assignment; a mutation the resolver rejects leaves the previous
selection in place.
"""
import logging
from typing import List, Optional, Tuple

from PIL import Image

from wojak_creator.compositor import PaintEntry, build_paint_list
from wojak_creator.config import CANVAS_SIZE
from wojak_creator.errors import RuleCycleError
from wojak_creator.grouping import OptionView, build_groups, option_views
from wojak_creator.labels import describe_selection, export_filename
from wojak_creator.manifest import AssetManifest
from wojak_creator.randomizer import Randomizer
from wojak_creator.renderer import BitmapCache, RenderScheduler, RenderWarning, new_surface, render
from wojak_creator.rules import RuleOutcome, resolve
from wojak_creator.selection import NONE_VALUES, Selection

logger = logging.getLogger(__name__)


class WojakCreator:
    def __init__(
        self,
        manifest: AssetManifest,
        randomizer: Randomizer = None,
        scheduler: RenderScheduler = None,
    ):
        self.manifest = manifest
        self.randomizer = randomizer or Randomizer(manifest)
        self.scheduler = scheduler
        bases = manifest.selectable("Base")
        start = Selection({"Base": bases[0].path} if bases else {})
        self._outcome: RuleOutcome = resolve(manifest, start)
        self._selection: Selection = self._outcome.applied()

    @property
    def selection(self) -> Selection:
        return self._selection

    @property
    def outcome(self) -> RuleOutcome:
        return self._outcome

    @property
    def disabled_layers(self) -> List[str]:
        return list(self._outcome.disabled_layers)

    def disabled_reason(self, layer: str) -> Optional[str]:
        if layer not in self._outcome.disabled_layers:
            return None
        return self._outcome.reason(layer)

    def _commit(self, draft: Selection) -> bool:
        try:
            outcome = resolve(self.manifest, draft)
        except RuleCycleError as exc:
            logger.error(f"Rejected selection change: {exc}")
            return False
        self._outcome = outcome
        self._selection = outcome.applied()
        if self.scheduler is not None:
            self.scheduler.submit(self.current_paint_list())
        return True

    def select_trait(self, layer: str, path: str) -> bool:
        """Set one layer and settle the whole selection.

        The Clothes picker also lists the addon assets; choosing one stores
        it in ClothesAddon. Choosing a garment the addon cannot be worn over,
        or no garment at all, takes the addon off.

        Returns:
            False when the change was rejected
        """
        path = "" if path in NONE_VALUES else path
        asset = self.manifest.get(path)
        on_picker = asset is not None and (
            asset.layer == layer or (layer == "Clothes" and asset.layer == "ClothesAddon")
        )
        if path and not on_picker:
            logger.debug(f"Unknown asset {path!r} for {layer}, treating as none")
            path = ""
            asset = None

        if layer == "Base" and not path:
            logger.debug("Base cannot be empty, ignoring")
            return False

        changes = {layer: path}
        if layer == "Clothes" and asset is not None and asset.layer == "ClothesAddon":
            changes = {"ClothesAddon": path}
        elif layer == "Clothes" and (asset is None or not asset.has_family("tee")):
            changes["ClothesAddon"] = ""

        return self._commit(self._selection.update(changes))

    def select_group(self, layer: str, base_name: str) -> bool:
        """Pick a group from a picker, keeping the active variant if it is a member."""
        grouped = build_groups(self.manifest, layer, self._selection, self._outcome)
        group = grouped.group(base_name)
        if group is None:
            logger.debug(f"No group {base_name!r} in {layer}")
            return False
        current = [self._selection[layer]]
        if layer == "Clothes":
            current.append(self._selection["ClothesAddon"])
        for path in current:
            variant = group.variant_for(path)
            if variant is not None:
                return self.select_trait(layer, variant.path)

        variant = group.variant_for(group.default_variant_path)
        if variant.disabled:
            variant = next((v for v in group.variants if not v.disabled), variant)
        return self.select_trait(layer, variant.path)

    def grouped_options(self, layer: str) -> List[OptionView]:
        return option_views(self.manifest, layer, self._selection, self._outcome)

    def cycle_option(self, layer: str, direction: int = 1) -> bool:
        """Move to the next (or previous) enabled picker entry, as arrow keys do."""
        options = self.grouped_options(layer)
        if not options:
            return False
        current = next((i for i, o in enumerate(options) if o.active), None)
        if current is None:
            current = -1 if direction > 0 else len(options)

        index = current + direction
        while 0 <= index < len(options):
            option = options[index]
            if not option.disabled:
                return self.select_trait(layer, option.value)
            index += direction
        return False

    def randomize_all(self) -> Selection:
        randomizer = self.randomizer
        draft = randomizer.draft(randomizer.rng.random(len(randomizer.tables)))
        self._commit(draft)
        return self._selection

    def current_paint_list(self) -> List[PaintEntry]:
        return build_paint_list(self.manifest, self._selection)

    def export_filename(self) -> str:
        return export_filename(self.manifest, self._selection)

    def describe(self) -> str:
        return describe_selection(self.manifest, self._selection)

    async def render(
        self, cache: BitmapCache, size: Tuple[int, int] = CANVAS_SIZE
    ) -> Tuple[Image.Image, List[RenderWarning]]:
        """Render the current selection once, outside the scheduler."""
        surface = new_surface(*size)
        problems = await render(surface, self.current_paint_list(), size[0], size[1], cache)
        return surface, problems
