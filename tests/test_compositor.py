"""Tests for paint list construction."""

import numpy as np
import pytest

from wojak_creator import compositor
from wojak_creator.compositor import Z_INDEX, build_paint_list
from wojak_creator.config import Z_ORDER
from wojak_creator.errors import CompositionError
from wojak_creator.randomizer import Randomizer
from wojak_creator.selection import Selection


def slots(paint_list):
    return {entry.layer: entry.path for entry in paint_list}


class TestBuildPaintList:
    """Tests for build_paint_list."""

    def test_empty_selection(self, manifest, empty):
        assert build_paint_list(manifest, empty) == []

    def test_sorted_by_z(self, manifest):
        selection = Selection(
            {
                "Background": "BACKGROUND/Blue.png",
                "Base": "BASE/Classic.png",
                "Eyes": "EYE/Normal.png",
                "Head": "HEAD/Crown.png",
                "MouthBase": "MOUTH/BASE/Numb.png",
                "MouthItem": "MOUTH/ITEM/Cig.png",
                "FacialHair": "FACIAL_HAIR/Stach.png",
                "Mask": "MASK/Pepe-Mask.png",
                "Clothes": "CLOTHES/Tee-Blue.png",
                "ClothesAddon": "CLOTHES/ADDON/Chia-Farmer-Blue.png",
            }
        )
        paint_list = build_paint_list(manifest, selection)

        assert [e.layer for e in paint_list] == [
            "Background",
            "Base",
            "Clothes",
            "ClothesAddon",
            "FacialHair",
            "MouthBase",
            "MouthItem",
            "Mask",
            "Eyes",
            "Head",
        ]
        assert [e.z_index for e in paint_list] == sorted(e.z_index for e in paint_list)

    def test_unknown_paths_skipped(self, manifest):
        paint_list = build_paint_list(manifest, {"Head": "HEAD/Gone.png", "Base": "BASE/Alien.png"})

        assert slots(paint_list) == {"Base": "BASE/Alien.png"}

    def test_z_order_is_total(self):
        assert len(set(Z_INDEX.values())) == len(Z_ORDER)


class TestVirtualLayers:
    """Tests for virtual slot extraction."""

    def test_astronaut_moves_above_face(self, manifest):
        paint_list = build_paint_list(
            manifest, Selection({"Clothes": "CLOTHES/Astronaut.png", "Eyes": "EYE/Normal.png"})
        )
        placed = slots(paint_list)

        assert "Clothes" not in placed
        assert placed["Astronaut"] == "CLOTHES/Astronaut.png"
        assert Z_INDEX["Astronaut"] > Z_INDEX["Eyes"]

    def test_other_clothes_stay_in_slot(self, manifest):
        placed = slots(build_paint_list(manifest, Selection({"Clothes": "CLOTHES/Hoodie.png"})))

        assert placed == {"Clothes": "CLOTHES/Hoodie.png"}

    def test_hannibal_mask_above_mouth_and_eyes(self, manifest):
        placed = slots(
            build_paint_list(
                manifest,
                Selection({"Mask": "MASK/Hannibal-Mask.png", "MouthItem": "MOUTH/ITEM/Pipe.png"}),
            )
        )

        assert "Mask" not in placed
        assert placed["HannibalMask"] == "MASK/Hannibal-Mask.png"
        assert Z_INDEX["HannibalMask"] > Z_INDEX["MouthItem"]

    def test_tyson_tattoo_under_mask(self, manifest):
        paint_list = build_paint_list(
            manifest, Selection({"Eyes": "EYE/Tyson-Tattoo.png", "Mask": "MASK/Pepe-Mask.png"})
        )

        assert [e.layer for e in paint_list] == ["TysonTattoo", "Mask"]

    def test_tyson_tattoo_without_mask(self, manifest):
        placed = slots(build_paint_list(manifest, Selection({"Eyes": "EYE/Tyson-Tattoo.png"})))

        assert placed == {"Eyes": "EYE/Tyson-Tattoo.png"}

    def test_ninja_eyes_under_covering_mask(self, manifest):
        paint_list = build_paint_list(
            manifest, Selection({"Eyes": "EYE/Ninja-Turtle-Eyes.png", "Mask": "MASK/Ski-Mask.png"})
        )

        assert [e.layer for e in paint_list] == ["NinjaEyes", "Mask"]

    def test_ninja_eyes_over_other_masks(self, manifest):
        paint_list = build_paint_list(
            manifest, Selection({"Eyes": "EYE/Ninja-Turtle-Eyes.png", "Mask": "MASK/Pepe-Mask.png"})
        )

        assert [e.layer for e in paint_list] == ["Mask", "Eyes"]

    def test_each_asset_painted_once(self, manifest):
        """Random selections never paint an asset twice or drop one."""
        randomizer = Randomizer(manifest, rng=np.random.default_rng(3))
        for selection in randomizer.randomize_many(200):
            paint_list = build_paint_list(manifest, selection)
            painted = [e.path for e in paint_list]
            chosen = [path for path in selection.values() if path]

            assert sorted(painted) == sorted(chosen)
            assert len({e.z_index for e in paint_list}) == len(paint_list)

    def test_missing_slot_raises(self, manifest, monkeypatch):
        monkeypatch.setitem(compositor.VIRTUAL_SLOTS, "Clothes", [lambda asset, sel, man: "Nowhere"])

        with pytest.raises(CompositionError):
            build_paint_list(manifest, Selection({"Clothes": "CLOTHES/Hoodie.png"}))
