"""Shared pytest fixtures for wojak_creator tests."""

from __future__ import annotations

import io
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from wojak_creator.config import LAYERS
from wojak_creator.manifest import AssetManifest
from wojak_creator.randomizer import Randomizer
from wojak_creator.selection import Selection
from wojak_creator.session import WojakCreator

# ============================================================================
# Manifest Fixtures
# ============================================================================

CATALOGUE = {
    "Background": [
        ("Blue", "BACKGROUND/Blue.png"),
        ("$cashtag", "BACKGROUND/$CASHTAG.png"),
    ],
    "Base": [
        ("Classic", "BASE/Classic.png"),
        ("Alien", "BASE/Alien.png"),
    ],
    "Eyes": [
        ("Normal", "EYE/Normal.png"),
        ("Shades", "EYE/Shades.png"),
        ("Shades Black", "EYE/Shades-Black.png"),
        ("Shades, Gold", "EYE/Shades-Gold.png"),
        ("Matrix Lenses (Green)", "EYE/Matrix-Lenses-Green.png"),
        ("Tyson Tattoo", "EYE/Tyson-Tattoo.png"),
        ("Ninja Turtle Eyes", "EYE/Ninja-Turtle-Eyes.png"),
    ],
    "Head": [
        ("Cap", "HEAD/Cap.png"),
        ("Cap (Red)", "HEAD/Cap-Red.png"),
        ("Cap (Blue)", "HEAD/Cap-Blue.png"),
        ("Beanie neon green", "HEAD/Beanie-Neon-Green.png"),
        ("Beanie Orange", "HEAD/Beanie-Orange.png"),
        ("Centurion", "HEAD/Centurion.png"),
        ("Centurion mask", "HEAD/Centurion_mask.png"),
        ("Crown", "HEAD/Crown.png"),
        ("Halo Gold", "HEAD/Halo-Gold.png"),
    ],
    "MouthBase": [
        ("Numb", "MOUTH/BASE/Numb.png"),
        ("Smile", "MOUTH/BASE/Smile.png"),
        ("Screeming", "MOUTH/BASE/Screeming.png"),
        ("Bubble Gum", "MOUTH/BASE/Bubble-Gum.png"),
    ],
    "MouthItem": [
        ("Cig", "MOUTH/ITEM/Cig.png"),
        ("Pipe", "MOUTH/ITEM/Pipe.png"),
    ],
    "FacialHair": [
        ("Stach", "FACIAL_HAIR/Stach.png"),
        ("neckbeard", "FACIAL_HAIR/Neckbeard.png"),
    ],
    "Mask": [
        ("Hannibal Mask", "MASK/Hannibal-Mask.png"),
        ("Clown Mask", "MASK/Clown-Mask.png"),
        ("Ski Mask", "MASK/Ski-Mask.png"),
        ("Pepe Mask", "MASK/Pepe-Mask.png"),
    ],
    "Clothes": [
        ("Tee White", "CLOTHES/Tee-White.png"),
        ("Tee Blue", "CLOTHES/Tee-Blue.png"),
        ("Tank Top Red", "CLOTHES/Tank-Top-Red.png"),
        ("Astronaut", "CLOTHES/Astronaut.png"),
        ("Hoodie", "CLOTHES/Hoodie.png"),
        ("McD Uniform", "CLOTHES/McD-Uniform.png"),
        ("McD Uniform capless", "CLOTHES/McD-Uniform-capless.png"),
        ("suit black red tie", "CLOTHES/Suit-Black-Red-Tie.png"),
        ("suit black blue bow", "CLOTHES/Suit-Black-Blue-Bow.png"),
        ("suit orange red tie", "CLOTHES/Suit-Orange-Red-Tie.png"),
        ("Suit Orange Gold Bow", "CLOTHES/Suit-Orange-Gold-Bow.png"),
    ],
    "ClothesAddon": [
        ("Chia Farmer blue", "CLOTHES/ADDON/Chia-Farmer-Blue.png"),
        ("Chia Farmer red", "CLOTHES/ADDON/Chia-Farmer-Red.png"),
        ("Chia Farmer brown", "CLOTHES/ADDON/Chia-Farmer-Brown.png"),
    ],
}


@pytest.fixture
def manifest() -> AssetManifest:
    """In-memory manifest covering every rule and grouping case."""
    return AssetManifest.from_mapping(CATALOGUE)


@pytest.fixture
def empty() -> Selection:
    return Selection()


@pytest.fixture
def creator(manifest: AssetManifest) -> WojakCreator:
    randomizer = Randomizer(manifest, rng=np.random.default_rng(1234))
    return WojakCreator(manifest, randomizer=randomizer)


# ============================================================================
# Bitmap Fixtures
# ============================================================================


def png_bytes(size=(100, 100), color=(255, 0, 0, 255)) -> bytes:
    """Encode a solid-colour PNG."""
    buffer = io.BytesIO()
    Image.new("RGBA", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def bitmaps() -> dict:
    """A bitmap for every catalogue path, keyed by path."""
    return {path: png_bytes() for items in CATALOGUE.values() for _, path in items}


@pytest.fixture
def assets_dir(tmp_path: Path) -> Path:
    """A minimal on-disk assets tree with every layer directory."""
    root = tmp_path / "assets"
    for _, directory, _ in LAYERS:
        (root / directory).mkdir(parents=True, exist_ok=True)

    files = {
        "BACKGROUND/Blue.png": (0, 0, 255, 255),
        "BASE/Classic.png": (255, 220, 180, 255),
        "BASE/Alien.png": (0, 200, 0, 255),
        "EYE/Normal.png": (0, 0, 0, 128),
        "MASK/Ski-Mask.png": (10, 10, 10, 255),
        "CLOTHES/Tee-White.png": (250, 250, 250, 255),
        "CLOTHES/Tee-Blue.png": (0, 0, 250, 255),
        "CLOTHES/ADDON/Chia-Farmer-Blue.png": (0, 100, 200, 255),
    }
    for relative, color in files.items():
        (root / relative).write_bytes(png_bytes((50, 50), color))
    return root
