"""Trait composition engine for layered Wojak portraits."""
from wojak_creator.compositor import PaintEntry, build_paint_list
from wojak_creator.errors import (
    AssetLoadError,
    CompositionError,
    ManifestError,
    RuleCycleError,
    WojakError,
)
from wojak_creator.grouping import build_groups
from wojak_creator.manifest import Asset, AssetManifest, load_manifest
from wojak_creator.randomizer import Randomizer
from wojak_creator.renderer import BitmapCache, RenderScheduler, render
from wojak_creator.rules import RuleOutcome, evaluate, resolve
from wojak_creator.selection import Selection
from wojak_creator.session import WojakCreator

__version__ = "0.1.0"
