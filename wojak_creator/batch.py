"""Batch generation of random portraits with a rarity report.

Run ``wojak-batch`` (or ``python -m wojak_creator.batch``) from a directory
containing the ``assets`` tree.
"""
import asyncio
import pathlib
from typing import Dict, List

import pandas as pd
from progressbar import progressbar

from wojak_creator.compositor import build_paint_list
from wojak_creator.config import ASSETS_PATH, CANVAS_SIZE, LAYER_NAMES, OUTPUT_PATH
from wojak_creator.labels import export_filename, format_display_label
from wojak_creator.loaders import FileAssetLoader
from wojak_creator.manifest import AssetManifest, load_manifest
from wojak_creator.randomizer import NONE_OPTION, Randomizer
from wojak_creator.renderer import BitmapCache, new_surface, render
from wojak_creator.selection import Selection

NONE_VALUE = "none"


def trait_value(manifest: AssetManifest, path: str) -> str:
    """Report value of one selected path."""
    asset = manifest.get(path)
    return format_display_label(asset.raw_label) if asset else NONE_VALUE


def generate_single_image(manifest: AssetManifest, selection: Selection, cache: BitmapCache, output_filename) -> list:
    """Render one selection and save it as PNG. Returns render warnings."""
    surface = new_surface(*CANVAS_SIZE)
    problems = asyncio.run(
        render(surface, build_paint_list(manifest, selection), CANVAS_SIZE[0], CANVAS_SIZE[1], cache)
    )
    surface.save(output_filename)
    return problems


def get_total_combinations(randomizer: Randomizer) -> int:
    """Number of distinct drafts the weight tables can produce."""
    total = 1
    for table in randomizer.tables:
        total = total * len(table.options)
    return total


def generate_images(
    manifest: AssetManifest,
    randomizer: Randomizer,
    edition: str,
    count: int,
    assets_path: pathlib.Path = ASSETS_PATH,
) -> pd.DataFrame:
    """Generate random portraits and return their traits as a DataFrame.

    Args:
        manifest: Asset catalogue
        randomizer: Source of rule-consistent selections
        edition: Edition name for output directory
        count: Number of images to generate
        assets_path: Root the asset paths are relative to

    Returns:
        DataFrame with one column per layer and the image file name
    """
    rarity_data: Dict[str, List[str]] = {layer: [] for layer in LAYER_NAMES}
    rarity_data["file"] = []

    images_dir = OUTPUT_PATH / f"edition_{edition}" / "images"
    images_dir.mkdir(parents=True, exist_ok=True)

    # Calculate zero-padding width
    zfill_width = len(str(count - 1))

    cache = BitmapCache(FileAssetLoader(assets_path))
    selections = randomizer.randomize_many(count, quasi=True)
    skipped = 0

    for idx in progressbar(range(count)):
        selection = selections[idx]
        image_name = f"{idx:0{zfill_width}d}_{export_filename(manifest, selection)}"
        skipped += len(generate_single_image(manifest, selection, cache, images_dir / image_name))

        for layer in LAYER_NAMES:
            rarity_data[layer].append(trait_value(manifest, selection[layer]))
        rarity_data["file"].append(image_name)

    if skipped:
        print(f"Warning: {skipped} layers could not be loaded and were skipped")
    print(f"Generated {count} images")
    return pd.DataFrame(rarity_data)


def generate_rarity_stats(manifest: AssetManifest, randomizer: Randomizer, metadata_df: pd.DataFrame) -> Dict[str, float]:
    """Print target vs actual distribution per layer.

    Targets are the randomizer weights before rule repair, so layers the
    rules touch (e.g. Clothes under an addon) may drift from their target.

    Returns:
        Maximum absolute difference per layer
    """
    max_diffs = {}
    for table in randomizer.tables:
        layer = table.layer
        if layer not in metadata_df.columns:
            continue

        print(f"\n{layer.upper()}:")
        target_dist = {}
        for option, weight in table.distribution().items():
            key = NONE_VALUE if option == NONE_OPTION else trait_value(manifest, option)
            target_dist[key] = target_dist.get(key, 0.0) + weight

        actual_dist = _get_actual_distribution(metadata_df[layer], target_dist.keys())
        max_diffs[layer] = _print_trait_differences(target_dist, actual_dist)
        print(f"  Max difference: {max_diffs[layer]:.4f}")
    return max_diffs


def _get_actual_distribution(series: pd.Series, expected_traits) -> dict:
    """Calculate actual trait distribution from metadata."""
    counts = series.value_counts(normalize=True)
    return {trait: float(counts.get(trait, 0.0)) for trait in expected_traits}


def _print_trait_differences(target_dist: dict, actual_dist: dict) -> float:
    """Print per-trait differences and return maximum difference."""
    max_diff = 0.0

    for trait, target_prob in target_dist.items():
        actual_prob = actual_dist[trait]
        diff = abs(actual_prob - target_prob)
        max_diff = max(max_diff, diff)
        print(f"    {trait}: {actual_prob:.4f} (target: {target_prob:.4f}, diff: {diff:.4f})")

    return max_diff


def main() -> None:
    """Batch generation workflow."""
    print("Checking assets...")
    manifest = load_manifest(ASSETS_PATH)
    randomizer = Randomizer(manifest)
    print(f"{len(manifest)} assets loaded\n")

    total_combinations = get_total_combinations(randomizer)
    print(f"The weight tables cover up to {total_combinations} raw combinations\n")

    count = int(input("How many wojaks would you like to create? "))
    edition_name = input("What would you like to call this edition?: ").strip()

    print("Starting generation...")
    metadata_df = generate_images(manifest, randomizer, edition_name, count, ASSETS_PATH)

    print("Saving traits...")
    metadata_path = OUTPUT_PATH / f"edition_{edition_name}" / "traits.csv"
    metadata_df.to_csv(metadata_path)

    print("\n=== Rarity Statistics ===")
    generate_rarity_stats(manifest, randomizer, metadata_df)
    print("Task complete!")


if __name__ == "__main__":
    main()
