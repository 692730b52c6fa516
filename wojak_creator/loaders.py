import pathlib

from wojak_creator.config import ASSETS_PATH


class FileAssetLoader:
    """Read asset bytes from the assets directory, keyed by manifest path."""

    def __init__(self, root: pathlib.Path = ASSETS_PATH):
        self.root = pathlib.Path(root)

    def __call__(self, path: str) -> bytes:
        return (self.root / path).read_bytes()
