"""Rasterize a paint list onto a Pillow surface.

Bitmaps are fetched concurrently through a process-wide cache and painted
in z order, each scaled to fit the surface without cropping or stretching.
A bitmap that fails to load is logged and skipped.
"""
import asyncio
import inspect
import io
import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from PIL import Image

from wojak_creator.compositor import PaintEntry
from wojak_creator.config import CANVAS_SIZE, RENDER_DEBOUNCE_S
from wojak_creator.errors import AssetLoadError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderWarning:
    layer: str
    path: str
    message: str


def new_surface(width: int, height: int) -> Image.Image:
    """Blank transparent canvas."""
    return Image.new("RGBA", (width, height), (0, 0, 0, 0))


def aspect_fit(image_size: Tuple[int, int], surface_size: Tuple[int, int]) -> Tuple[int, int, int, int]:
    """Fit an image inside a surface, centred, keeping its aspect ratio.

    Args:
        image_size: (width, height) of the bitmap
        surface_size: (width, height) of the surface

    Returns:
        (x, y, width, height) of the drawn image
    """
    image_width, image_height = image_size
    surface_width, surface_height = surface_size
    image_aspect = image_width / image_height
    surface_aspect = surface_width / surface_height

    if image_aspect > surface_aspect:
        # Wider than the surface: fit to width
        draw_width = surface_width
        draw_height = max(1, round(surface_width / image_aspect))
    else:
        # Taller (or same shape): fit to height
        draw_height = surface_height
        draw_width = max(1, round(surface_height * image_aspect))

    x = (surface_width - draw_width) // 2
    y = (surface_height - draw_height) // 2
    return x, y, draw_width, draw_height


def decode(data) -> Image.Image:
    """Turn loader output (bytes or an image) into an RGBA bitmap."""
    if isinstance(data, Image.Image):
        image = data
    else:
        image = Image.open(io.BytesIO(data))
        image.load()
    return image.convert("RGBA")


class BitmapCache:
    """Memoized asset bitmaps keyed by asset path.

    ``loader`` maps a path to bytes (or a Pillow image), either directly or
    as a coroutine function. Concurrent requests for the same path share a
    single fetch. Failed fetches are not cached.
    """

    def __init__(self, loader: Callable):
        self._loader = loader
        self._images: Dict[str, Image.Image] = {}
        self._pending: Dict[str, asyncio.Task] = {}

    def __contains__(self, path: str) -> bool:
        return path in self._images

    def __len__(self) -> int:
        return len(self._images)

    def clear(self) -> None:
        self._images.clear()

    async def _fetch(self, path: str) -> Image.Image:
        try:
            if inspect.iscoroutinefunction(self._loader):
                data = await self._loader(path)
            else:
                data = await asyncio.to_thread(self._loader, path)
            image = decode(data)
        except Exception as exc:
            raise AssetLoadError(path, exc) from exc
        finally:
            self._pending.pop(path, None)
        self._images[path] = image
        logger.debug(f"Cached bitmap {path} ({image.width}x{image.height})")
        return image

    async def get(self, path: str) -> Image.Image:
        image = self._images.get(path)
        if image is not None:
            return image
        task = self._pending.get(path)
        if task is None:
            task = asyncio.get_running_loop().create_task(self._fetch(path))
            self._pending[path] = task
        # A superseded render must not cancel a fetch other renders share
        return await asyncio.shield(task)


async def render(
    surface: Image.Image,
    paint_list: Sequence[PaintEntry],
    width: int,
    height: int,
    cache: BitmapCache,
) -> List[RenderWarning]:
    """Paint every entry onto ``surface`` in ascending z order.

    Bitmaps load concurrently; painting happens after all loads settle so
    the order is always respected.

    Returns:
        One warning per entry that could not be loaded
    """
    entries = sorted(paint_list, key=lambda entry: entry.z_index)
    results = await asyncio.gather(*(cache.get(e.path) for e in entries), return_exceptions=True)

    problems = []
    for entry, result in zip(entries, results):
        if isinstance(result, Exception):
            logger.warning(f"Skipping {entry.layer} layer: {result}")
            problems.append(RenderWarning(entry.layer, entry.path, str(result)))
            continue
        x, y, draw_width, draw_height = aspect_fit(result.size, (width, height))
        if (draw_width, draw_height) != result.size:
            bitmap = result.resize((draw_width, draw_height), Image.LANCZOS)
        else:
            bitmap = result
        surface.alpha_composite(bitmap, (x, y))
    return problems


class RenderScheduler:
    """Coalesce render requests so only the newest selection is painted.

    Every ``submit`` supersedes the previous request: a pending request is
    cancelled during its debounce window, and a render that finishes after
    a newer submit is discarded instead of published.
    """

    def __init__(
        self,
        cache: BitmapCache,
        size: Tuple[int, int] = CANVAS_SIZE,
        debounce: float = RENDER_DEBOUNCE_S,
        on_frame: Optional[Callable] = None,
    ):
        self.cache = cache
        self.size = size
        self.debounce = debounce
        self.on_frame = on_frame
        self.frame: Optional[Image.Image] = None
        self.frame_generation = 0
        self.warnings: List[RenderWarning] = []
        self._generation = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def generation(self) -> int:
        return self._generation

    def submit(self, paint_list: Sequence[PaintEntry]) -> asyncio.Task:
        self._generation += 1
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = asyncio.get_running_loop().create_task(
            self._run(self._generation, list(paint_list))
        )
        return self._task

    async def _run(self, generation: int, paint_list: List[PaintEntry]) -> Optional[Image.Image]:
        if self.debounce:
            await asyncio.sleep(self.debounce)
        surface = new_surface(*self.size)
        problems = await render(surface, paint_list, self.size[0], self.size[1], self.cache)
        if generation != self._generation:
            logger.debug(f"Discarding stale frame {generation} (latest {self._generation})")
            return None
        self.frame = surface
        self.frame_generation = generation
        self.warnings = problems
        if self.on_frame is not None:
            self.on_frame(surface, problems)
        return surface

    async def wait(self) -> Optional[Image.Image]:
        """Wait for the latest submitted render and return the published frame."""
        while self._task is not None:
            task = self._task
            try:
                await task
            except asyncio.CancelledError:
                if task is self._task:
                    raise
            if task is self._task:
                break
        return self.frame
