"""Render driver: settings, banded rendering and pixel delivery.

The Renderer wraps the integrator kernels. It uploads the world, sets up the
camera for the image aspect ratio, and renders the image in bands of rows
from the top down. After each band it hands the finished pixels to an
optional ``plot(x, y, rgb)`` callback, reports progress and checks the
optional deadline.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.core.renderer import RenderSettings, Renderer
    >>> from pathtracer.preview.export import ImageBuffer
    >>> settings = RenderSettings(width=200, height=100, samples_per_pixel=50)
    >>> buffer = ImageBuffer(settings.width, settings.height)
    >>> image = Renderer(world, settings).render(plot=buffer.plot)
    >>> buffer.save("spheres.ppm")
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Generator
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt

from pathtracer.camera.pinhole import PinholeCamera, setup_camera
from pathtracer.core.integrator import (
    MAX_DEPTH,
    MAX_IMAGE_HEIGHT,
    MAX_IMAGE_WIDTH,
    T_MIN,
    read_rows,
    render_rows,
)
from pathtracer.geometry.hittable import Hittable
from pathtracer.scene.intersection import get_scene_generation
from pathtracer.scene.manager import SceneManager

logger = logging.getLogger(__name__)

# Receives (x, y, (r, g, b)) with y counted from the top of the image
PlotCallback = Callable[[int, int, tuple[int, int, int]], None]

# Receives (rows_done, rows_total)
ProgressCallback = Callable[[int, int], None]

# Seeds are passed to the kernels as 32-bit signed integers
_MAX_SEED = 2**31 - 1


class RenderTimeoutError(RuntimeError):
    """Raised when a render runs past its deadline."""


@dataclass
class RenderSettings:
    """Parameters of a render.

    Attributes:
        width: Image width in pixels (2 to 2048).
        height: Image height in pixels (2 to 2048).
        samples_per_pixel: Primary rays averaged per pixel.
        max_depth: Deepest traced bounce; deeper rays contribute black.
        vfov: Vertical field of view in degrees.
        seed: Seed of the per-pixel random streams.
        jitter: Randomize each sample within its pixel. Disable for a
            deterministic sample position at the pixel corner.
        t_min: Nearest accepted hit distance.
        band_rows: Rows rendered per kernel launch.
        deadline_seconds: Optional wall-clock budget, checked between bands.

    Raises:
        ValueError: If any value is out of range.
    """

    width: int = 256
    height: int = 256
    samples_per_pixel: int = 200
    max_depth: int = MAX_DEPTH
    vfov: float = 25.0
    seed: int = 0
    jitter: bool = True
    t_min: float = T_MIN
    band_rows: int = 16
    deadline_seconds: float | None = None

    def __post_init__(self) -> None:
        if not 2 <= self.width <= MAX_IMAGE_WIDTH:
            raise ValueError(f"width = {self.width} must be in [2, {MAX_IMAGE_WIDTH}]")
        if not 2 <= self.height <= MAX_IMAGE_HEIGHT:
            raise ValueError(f"height = {self.height} must be in [2, {MAX_IMAGE_HEIGHT}]")
        if self.samples_per_pixel < 1:
            raise ValueError(f"samples_per_pixel = {self.samples_per_pixel} must be >= 1")
        if self.max_depth < 1:
            raise ValueError(f"max_depth = {self.max_depth} must be >= 1")
        if self.t_min < 0.0:
            raise ValueError(f"t_min = {self.t_min} must be >= 0")
        if self.band_rows < 1:
            raise ValueError(f"band_rows = {self.band_rows} must be >= 1")
        if not 0 <= self.seed <= _MAX_SEED:
            raise ValueError(f"seed = {self.seed} must be in [0, {_MAX_SEED}]")
        if self.deadline_seconds is not None and self.deadline_seconds <= 0.0:
            raise ValueError(f"deadline_seconds = {self.deadline_seconds} must be positive")

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height

    def camera(self) -> PinholeCamera:
        return PinholeCamera.for_image(self.width, self.height, self.vfov)


class Renderer:
    """Renders a world with the sampling parameters of a RenderSettings.

    Attributes:
        world: The Hittable being rendered.
        settings: The render parameters.
        scene: The SceneManager holding the uploaded world.
        camera: The camera to render through. When None, a camera is built
            from the settings (image aspect ratio and vfov).
    """

    def __init__(
        self,
        world: Hittable,
        settings: RenderSettings | None = None,
        camera: PinholeCamera | None = None,
    ) -> None:
        self.world = world
        self.settings = settings if settings is not None else RenderSettings()
        self.camera = camera
        self.scene = SceneManager()
        self._generation: int | None = None

    def prepare(self) -> None:
        """Upload the world and set up the camera."""
        stats = self.scene.load(self.world)
        self._generation = get_scene_generation()
        camera = self.camera if self.camera is not None else self.settings.camera()
        if abs(camera.aspect_ratio - self.settings.aspect_ratio) > 1e-6:
            logger.warning(
                "Camera aspect ratio %.4f does not match the %dx%d image",
                camera.aspect_ratio,
                self.settings.width,
                self.settings.height,
            )
        setup_camera(camera)
        logger.debug("Prepared %d spheres, %d materials", stats.spheres, stats.materials)

    def iter_bands(self) -> Generator[tuple[int, npt.NDArray[np.uint8]], None, None]:
        """Render the image band by band, from the top down.

        Yields:
            (y_top, band) pairs where y_top is the image row (from the top) of
            the band's first row and band is a uint8 array of shape
            (rows, width, 3) in top-down order.

        Raises:
            RenderTimeoutError: If the deadline passes between bands.
            RuntimeError: If prepare() has not been called, or another world
                was loaded into the scene tables since.
        """
        s = self.settings
        start = time.perf_counter()
        row_end = s.height

        while row_end > 0:
            if self._generation is None or self._generation != get_scene_generation():
                raise RuntimeError("Scene tables do not hold this world; call prepare() first")
            row_start = max(0, row_end - s.band_rows)
            render_rows(
                row_start,
                row_end,
                s.width,
                s.height,
                s.samples_per_pixel,
                s.max_depth,
                s.t_min,
                s.seed,
                s.jitter,
            )
            # read_rows returns bottom-up; images are top-down
            band = np.flipud(read_rows(row_start, row_end, s.width))
            y_top = s.height - row_end
            logger.debug("Rendered rows %d-%d of %d", y_top, y_top + band.shape[0], s.height)
            yield y_top, band

            row_end = row_start
            elapsed = time.perf_counter() - start
            if row_end > 0 and s.deadline_seconds is not None and elapsed > s.deadline_seconds:
                raise RenderTimeoutError(
                    f"Render exceeded its deadline of {s.deadline_seconds:.2f}s "
                    f"with {row_end} of {s.height} rows left"
                )

    def render(
        self,
        plot: PlotCallback | None = None,
        callback: ProgressCallback | None = None,
    ) -> npt.NDArray[np.uint8]:
        """Render the full image.

        Args:
            plot: Optional callback receiving every finished pixel as
                (x, y, (r, g, b)) with y counted from the top.
            callback: Optional progress callback receiving
                (rows_done, rows_total) after each band.

        Returns:
            A uint8 array of shape (height, width, 3), row 0 at the top.

        Raises:
            RenderTimeoutError: If the deadline passes before the last band.
        """
        s = self.settings
        logger.info(
            "Rendering %dx%d at %d spp (max depth %d, seed %d)",
            s.width,
            s.height,
            s.samples_per_pixel,
            s.max_depth,
            s.seed,
        )
        start = time.perf_counter()
        self.prepare()

        image = np.zeros((s.height, s.width, 3), dtype=np.uint8)
        rows_done = 0
        for y_top, band in self.iter_bands():
            image[y_top : y_top + band.shape[0]] = band
            rows_done += band.shape[0]

            if plot is not None:
                for dy, row in enumerate(band):
                    for x, pixel in enumerate(row):
                        plot(x, y_top + dy, (int(pixel[0]), int(pixel[1]), int(pixel[2])))

            if callback is not None:
                callback(rows_done, s.height)

        logger.info("Finished render in %.2fs", time.perf_counter() - start)
        return image
