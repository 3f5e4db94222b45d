"""Image buffer and file export.

``ImageBuffer`` is the output collaborator of the renderer: it receives
finished pixels through ``plot(x, y, (r, g, b))`` and serializes them.

Supported formats:
    - PPM (plain-text P3), written directly
    - Anything Pillow can write (PNG, JPEG, BMP, ...), chosen by extension

Example:
    >>> from pathtracer.preview.export import ImageBuffer
    >>> buffer = ImageBuffer(200, 100)
    >>> Renderer(world, settings).render(plot=buffer.plot)
    >>> buffer.save("spheres.png")
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

# Color written for pixels that were never plotted
UNSET_COLOR = (255, 255, 255)


class ImageBuffer:
    """An 8-bit RGB raster with top-down row order.

    Attributes:
        width: Number of columns.
        height: Number of rows.

    Raises:
        ValueError: If width or height is not positive.
    """

    def __init__(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"Image size {width}x{height} must be positive")
        self.width = width
        self.height = height
        self._pixels = np.zeros((height, width, 3), dtype=np.uint8)
        self._plotted = np.zeros((height, width), dtype=bool)

    def plot(self, x: int, y: int, color: tuple[int, int, int]) -> None:
        """Set the pixel at column x, row y (counted from the top).

        Raises:
            IndexError: If (x, y) is outside the image.
            ValueError: If a color component is outside [0, 255].
        """
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Pixel ({x}, {y}) is outside a {self.width}x{self.height} image")
        for component in color:
            if not 0 <= component <= 255:
                raise ValueError(f"Color component {component} is outside [0, 255]")
        self._pixels[y, x] = color
        self._plotted[y, x] = True

    def clear(self) -> None:
        """Forget all plotted pixels."""
        self._pixels[:] = 0
        self._plotted[:] = False

    def to_array(self) -> npt.NDArray[np.uint8]:
        """Return a copy of the image; unplotted pixels are white."""
        image = self._pixels.copy()
        image[~self._plotted] = UNSET_COLOR
        return image

    def to_ppm(self) -> str:
        """Serialize as plain-text PPM (P3), one pixel per line."""
        lines = [f"P3\n{self.width} {self.height}\n255"]
        for r, g, b in self.to_array().reshape(-1, 3):
            lines.append(f"{r} {g} {b}")
        return "\n".join(lines) + "\n"

    def save(self, filepath: str | Path) -> Path:
        """Write the image to disk.

        A ``.ppm`` path is written as P3 text; any other extension is
        converted by Pillow.

        Returns:
            The path written.
        """
        path = Path(filepath)
        if path.suffix.lower() == ".ppm":
            path.write_text(self.to_ppm())
        else:
            save_image_array(self.to_array(), path)
        return path


def save_image_array(image: npt.NDArray[np.uint8], filepath: str | Path) -> None:
    """Save a (H, W, 3) uint8 array with Pillow; the format follows the extension."""
    pil_image = PILImage.fromarray(np.ascontiguousarray(image, dtype=np.uint8), mode="RGB")
    pil_image.save(str(filepath))
