"""Matplotlib-based display for rendered images.

Example:
    >>> from pathtracer.preview.display import show_image
    >>> image = Renderer(world, settings).render()
    >>> show_image(image, title="spheres")
"""

from __future__ import annotations

import numpy as np
import numpy.typing as npt


def show_image(
    image: npt.NDArray[np.uint8],
    *,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 6),
    block: bool = True,
) -> None:
    """Display an 8-bit RGB image in a Matplotlib window.

    Args:
        image: Array of shape (H, W, 3), row 0 at the top.
        title: Window/figure title, e.g. a caller-chosen render name.
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until the figure is closed.

    Raises:
        ValueError: If the array is not (H, W, 3).
    """
    import matplotlib.pyplot as plt

    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {image.shape}")

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.imshow(image)
    ax.axis("off")
    if title is not None:
        ax.set_title(title)
        fig.canvas.manager.set_window_title(title)

    plt.tight_layout()
    plt.show(block=block)
