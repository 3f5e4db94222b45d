"""Preview module: the renderer's output collaborator.

Components:
    export: ImageBuffer (plot target, PPM serialization, file export)
    display: Matplotlib display of finished images
"""

from pathtracer.preview.display import show_image
from pathtracer.preview.export import UNSET_COLOR, ImageBuffer, save_image_array

__all__ = [
    "ImageBuffer",
    "UNSET_COLOR",
    "save_image_array",
    "show_image",
]
