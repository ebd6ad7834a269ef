"""Preview module for output and visualization.

Components:
    display: Compositing helpers and Matplotlib static preview
    export: PNG export (RGBA or composited RGB)
    interactive: Taichi GGUI window hosting a live scene

Frames come out of the ray marcher as straight RGBA in display space; the
glow halo is translucent and the surface is opaque. Compositing over the
preset's background colour turns a frame into an opaque image.

Example:
    >>> from metaball.preview import save_png, show_frame
    >>> from metaball.scene.composer import SceneComposer
    >>>
    >>> composer = SceneComposer(width=640, height=360)
    >>> show_frame(composer.render())
    >>> save_png(composer, "metaballs.png", transparent=True)

For the interactive GGUI window:
    >>> from metaball.preview import MetaballPreview
    >>> MetaballPreview(composer).run()
"""

from metaball.preview.display import (
    apply_gamma,
    composite_over,
    process_image_for_display,
    show_comparison,
    show_frame,
)
from metaball.preview.export import (
    compute_rmse,
    image_to_uint8,
    save_png,
    save_png_from_array,
)
from metaball.preview.interactive import MetaballPreview

__all__ = [
    # Interactive preview
    "MetaballPreview",
    # Display functions
    "show_frame",
    "show_comparison",
    "composite_over",
    "apply_gamma",
    "process_image_for_display",
    # Export functions
    "save_png",
    "save_png_from_array",
    "image_to_uint8",
    "compute_rmse",
]
