"""Sink stages.

Terminal stages with side effects: persisting variants and previewing them.
"""

from .save import Save, DirectoryCreateError
from .preview import Preview, draw_selection, show_with_opencv

__all__ = [
    "Save",
    "DirectoryCreateError",
    "Preview",
    "draw_selection",
    "show_with_opencv",
]
