"""Driver fatigue detection from facial landmarks and head pose."""

__version__ = "0.1.0"
__all__ = ["detector", "geometry", "headpose", "render"]