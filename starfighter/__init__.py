"""A 3D arcade space shooter with a small quaternion-camera game engine."""

__version__ = "0.1.0"

__all__ = ["__version__"]