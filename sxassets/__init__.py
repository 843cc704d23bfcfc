"""Readers, converters and tools for helicopter-simulation game assets: models, animations, BC3 textures, mission text, waypoints and heightfields."""

__version__ = "0.1.0"

__all__ = [
    "bc3",
    "c3inf",
    "c3jim",
    "c3model",
    "dxt",
    "dxt_alpha",
    "heightfield",
    "matrix3",
    "modeltool",
    "png2bc3",
    "terrain_mesh",
]