"""Shared constants used across the model, engine, and rendering layers."""

CLIP_EPSILON: float = 1e-3
"""Outward offset applied to every derived clipping plane."""

NORMAL_EPSILON: float = 1e-4
"""Tolerance on ``|n|^2 - 1`` before a recomputed face normal is degenerate."""

W_EPSILON: float = 1e-12
"""Homogeneous ``w`` below which a transformed point has no finite image."""

LAYER_PERSPECTIVE: int = 1
"""Visibility layer for the perspective frustum geometry."""

LAYER_ORTHOGRAPHIC: int = 2
"""Visibility layer for the orthographic frustum geometry."""

MAX_FOV_DEGREES: float = 179.0
"""Largest accepted field of view; ``tan(fov/2)`` diverges at 180."""
