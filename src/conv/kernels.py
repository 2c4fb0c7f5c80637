"""Kernel presets."""

LAPLACIAN_KERNEL = (
    (-1, -1, -1),
    (-1, 8, -1),
    (-1, -1, -1),
)
