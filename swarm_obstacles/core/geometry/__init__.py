"""
Geometry 幾何運算模組
"""

from .vector import (
    Position,
    Vector2D
)

__all__ = [
    'Position',
    'Vector2D'
]
