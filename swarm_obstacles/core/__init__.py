"""
Core 核心演算法模組
"""

from .geometry import Position, Vector2D
from .collision import ObstacleManager, Obstacle, ObstacleType, RiskLevel

__all__ = [
    'Position', 'Vector2D',
    'ObstacleManager', 'Obstacle', 'ObstacleType', 'RiskLevel'
]
