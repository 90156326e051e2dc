"""
碰撞檢測與避障模組
提供障礙物模型、碰撞檢測、路徑檢查與避障斥力等功能
"""

from .obstacle import (
    Obstacle,
    ObstacleType,
    RiskLevel,
    SphericalObstacle,
    StaticObstacle,
    MovingObstacle,
    ExpandingObstacle,
    BuildingObstacle,
    NoFlyZone
)

from .obstacle_manager import (
    ObstacleManager
)

__all__ = [
    # Obstacles
    'Obstacle',
    'ObstacleType',
    'RiskLevel',
    'SphericalObstacle',
    'StaticObstacle',
    'MovingObstacle',
    'ExpandingObstacle',
    'BuildingObstacle',
    'NoFlyZone',

    # Obstacle Manager
    'ObstacleManager'
]
