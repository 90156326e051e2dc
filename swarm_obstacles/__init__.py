"""
Swarm Obstacles
===============

群飛模擬的障礙物偵測與避障系統

主要功能：
- 靜態、移動、擴張等障礙物模型
- 點碰撞與路徑取樣檢查
- 鄰近障礙物的水平避障斥力合成
- 每個模擬週期更新動態障礙物

使用方式：
    from swarm_obstacles import (
        ObstacleManager, MovingObstacle, Position
    )

    manager = ObstacleManager()
    manager.add_obstacle(MovingObstacle(Position(10, 0, 0), 5.0, (1, 0, 0), "truck"))
    force = manager.get_avoidance_vector(Position(0, 0, 0), 20.0)
"""

__version__ = "1.0.0"
__author__ = "Swarm Obstacles Team"

from .core.geometry.vector import (
    Position,
    Vector2D
)

from .core.collision.obstacle import (
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

from .core.collision.obstacle_manager import (
    ObstacleManager
)

from .config.settings import (
    GlobalSettings,
    AvoidanceSettings,
    ManagerSettings,
    LogSettings,
    get_settings,
    init_settings
)

from .utils.logger import (
    setup_logger,
    get_logger
)

__all__ = [
    # Geometry
    'Position',
    'Vector2D',

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

    # Manager
    'ObstacleManager',

    # Config
    'GlobalSettings',
    'AvoidanceSettings',
    'ManagerSettings',
    'LogSettings',
    'get_settings',
    'init_settings',

    # Logger
    'setup_logger',
    'get_logger',
]
