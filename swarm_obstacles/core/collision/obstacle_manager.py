"""
障礙物管理器
提供障礙物的統一管理、空間查詢、路徑檢查與避障斥力合成
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional, Sequence

from .obstacle import (
    Obstacle,
    ObstacleType,
    RiskLevel,
    StaticObstacle,
    MovingObstacle,
    ExpandingObstacle,
    BuildingObstacle,
    NoFlyZone
)
from ..geometry import Position, Vector2D
from ...config.settings import AvoidanceSettings, GlobalSettings, ManagerSettings
from ...utils.logger import get_logger, log_execution_time


logger = get_logger()


class ObstacleManager:
    """
    障礙物管理器

    功能:
    - 障礙物的添加、刪除、查詢
    - 碰撞與路徑取樣檢查
    - 鄰近障礙物的避障斥力合成
    - 每個模擬週期更新動態障礙物

    執行緒模型:
        單一寫入者（模擬週期、新增/移除）搭配多個讀取者（代理查詢）。
        所有結構變更都在鎖內完成；查詢先在鎖內取得快照再於鎖外計算，
        因此讀取者不會看到更新到一半的集合。
        空間查詢採線性掃描，適用於有限數量的障礙物。
    """

    def __init__(self, settings: Optional[ManagerSettings] = None,
                 avoidance: Optional[AvoidanceSettings] = None):
        """
        初始化障礙物管理器

        參數:
            settings: 管理器配置
            avoidance: 便捷建構方法建立的障礙物所使用的斥力參數
        """
        self.settings = settings or ManagerSettings()
        self.avoidance = avoidance or AvoidanceSettings()

        self._lock = threading.RLock()
        self._obstacles: Dict[int, Obstacle] = {}          # id -> obstacle
        self._dynamic_obstacles: Dict[int, Obstacle] = {}  # 動態障礙物索引

        # 平行更新用的執行緒池，首次需要時建立
        self._executor: Optional[ThreadPoolExecutor] = None

    @classmethod
    def from_settings(cls, global_settings: GlobalSettings) -> 'ObstacleManager':
        """以全域配置建立管理器"""
        return cls(global_settings.manager, global_settings.avoidance)

    def close(self):
        """關閉平行更新的執行緒池（之後的平行更新會重新建立）"""
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=True)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    # ==========================================
    # 註冊與移除
    # ==========================================
    def add_obstacle(self, obstacle: Obstacle) -> int:
        """
        添加障礙物（相同 ID 會覆蓋既有項目）

        參數:
            obstacle: 障礙物對象

        返回:
            障礙物 ID
        """
        with self._lock:
            replaced = self._obstacles.get(obstacle.id)
            if replaced is not None and replaced is not obstacle:
                self._dynamic_obstacles.pop(obstacle.id, None)

            self._obstacles[obstacle.id] = obstacle
            if obstacle.obstacle_type == ObstacleType.DYNAMIC:
                self._dynamic_obstacles[obstacle.id] = obstacle

        if replaced is not None:
            logger.debug(f"覆蓋障礙物: {replaced} -> {obstacle}")
        else:
            logger.debug(f"添加障礙物: {obstacle}")
        return obstacle.id

    def remove_obstacle(self, obstacle_id: int) -> bool:
        """
        移除障礙物（未知 ID 不做任何事）

        參數:
            obstacle_id: 障礙物 ID

        返回:
            是否成功移除
        """
        with self._lock:
            removed = self._obstacles.pop(obstacle_id, None)
            if removed is None:
                return False
            if removed.obstacle_type == ObstacleType.DYNAMIC:
                self._dynamic_obstacles.pop(obstacle_id, None)

        logger.debug(f"移除障礙物: {removed}")
        return True

    def clear_all(self):
        """清除所有障礙物"""
        with self._lock:
            self._obstacles.clear()
            self._dynamic_obstacles.clear()
        logger.debug("已清除所有障礙物")

    # ==========================================
    # 便捷建構方法
    # ==========================================
    def add_static_obstacle(self, center: Position, radius: float, name: str,
                            risk_level: RiskLevel = RiskLevel.LOW) -> StaticObstacle:
        """添加固定球形障礙物"""
        obstacle = StaticObstacle(center, radius, name, risk_level,
                                  avoidance=self.avoidance)
        self.add_obstacle(obstacle)
        return obstacle

    def add_building(self, x1: float, y1: float, x2: float, y2: float,
                     height: float, name: str) -> BuildingObstacle:
        """添加建築物"""
        obstacle = BuildingObstacle(x1, y1, x2, y2, height, name,
                                    avoidance=self.avoidance)
        self.add_obstacle(obstacle)
        return obstacle

    def add_no_fly_zone(self, center: Position, radius: float, name: str) -> NoFlyZone:
        """添加禁航區"""
        obstacle = NoFlyZone(center, radius, name,
                             avoidance=self.avoidance)
        self.add_obstacle(obstacle)
        return obstacle

    def add_moving_obstacle(self, position: Position, radius: float,
                            velocity: Sequence[float], name: str) -> MovingObstacle:
        """添加移動障礙物"""
        obstacle = MovingObstacle(position, radius, velocity, name,
                                  avoidance=self.avoidance)
        self.add_obstacle(obstacle)
        return obstacle

    def add_expanding_obstacle(self, center: Position, initial_radius: float,
                               expansion_rate: float, max_radius: float,
                               name: str) -> ExpandingObstacle:
        """添加擴張危害"""
        obstacle = ExpandingObstacle(center, initial_radius, expansion_rate, max_radius, name,
                                     avoidance=self.avoidance)
        self.add_obstacle(obstacle)
        return obstacle

    # ==========================================
    # 查詢
    # ==========================================
    def get_obstacle(self, obstacle_id: int) -> Optional[Obstacle]:
        """獲取障礙物（未知 ID 返回 None）"""
        with self._lock:
            return self._obstacles.get(obstacle_id)

    def get_all_obstacles(self) -> List[Obstacle]:
        """獲取所有障礙物（快照）"""
        with self._lock:
            return list(self._obstacles.values())

    def get_dynamic_obstacles(self) -> List[Obstacle]:
        """獲取所有動態障礙物（快照，依加入順序）"""
        with self._lock:
            return list(self._dynamic_obstacles.values())

    def get_obstacle_count(self) -> int:
        with self._lock:
            return len(self._obstacles)

    def __len__(self) -> int:
        return self.get_obstacle_count()

    def __contains__(self, obstacle_id: int) -> bool:
        with self._lock:
            return obstacle_id in self._obstacles

    def check_collision(self, point: Position) -> bool:
        """
        檢查點是否與任何障礙物碰撞

        參數:
            point: 查詢點

        返回:
            是否碰撞
        """
        return any(obstacle.contains_point(point) for obstacle in self.get_all_obstacles())

    def get_path_clear(self, start: Position, end: Position) -> bool:
        """
        檢查路徑是否暢通

        在線段上等距取樣 path_samples + 1 個點（含兩端點），任一點碰撞即不通。
        小於取樣間距的障礙物可能被漏判。

        參數:
            start: 起點
            end: 終點

        返回:
            是否所有取樣點都沒有碰撞
        """
        obstacles = self.get_all_obstacles()
        for sample in self._sample_path(start, end):
            if any(obstacle.contains_point(sample) for obstacle in obstacles):
                return False
        return True

    def get_obstacles_in_radius(self, position: Position, radius: float) -> List[Obstacle]:
        """
        獲取中心位於半徑內（含邊界）的所有障礙物

        參數:
            position: 查詢中心
            radius: 查詢半徑（公尺）

        返回:
            障礙物列表（依註冊表順序）
        """
        return [obstacle for obstacle in self.get_all_obstacles()
                if position.distance_to(obstacle.position) <= radius]

    def get_nearest_obstacle(self, point: Position,
                             max_distance: float = float('inf')) -> Optional[Obstacle]:
        """
        獲取中心最接近查詢點的障礙物

        參數:
            point: 查詢點
            max_distance: 最大搜索距離（公尺）

        返回:
            最近的障礙物（如果有）
        """
        nearest_obstacle = None
        min_distance = max_distance

        for obstacle in self.get_all_obstacles():
            distance = point.distance_to(obstacle.position)
            if distance < min_distance or (nearest_obstacle is None and distance == max_distance):
                min_distance = distance
                nearest_obstacle = obstacle

        return nearest_obstacle

    def get_obstacles_near_path(self, start: Position, end: Position,
                                detection_radius: float) -> List[Obstacle]:
        """
        獲取路徑附近的障礙物

        任一取樣點與障礙物中心的距離在 detection_radius 內（含邊界）即納入，
        每個障礙物最多出現一次。

        參數:
            start: 起點
            end: 終點
            detection_radius: 偵測半徑（公尺）

        返回:
            障礙物列表
        """
        samples = self._sample_path(start, end)
        nearby_obstacles = []

        for obstacle in self.get_all_obstacles():
            center = obstacle.position
            if any(sample.distance_to(center) <= detection_radius for sample in samples):
                nearby_obstacles.append(obstacle)

        return nearby_obstacles

    def get_avoidance_vector(self, agent_position: Position,
                             detection_radius: Optional[float] = None) -> Vector2D:
        """
        合成偵測範圍內所有障礙物的避障斥力

        參數:
            agent_position: 代理位置
            detection_radius: 偵測半徑（未指定時使用預設值）

        返回:
            合力向量；範圍內沒有障礙物時為零向量
        """
        if detection_radius is None:
            detection_radius = self.settings.default_detection_radius

        nearby_obstacles = self.get_obstacles_in_radius(agent_position, detection_radius)
        total_avoidance = Vector2D.zero()

        for obstacle in nearby_obstacles:
            total_avoidance = total_avoidance + obstacle.get_avoidance_vector(agent_position)

        return total_avoidance

    # ==========================================
    # 週期更新
    # ==========================================
    @log_execution_time(logger)
    def update_dynamic_obstacles(self, delta_time: float):
        """
        更新所有動態障礙物

        在週期開始時取得動態索引的快照，週期內的新增或移除不影響本次迭代。

        參數:
            delta_time: 時間步長（秒）
        """
        dynamic_obstacles = self.get_dynamic_obstacles()
        if not dynamic_obstacles:
            return

        if self.settings.parallel_updates and len(dynamic_obstacles) > 1:
            # list() 讓工作執行緒中的例外在此拋出
            list(self._get_executor().map(lambda obstacle: obstacle.update(delta_time),
                                          dynamic_obstacles))
        else:
            for obstacle in dynamic_obstacles:
                obstacle.update(delta_time)

        logger.debug(f"更新 {len(dynamic_obstacles)} 個動態障礙物 (dt={delta_time:.3f}s)")

    def get_statistics(self) -> dict:
        """
        獲取統計信息

        返回:
            統計字典
        """
        obstacles = self.get_all_obstacles()

        by_risk = {level.name: 0 for level in RiskLevel}
        by_kind: Dict[str, int] = {}
        for obstacle in obstacles:
            by_risk[obstacle.risk_level.name] += 1
            kind = type(obstacle).__name__
            by_kind[kind] = by_kind.get(kind, 0) + 1

        dynamic_count = sum(1 for obs in obstacles if obs.obstacle_type == ObstacleType.DYNAMIC)

        return {
            'total_obstacles': len(obstacles),
            'static_obstacles': len(obstacles) - dynamic_count,
            'dynamic_obstacles': dynamic_count,
            'by_risk_level': by_risk,
            'by_kind': by_kind
        }

    # ==========================================
    # 內部工具
    # ==========================================
    def _sample_path(self, start: Position, end: Position) -> List[Position]:
        """在線段上取樣 t = i / n (i = 0..n) 的點"""
        samples = self.settings.path_samples
        return [start.interpolate(end, i / samples) for i in range(samples + 1)]

    def _get_executor(self) -> ThreadPoolExecutor:
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.settings.max_workers,
                    thread_name_prefix='obstacle-update'
                )
            return self._executor
