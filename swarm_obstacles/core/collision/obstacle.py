"""
障礙物模組
定義環境中的各類障礙物：靜態球體、建築物、禁航區、移動障礙物、擴張危害
每種障礙物提供碰撞判斷、最近點、避障斥力與狀態更新
"""

import itertools
import math
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import ClassVar, Optional, Tuple

from ..geometry import Position, Vector2D
from ...config.settings import AvoidanceSettings


# 代理位於中心時的固定斥力方向 (+X)
FALLBACK_AVOIDANCE = Vector2D(1.0, 0.0)

_id_counter = itertools.count(1)
_id_lock = threading.Lock()


def _next_obstacle_id() -> int:
    with _id_lock:
        return next(_id_counter)


class ObstacleType(Enum):
    """障礙物類型枚舉"""
    STATIC = auto()     # 不隨時間變化（建築、地形）
    DYNAMIC = auto()    # 隨時間變化（車輛、火場）


class RiskLevel(Enum):
    """碰撞風險等級"""
    LOW = auto()        # 輕微，容易避開
    MEDIUM = auto()     # 中等，需要注意
    HIGH = auto()       # 顯著，需立即處理
    CRITICAL = auto()   # 極端危險


# ==========================================
# 障礙物基類
# ==========================================
@dataclass(eq=False)
class Obstacle(ABC):
    """
    障礙物抽象基類

    ID 在建立時由全域計數器分配（從 1 開始），在物件生命週期內不變。
    位置與形狀只由 update() 改變；查詢方法皆為唯讀。
    子類別需宣告 avoidance_gain 與 avoidance 欄位，未指定的增益
    由 avoidance 中名為 gain_setting 的欄位補上。
    """
    id: int = field(init=False)

    obstacle_type: ClassVar[ObstacleType] = ObstacleType.STATIC
    gain_setting: ClassVar[str] = 'static_gain'

    def __post_init__(self):
        if self.avoidance is None:
            self.avoidance = AvoidanceSettings()
        if self.avoidance_gain is None:
            self.avoidance_gain = getattr(self.avoidance, self.gain_setting)
        self.id = _next_obstacle_id()

    @property
    def is_dynamic(self) -> bool:
        return self.obstacle_type == ObstacleType.DYNAMIC

    @abstractmethod
    def contains_point(self, point: Position) -> bool:
        """判斷點是否在危害區域內（含邊界）"""
        pass

    @abstractmethod
    def get_closest_point_to(self, agent_position: Position) -> Position:
        """獲取障礙物邊界上距離代理最近的點"""
        pass

    @abstractmethod
    def get_avoidance_vector(self, agent_position: Position) -> Vector2D:
        """獲取遠離障礙物的水平斥力向量"""
        pass

    def update(self, delta_time: float):
        """
        推進障礙物狀態

        參數:
            delta_time: 時間步長（秒）
        """
        # 靜態障礙物不需更新

    def _planar_repulsion(self, dx: float, dy: float, scale_of) -> Vector2D:
        """
        沿水平偏移 (dx, dy) 方向的斥力

        參數:
            dx, dy: 從障礙物指向代理的水平偏移
            scale_of: 由水平距離計算斥力大小的函數

        返回:
            斥力向量；距離過近時為固定的 (1, 0)
        """
        distance = math.hypot(dx, dy)
        if distance < self.avoidance.degenerate_distance:
            return FALLBACK_AVOIDANCE

        scale = scale_of(distance)
        return Vector2D(dx / distance * scale, dy / distance * scale)

    def _inverse_falloff(self, distance: float) -> float:
        """gain / (distance + offset)"""
        return self.avoidance_gain / (distance + self.avoidance.falloff_offset)

    def _boundary_denominator(self, distance: float, radius: float) -> float:
        """邊界斥力的分母，下限為 min_force_denominator，內部不反向"""
        return max(distance - radius + self.avoidance.falloff_offset,
                   self.avoidance.min_force_denominator)

    def __str__(self) -> str:
        return f"{self.name}[id={self.id}, type={self.obstacle_type.name}, pos={self.position}]"


# ==========================================
# 球形障礙物
# ==========================================
class SphericalObstacle(Obstacle):
    """
    球形危害區域的共用幾何

    子類別只需實作 _force_scale() 定義斥力大小隨距離的衰減。
    """

    def __post_init__(self):
        if self.radius < 0:
            raise ValueError(f"障礙物半徑不可為負: {self.radius}")
        self.radius = float(self.radius)
        super().__post_init__()

    def contains_point(self, point: Position) -> bool:
        return self.position.distance_to(point) <= self.radius

    def get_closest_point_to(self, agent_position: Position) -> Position:
        """
        獲取球面上距離代理最近的點

        代理位於球心附近時（距離 < degenerate_distance），回傳球心沿 +X 偏移半徑的固定點。
        """
        center = self.position
        dx = agent_position.x - center.x
        dy = agent_position.y - center.y
        dz = agent_position.z - center.z
        distance = math.sqrt(dx * dx + dy * dy + dz * dz)

        if distance < self.avoidance.degenerate_distance:
            return center.add(self.radius, 0.0, 0.0)

        scale = self.radius / distance
        return center.add(dx * scale, dy * scale, dz * scale)

    def get_avoidance_vector(self, agent_position: Position) -> Vector2D:
        return self._planar_repulsion(agent_position.x - self.position.x,
                                      agent_position.y - self.position.y,
                                      self._force_scale)

    @abstractmethod
    def _force_scale(self, distance: float) -> float:
        """給定水平距離的斥力大小"""
        pass


@dataclass(eq=False)
class StaticObstacle(SphericalObstacle):
    """固定球形障礙物（樹木、塔柱等），風險較低，斥力較弱"""
    position: Position
    radius: float
    name: str
    risk_level: RiskLevel = RiskLevel.LOW
    avoidance_gain: Optional[float] = None
    avoidance: Optional[AvoidanceSettings] = field(default=None, repr=False)

    def _force_scale(self, distance: float) -> float:
        return self._inverse_falloff(distance)

    def __str__(self) -> str:
        return f"StaticObstacle[{self.name}, center={self.position}, radius={self.radius:.1f}m]"


@dataclass(eq=False)
class MovingObstacle(SphericalObstacle):
    """
    移動障礙物（車輛、鳥類等）

    以固定速度 (vx, vy, vz) m/s 移動，直到 set_velocity() 重新設定。
    行為較難預測，因此斥力比靜態障礙物強。
    """
    position: Position
    radius: float
    velocity: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    name: str = "MovingObstacle"
    avoidance_gain: Optional[float] = None
    avoidance: Optional[AvoidanceSettings] = field(default=None, repr=False)
    risk_level: RiskLevel = field(default=RiskLevel.MEDIUM, init=False)

    obstacle_type: ClassVar[ObstacleType] = ObstacleType.DYNAMIC
    gain_setting: ClassVar[str] = 'moving_gain'

    def __post_init__(self):
        if len(self.velocity) != 3:
            raise ValueError(f"速度必須為三維向量: {self.velocity}")
        self.velocity = tuple(float(v) for v in self.velocity)
        super().__post_init__()

    def set_velocity(self, vx: float, vy: float, vz: float = 0.0):
        """重新設定速度"""
        self.velocity = (float(vx), float(vy), float(vz))

    def update(self, delta_time: float):
        vx, vy, vz = self.velocity
        self.position = self.position.add(vx * delta_time, vy * delta_time, vz * delta_time)

    def _force_scale(self, distance: float) -> float:
        return self._inverse_falloff(distance)

    def __str__(self) -> str:
        vx, vy, vz = self.velocity
        return (f"MovingObstacle[{self.name}, pos={self.position}, radius={self.radius:.1f}m, "
                f"velocity=({vx:.1f}, {vy:.1f}, {vz:.1f})m/s]")


@dataclass(eq=False)
class ExpandingObstacle(SphericalObstacle):
    """
    擴張危害（火場、煙霧等）

    radius 從初始值以 expansion_rate (m/s) 增長直到 max_radius，之後停止增長但不會消失。
    半徑單調不減且永不超過 max_radius。
    """
    position: Position
    radius: float
    expansion_rate: float
    max_radius: float
    name: str = "ExpandingObstacle"
    avoidance_gain: Optional[float] = None
    avoidance: Optional[AvoidanceSettings] = field(default=None, repr=False)
    risk_level: RiskLevel = field(default=RiskLevel.CRITICAL, init=False)
    initial_radius: float = field(init=False)

    obstacle_type: ClassVar[ObstacleType] = ObstacleType.DYNAMIC
    gain_setting: ClassVar[str] = 'expanding_gain'

    def __post_init__(self):
        if self.expansion_rate < 0:
            raise ValueError(f"擴張速率不可為負: {self.expansion_rate}")
        if self.max_radius < self.radius:
            raise ValueError(f"最大半徑 ({self.max_radius}) 小於初始半徑 ({self.radius})")
        self.expansion_rate = float(self.expansion_rate)
        self.max_radius = float(self.max_radius)
        super().__post_init__()
        self.initial_radius = self.radius

    @property
    def is_fully_expanded(self) -> bool:
        return self.radius >= self.max_radius

    def update(self, delta_time: float):
        # 負時間步長視為 0，半徑不會縮小
        if delta_time <= 0:
            return
        if self.radius < self.max_radius:
            self.radius = min(self.radius + self.expansion_rate * delta_time, self.max_radius)

    def _force_scale(self, distance: float) -> float:
        # 危害越大斥力越強
        growth = self.radius / self.max_radius if self.max_radius > 0 else 1.0
        return self.avoidance_gain * growth / self._boundary_denominator(distance, self.radius)

    def __str__(self) -> str:
        return (f"ExpandingObstacle[{self.name}, center={self.position}, "
                f"radius={self.radius:.1f}m/{self.max_radius:.1f}m, "
                f"rate={self.expansion_rate:.1f}m/s]")


# ==========================================
# 其他靜態障礙物
# ==========================================
@dataclass(eq=False)
class BuildingObstacle(Obstacle):
    """建築物（自地面 z=0 起算、對角 (x1, y1)-(x2, y2) 的軸對齊長方體）"""
    x1: float
    y1: float
    x2: float
    y2: float
    height: float
    name: str
    avoidance_gain: Optional[float] = None
    avoidance: Optional[AvoidanceSettings] = field(default=None, repr=False)
    risk_level: RiskLevel = field(default=RiskLevel.HIGH, init=False)
    position: Position = field(init=False)

    gain_setting: ClassVar[str] = 'building_gain'

    def __post_init__(self):
        if self.height < 0:
            raise ValueError(f"建築物高度不可為負: {self.height}")
        self.height = float(self.height)
        self.position = Position((self.x1 + self.x2) / 2, (self.y1 + self.y2) / 2, self.height / 2)
        super().__post_init__()

    @property
    def min_x(self) -> float:
        return min(self.x1, self.x2)

    @property
    def max_x(self) -> float:
        return max(self.x1, self.x2)

    @property
    def min_y(self) -> float:
        return min(self.y1, self.y2)

    @property
    def max_y(self) -> float:
        return max(self.y1, self.y2)

    def get_bounds(self) -> Tuple[float, float, float, float]:
        """
        獲取水平邊界框

        返回:
            (min_x, min_y, max_x, max_y)
        """
        return (self.min_x, self.min_y, self.max_x, self.max_y)

    def contains_point(self, point: Position) -> bool:
        return (self.min_x <= point.x <= self.max_x and
                self.min_y <= point.y <= self.max_y and
                0.0 <= point.z <= self.height)

    def get_closest_point_to(self, agent_position: Position) -> Position:
        return Position(
            max(self.min_x, min(agent_position.x, self.max_x)),
            max(self.min_y, min(agent_position.y, self.max_y)),
            max(0.0, min(agent_position.z, self.height))
        )

    def get_avoidance_vector(self, agent_position: Position) -> Vector2D:
        # 以最近的牆面點而非中心計算方向
        closest = self.get_closest_point_to(agent_position)
        return self._planar_repulsion(agent_position.x - closest.x,
                                      agent_position.y - closest.y,
                                      self._inverse_falloff)

    def __str__(self) -> str:
        return (f"BuildingObstacle[{self.name}, x=[{self.min_x:.1f}, {self.max_x:.1f}], "
                f"y=[{self.min_y:.1f}, {self.max_y:.1f}], height={self.height:.1f}m]")


@dataclass(eq=False)
class NoFlyZone(Obstacle):
    """圓形禁航區（垂直圓柱，涵蓋所有高度）"""
    position: Position
    radius: float
    name: str
    avoidance_gain: Optional[float] = None
    avoidance: Optional[AvoidanceSettings] = field(default=None, repr=False)
    risk_level: RiskLevel = field(default=RiskLevel.CRITICAL, init=False)

    gain_setting: ClassVar[str] = 'no_fly_zone_gain'

    def __post_init__(self):
        if self.radius < 0:
            raise ValueError(f"禁航區半徑不可為負: {self.radius}")
        self.radius = float(self.radius)
        super().__post_init__()

    def contains_point(self, point: Position) -> bool:
        # 只比較水平距離
        return self.position.horizontal_distance_to(point) <= self.radius

    def get_closest_point_to(self, agent_position: Position) -> Position:
        """圓柱側面上的最近點，保持代理的高度"""
        dx = agent_position.x - self.position.x
        dy = agent_position.y - self.position.y
        horizontal_distance = math.hypot(dx, dy)

        if horizontal_distance < self.avoidance.degenerate_distance:
            return Position(self.position.x + self.radius, self.position.y, agent_position.z)

        scale = self.radius / horizontal_distance
        return Position(
            self.position.x + dx * scale,
            self.position.y + dy * scale,
            agent_position.z
        )

    def get_avoidance_vector(self, agent_position: Position) -> Vector2D:
        return self._planar_repulsion(
            agent_position.x - self.position.x,
            agent_position.y - self.position.y,
            lambda distance: self.avoidance_gain / self._boundary_denominator(distance, self.radius)
        )

    def __str__(self) -> str:
        return f"NoFlyZone[{self.name}, center={self.position}, radius={self.radius:.1f}m]"
