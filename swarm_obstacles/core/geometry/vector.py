"""
向量與座標點模組
提供模擬世界中的 3D 位置與 2D 力向量
"""

import math
from dataclasses import dataclass
from typing import Tuple

import numpy as np


@dataclass(frozen=True)
class Position:
    """
    本地座標點 (x=East, y=North, z=高度，單位公尺)

    不可變值物件：所有運算都回傳新的 Position。
    """
    x: float
    y: float
    z: float = 0.0

    def distance_to(self, other: 'Position') -> float:
        """計算 3D 歐氏距離"""
        dx = self.x - other.x
        dy = self.y - other.y
        dz = self.z - other.z
        return math.sqrt(dx * dx + dy * dy + dz * dz)

    def horizontal_distance_to(self, other: 'Position') -> float:
        """計算水平距離（忽略高度）"""
        return math.hypot(self.x - other.x, self.y - other.y)

    def add(self, dx: float, dy: float, dz: float = 0.0) -> 'Position':
        """加上位移，回傳新的位置"""
        return Position(self.x + dx, self.y + dy, self.z + dz)

    def interpolate(self, other: 'Position', t: float) -> 'Position':
        """
        線性插值

        參數:
            other: 終點
            t: 插值參數（0 為自身，1 為終點）

        返回:
            插值點
        """
        return Position(
            self.x + (other.x - self.x) * t,
            self.y + (other.y - self.y) * t,
            self.z + (other.z - self.z) * t
        )

    def is_near(self, other: 'Position', tolerance: float) -> bool:
        """檢查是否在容許距離內（含邊界）"""
        return self.distance_to(other) <= tolerance

    def to_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def to_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z])

    def __str__(self) -> str:
        return f"({self.x:.1f}, {self.y:.1f}, {self.z:.1f})"


@dataclass(frozen=True)
class Vector2D:
    """2D 向量（水平面上的力或方向）"""
    x: float
    y: float

    @classmethod
    def zero(cls) -> 'Vector2D':
        return cls(0.0, 0.0)

    def magnitude(self) -> float:
        return math.hypot(self.x, self.y)

    def normalize(self) -> 'Vector2D':
        """單位向量；零向量維持為零"""
        mag = self.magnitude()
        if mag > 0:
            return Vector2D(self.x / mag, self.y / mag)
        return Vector2D.zero()

    def add(self, other: 'Vector2D') -> 'Vector2D':
        return Vector2D(self.x + other.x, self.y + other.y)

    def subtract(self, other: 'Vector2D') -> 'Vector2D':
        return Vector2D(self.x - other.x, self.y - other.y)

    def multiply(self, scalar: float) -> 'Vector2D':
        return Vector2D(self.x * scalar, self.y * scalar)

    def __add__(self, other: 'Vector2D') -> 'Vector2D':
        return self.add(other)

    def __sub__(self, other: 'Vector2D') -> 'Vector2D':
        return self.subtract(other)

    def to_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)

    def to_array(self) -> np.ndarray:
        return np.array([self.x, self.y])

    def __str__(self) -> str:
        return f"Vector2D({self.x:.2f}, {self.y:.2f})"
