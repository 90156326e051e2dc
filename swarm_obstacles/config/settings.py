"""
全局配置管理模組
提供避障力參數、障礙物管理器參數、日誌配置等
"""

import os
import json
from dataclasses import dataclass, asdict
from typing import Dict, Any, Optional

from ..utils.logger import DEFAULT_LOGGER_NAME, Logger, get_logger, setup_logger


LOG_LEVEL_NAMES = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


@dataclass
class AvoidanceSettings:
    """避障力配置"""
    # 各類障礙物的斥力增益
    static_gain: float = 50.0
    building_gain: float = 50.0
    no_fly_zone_gain: float = 100.0
    moving_gain: float = 80.0
    expanding_gain: float = 150.0

    # 衰減參數
    falloff_offset: float = 1.0          # scale = gain / (distance + offset)
    degenerate_distance: float = 0.01    # 低於此距離視為位於中心（公尺）
    min_force_denominator: float = 0.1   # 邊界斥力分母下限

    def __post_init__(self):
        """檢查參數"""
        if self.degenerate_distance <= 0:
            raise ValueError(f"degenerate_distance 必須大於 0: {self.degenerate_distance}")
        if self.min_force_denominator <= 0:
            raise ValueError(f"min_force_denominator 必須大於 0: {self.min_force_denominator}")


@dataclass
class ManagerSettings:
    """障礙物管理器配置"""
    # 路徑取樣段數（取樣點數 = path_samples + 1）
    path_samples: int = 10

    # 預設偵測半徑（公尺）
    default_detection_radius: float = 50.0

    # 動態障礙物平行更新
    parallel_updates: bool = False
    max_workers: int = 4

    def __post_init__(self):
        """檢查參數"""
        if self.path_samples < 1:
            raise ValueError(f"path_samples 至少為 1: {self.path_samples}")
        if self.max_workers < 1:
            raise ValueError(f"max_workers 至少為 1: {self.max_workers}")


@dataclass
class LogSettings:
    """日誌配置"""
    level: str = "INFO"
    log_to_file: bool = False
    log_to_console: bool = True
    log_dir: Optional[str] = None

    def __post_init__(self):
        """檢查參數"""
        if str(self.level).upper() not in LOG_LEVEL_NAMES:
            raise ValueError(f"未知的日誌等級: {self.level}")
        self.level = self.level.upper()


class GlobalSettings:
    """全局配置管理器"""

    def __init__(self, config_file: Optional[str] = None):
        """
        初始化全局配置

        參數:
            config_file: 配置文件路徑（可選，存在時自動載入）
        """
        self.avoidance = AvoidanceSettings()
        self.manager = ManagerSettings()
        self.log = LogSettings()

        self.config_file = config_file

        if self.config_file:
            self.load()

    def load(self) -> bool:
        """
        從文件載入配置

        返回:
            是否成功載入
        """
        if not self.config_file or not os.path.exists(self.config_file):
            return False

        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                config_data = json.load(f)

            # 先全部解析成功再套用，避免部分更新
            avoidance = AvoidanceSettings(**config_data.get('avoidance', {}))
            manager = ManagerSettings(**config_data.get('manager', {}))
            log = LogSettings(**config_data.get('log', {}))
        except (OSError, json.JSONDecodeError, TypeError, ValueError, AttributeError) as e:
            get_logger().warning(f"載入配置失敗: {self.config_file}: {e}")
            return False

        self.avoidance = avoidance
        self.manager = manager
        self.log = log
        self.apply_logging()
        return True

    def apply_logging(self, name: str = DEFAULT_LOGGER_NAME) -> Logger:
        """
        依 log 配置重新設定日誌

        參數:
            name: 日誌名稱

        返回:
            Logger 實例
        """
        return setup_logger(name,
                            level=self.log.level,
                            log_dir=self.log.log_dir,
                            log_to_file=self.log.log_to_file,
                            log_to_console=self.log.log_to_console)

    def save(self, config_file: Optional[str] = None) -> bool:
        """
        儲存配置到文件

        參數:
            config_file: 目標路徑（未指定時使用初始化時的路徑）

        返回:
            是否成功儲存
        """
        target = config_file or self.config_file
        if not target:
            get_logger().warning("儲存配置失敗: 未指定配置文件路徑")
            return False

        try:
            directory = os.path.dirname(target)
            if directory:
                os.makedirs(directory, exist_ok=True)

            with open(target, 'w', encoding='utf-8') as f:
                json.dump(self.get_dict(), f, indent=4, ensure_ascii=False)
        except OSError as e:
            get_logger().warning(f"儲存配置失敗: {target}: {e}")
            return False

        self.config_file = target
        return True

    def reset_to_default(self):
        """重設為預設配置"""
        self.avoidance = AvoidanceSettings()
        self.manager = ManagerSettings()
        self.log = LogSettings()

    def get_dict(self) -> Dict[str, Any]:
        """獲取配置字典"""
        return {
            'avoidance': asdict(self.avoidance),
            'manager': asdict(self.manager),
            'log': asdict(self.log)
        }


# 全局配置實例
_global_settings: Optional[GlobalSettings] = None


def get_settings() -> GlobalSettings:
    """
    獲取全局配置實例（單例模式）

    返回:
        GlobalSettings實例
    """
    global _global_settings
    if _global_settings is None:
        _global_settings = GlobalSettings()
    return _global_settings


def init_settings(config_file: Optional[str] = None) -> GlobalSettings:
    """
    初始化全局配置，並依其 log 配置設定日誌

    參數:
        config_file: 配置文件路徑（可選）

    返回:
        GlobalSettings實例
    """
    global _global_settings
    _global_settings = GlobalSettings(config_file)
    _global_settings.apply_logging()
    return _global_settings
