"""
配置模組
提供全局配置管理、避障參數配置等功能
"""

from .settings import (
    GlobalSettings,
    AvoidanceSettings,
    ManagerSettings,
    LogSettings,
    get_settings,
    init_settings
)

__all__ = [
    'GlobalSettings',
    'AvoidanceSettings',
    'ManagerSettings',
    'LogSettings',
    'get_settings',
    'init_settings'
]
