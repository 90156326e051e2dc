"""
日誌工具模組
障礙物系統的日誌輸出：控制台/文件處理器、執行時間記錄
等級與輸出目標由 config.LogSettings 提供
"""

import logging
import os
import sys
import time
from functools import wraps
from typing import Dict, Optional


DEFAULT_LOGGER_NAME = 'SwarmObstacles'

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def _to_level(level: str, default: int = logging.INFO) -> int:
    """等級名稱轉換為 logging 常數（未知名稱使用 default）"""
    value = logging.getLevelName(str(level).upper())
    return value if isinstance(value, int) else default


class Logger:
    """
    障礙物系統的日誌包裝

    同名的 Logger 共用同一個 logging.Logger，重新設定時會替換處理器，
    因此模組層級持有的實例也會跟著新的等級與輸出目標。
    """

    _instances: Dict[str, 'Logger'] = {}

    def __init__(self, name: str = DEFAULT_LOGGER_NAME,
                 level: str = 'INFO',
                 log_dir: Optional[str] = None,
                 log_to_file: bool = False,
                 log_to_console: bool = True):
        """
        參數:
            name: 日誌名稱
            level: 日誌等級（DEBUG, INFO, WARNING, ERROR, CRITICAL）
            log_dir: 日誌目錄（未指定時使用目前工作目錄下的 logs/）
            log_to_file: 是否寫入 <log_dir>/<name>.log
            log_to_console: 是否輸出到標準輸出
        """
        self.name = name
        self.log_file: Optional[str] = None
        self.logger = logging.getLogger(name)
        self.logger.setLevel(_to_level(level))
        self.logger.propagate = False

        self.close()
        self.logger.handlers.clear()

        formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)

        if log_to_console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setFormatter(formatter)
            self.logger.addHandler(console_handler)

        if log_to_file:
            log_dir = log_dir or os.path.join(os.getcwd(), 'logs')
            os.makedirs(log_dir, exist_ok=True)
            self.log_file = os.path.join(log_dir, f"{name}.log")

            file_handler = logging.FileHandler(self.log_file, encoding='utf-8')
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)

    def debug(self, message: str):
        self.logger.debug(message)

    def info(self, message: str):
        self.logger.info(message)

    def warning(self, message: str):
        self.logger.warning(message)

    def error(self, message: str):
        self.logger.error(message)

    def log(self, level: str, message: str):
        self.logger.log(_to_level(level), message)

    def is_enabled_for(self, level: str) -> bool:
        """檢查指定等級是否會被輸出"""
        return self.logger.isEnabledFor(_to_level(level))

    def set_level(self, level: str):
        self.logger.setLevel(_to_level(level))

    def close(self):
        """關閉所有處理器（寫出文件緩衝）"""
        for handler in list(self.logger.handlers):
            handler.flush()
            handler.close()


def setup_logger(name: str = DEFAULT_LOGGER_NAME,
                 level: str = 'INFO',
                 log_dir: Optional[str] = None,
                 log_to_file: bool = False,
                 log_to_console: bool = True) -> Logger:
    """
    設定日誌，並取代同名的既有實例

    參數:
        name: 日誌名稱
        level: 日誌等級
        log_dir: 日誌目錄
        log_to_file: 是否輸出到文件
        log_to_console: 是否輸出到控制台

    返回:
        Logger 實例
    """
    logger = Logger(name, level, log_dir, log_to_file, log_to_console)
    Logger._instances[name] = logger
    return logger


def get_logger(name: str = DEFAULT_LOGGER_NAME) -> Logger:
    """獲取日誌實例（尚未設定時以預設值建立）"""
    if name not in Logger._instances:
        Logger._instances[name] = Logger(name)
    return Logger._instances[name]


def log_execution_time(logger: Optional[Logger] = None, level: str = 'DEBUG'):
    """
    記錄函數執行時間的裝飾器；函數拋出例外時以 ERROR 記錄後重新拋出

    參數:
        logger: Logger 實例（未指定時使用預設日誌）
        level: 正常完成時的輸出等級
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            _logger = logger or get_logger()
            start_time = time.perf_counter()

            try:
                result = func(*args, **kwargs)
            except Exception as e:
                _logger.error(f"{func.__name__} 執行失敗 "
                              f"({time.perf_counter() - start_time:.4f} 秒): {e}")
                raise

            if _logger.is_enabled_for(level):
                _logger.log(level, f"{func.__name__} 執行時間: "
                                   f"{time.perf_counter() - start_time:.4f} 秒")
            return result
        return wrapper
    return decorator
