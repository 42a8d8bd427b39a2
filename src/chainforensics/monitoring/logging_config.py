# File: src/chainforensics/monitoring/logging_config.py

import logging
import logging.handlers
import os
from datetime import datetime
from typing import Union

from ..utils.config import Config
from ..utils.logger import resolve_level

class LogConfig:
    def __init__(
        self,
        log_dir: str = Config.LOG_DIR,
        max_size: int = Config.LOG_MAX_SIZE,
        backup_count: int = Config.LOG_BACKUP_COUNT,
        console_level: Union[str, int] = Config.LOG_LEVEL
    ):
        self.log_dir = log_dir
        self.max_size = max_size
        self.backup_count = backup_count
        self.console_level = resolve_level(console_level)
        
        if not os.path.exists(log_dir):
            os.makedirs(log_dir)

    @property
    def log_file(self) -> str:
        return os.path.join(
            self.log_dir,
            f'chainforensics_{datetime.now().strftime("%Y%m%d")}.log'
        )

    def setup_logging(self) -> logging.Logger:
        # Create formatters
        file_formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
        console_formatter = logging.Formatter(
            '%(asctime)s - %(levelname)s - %(message)s'
        )

        # Set up file handler
        file_handler = logging.handlers.RotatingFileHandler(
            self.log_file,
            maxBytes=self.max_size,
            backupCount=self.backup_count
        )
        file_handler.setFormatter(file_formatter)
        file_handler.setLevel(logging.DEBUG)

        # Set up console handler
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(console_formatter)
        console_handler.setLevel(self.console_level)

        # Configure root logger
        root_logger = logging.getLogger()
        root_logger.setLevel(logging.DEBUG)
        root_logger.addHandler(file_handler)
        root_logger.addHandler(console_handler)
        return root_logger
