# Collectors module
"""
Collectors that turn OS state into CSV rows, one per subcommand.
"""

from .base_collector import BaseCollector
from .mount_collector import MountCollector
from .process_collector import ProcessCollector
from .system_collector import SystemCollector

__all__ = [
    "BaseCollector",
    "MountCollector",
    "ProcessCollector",
    "SystemCollector",
]
