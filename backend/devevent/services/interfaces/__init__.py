"""
Service interfaces for dependency inversion.
Allows swapping implementations without changing business logic.
"""

from .notifier import Notifier
from .logging_notifier import LoggingNotifier
from .redis_notifier import RedisNotifier

__all__ = ['Notifier', 'LoggingNotifier', 'RedisNotifier']
