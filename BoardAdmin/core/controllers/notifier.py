"""
Notifier interface
Controllers report outcomes through an injected notifier instead of
calling the UI directly.
"""

from abc import ABC, abstractmethod


class Notifier(ABC):
    """User-facing notification channel"""

    @abstractmethod
    def success(self, message: str):
        pass

    @abstractmethod
    def error(self, message: str):
        pass

    @abstractmethod
    def warning(self, message: str):
        pass
