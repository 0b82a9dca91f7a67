"""
Migration storage backend interface.

A migration-runner host drives a backend in this order:
connect -> before_migration -> {get_executed_migration_names,
mark_executed, unmark_executed}* -> disconnect.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, List


class MigrationBackend(ABC):
    """Contract every migration storage backend satisfies."""

    @abstractmethod
    async def connect(self) -> Any:
        """Open the connection and ensure the tracking storage exists."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Release the connection. Never raises."""

    @abstractmethod
    async def before_migration(self) -> None:
        """Hook called once before a batch of migrations runs."""

    @abstractmethod
    async def get_executed_migration_names(self) -> List[str]:
        """Names of all migrations recorded as executed."""

    @abstractmethod
    async def mark_executed(self, name: str) -> None:
        """Record a migration as executed."""

    @abstractmethod
    async def unmark_executed(self, name: str) -> None:
        """Forget that a migration was executed."""

    @abstractmethod
    async def reset_executed(self) -> None:
        """Forget every executed migration."""

    @abstractmethod
    def get_template_path(self) -> Path:
        """Path of the template used for new migration files."""
