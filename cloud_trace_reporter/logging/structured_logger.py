"""
Logging - Structured Logger

Logger JSON structuré pour les diagnostics du reporter (échecs de
soumission, spans abandonnés, conversions par défaut).

Le logger est appelé depuis les threads de l'application (report) et depuis
le thread de soumission: les entrées sont conservées dans un buffer borné.
"""

import sys
import threading
from collections import deque
from datetime import datetime, timezone
from typing import Any, Callable, Deque, List, Optional

from .interfaces import IStructuredLogger, LogConfig, LogEntry, LogLevel


class InvalidLogLevelError(ValueError):
    """Niveau de log invalide."""

    def __init__(self, level: str) -> None:
        self.level = level
        super().__init__(f"Invalid log level: {level}")


def parse_log_level(level: str) -> LogLevel:
    """
    Résout un niveau de log depuis son nom.

    Accepte aussi WARNING comme alias de WARN.

    Raises:
        InvalidLogLevelError: Si le nom est inconnu
    """
    name = str(level).strip().upper()
    if name == "WARNING":
        name = "WARN"
    try:
        return LogLevel(name)
    except ValueError:
        raise InvalidLogLevelError(str(level)) from None


def _stderr_handler(line: str) -> None:
    print(line, file=sys.stderr)


class StructuredLogger(IStructuredLogger):
    """
    Logger JSON structuré.

    Example:
        logger = StructuredLogger("cloud_trace_reporter")
        logger.set_default_project("my-project")
        logger.warn("Batch dropped", trace_id="abc", spans=3)
    """

    def __init__(
        self,
        name: str,
        config: Optional[LogConfig] = None,
        output_handler: Optional[Callable[[str], None]] = None,
    ) -> None:
        """
        Initialise le logger structuré.

        Args:
            name: Nom du logger
            config: Configuration optionnelle
            output_handler: Reçoit chaque ligne JSON (défaut: stderr)

        Raises:
            ValueError: Si name vide
        """
        if not name or not name.strip():
            raise ValueError("Logger name cannot be empty")

        self._name = name.strip()
        self._config = config or LogConfig()
        self._output_handler = output_handler or _stderr_handler
        self._entries: Deque[LogEntry] = deque(maxlen=self._config.max_entries)
        self._default_project_id: Optional[str] = self._config.default_project_id
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        """Retourne le nom du logger."""
        return self._name

    @property
    def config(self) -> LogConfig:
        """Retourne la configuration."""
        return self._config

    def set_default_project(self, project_id: str) -> None:
        """
        Définit project_id ajouté à chaque entrée.

        Args:
            project_id: ID projet Cloud Trace
        """
        self._default_project_id = project_id

    def log(self, level: LogLevel, message: str, **extra: Any) -> Optional[LogEntry]:
        """
        Crée une entrée de log structurée.

        Processus:
            1. Vérifie niveau >= min_level
            2. Génère timestamp ISO 8601 UTC
            3. Crée LogEntry et la conserve (buffer borné)
            4. Envoie la ligne JSON au handler

        Args:
            level: Niveau de log
            message: Message à logger
            **extra: Données supplémentaires

        Returns:
            LogEntry créé ou None si filtré

        Raises:
            ValueError: Si message vide
        """
        if not self._should_log(level):
            return None

        if not message:
            raise ValueError("Log message cannot be empty")

        entry = LogEntry(
            timestamp=self._generate_timestamp(),
            level=level,
            message=message,
            project_id=self._default_project_id,
            extra=dict(extra) if extra and self._config.include_extra else {},
            logger_name=self._name,
        )

        with self._lock:
            self._entries.append(entry)

        self._output_handler(entry.to_json())
        return entry

    def _generate_timestamp(self) -> str:
        """
        Génère timestamp ISO 8601 UTC avec millisecondes.

        Format: 2024-12-04T14:30:00.123Z
        """
        now = datetime.now(timezone.utc)
        return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"

    def _should_log(self, level: LogLevel) -> bool:
        return LogLevel.get_priority(level) >= LogLevel.get_priority(
            self._config.min_level
        )

    def debug(self, message: str, **extra: Any) -> Optional[LogEntry]:
        """Log niveau DEBUG."""
        return self.log(LogLevel.DEBUG, message, **extra)

    def info(self, message: str, **extra: Any) -> Optional[LogEntry]:
        """Log niveau INFO."""
        return self.log(LogLevel.INFO, message, **extra)

    def warn(self, message: str, **extra: Any) -> Optional[LogEntry]:
        """Log niveau WARN."""
        return self.log(LogLevel.WARN, message, **extra)

    def error(self, message: str, **extra: Any) -> Optional[LogEntry]:
        """Log niveau ERROR."""
        return self.log(LogLevel.ERROR, message, **extra)

    def critical(self, message: str, **extra: Any) -> Optional[LogEntry]:
        """Log niveau CRITICAL."""
        return self.log(LogLevel.CRITICAL, message, **extra)

    def get_entries(self) -> List[LogEntry]:
        """
        Retourne les entrées de log capturées.

        Returns:
            Liste des LogEntry (les plus anciennes sont évincées au-delà
            de max_entries)
        """
        with self._lock:
            return list(self._entries)

    def clear_entries(self) -> None:
        """Efface les entrées capturées."""
        with self._lock:
            self._entries.clear()

    def get_entries_by_level(self, level: LogLevel) -> List[LogEntry]:
        """
        Filtre les entrées par niveau.

        Args:
            level: Niveau à filtrer

        Returns:
            Liste des LogEntry du niveau spécifié
        """
        return [e for e in self.get_entries() if e.level == level]
