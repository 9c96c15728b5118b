"""
Reporter - Config Loader

Charge les options du reporter depuis un fichier YAML explicite.

Format:
    reporter:
      project_id: my-project
      service_name: checkout
      max_queued_spans: 4096
      retry_backoff_policy:
        initial_delay: 0.5

La clé "reporter" est optionnelle. Les converters ne s'expriment pas en
YAML et se passent en surcharge à load().
"""

from pathlib import Path
from typing import Any, Dict, Union

import yaml

from .config import ConfigurationError, ReporterConfig, build_config


class ReporterConfigLoader:
    """Chargement de la configuration du reporter depuis YAML."""

    SECTION_KEY = "reporter"

    def __init__(self, configs_path: Union[str, Path, None] = None) -> None:
        """
        Args:
            configs_path: Répertoire de base des chemins relatifs (optionnel)
        """
        self.configs_path = Path(configs_path) if configs_path is not None else None

    def load(self, path: Union[str, Path], **overrides: Any) -> ReporterConfig:
        """
        Charge et valide la configuration.

        Args:
            path: Fichier YAML
            **overrides: Options prioritaires sur le fichier (ex: converters)

        Returns:
            ReporterConfig validée

        Raises:
            ConfigurationError: Fichier absent, YAML invalide ou options invalides
        """
        options = self.read(path)
        options.update(overrides)
        return build_config(**options)

    def read(self, path: Union[str, Path]) -> Dict[str, Any]:
        """
        Lit les options brutes sans les valider.

        Raises:
            ConfigurationError: Fichier absent, YAML invalide ou document non mapping
        """
        config_file = self._resolve(path)

        if not config_file.exists():
            raise ConfigurationError(f"Configuration file not found: {config_file}")

        try:
            with open(config_file, "r", encoding="utf-8") as f:
                document = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_file}: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Cannot read {config_file}: {e}") from e

        if document is None:
            document = {}
        if not isinstance(document, dict):
            raise ConfigurationError("Reporter configuration must be a YAML mapping")

        section = document.get(self.SECTION_KEY, document)
        if not isinstance(section, dict):
            raise ConfigurationError(
                f"'{self.SECTION_KEY}' section must be a YAML mapping", [self.SECTION_KEY]
            )
        return dict(section)

    def _resolve(self, path: Union[str, Path]) -> Path:
        config_file = Path(path)
        if self.configs_path is not None and not config_file.is_absolute():
            config_file = self.configs_path / config_file
        return config_file
