#!/usr/bin/env python3
"""
SQLSync Configuration
Resolves paths, the connection registry file, the credential store and log
level from the environment (and an optional .env file) in one place.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


@dataclass
class SyncConfig:
    """SQLSync configuration settings"""

    # Base paths - environment or defaults
    base_dir: Path = None
    config_dir: Path = None
    connections_file: Path = None
    credentials_file: Path = None

    # Secrets (environment only)
    master_key: str = None

    # Runtime settings
    log_level: str = "INFO"

    # Profile settings
    profile: str = "dev"  # dev, prod

    def __post_init__(self):
        """Initialize paths and load environment variables"""
        self.profile = os.environ.get('SQLSYNC_PROFILE', 'dev')

        if self.base_dir is None:
            default_root = Path(__file__).parent.parent
            self.base_dir = Path(os.environ.get('SQLSYNC_HOME', default_root))
        else:
            self.base_dir = Path(self.base_dir)

        if self.config_dir is None:
            self.config_dir = self.base_dir / 'config'

        if self.connections_file is None:
            env_path = os.environ.get('SQLSYNC_CONNECTIONS')
            self.connections_file = Path(env_path) if env_path else self.config_dir / 'connections.json'
        if self.credentials_file is None:
            env_path = os.environ.get('SQLSYNC_CREDENTIALS')
            self.credentials_file = Path(env_path) if env_path else self.config_dir / 'credentials.enc'

        self.master_key = os.environ.get('SQLSYNC_MASTER_KEY', self.master_key)
        self.log_level = os.environ.get('SQLSYNC_LOG_LEVEL', self.log_level).upper()

        if self.profile == 'prod':
            self.log_level = 'WARNING'

    def get_safe_dict(self) -> Dict[str, Any]:
        """Configuration as dict without sensitive values"""
        return {
            'base_dir': str(self.base_dir),
            'config_dir': str(self.config_dir),
            'connections_file': str(self.connections_file),
            'credentials_file': str(self.credentials_file),
            'log_level': self.log_level,
            'profile': self.profile,
            'master_key_configured': bool(self.master_key),
        }


class ConfigManager:
    """Singleton configuration manager"""

    _instance: Optional['ConfigManager'] = None
    _config: Optional[SyncConfig] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if self._config is None:
            self.load_config()

    def load_config(self):
        """Load configuration from the environment.

        Priority (highest to lowest):
        1. Environment variables (SQLSYNC_*)
        2. .env file under SQLSYNC_HOME
        3. SyncConfig defaults
        """
        default_base = Path(__file__).parent.parent
        base_dir = Path(os.environ.get('SQLSYNC_HOME', default_base))
        env_file = base_dir / '.env'
        if env_file.exists():
            self._load_env_file(env_file)

        self._config = SyncConfig()

    def _load_env_file(self, env_file: Path):
        """Load KEY=VALUE lines; exported variables take precedence"""
        try:
            with open(env_file, 'r') as f:
                for line in f:
                    line = line.strip()
                    if line and not line.startswith('#') and '=' in line:
                        key, value = line.split('=', 1)
                        key = key.strip()
                        if key not in os.environ:
                            os.environ[key] = value.strip().strip('"').strip("'")
        except OSError as e:
            logger.warning(f"Could not load .env file {env_file}: {e}")

    @property
    def config(self) -> SyncConfig:
        if self._config is None:
            self.load_config()
        return self._config

    @classmethod
    def reset(cls):
        """Forget the loaded configuration (next access re-reads the environment)"""
        if cls._instance is not None:
            cls._instance._config = None
        cls._config = None


def get_config() -> SyncConfig:
    """Get the global configuration instance"""
    return ConfigManager().config
