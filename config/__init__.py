from config.settings import ConfigManager, SyncConfig, get_config

__all__ = ['ConfigManager', 'SyncConfig', 'get_config']
