from civic_auth.config.settings import Settings, settings

__all__ = ["Settings", "settings"]
