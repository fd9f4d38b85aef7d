from comments_picker.config.settings import Settings, load_settings, setup_logging

__all__ = ["Settings", "load_settings", "setup_logging"]
