import os

_ENV_MODULES = {
    "prod": "config.production",
    "production": "config.production",
    "test": "config.testing",
    "testing": "config.testing",
}


def get_settings_module() -> str:
    """Dotted settings module: HR_SETTINGS_MODULE wins, else APP_ENV (default development)."""
    explicit = os.getenv("HR_SETTINGS_MODULE", "").strip()
    if explicit:
        return explicit
    return _ENV_MODULES.get(os.getenv("APP_ENV", "development").strip().lower(), "config.development")
