import os


def env_bool(name: str, default: str = "0") -> bool:
    return bool(int(os.getenv(name, default)))


def env_list(name: str, default: tuple) -> tuple:
    raw = os.getenv(name)
    if raw is None:
        return tuple(default)
    return tuple(part.strip() for part in raw.split(",") if part.strip())


def db_config_from_env(*, default_database: str = "hr_backoffice") -> dict:
    return {
        "host": os.getenv("DB_HOST", "localhost"),
        "port": int(os.getenv("DB_PORT", "3306")),
        "user": os.getenv("DB_USER", "root"),
        "password": os.getenv("DB_PASSWORD", ""),
        "database": os.getenv("DB_NAME", default_database),
    }


class Config:
    """Business settings shared by every environment."""

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # date.weekday(): Monday=0 ... Sunday=6
    WEEKLY_OFF_DAY = int(os.getenv("WEEKLY_OFF_DAY", "6"))

    APPROVER_ROLES = env_list("APPROVER_ROLES", ("hr", "hod"))
    UNACCOUNTED_LEAVE_TYPES = env_list("UNACCOUNTED_LEAVE_TYPES", ("LWP", "VACATION"))
    CLEARANCE_DEPARTMENTS = env_list(
        "CLEARANCE_DEPARTMENTS",
        ("Reporting Manager", "IT", "Finance", "Admin", "HR"),
    )

    STORE_RETRY_ATTEMPTS = int(os.getenv("STORE_RETRY_ATTEMPTS", "3"))


LOG_LEVEL = Config.LOG_LEVEL
WEEKLY_OFF_DAY = Config.WEEKLY_OFF_DAY
APPROVER_ROLES = Config.APPROVER_ROLES
UNACCOUNTED_LEAVE_TYPES = Config.UNACCOUNTED_LEAVE_TYPES
CLEARANCE_DEPARTMENTS = Config.CLEARANCE_DEPARTMENTS
STORE_RETRY_ATTEMPTS = Config.STORE_RETRY_ATTEMPTS
