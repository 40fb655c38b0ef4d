from config.config import *  # noqa: F401,F403
from config.config import db_config_from_env, env_bool

SECRET_KEY = "test-secret"

DB_CONFIG = db_config_from_env(default_database="hr_backoffice_test")

DEBUG = False
TESTING = True

AUTO_INIT_DB = env_bool("AUTO_INIT_DB", "0")
