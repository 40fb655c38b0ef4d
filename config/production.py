import os

from config.config import *  # noqa: F401,F403
from config.config import db_config_from_env, env_bool

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = db_config_from_env()

DEBUG = False

AUTO_INIT_DB = env_bool("AUTO_INIT_DB", "0")
