# payroll/db/bootstrap.py
import logging
import os

from alembic import command
from alembic.config import Config

from payroll.db.session import SQLALCHEMY_DATABASE_URL

logger = logging.getLogger(__name__)

BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))


def run_migrations() -> None:
    cfg = Config(os.path.join(BASE_DIR, "alembic.ini"))
    cfg.set_main_option("script_location", os.path.join(BASE_DIR, "migrations"))
    # configparser interpolation: escape "%" in passwords
    cfg.set_main_option("sqlalchemy.url", SQLALCHEMY_DATABASE_URL.replace("%", "%%"))

    logger.info("Applying database migrations")
    command.upgrade(cfg, "head")
