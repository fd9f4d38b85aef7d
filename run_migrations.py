import logging
import sys
import argparse
import os
from alembic.config import Config
from alembic import command

from comments_picker.database.db import normalize_database_url

BASE_DIR = os.path.dirname(os.path.abspath(__file__))


def build_alembic_config(database_url=None) -> Config:
    """
    Конфигурация Alembic из alembic.ini; URL базы берется из DATABASE_URL.

    Raises:
        FileNotFoundError: Если alembic.ini не найден рядом со скриптом
    """
    alembic_ini_path = os.path.join(BASE_DIR, "alembic.ini")
    if not os.path.exists(alembic_ini_path):
        raise FileNotFoundError(f"Файл alembic.ini не найден по пути: {alembic_ini_path}")

    alembic_cfg = Config(alembic_ini_path)
    alembic_cfg.set_main_option("script_location", os.path.join(BASE_DIR, "migrations"))

    database_url = database_url or os.environ.get("DATABASE_URL")
    if database_url:
        # % в пароле ломает интерполяцию configparser
        alembic_cfg.set_main_option("sqlalchemy.url", normalize_database_url(database_url).replace("%", "%%"))
    return alembic_cfg


def run_migrations(upgrade=True, revision=None, sql=False, database_url=None):
    """
    Запускает миграции базы данных с использованием Alembic.

    Args:
        upgrade (bool): True для применения миграций, False для отката
        revision (str): Версия миграции (по умолчанию 'head' для upgrade и '-1' для downgrade)
        sql (bool): Выводить SQL вместо выполнения миграций
        database_url (str): URL базы, по умолчанию из DATABASE_URL
    """
    try:
        logging.info("Запуск миграций базы данных с Alembic...")
        alembic_cfg = build_alembic_config(database_url)

        if upgrade:
            target_revision = revision or "head"
            logging.info(f"Применение миграций до версии: {target_revision}")
            command.upgrade(alembic_cfg, target_revision, sql=sql)
            logging.info("Миграции успешно применены")
        else:
            target_revision = revision or "-1"
            logging.info(f"Откат миграций до версии: {target_revision}")
            command.downgrade(alembic_cfg, target_revision, sql=sql)
            logging.info("Миграции успешно откачены")

        return True

    except Exception as e:
        logging.error(f"Ошибка при выполнении миграций: {e}")
        return False


if __name__ == "__main__":
    from dotenv import load_dotenv

    load_dotenv(os.path.join(BASE_DIR, ".env"))
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="Управление миграциями базы данных")
    parser.add_argument("--downgrade", action="store_true", help="Откатить миграции")
    parser.add_argument("--revision", help="Версия миграции (по умолчанию 'head' для upgrade и '-1' для downgrade)")
    parser.add_argument("--sql", action="store_true", help="Только вывести SQL без выполнения миграций")
    args = parser.parse_args()

    success = run_migrations(
        upgrade=not args.downgrade,
        revision=args.revision,
        sql=args.sql
    )

    sys.exit(0 if success else 1)
