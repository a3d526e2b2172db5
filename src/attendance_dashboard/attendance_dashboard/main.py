from __future__ import annotations

import importlib
import logging

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .api.controller import register as register_api
from .container import build_container
from .database.bootstrap import apply_schema, list_tables
from .database.connection import DBConfig

logger = logging.getLogger(__name__)


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    backend = getattr(settings, "STORAGE_BACKEND", "memory")
    db_config = getattr(settings, "DB_CONFIG", None)
    logger.info("settings=%s storage=%s", settings_module, backend)

    if backend == "mysql" and bool(getattr(settings, "AUTO_INIT_DB", False)):
        config = DBConfig.from_dict(db_config)
        apply_schema(config)
        logger.info("Storage schema ready (tables=%d)", len(list_tables(config)))

    latency_ms = getattr(settings, "SIMULATED_LATENCY_MS", (0, 0))
    container = build_container(
        backend=backend,
        db_config=db_config,
        quota_bytes=getattr(settings, "STORAGE_QUOTA_BYTES", None),
        latency=(latency_ms[0] / 1000, latency_ms[1] / 1000),
        fixture_path=getattr(settings, "FIXTURE_PATH", None),
        hash_method=getattr(settings, "PASSWORD_HASH_METHOD", "scrypt"),
    )
    app.extensions["attendance_dashboard"] = container

    register_api(app, container)

    return app
