from flask import Flask
from flask_sqlalchemy import SQLAlchemy
import os

from .config import config_map

# Global DB instance; the local store for synced ERP copies and the sync audit log
db = SQLAlchemy()


def create_app(env: str | None = None):
    env = env or os.getenv("FLASK_ENV", "development")

    app = Flask(__name__)

    cfg_cls = config_map.get(env, config_map["default"])
    if env == "production":
        cfg_cls.validate()
    app.config.from_object(cfg_cls)

    # Init extensions
    db.init_app(app)

    # Import models so that db.create_all sees them
    from .models.erp import ErpItemMaster, ErpPurchaseOrder, ErpInventoryLevel  # noqa: F401
    from .models.log import DataSyncLog  # noqa: F401

    # CLI command groups (`flask erp ...`, `flask env ...`)
    from .erp.cli import erp_cli, env_cli

    app.cli.add_command(erp_cli)
    app.cli.add_command(env_cli)

    # Bootstrap tables (no Alembic for the local store)
    with app.app_context():
        db.create_all()

    return app
