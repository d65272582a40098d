# backend/gadgetdesk/__init__.py
from flask import Flask, request

from .config import Config
from .extensions import db, migrate


def create_app(test_config: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    from .services.sales_service import INVENTORY_MODES
    if app.config["SALE_INVENTORY_MODE"] not in INVENTORY_MODES:
        raise RuntimeError(
            f"SALE_INVENTORY_MODE must be one of {', '.join(INVENTORY_MODES)}, "
            f"got {app.config['SALE_INVENTORY_MODE']!r}"
        )

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.system import system_bp
    from .routes.auth import auth_bp
    from .routes.units import units_bp
    from .routes.accessories import accessories_bp
    from .routes.sales import sales_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(units_bp)
    app.register_blueprint(accessories_bp)
    app.register_blueprint(sales_bp)

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin in app.config["CORS_ORIGINS"]:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PATCH,DELETE,OPTIONS"
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
