from flask import Flask, jsonify

from school_library.config import Config
from school_library.extensions import db, migrate, jwt, mail


def create_app(config_object=None):
    app = Flask(__name__)
    app.config.from_object(config_object or Config)

    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    mail.init_app(app)

    # models must be imported before create_all / migrations see the metadata
    from school_library import models  # noqa: F401

    from school_library.controllers.auth_controller import auth_bp
    from school_library.controllers.library_controller import library_bp
    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(library_bp, url_prefix="/api/library")

    from school_library.utils.error_handlers import register_error_handlers
    register_error_handlers(app)

    from school_library.cli import register_cli
    register_cli(app)

    @app.get("/health")
    def health():
        return jsonify({"ok": True})

    from school_library.tasks.scheduler import start_scheduler
    start_scheduler(app)

    return app
