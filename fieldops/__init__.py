import logging

from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy

from .config import Config

db = SQLAlchemy()


def create_app(test_config=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    app.logger.setLevel(getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO))

    db.init_app(app)

    # register Blueprints
    from .routes.accounts   import accounts_bp
    from .routes.tasks      import tasks_bp
    from .routes.customers  import customers_bp
    from .routes.attendance import attendance_bp

    app.register_blueprint(accounts_bp)
    app.register_blueprint(tasks_bp)
    app.register_blueprint(customers_bp)
    app.register_blueprint(attendance_bp)

    register_error_handlers(app)

    return app


def register_error_handlers(app):
    from .errors import ValidationError, StoreError

    @app.errorhandler(ValidationError)
    def handle_validation_error(e):
        return jsonify({'error': str(e)}), 400

    @app.errorhandler(StoreError)
    def handle_store_error(e):
        app.logger.error(f"Store error [{e.code}]: {e}")
        return jsonify({'error': e.user_message, 'code': e.code}), e.http_status
