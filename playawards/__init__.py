import os

from flask import Flask
from flask_sqlalchemy import SQLAlchemy


db = SQLAlchemy()


def create_app(database_uri: str | None = None, **config_overrides):
    app = Flask(__name__)
    app.config["SQLALCHEMY_DATABASE_URI"] = database_uri or "sqlite:///data.db"
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False
    app.config["AWARDS_AI_ENDPOINT"] = os.environ.get("AWARDS_AI_ENDPOINT") or None
    app.config["AWARDS_AI_TIMEOUT"] = float(os.environ.get("AWARDS_AI_TIMEOUT", 10))
    app.config.update(config_overrides)

    db.init_app(app)

    from .routes import bp as awards_bp

    app.register_blueprint(awards_bp)

    with app.app_context():
        db.create_all()

    return app
