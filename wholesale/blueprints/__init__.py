from flask import Flask


def register_blueprints(app: Flask) -> None:
    from .api import api_bp

    app.register_blueprint(api_bp)
