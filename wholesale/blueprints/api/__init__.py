from flask import Blueprint

api_bp = Blueprint('api', __name__, url_prefix='/api')

# Register sub-blueprints
from .order_routes import order_api_bp  # noqa: E402
from .production_routes import production_api_bp  # noqa: E402
from .template_routes import template_api_bp  # noqa: E402

api_bp.register_blueprint(order_api_bp)
api_bp.register_blueprint(template_api_bp)
api_bp.register_blueprint(production_api_bp)
