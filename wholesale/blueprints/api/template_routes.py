import logging

from flask import Blueprint

from ...services.order_templates import (
    create_order_from_template,
    destroy_template,
    get_template,
    list_templates,
)
from ...utils.api_responses import APIResponse

logger = logging.getLogger(__name__)

template_api_bp = Blueprint("template_api", __name__, url_prefix="/templates")


@template_api_bp.route("", methods=["GET"])
def index():
    return APIResponse.success([template.to_dict() for template in list_templates()])


@template_api_bp.route("/<int:template_id>/orders", methods=["POST"])
def derive(template_id):
    """Stamp a new order out of a template; body carries the overrides"""
    template = get_template(template_id)
    if template is None:
        return APIResponse.not_found("Order template")
    order = create_order_from_template(template, APIResponse.handle_request_content())
    return APIResponse.success(order.to_dict(), message="Order created from template", status_code=201)


@template_api_bp.route("/<int:template_id>", methods=["DELETE"])
def destroy(template_id):
    template = get_template(template_id)
    if template is None:
        return APIResponse.not_found("Order template")
    snapshot = destroy_template(template)
    return APIResponse.success(snapshot, message="Template deleted")
