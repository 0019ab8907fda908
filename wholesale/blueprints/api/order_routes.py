import logging

from flask import Blueprint

from ...services.order_lifecycle import create_order, destroy_order, get_order, update_order
from ...services.order_templates import copy_to_template
from ...utils.api_responses import APIResponse

logger = logging.getLogger(__name__)

order_api_bp = Blueprint("order_api", __name__, url_prefix="/orders")


@order_api_bp.route("", methods=["POST"])
def create():
    """Create an order; binds its bucket and computes its costs"""
    order = create_order(APIResponse.handle_request_content())
    return APIResponse.success(order.to_dict(), message="Order created", status_code=201)


@order_api_bp.route("/<int:order_id>", methods=["GET"])
def show(order_id):
    order = get_order(order_id)
    if order is None:
        return APIResponse.not_found("Order")
    data = order.to_dict()
    data.update(
        revenue=order.revenue,
        expenses=order.expenses,
        total=order.total,
        label=str(order),
    )
    return APIResponse.success(data)


@order_api_bp.route("/<int:order_id>", methods=["PATCH", "PUT"])
def update(order_id):
    order = get_order(order_id)
    if order is None:
        return APIResponse.not_found("Order")
    order = update_order(order, APIResponse.handle_request_content())
    return APIResponse.success(order.to_dict(), message="Order updated")


@order_api_bp.route("/<int:order_id>", methods=["DELETE"])
def destroy(order_id):
    order = get_order(order_id)
    if order is None:
        return APIResponse.not_found("Order")
    snapshot = destroy_order(order)
    return APIResponse.success(snapshot, message="Order deleted")


@order_api_bp.route("/<int:order_id>/template", methods=["POST"])
def copy_template(order_id):
    """Save a copy of the order as a template"""
    order = get_order(order_id)
    if order is None:
        return APIResponse.not_found("Order")
    payload = APIResponse.handle_request_content()
    template = copy_to_template(
        order,
        overrides=payload.get("overrides") or {},
        identifier=payload.get("identifier"),
        notes=payload.get("notes"),
    )
    return APIResponse.success(template.to_dict(), message="Template created", status_code=201)
