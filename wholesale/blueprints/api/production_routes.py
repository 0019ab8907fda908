import logging

from flask import Blueprint

from ...services.errors import ErrorCollector
from ...services.inventory_buckets import get_bucket
from ...services.production_fulfillment import (
    convert_outstanding_for_date,
    convert_outstanding_orders_to_requests,
    create_production_request,
    destroy_production_request,
    get_production_request,
    update_production_request,
)
from ...utils.api_responses import APIResponse
from ...utils.coercion import to_date, to_int

logger = logging.getLogger(__name__)

production_api_bp = Blueprint("production_api", __name__, url_prefix="/production")


@production_api_bp.route("/requests", methods=["POST"])
def create_request():
    production_request = create_production_request(APIResponse.handle_request_content())
    return APIResponse.success(production_request.to_dict(), message="Production request created", status_code=201)


@production_api_bp.route("/requests/<int:request_id>", methods=["PATCH", "PUT"])
def update_request(request_id):
    production_request = get_production_request(request_id)
    if production_request is None:
        return APIResponse.not_found("Production request")
    production_request = update_production_request(production_request, APIResponse.handle_request_content())
    return APIResponse.success(production_request.to_dict(), message="Production request updated")


@production_api_bp.route("/requests/<int:request_id>", methods=["DELETE"])
def destroy_request(request_id):
    production_request = get_production_request(request_id)
    if production_request is None:
        return APIResponse.not_found("Production request")
    snapshot = destroy_production_request(production_request)
    return APIResponse.success(snapshot, message="Production request deleted")


@production_api_bp.route("/convert", methods=["POST"])
def convert_for_date():
    """Create production requests for uncovered demand shipping on a date"""
    payload = APIResponse.handle_request_content()
    errors = ErrorCollector()
    shipping_date = product_id = None
    try:
        shipping_date = to_date(payload.get("date"))
    except ValueError as exc:
        errors.add("date", str(exc))
    else:
        if shipping_date is None:
            errors.add("date", "can't be blank")
    try:
        product_id = to_int(payload.get("product_id"))
    except ValueError as exc:
        errors.add("product_id", str(exc))
    errors.raise_if_any()

    created = convert_outstanding_for_date(shipping_date, product_id=product_id)
    return APIResponse.success(
        [production_request.to_dict() for production_request in created],
        message=f"{len(created)} production requests created",
    )


@production_api_bp.route("/buckets/<int:bucket_id>", methods=["GET"])
def show_bucket(bucket_id):
    bucket = get_bucket(bucket_id)
    if bucket is None:
        return APIResponse.not_found("Inventory bucket")
    data = bucket.to_dict()
    data["freight_quantity"] = bucket.freight_quantity
    return APIResponse.success(data)


@production_api_bp.route("/buckets/<int:bucket_id>/convert", methods=["POST"])
def convert_bucket(bucket_id):
    bucket = get_bucket(bucket_id)
    if bucket is None:
        return APIResponse.not_found("Inventory bucket")
    production_request = convert_outstanding_orders_to_requests(bucket)
    data = production_request.to_dict() if production_request is not None else None
    return APIResponse.success(data, message="Outstanding orders converted")
