from typing import Any, Dict, List, Optional

from flask import Response, jsonify, request

LIST_FIELDS = ("order_category_ids",)


class APIResponse:
    """Standardized API response handler"""

    @staticmethod
    def success(data: Any = None, message: str = "Success", status_code: int = 200) -> Response:
        response_data = {
            'success': True,
            'message': message,
            'data': data
        }
        return jsonify(response_data), status_code

    @staticmethod
    def error(message: str, errors: Optional[Dict] = None, status_code: int = 400) -> Response:
        response_data = {
            'success': False,
            'message': message,
            'errors': errors or {}
        }
        return jsonify(response_data), status_code

    @staticmethod
    def validation_error(errors: Dict[str, List[str]], message: str = "Validation failed") -> Response:
        """Field-error set as a 422"""
        return APIResponse.error(
            message=message,
            errors=errors,
            status_code=422
        )

    @staticmethod
    def not_found(resource: str = "Resource") -> Response:
        return APIResponse.error(
            message=f"{resource} not found",
            status_code=404
        )

    @staticmethod
    def handle_request_content(list_fields=LIST_FIELDS):
        """JSON body, else form fields, else an empty mapping. Fields in ``list_fields`` keep every form value."""
        if request.is_json:
            return request.get_json(silent=True) or {}
        elif request.form:
            content = request.form.to_dict()
            for field in list_fields:
                if field in request.form:
                    content[field] = request.form.getlist(field)
            return content
        else:
            return {}


__all__ = ['APIResponse']
