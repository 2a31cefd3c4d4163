from __future__ import annotations

import logging
from functools import wraps

from flask import Flask, jsonify, request
from werkzeug.exceptions import BadRequest, HTTPException

from ..core.exceptions import ConflictError, NotFoundError, StorageError, ValidationError
from ..container import Container
from .model import LocatorFilter

logger = logging.getLogger(__name__)

_CREATE_FIELDS = (
    "employee_id",
    "locator_date",
    "destination",
    "purpose",
    "departure",
    "arrival",
    "remarks",
    "status",
    "created_by",
)
_EDIT_FIELDS = ("locator_date", "destination", "purpose", "departure", "arrival", "remarks")


def _envelope(success: bool, message: str, data=None, status: int = 200):
    return jsonify({"success": success, "message": message, "data": data}), status


def _json_body() -> dict:
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise BadRequest("Request body must be a JSON object")
    # `date` is accepted as an alias of `locator_date`
    if "date" in payload and "locator_date" not in payload:
        payload = dict(payload, locator_date=payload["date"])
    return payload


def json_endpoint(view):
    """Run a view and map domain errors onto the JSON envelope."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except ValidationError as e:
            return _envelope(False, str(e), status=400)
        except NotFoundError as e:
            return _envelope(False, str(e), status=404)
        except ConflictError as e:
            return _envelope(False, str(e), status=409)
        except HTTPException as e:
            return _envelope(False, e.description or e.name, status=e.code or 400)
        except StorageError:
            logger.exception("Storage failure in %s", view.__name__)
            return _envelope(False, "Database error", status=500)
        except Exception:
            logger.exception("Unexpected failure in %s", view.__name__)
            return _envelope(False, "Internal server error", status=500)

    return wrapper


def register(app: Flask, container: Container) -> None:
    service = container.locator_service

    @app.route("/api/locators", methods=["POST"], endpoint="api_locators_create")
    @json_endpoint
    def api_locators_create():
        payload = _json_body()
        result = service.create(**{k: payload.get(k) for k in _CREATE_FIELDS})
        data = {
            "locator_uid": result.locator_uid,
            "locator_no": result.locator_no,
            "reconciliation": result.to_dict(),
        }
        return _envelope(True, f"Locator {result.locator_no} created", data, status=201)

    @app.route("/api/locators", methods=["GET"], endpoint="api_locators_list")
    @json_endpoint
    def api_locators_list():
        args = request.args
        filters = LocatorFilter(
            employee_search=args.get("employee_search") or None,
            locator_no_search=args.get("locator_no_search") or None,
            date_from=args.get("date_from") or None,
            date_to=args.get("date_to") or None,
            destination_search=args.get("destination_search") or None,
            purpose_search=args.get("purpose_search") or None,
        )
        page = service.list_locators(
            filters=filters,
            page=args.get("page", 1),
            page_size=args.get("page_size", None),
        )
        return _envelope(True, "OK", page.to_dict())

    # Static paths go before /<locator_no> so they are not read as numbers.
    @app.route("/api/locators/count", methods=["GET"], endpoint="api_locators_count")
    @json_endpoint
    def api_locators_count():
        return _envelope(True, "OK", {"count": service.count()})

    @app.route("/api/locators/check-duplicate", methods=["GET"], endpoint="api_locators_check_duplicate")
    @json_endpoint
    def api_locators_check_duplicate():
        employee_id = request.args.get("employee_id")
        locator_date = request.args.get("date") or request.args.get("locator_date")
        if not employee_id or not locator_date:
            raise ValidationError("employee_id and date are required")
        data = service.check_duplicate(employee_id=employee_id, locator_date=locator_date)
        return _envelope(True, "OK", data)

    @app.route("/api/locators/monthly-stats", methods=["GET"], endpoint="api_locators_monthly_stats")
    @json_endpoint
    def api_locators_monthly_stats():
        return _envelope(True, "OK", service.monthly_stats())

    @app.route("/api/locators/<locator_no>", methods=["GET"], endpoint="api_locators_get")
    @json_endpoint
    def api_locators_get(locator_no: str):
        return _envelope(True, "OK", service.get(locator_no).to_dict())

    @app.route("/api/locators/<locator_no>", methods=["PUT"], endpoint="api_locators_update")
    @json_endpoint
    def api_locators_update(locator_no: str):
        payload = _json_body()
        changes = {k: payload[k] for k in _EDIT_FIELDS if k in payload}
        if not changes:
            raise ValidationError("Nothing to update")
        record = service.update(locator_no, changes=changes, updated_by=payload.get("updated_by"))
        return _envelope(True, f"Locator {record.locator_no} updated", record.to_dict())

    @app.route("/api/locators/<locator_no>", methods=["DELETE"], endpoint="api_locators_void")
    @json_endpoint
    def api_locators_void(locator_no: str):
        payload = request.get_json(silent=True) or {}
        updated_by = payload.get("updated_by") if isinstance(payload, dict) else None
        record = service.void(locator_no, updated_by=updated_by or request.args.get("updated_by"))
        return _envelope(True, f"Locator {record.locator_no} voided", record.to_dict())

    @app.route("/api/locators/<locator_no>/reconcile", methods=["POST"], endpoint="api_locators_reconcile")
    @json_endpoint
    def api_locators_reconcile(locator_no: str):
        result = service.replay(locator_no)
        data = {
            "locator_uid": result.locator_uid,
            "locator_no": result.locator_no,
            "reconciliation": result.to_dict(),
        }
        return _envelope(True, f"Locator {result.locator_no} reconciled", data)
