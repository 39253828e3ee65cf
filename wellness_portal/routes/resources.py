"""
Routes for the self-help resource library.

Any signed-in user can browse, search, download and rate resources.
Only counselors can add, edit or remove them.
"""

from __future__ import annotations

from flask import Blueprint, request
from flask_jwt_extended import jwt_required

from .. import db
from ..models import Resource
from ..schemas import ResourceSchema, ResourceInputSchema
from ..security import require_counselor
from ..services import resource_service


resources_bp = Blueprint("resources", __name__)


def _get_resource(resource_id: int) -> Resource:
    return db.get_or_404(Resource, resource_id, description="Resource not found.")


@resources_bp.route("/resources", methods=["GET"])
@jwt_required()
def list_resources() -> tuple[list[dict], int]:
    """List resources, filtered by ``q``, ``type`` and ``category``."""
    type_arg = request.args.get("type")
    resources = resource_service.search(
        query=request.args.get("q"),
        type=resource_service.parse_type(type_arg) if type_arg else None,
        category=request.args.get("category"),
    )
    return ResourceSchema(many=True).dump(resources), 200


@resources_bp.route("/resources/type/<string:resource_type>", methods=["GET"])
@jwt_required()
def resources_by_type(resource_type: str) -> tuple[list[dict], int]:
    resources = resource_service.search(type=resource_service.parse_type(resource_type))
    return ResourceSchema(many=True).dump(resources), 200


@resources_bp.route("/resources/<int:resource_id>", methods=["GET"])
@jwt_required()
def get_resource(resource_id: int) -> tuple[dict, int]:
    return ResourceSchema().dump(_get_resource(resource_id)), 200


@resources_bp.route("/resources", methods=["POST"])
@jwt_required()
def create_resource() -> tuple[dict, int]:
    """Add a resource. Counselors only.

    Expects ``title``, ``description``, ``type``, ``url`` and ``author``
    with optional ``category`` (default ``general``), ``tags`` and
    ``duration``.
    """
    require_counselor()
    data = ResourceInputSchema().load(request.get_json(silent=True) or {})
    return ResourceSchema().dump(resource_service.create_resource(data)), 201


@resources_bp.route("/resources/<int:resource_id>", methods=["PUT"])
@jwt_required()
def update_resource(resource_id: int) -> tuple[dict, int]:
    require_counselor()
    resource = _get_resource(resource_id)
    data = ResourceInputSchema(partial=True).load(request.get_json(silent=True) or {})
    return ResourceSchema().dump(resource_service.update_resource(resource, data)), 200


@resources_bp.route("/resources/<int:resource_id>", methods=["DELETE"])
@jwt_required()
def delete_resource(resource_id: int) -> tuple[dict, int]:
    require_counselor()
    resource = _get_resource(resource_id)
    db.session.delete(resource)
    db.session.commit()
    return {"success": True, "message": "Resource deleted successfully"}, 200


@resources_bp.route("/resources/<int:resource_id>/download", methods=["POST"])
@jwt_required()
def download_resource(resource_id: int) -> tuple[dict, int]:
    resource = resource_service.record_download(_get_resource(resource_id))
    return ResourceSchema().dump(resource), 200


@resources_bp.route("/resources/<int:resource_id>/rating", methods=["POST"])
@jwt_required()
def rate_resource(resource_id: int) -> tuple[dict, int]:
    """Set the resource's ``rating`` (0-5)."""
    data = request.get_json(silent=True) or {}
    resource = resource_service.set_rating(_get_resource(resource_id), data.get("rating"))
    return ResourceSchema().dump(resource), 200
