from __future__ import annotations

from typing import Any

from firebase_admin import firestore
from flask import jsonify, request

from ricgcw.crud.routes import store_error
from ricgcw.crud.services import CollectionService
from ricgcw.errors import AppError

from . import bp
from .services import ContributionService


@bp.route("/<member_id>/contributions", methods=["GET"])
def list_contributions(member_id: str) -> Any:
    """Return the contributions recorded for a member."""
    try:
        items = ContributionService.list_for_member(firestore.client(), member_id)
    except Exception as e:
        return store_error(f"Failed to fetch contributions for member {member_id}", e)
    return jsonify(items), 200


@bp.route("/<member_id>/contributions", methods=["POST"])
def add_contribution(member_id: str) -> Any:
    """Record a contribution for a member."""
    try:
        payload = CollectionService.json_body(request)
        item = ContributionService.add(firestore.client(), member_id, payload)
    except AppError:
        raise
    except Exception as e:
        return store_error(f"Failed to add contribution for member {member_id}", e)
    return jsonify(item), 201
