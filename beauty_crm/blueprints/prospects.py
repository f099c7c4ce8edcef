"""Prospects blueprint - /api/prospects/*

JSON API over the prospect pipeline. All routes accept session or Bearer
CRM_API_KEY auth. Domain errors raised by the services are turned into
JSON responses by the app-level error handler.

Route Map:
  GET  /api/prospects                      - Decorated list (?status= filter)
  GET  /api/prospects/<id>                 - Decorated prospect
  POST /api/prospects/import               - Bulk import {"prospects": [...]}
  POST /api/prospects/<id>/qualify         - Qualify + rescore
  POST /api/prospects/<id>/assign          - Assign {"salesRepID"}
  POST /api/prospects/<id>/status          - Change status {"newStatus"}
  POST /api/prospects/<id>/opportunity     - Create opportunity only
  POST /api/prospects/<id>/convert         - Account + Contact + Opportunity
  POST /api/prospects/<id>/about           - Generate about text
  POST /api/prospects/<id>/meeting-script  - Generate meeting script
"""

from flask import Blueprint, current_app, jsonify, request

from beauty_crm.decorators import api_auth, current_actor_id
from beauty_crm.errors import InvalidArgument
from beauty_crm.extensions import db, limiter
from beauty_crm.models.prospect import Prospect
from beauty_crm.services import about_service, import_service, lifecycle, prospect_service
from beauty_crm.services.display import decorate_prospect
from beauty_crm.services.lifecycle import PROSPECT

prospects_bp = Blueprint("prospects", __name__, url_prefix="/api/prospects")


def _json_body():
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidArgument("Request body must be a JSON object")
    return data


def _import_rate_limit():
    return current_app.config["CRM_IMPORT_RATE_LIMIT"]


# ─── Read ────────────────────────────────────────────────────────

@prospects_bp.route("")
@api_auth
def list_prospects():
    query = Prospect.query
    status = request.args.get("status")
    if status:
        query = query.filter_by(status=status)
    prospects = query.order_by(Prospect.prospect_score.desc(), Prospect.created_at).all()
    return jsonify({"prospects": [decorate_prospect(p) for p in prospects]})


@prospects_bp.route("/<prospect_id>")
@api_auth
def get_prospect(prospect_id):
    prospect = lifecycle.get_entity(PROSPECT, prospect_id)
    return jsonify(decorate_prospect(prospect))


# ─── Import ──────────────────────────────────────────────────────

@prospects_bp.route("/import", methods=["POST"])
@limiter.limit(_import_rate_limit)
@api_auth
def import_prospects():
    data = _json_body()
    result = import_service.bulk_import(
        PROSPECT, data.get("prospects"), actor_user_id=current_actor_id()
    )
    db.session.commit()
    return jsonify(result), 201


# ─── Lifecycle actions ───────────────────────────────────────────

@prospects_bp.route("/<prospect_id>/qualify", methods=["POST"])
@api_auth
def qualify(prospect_id):
    result = lifecycle.qualify(PROSPECT, prospect_id, actor_user_id=current_actor_id())
    db.session.commit()
    return jsonify(result)


@prospects_bp.route("/<prospect_id>/assign", methods=["POST"])
@api_auth
def assign(prospect_id):
    data = _json_body()
    sales_rep_id = data.get("salesRepID") or data.get("sales_rep_id")
    if not sales_rep_id:
        raise InvalidArgument("salesRepID is required")
    result = lifecycle.assign_to_sales_rep(
        PROSPECT, prospect_id, sales_rep_id, actor_user_id=current_actor_id()
    )
    db.session.commit()
    return jsonify(result)


@prospects_bp.route("/<prospect_id>/status", methods=["POST"])
@api_auth
def change_status(prospect_id):
    data = _json_body()
    new_status = data.get("newStatus") or data.get("new_status")
    if not new_status:
        raise InvalidArgument("newStatus is required")
    prospect = lifecycle.change_status(
        PROSPECT, prospect_id, new_status, actor_user_id=current_actor_id()
    )
    db.session.commit()
    return jsonify(decorate_prospect(prospect))


# ─── Conversion ──────────────────────────────────────────────────

@prospects_bp.route("/<prospect_id>/opportunity", methods=["POST"])
@api_auth
def create_opportunity(prospect_id):
    result = prospect_service.create_opportunity(
        prospect_id, _json_body(), actor_user_id=current_actor_id()
    )
    db.session.commit()
    return jsonify(result), 201


@prospects_bp.route("/<prospect_id>/convert", methods=["POST"])
@api_auth
def convert(prospect_id):
    result = prospect_service.convert_to_account(
        prospect_id, _json_body(), actor_user_id=current_actor_id()
    )
    db.session.commit()
    return jsonify(result), 201


# ─── Generated text ──────────────────────────────────────────────

@prospects_bp.route("/<prospect_id>/about", methods=["POST"])
@api_auth
def generate_about(prospect_id):
    prospect = about_service.generate_about(
        PROSPECT, prospect_id, actor_user_id=current_actor_id()
    )
    db.session.commit()
    return jsonify({"about": prospect.about})


@prospects_bp.route("/<prospect_id>/meeting-script", methods=["POST"])
@api_auth
def meeting_script(prospect_id):
    script = prospect_service.generate_meeting_script(prospect_id)
    return jsonify({"script": script})
