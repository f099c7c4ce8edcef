"""Merchants blueprint - /api/merchants/*

Route Map:
  GET  /api/merchants                       - Decorated list (?status= filter)
  GET  /api/merchants/<id>                  - Decorated merchant
  POST /api/merchants/import                - Bulk import {"discoveries": [...]}
  POST /api/merchants/<id>/qualify          - Qualify + rescore
  POST /api/merchants/<id>/assign           - Assign {"salesRepID"}
  POST /api/merchants/<id>/status           - Change status {"newStatus"}
  POST /api/merchants/<id>/about            - Generate about text
  POST /api/merchants/<id>/convert-to-lead  - Hand over to sales as a Lead
"""

from flask import Blueprint, current_app, jsonify, request

from beauty_crm.decorators import api_auth, current_actor_id
from beauty_crm.errors import InvalidArgument
from beauty_crm.extensions import db, limiter
from beauty_crm.models.merchant import MerchantDiscovery
from beauty_crm.services import about_service, import_service, lifecycle, merchant_service
from beauty_crm.services.display import decorate_merchant
from beauty_crm.services.lifecycle import MERCHANT

merchants_bp = Blueprint("merchants", __name__, url_prefix="/api/merchants")


def _json_body():
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidArgument("Request body must be a JSON object")
    return data


def _import_rate_limit():
    return current_app.config["CRM_IMPORT_RATE_LIMIT"]


@merchants_bp.route("")
@api_auth
def list_merchants():
    query = MerchantDiscovery.query
    status = request.args.get("status")
    if status:
        query = query.filter_by(status=status)
    merchants = query.order_by(
        MerchantDiscovery.merchant_score.desc(), MerchantDiscovery.created_at
    ).all()
    return jsonify({"merchants": [decorate_merchant(m) for m in merchants]})


@merchants_bp.route("/<merchant_id>")
@api_auth
def get_merchant(merchant_id):
    merchant = lifecycle.get_entity(MERCHANT, merchant_id)
    return jsonify(decorate_merchant(merchant))


@merchants_bp.route("/import", methods=["POST"])
@limiter.limit(_import_rate_limit)
@api_auth
def import_merchants():
    data = _json_body()
    result = import_service.bulk_import(
        MERCHANT, data.get("discoveries"), actor_user_id=current_actor_id()
    )
    db.session.commit()
    return jsonify(result), 201


@merchants_bp.route("/<merchant_id>/qualify", methods=["POST"])
@api_auth
def qualify(merchant_id):
    result = lifecycle.qualify(MERCHANT, merchant_id, actor_user_id=current_actor_id())
    db.session.commit()
    return jsonify(result)


@merchants_bp.route("/<merchant_id>/assign", methods=["POST"])
@api_auth
def assign(merchant_id):
    data = _json_body()
    sales_rep_id = data.get("salesRepID") or data.get("sales_rep_id")
    if not sales_rep_id:
        raise InvalidArgument("salesRepID is required")
    result = lifecycle.assign_to_sales_rep(
        MERCHANT, merchant_id, sales_rep_id, actor_user_id=current_actor_id()
    )
    db.session.commit()
    return jsonify(result)


@merchants_bp.route("/<merchant_id>/status", methods=["POST"])
@api_auth
def change_status(merchant_id):
    data = _json_body()
    new_status = data.get("newStatus") or data.get("new_status")
    if not new_status:
        raise InvalidArgument("newStatus is required")
    merchant = lifecycle.change_status(
        MERCHANT, merchant_id, new_status, actor_user_id=current_actor_id()
    )
    db.session.commit()
    return jsonify(decorate_merchant(merchant))


@merchants_bp.route("/<merchant_id>/about", methods=["POST"])
@api_auth
def generate_about(merchant_id):
    merchant = about_service.generate_about(
        MERCHANT, merchant_id, actor_user_id=current_actor_id()
    )
    db.session.commit()
    return jsonify({"about": merchant.about})


@merchants_bp.route("/<merchant_id>/convert-to-lead", methods=["POST"])
@api_auth
def convert_to_lead(merchant_id):
    result = merchant_service.convert_to_lead(merchant_id, actor_user_id=current_actor_id())
    db.session.commit()
    return jsonify(result), 201
