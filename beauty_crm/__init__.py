import os
import logging

import click
from flask import Flask, jsonify
from sqlalchemy.orm.exc import StaleDataError
from werkzeug.security import generate_password_hash

from beauty_crm.config import config_by_name
from beauty_crm.errors import CrmError
from beauty_crm.extensions import db, migrate, login_manager, limiter

logger = logging.getLogger(__name__)


def create_app(config_name=None):
    """Application factory."""

    if config_name is None:
        config_name = os.environ.get("FLASK_ENV", "development")

    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])

    # --- Validate required env vars (skip in testing) ---
    if config_name != "testing":
        try:
            config_by_name[config_name].validate()
        except RuntimeError as e:
            app.logger.warning(f"Config validation: {e}")

    # --- Init extensions ---
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    limiter.init_app(app)

    # --- Import models so Alembic can discover them ---
    with app.app_context():
        from beauty_crm import models  # noqa: F401

    # --- Register blueprints ---
    from beauty_crm.blueprints.auth import auth_bp
    from beauty_crm.blueprints.prospects import prospects_bp
    from beauty_crm.blueprints.merchants import merchants_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(prospects_bp)
    app.register_blueprint(merchants_bp)

    @app.route("/health")
    def health():
        return jsonify({"status": "ok"})

    # --- Error handlers ---
    @app.errorhandler(CrmError)
    def crm_error(e):
        db.session.rollback()
        log = logger.error if e.status_code >= 500 else logger.info
        log(f"{type(e).__name__}: {e.message}")
        return jsonify({"error": e.message}), e.status_code

    @app.errorhandler(StaleDataError)
    def stale_data(e):
        db.session.rollback()
        logger.warning(f"Concurrent update rejected: {e}")
        return jsonify({"error": "Record was modified by another request; reload and retry"}), 409

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"error": "Not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({"error": "Method not allowed"}), 405

    @app.errorhandler(429)
    def rate_limited(e):
        return jsonify({"error": f"Rate limit exceeded: {e.description}"}), 429

    @app.errorhandler(500)
    def server_error(e):
        db.session.rollback()
        return jsonify({"error": "Internal server error"}), 500

    # --- CLI commands ---
    register_cli(app)

    # --- Security headers ---
    @app.after_request
    def add_security_headers(response):
        """Add security headers to every response."""
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        if not app.debug:
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )
        return response

    # --- Logging ---
    if not app.debug:
        logging.basicConfig(level=logging.INFO)

    return app


# ─── Demo data ─────────────────────────────────────────────

DEMO_REPS = [
    # (email, full name, region, quota)
    ("sarah.tan@beautycrm.local", "Sarah Tan", "Central", 500000),
    ("kevin.tan@beautycrm.local", "Kevin Tan", "Central", 350000),
    ("lisa.wong@beautycrm.local", "Lisa Wong", "North", 300000),
    ("david.lee@beautycrm.local", "David Lee", "South", 320000),
]

# Fixed ids so entries in data/about_lookup.csv line up with seeded rows.
DEMO_PROSPECTS = [
    {
        "id": "1b9d6bcd-bbfd-4b2d-9b5d-ab8dfbbd4bed",
        "prospectName": "Glow Beauty Bar",
        "businessType": "Salon",
        "discoverySource": "Partnership",
        "city": "Kuala Lumpur",
        "location": "Bangsar, Kuala Lumpur",
        "contactInfo": {"name": "Nurul Aisyah", "email": "nurul@glowbeauty.my", "phone": "+60 12-345 6789"},
        "socialMediaLinks": "https://instagram.com/glowbeautybar",
        "estimatedValue": 45000,
    },
    {
        "id": "6ec0bd7f-11c0-43da-975e-2a8ad9ebae0b",
        "prospectName": "Serene Day Spa",
        "businessType": "Spa",
        "discoverySource": "Online Web",
        "city": "Penang",
        "location": "George Town, Penang",
        "contactInfo": {"name": "Ahmad Bin Ali", "email": "ahmad@serenespa.my"},
        "estimatedValue": 38000,
    },
    {
        "id": "a3bb189e-8bf9-4888-9912-ace4e6543002",
        "prospectName": "K-Beauty Hub Distributors",
        "businessType": "Distributor",
        "discoverySource": "Lead Conversion",
        "city": "Johor Bahru",
        "location": "Johor Bahru, Johor",
        "contactInfo": {"name": "Jason Lim", "phone": "+60 7-222 1111"},
        "socialMediaLinks": "https://facebook.com/kbeautyhubmy",
        "estimatedValue": 120000,
    },
]

DEMO_MERCHANTS = [
    {
        "merchantName": "Luxe Lash Studio",
        "businessType": "Salon",
        "discoverySource": "Instagram",
        "city": "Petaling Jaya",
        "location": "SS2, Petaling Jaya",
        "contactInfo": "Name: Mei Ling, meiling@luxelash.my, 012-888 7777",
        "socialMediaLinks": "https://instagram.com/luxelashstudio",
    },
    {
        "merchantName": "Skin Deep Online",
        "businessType": "E-commerce",
        "discoverySource": "Shopee",
        "city": "Ipoh",
        "contactInfo": "Contact: Farah, hello@skindeep.my",
    },
]


def register_cli(app):
    """Register custom CLI commands with the Flask app."""

    def _run_import(lifecycle, path):
        from beauty_crm.services.import_service import bulk_import

        with open(path, encoding="utf-8") as fh:
            payload = fh.read()
        try:
            result = bulk_import(lifecycle, payload)
        except CrmError as e:
            db.session.rollback()
            raise click.ClickException(e.message)
        db.session.commit()
        click.echo(
            f"Imported {result['count']} {lifecycle.kind}(s), skipped {result['skipped']}."
        )

    @app.cli.command("seed-demo")
    @click.option("--password", default="demo1234", help="Password for every demo rep")
    def seed_demo(password):
        """Create demo sales reps, prospects and merchant discoveries.

        Usage:
            flask seed-demo
            flask seed-demo --password s3cret
        """
        import json

        from beauty_crm.models.prospect import Prospect
        from beauty_crm.models.user import User
        from beauty_crm.services.import_service import bulk_import
        from beauty_crm.services.lifecycle import MERCHANT, PROSPECT

        # --- 1. Sales reps ---
        for email, full_name, region, quota in DEMO_REPS:
            if User.query.filter_by(email=email).first():
                click.echo(f"Rep already exists: {email}")
                continue
            db.session.add(User(
                email=email,
                password_hash=generate_password_hash(password),
                full_name=full_name,
                role="Sales Rep",
                region=region,
                quota=quota,
            ))
            click.echo(f"Created rep: {email} ({region})")
        db.session.flush()

        # --- 2. Prospects (fixed ids) ---
        new_rows = [
            row for row in DEMO_PROSPECTS if db.session.get(Prospect, row["id"]) is None
        ]
        result = bulk_import(PROSPECT, json.dumps(new_rows), keep_ids=True)

        # --- 3. Merchant discoveries ---
        merchants = bulk_import(MERCHANT, DEMO_MERCHANTS)

        db.session.commit()

        click.echo("")
        click.echo("=" * 60)
        click.echo("Demo data created successfully!")
        click.echo("=" * 60)
        click.echo(f"  Reps:      {len(DEMO_REPS)} (password: {password})")
        click.echo(f"  Prospects: {result['count']} new")
        click.echo(f"  Merchants: {merchants['count']}")
        click.echo("=" * 60)

    @app.cli.command("import-prospects")
    @click.argument("path", type=click.Path(exists=True, dir_okay=False))
    def import_prospects(path):
        """Bulk import prospects from a JSON array file."""
        from beauty_crm.services.lifecycle import PROSPECT

        _run_import(PROSPECT, path)

    @app.cli.command("import-merchants")
    @click.argument("path", type=click.Path(exists=True, dir_okay=False))
    def import_merchants(path):
        """Bulk import merchant discoveries from a JSON array file."""
        from beauty_crm.services.lifecycle import MERCHANT

        _run_import(MERCHANT, path)
