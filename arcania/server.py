"""
Arcania - Reference Backend (Flask)

Stores what the client derives and checks login hashes. Endpoints:
    POST /api/signup             {email, authSalt, encryptionSalt, authHash, masterPasswordCheckHash}
    GET  /api/get-salts/<email>  -> {authSalt, encryptionSalt}
    POST /api/login              {email, providedAuthHash}

Salts and hashes travel as base64. Login failures never say whether the
email or the password was wrong.

Run:
    python -m arcania.server --db accounts.db --port 5000
"""

import argparse
import logging

from flask import Flask, current_app, jsonify, request
from flask_cors import CORS

from . import crypto
from .accounts import DEFAULT_DB_PATH, AccountExists, AccountStore


logger = logging.getLogger(__name__)

GENERIC_LOGIN_ERROR = "Invalid email or password."

SIGNUP_FIELDS = ("email", "authSalt", "encryptionSalt", "authHash", "masterPasswordCheckHash")


def create_app(db_path: str = DEFAULT_DB_PATH) -> Flask:
    """
    Build the Flask app around an AccountStore at db_path.

    CORS is enabled so the browser pages (served from another origin) can
    call the API.
    """
    app = Flask(__name__)
    CORS(app)

    app.config["ACCOUNT_STORE"] = AccountStore(db_path).open()

    @app.route("/api/signup", methods=["POST"])
    def signup():
        data = request.get_json(silent=True)
        if not isinstance(data, dict) or any(not data.get(f) for f in SIGNUP_FIELDS):
            return jsonify({"error": "Missing signup fields"}), 400
        if not isinstance(data["email"], str):
            return jsonify({"error": "Invalid email"}), 400

        try:
            auth_salt = crypto.from_base64(data["authSalt"])
            encryption_salt = crypto.from_base64(data["encryptionSalt"])
            auth_hash = crypto.from_base64(data["authHash"])
            check_hash = crypto.from_base64(data["masterPasswordCheckHash"])
        except crypto.InvalidArgument:
            return jsonify({"error": "Salts and hashes must be base64"}), 400

        try:
            _store().create_account(
                data["email"], auth_salt, encryption_salt, auth_hash, check_hash
            )
        except AccountExists:
            return jsonify({"error": "Email already exists"}), 409

        logger.info("Account created")
        return jsonify({"message": "Signup successful"}), 201

    @app.route("/api/get-salts/<path:email>", methods=["GET"])
    def get_salts(email):
        account = _store().get_account(email)
        if not account:
            return jsonify({"error": GENERIC_LOGIN_ERROR}), 404

        return jsonify({
            "authSalt": crypto.to_base64(account["auth_salt"]),
            "encryptionSalt": crypto.to_base64(account["encryption_salt"]),
        })

    @app.route("/api/login", methods=["POST"])
    def login():
        data = request.get_json(silent=True)
        if not isinstance(data, dict) or not data.get("email") or not data.get("providedAuthHash"):
            return jsonify({"error": "Email and providedAuthHash are required"}), 400
        if not isinstance(data["email"], str) or not isinstance(data["providedAuthHash"], str):
            return jsonify({"error": "Email and providedAuthHash must be strings"}), 400

        try:
            provided = crypto.from_base64(data["providedAuthHash"])
        except crypto.InvalidArgument:
            return jsonify({"error": GENERIC_LOGIN_ERROR}), 401

        account = _store().get_account(data["email"])
        if not account or not crypto.constant_compare(provided, account["auth_hash"]):
            logger.info("Login rejected")
            return jsonify({"error": GENERIC_LOGIN_ERROR}), 401

        _store().record_login(data["email"])
        logger.info("Login accepted")
        return jsonify({"message": "Login successful"}), 200

    return app


def _store() -> AccountStore:
    return current_app.config["ACCOUNT_STORE"]


def main():
    parser = argparse.ArgumentParser(description="Arcania reference backend")
    parser.add_argument("--db", default=DEFAULT_DB_PATH, help="SQLite account database")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=5000)
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app = create_app(args.db)
    app.run(host=args.host, port=args.port)


if __name__ == "__main__":
    main()
