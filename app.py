# ==========================================
# XMR-WALLET-BRIDGE – Flask Backend / app.py
# ==========================================

# ================
# 🔗 Standard Libs
# ================
import sys

# =====================
# 🧪 Flask & Extensions
# =====================
from flask import Flask, current_app, jsonify
from flask_cors import CORS

# ====================
# 🧠 Project Internals
# ====================
from nodes.config import make_server_config, make_wallet_config
from nodes.rpc import RPCRequest, WalletRPCError, WalletRPCInitError
from core.proxy import TrustedProxyFix
from core.wallet_service import (
    WalletNotInitializedError,
    ensure_client_ready,
    send_request,
)


## ================================================================================================================================================================ ##


# ===========================
# 🌐 Flask App initialisieren
# ===========================
def create_app(wallet_config=None, server_config=None, eager=True):
    """
    Builds the Flask app.

    With eager=True the wallet client is dialed here, before the server
    accepts any connection, so a dead daemon fails the startup instead of
    the first request.
    """
    wallet_config = make_wallet_config() if wallet_config is None else dict(wallet_config)
    server_config = make_server_config() if server_config is None else dict(server_config)

    app = Flask(__name__)
    app.config["WALLET_RPC"] = wallet_config
    app.config["SERVER"] = server_config

    # =====================
    # 🔸 CORS & Proxy Setup
    if server_config.get("cors_origins"):
        CORS(app, resources={r"/*": {"origins": server_config["cors_origins"]}})

    app.wsgi_app = TrustedProxyFix(app.wsgi_app, server_config.get("trusted_proxies", []))

    # ====================
    # 🟢 WALLET ADDRESS
    @app.route("/", methods=["GET"])
    def wallet_address():
        try:
            ensure_client_ready(**current_app.config["WALLET_RPC"])
            resp = send_request(RPCRequest(method="get_address", params={}, id=0))

        except (WalletRPCInitError, WalletNotInitializedError) as e:
            print(f"[GATEWAY] ⛔ Wallet RPC unavailable: {e}")
            return jsonify({"error": str(e)}), 503

        except WalletRPCError as e:
            print(f"[GATEWAY] ❌ {e}")
            return jsonify({"error": str(e)}), 500

        print(f"[GATEWAY] {resp.status_line}")
        print(f"[GATEWAY] {resp.body}")

        # raw daemon envelope, not the decoded "result"
        return jsonify({"wallet_addr": resp.body}), 200

    if eager:
        ensure_client_ready(**wallet_config)

    return app


## ================================================================================================================================================================ ##


# ===============
# 🚀 App starten
# ===============
def main():
    server_config = make_server_config()

    try:
        app = create_app(server_config=server_config)
    except WalletRPCInitError as e:
        print(f"[SERVER] ❌ {e}")
        sys.exit(1)

    print(f"[SERVER] 🚀 Listening on {server_config['host']}:{server_config['port']}")
    app.run(
        debug=False,
        host=server_config["host"],
        port=server_config["port"],
        threaded=True,
    )


if __name__ == "__main__":
    main()
