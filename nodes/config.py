# nodes/config.py
import os
from dotenv import load_dotenv

BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
ENV_DIR = os.path.join(BASE_DIR, "env")

LOOPBACK_HOSTS = ("127.0.0.1", "localhost", "::1")


def load_env(name: str):
    """Loads env/.env.<name> if present. Real env vars always win."""
    env_path = os.path.join(ENV_DIR, f".env.{name}")
    if os.path.isfile(env_path):
        load_dotenv(env_path, override=False)
        return True
    return False


def _split_list(raw):
    return [item.strip() for item in (raw or "").split(",") if item.strip()]


def _verify_hostname(raw: str, host: str) -> bool:
    value = (raw or "auto").strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    # auto: self-signed daemon certs on loopback rarely carry a matching SAN
    return host not in LOOPBACK_HOSTS


def make_server_config():
    load_env("server")
    return {
        "host": os.getenv("HOST") or "127.0.0.1",
        "port": int(os.getenv("PORT") or "8080"),
        "trusted_proxies": _split_list(os.getenv("TRUSTED_PROXIES", "127.0.0.1")),
        "cors_origins": _split_list(os.getenv("CORS_ORIGINS")),
    }


def make_wallet_config():
    load_env("wallet")
    host = os.getenv("WALLET_RPC_HOST") or "127.0.0.1"
    return {
        "cert_path": os.getenv("WALLET_RPC_CERT", "monero_rpc.crt"),
        "host": host,
        "port": int(os.getenv("WALLET_RPC_PORT") or "18081"),
        "username": os.getenv("WALLET_RPC_USER", ""),
        "password": os.getenv("WALLET_RPC_PASSWORD", ""),
        "timeout": float(os.getenv("WALLET_RPC_TIMEOUT") or "10"),
        "http_method": (os.getenv("WALLET_RPC_HTTP_METHOD") or "POST").upper(),
        "verify_hostname": _verify_hostname(os.getenv("WALLET_RPC_VERIFY_HOSTNAME"), host),
    }
