"""
Wallet-RPC client service

Provides a lazily initialised, process-wide instance of WalletRPC.

Goals of this module:
- exactly one wallet daemon connection per process
- the init body (TLS setup, credentials, get_info probe) runs at most once,
  even when many request threads hit it at the same time
- reuse from the Flask app, scripts and tests

Contract: once a client exists, later ensure_client_ready() calls return it
and ignore their arguments. A different daemon target needs a new process
(or reset_wallet_rpc() in tests).

This module contains infrastructure code only, no wallet logic.
"""

import threading

from nodes.rpc import DEFAULT_TIMEOUT, RPCRequest, RPCResponse, WalletRPC

# Singleton instance (created on first successful ensure_client_ready)
_wallet_rpc: WalletRPC | None = None
_wallet_rpc_lock = threading.Lock()


class WalletNotInitializedError(RuntimeError):
    """send_request() was called before ensure_client_ready() succeeded."""


def ensure_client_ready(
    cert_path: str | None,
    host: str,
    port: int,
    username: str | None = "",
    password: str | None = "",
    *,
    timeout: float = DEFAULT_TIMEOUT,
    http_method: str = "POST",
    verify_hostname: bool = True,
) -> WalletRPC:
    """
    Returns the shared WalletRPC instance, building it on the first call.

    Concurrent first callers block until the one running init finishes.
    If init fails the WalletRPCInitError propagates and nothing is stored,
    so the next caller runs the init body again.
    """
    global _wallet_rpc

    client = _wallet_rpc
    if client is not None:
        return client

    with _wallet_rpc_lock:
        if _wallet_rpc is None:
            _wallet_rpc = WalletRPC.dial(
                cert_path,
                host,
                port,
                username,
                password,
                timeout=timeout,
                http_method=http_method,
                verify_hostname=verify_hostname,
            )
        return _wallet_rpc


def get_wallet_rpc() -> WalletRPC:
    client = _wallet_rpc
    if client is None:
        raise WalletNotInitializedError(
            "HTTP client not initialized, please dial the wallet RPC server first"
        )
    return client


def send_request(request: RPCRequest) -> RPCResponse:
    return get_wallet_rpc().send(request)


def reset_wallet_rpc():
    """Drops the shared client (tests / shutdown)."""
    global _wallet_rpc

    with _wallet_rpc_lock:
        if _wallet_rpc is not None:
            _wallet_rpc.close()
        _wallet_rpc = None
