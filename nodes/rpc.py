# nodes/rpc.py
# RPC client for exactly one Monero wallet daemon – explicit, TLS-aware, no ENV magic

import json
import ssl
from dataclasses import dataclass, field
from http.cookiejar import DefaultCookiePolicy
from typing import Any, Dict, Optional

import requests
from requests.adapters import HTTPAdapter
from requests.auth import HTTPBasicAuth

JSONRPC_VERSION = "2.0"
RPC_PATH = "/json_rpc"
DEFAULT_TIMEOUT = 10.0


# -------------------------
# Errors
# -------------------------
class WalletRPCError(RuntimeError):
    """Transport-level failure talking to the wallet daemon."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message}: {self.cause}"
        return self.message


class WalletRPCInitError(WalletRPCError):
    """The client could not be built or the connectivity probe failed."""


# -------------------------
# Data model
# -------------------------
@dataclass(frozen=True)
class RPCEndpoint:
    host: str
    port: int
    secure: bool = False
    cert_path: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None

    @property
    def has_auth(self) -> bool:
        return bool(self.username) and bool(self.password)

    @property
    def scheme(self) -> str:
        return "https" if self.secure else "http"

    @property
    def url(self) -> str:
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"{self.scheme}://{host}:{self.port}{RPC_PATH}"


@dataclass(frozen=True)
class RPCRequest:
    method: str
    params: Dict[str, Any] = field(default_factory=dict)
    id: int = 0
    jsonrpc: str = JSONRPC_VERSION

    def to_payload(self) -> Dict[str, Any]:
        return {
            "jsonrpc": self.jsonrpc,
            "method": self.method,
            "params": self.params,
            "id": self.id,
        }


@dataclass(frozen=True)
class RPCResponse:
    status: int
    reason: str
    body: str

    @property
    def status_line(self) -> str:
        return f"{self.status} {self.reason}".strip()

    def json(self) -> Dict[str, Any]:
        data = json.loads(self.body)
        if not isinstance(data, dict):
            raise ValueError("JSON-RPC envelope is not an object")
        return data

    def result(self) -> Any:
        return self.json().get("result")


# -------------------------
# TLS
# -------------------------
def build_ssl_context(cert_path: str, verify_hostname: bool = True) -> ssl.SSLContext:
    """
    Trust store containing only the daemon's certificate.
    The chain is always verified; hostname matching can be switched off
    for loopback daemons whose self-signed cert has no matching SAN.
    """
    ctx = ssl.create_default_context(cafile=cert_path)
    if not verify_hostname:
        ctx.check_hostname = False
    return ctx


class TrustedCertAdapter(HTTPAdapter):
    """HTTPAdapter that pins the pool to a prepared SSLContext."""

    def __init__(self, ssl_context: ssl.SSLContext, verify_hostname: bool = True, **kwargs):
        # must exist before HTTPAdapter.__init__ calls init_poolmanager
        self.ssl_context = ssl_context
        self.verify_hostname = verify_hostname
        super().__init__(**kwargs)

    def init_poolmanager(self, connections, maxsize, block=False, **pool_kwargs):
        pool_kwargs["ssl_context"] = self.ssl_context
        if not self.verify_hostname:
            pool_kwargs["assert_hostname"] = False
        return super().init_poolmanager(connections, maxsize, block=block, **pool_kwargs)


# -------------------------
# Client
# -------------------------
class WalletRPC:
    """
    Fixed RPC client for exactly one wallet daemon.
    Once built, the target never changes.
    """

    def __init__(
        self,
        endpoint: RPCEndpoint,
        timeout: float = DEFAULT_TIMEOUT,
        http_method: str = "POST",
        ssl_context: Optional[ssl.SSLContext] = None,
        verify_hostname: bool = True,
    ):
        self.endpoint = endpoint
        self.timeout = timeout
        self.http_method = http_method.upper()
        self.headers = {"Content-Type": "application/json"}
        self.auth = (
            HTTPBasicAuth(endpoint.username, endpoint.password)
            if endpoint.has_auth
            else None
        )

        self.session = requests.Session()
        # no ~/.netrc credentials, no env proxies, no REQUESTS_CA_BUNDLE
        self.session.trust_env = False
        # daemon cookies would leak from one request into the next
        self.session.cookies.set_policy(DefaultCookiePolicy(allowed_domains=[]))
        if ssl_context is not None:
            self.session.mount(
                "https://",
                TrustedCertAdapter(ssl_context, verify_hostname=verify_hostname),
            )

        print("[WALLET-RPC] Initialized a new HTTP client")

    @classmethod
    def dial(
        cls,
        cert_path: Optional[str],
        host: str,
        port: int,
        username: Optional[str] = "",
        password: Optional[str] = "",
        *,
        timeout: float = DEFAULT_TIMEOUT,
        http_method: str = "POST",
        verify_hostname: bool = True,
    ) -> "WalletRPC":
        """
        Builds the client and probes the daemon with get_info.

        Raises WalletRPCInitError if the certificate cannot be loaded, the
        daemon cannot be reached or the probe answer is not JSON.
        """
        ssl_context = None
        secure = False

        if cert_path:
            print(f"[WALLET-RPC] Secure connection enabled, loading CA certificate from path: {cert_path}")
            try:
                ssl_context = build_ssl_context(cert_path, verify_hostname=verify_hostname)
            except (OSError, ValueError) as e:
                raise WalletRPCInitError(
                    f"Failed to read CA certificate {cert_path}", cause=e
                ) from e
            print("[WALLET-RPC] Added custom CA certificate to the trust store")
            secure = True

        if username and password:
            print("[WALLET-RPC] Basic auth credentials received, setting up basic auth")
        else:
            username = password = None

        endpoint = RPCEndpoint(
            host=host,
            port=int(port),
            secure=secure,
            cert_path=cert_path or None,
            username=username,
            password=password,
        )

        client = cls(
            endpoint,
            timeout=timeout,
            http_method=http_method,
            ssl_context=ssl_context,
            verify_hostname=verify_hostname,
        )
        client.probe()
        return client

    def send(self, request: RPCRequest) -> RPCResponse:
        url = self.endpoint.url
        print(f"[WALLET-RPC] Making RPC request to: {url}")

        if self.auth is not None:
            print(f"[WALLET-RPC] Setting basic auth for the request, user: {self.endpoint.username}")

        try:
            resp = self.session.request(
                self.http_method,
                url,
                data=json.dumps(request.to_payload()),
                headers=self.headers,
                auth=self.auth,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise WalletRPCError(
                f"[RPC:{self.info()}] {request.method} request to {url} failed", cause=e
            ) from e

        return RPCResponse(status=resp.status_code, reason=resp.reason or "", body=resp.text)

    def probe(self) -> Any:
        try:
            resp = self.send(RPCRequest(method="get_info", id=1))
        except WalletRPCError as e:
            raise WalletRPCInitError(
                "Failed to connect to wallet RPC server", cause=e.cause
            ) from e

        try:
            result = resp.result()
        except ValueError as e:
            raise WalletRPCInitError("Failed to decode response body", cause=e) from e

        print(f"[WALLET-RPC] get_info → {result}")
        print(f"[WALLET-RPC] Connected to wallet RPC server successfully {resp.status_line}")
        return result

    def close(self):
        self.session.close()

    def info(self) -> str:
        return f"{self.endpoint.host}:{self.endpoint.port}"
