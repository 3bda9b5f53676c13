# =====================================================
# 🔐 Trusted proxies – X-Forwarded-* only from known IPs
# =====================================================

from werkzeug.middleware.proxy_fix import ProxyFix


class TrustedProxyFix:
    """
    WSGI middleware: applies werkzeug's ProxyFix only when the direct peer
    is one of the trusted proxy addresses. Everyone else gets their
    forwarded headers ignored.
    """

    def __init__(self, app, trusted_proxies, x_for=1, x_proto=1, x_host=0):
        self.app = app
        self.trusted_proxies = frozenset(trusted_proxies or ())
        self.proxied = ProxyFix(app, x_for=x_for, x_proto=x_proto, x_host=x_host)

    def __call__(self, environ, start_response):
        if environ.get("REMOTE_ADDR") in self.trusted_proxies:
            return self.proxied(environ, start_response)
        return self.app(environ, start_response)
