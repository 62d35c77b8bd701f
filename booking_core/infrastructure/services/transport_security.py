"""Transport security checks for payment operations."""

from urllib.parse import urlparse

from booking_core.application.interfaces.transport import TransportSecurity

LOCAL_HOSTS = ("localhost", "127.0.0.1", "::1")


class UrlTransportSecurity(TransportSecurity):
    """
    Secure when the API base URL is HTTPS.

    Plain HTTP to localhost is accepted only when `allow_localhost` is set
    (development).
    """

    def __init__(self, base_url: str, allow_localhost: bool = False):
        parsed = urlparse(base_url)
        self._scheme = parsed.scheme.lower()
        self._hostname = (parsed.hostname or "").lower()
        self._allow_localhost = allow_localhost

    def is_secure(self) -> bool:
        if self._scheme == "https":
            return True
        return self._allow_localhost and self._hostname in LOCAL_HOSTS


class StaticTransportSecurity(TransportSecurity):
    def __init__(self, secure: bool = True):
        self.secure = secure

    def is_secure(self) -> bool:
        return self.secure
