class TsuboError(Exception):
    """Base error for tsubo."""


class InvalidUrlError(TsuboError, ValueError):
    """Raised when a URL does not pass validation."""


class CookieError(TsuboError, ValueError):
    """Raised when a cookie field is invalid."""


class InvalidCookieNameError(CookieError):
    """Raised when a cookie name is empty or not a string."""


class InvalidCookieValueError(CookieError):
    """Raised when a cookie value is not a string."""


class InvalidCookieExpirationError(CookieError):
    """Raised when a cookie expiration is neither an epoch nor a parseable date."""


class InvalidCookiePathError(CookieError):
    """Raised when a cookie path is not an absolute path."""


class InvalidCookieDomainError(CookieError):
    """Raised when a cookie domain is not a string."""


class InvalidHeaderError(TsuboError, ValueError):
    """Raised when a request header cannot be set by the caller."""


class InvalidMethodError(TsuboError, ValueError):
    """Raised for unsupported HTTP methods."""


class InvalidBodyError(TsuboError, ValueError):
    """Raised when request content is empty or not a string."""


class ConnectionError(TsuboError):
    """Raised when a TCP/TLS connection fails."""


class TLSNegotiationError(ConnectionError):
    """Raised when TLS handshake does not meet expectations."""


class ProtocolError(TsuboError):
    """Raised when an HTTP protocol error occurs."""
