from tsubo.client import Client
from tsubo.cookies import Cookie, CookieJar, CookieParseResult, ParseOutcome, parse_cookie_line
from tsubo.models import Request, Response
from tsubo.transport import HttpxTransport, SocketTransport, Transport
from tsubo.utils import UrlParts, validate_url

__all__ = [
    "Client",
    "Cookie",
    "CookieJar",
    "CookieParseResult",
    "ParseOutcome",
    "parse_cookie_line",
    "Request",
    "Response",
    "HttpxTransport",
    "SocketTransport",
    "Transport",
    "UrlParts",
    "validate_url",
]
