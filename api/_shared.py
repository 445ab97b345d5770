import json
import logging
import os
import re
from dataclasses import dataclass

logger = logging.getLogger("api")


def _log_level(name: str) -> int:
    level = logging.getLevelName((name or '').strip().upper())
    return level if isinstance(level, int) else logging.INFO


logger.setLevel(_log_level(os.environ.get('LOG_LEVEL', 'INFO')))

DEFAULT_RPC_URL = 'https://mainnet.base.org'

# Minted records never change on chain.
IMMUTABLE_CACHE_CONTROL = 'public, s-maxage=3600, stale-while-revalidate=86400'
NO_STORE_CACHE_CONTROL = 'no-store, no-cache, must-revalidate, max-age=0'

UINT256_MAX = 2 ** 256 - 1
UINT256_MAX_DIGITS = len(str(UINT256_MAX))

_TOKEN_ID_RE = re.compile(r'[0-9]+')

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET,OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type,Authorization",
}


@dataclass(frozen=True)
class Config:
    """Process-wide settings shared by the metadata and image handlers."""

    rpc_url: str = DEFAULT_RPC_URL
    contract_address: str = ''
    base_url: str = ''
    vercel_url: str = ''

    @classmethod
    def from_env(cls, environ=None) -> 'Config':
        env = os.environ if environ is None else environ
        return cls(
            rpc_url=(env.get('BASE_RPC_URL') or '').strip() or DEFAULT_RPC_URL,
            contract_address=(env.get('CONTRACT_ADDRESS') or '').strip(),
            base_url=(env.get('BASE_URL') or '').strip(),
            vercel_url=(env.get('VERCEL_URL') or '').strip(),
        )

    def public_base_url(self, fallback: str | None = None) -> str:
        """
        Base used for links back into this deployment.

        Priority:
        1) BASE_URL, when configured explicitly.
        2) https://VERCEL_URL, the host Vercel assigns to the deployment.
        3) The caller supplied fallback (usually the incoming request root).
        """
        if self.base_url:
            base = self.base_url
        elif self.vercel_url:
            host = self.vercel_url
            base = host if host.startswith(('http://', 'https://')) else f"https://{host}"
        else:
            base = fallback or ''
        return base.rstrip('/')


def parse_token_id(raw) -> int | None:
    """Return the integer token id, or None when `raw` is not a uint256 in base 10."""
    if raw is None:
        return None
    text = str(raw).strip()
    if not text or not _TOKEN_ID_RE.fullmatch(text):
        return None
    # int() refuses very long digit strings, so bound the length first
    if len(text.lstrip('0')) > UINT256_MAX_DIGITS:
        return None
    value = int(text)
    if value > UINT256_MAX:
        return None
    return value


def json_response(data: dict, status: int = 200, extra_headers: dict | None = None):
    body = json.dumps(data, ensure_ascii=False)
    headers = {"Content-Type": "application/json; charset=utf-8", **CORS_HEADERS}
    if extra_headers:
        headers.update(extra_headers)
    return (body, status, headers)


def text_response(text: str, status: int = 200, extra_headers: dict | None = None):
    headers = {"Content-Type": "text/plain; charset=utf-8", **CORS_HEADERS}
    if extra_headers:
        headers.update(extra_headers)
    return (text, status, headers)


def svg_response(svg: str, status: int = 200, extra_headers: dict | None = None):
    headers = {"Content-Type": "image/svg+xml", **CORS_HEADERS}
    if extra_headers:
        headers.update(extra_headers)
    return (svg, status, headers)


def preflight_response():
    return ('', 204, dict(CORS_HEADERS))


def request_token_id(request) -> str | None:
    """Pull the raw token id from a Flask or Vercel style request."""
    view_args = getattr(request, 'view_args', None) or {}
    raw = view_args.get('token_id')
    if raw is None:
        args = getattr(request, 'args', None) or {}
        raw = args.get('tokenId')
    return raw


def request_root(request) -> str | None:
    return getattr(request, 'host_url', None)
