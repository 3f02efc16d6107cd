"""
Personal Capital API client layer.

Provides the async request pipeline and the spHeader/spData envelope handling.
"""

from personalcapital.api.cookies import CookieJar
from personalcapital.api.http_client import AsyncHttpClient, SPErrorCode, sanitize_for_log

__all__ = ["AsyncHttpClient", "CookieJar", "SPErrorCode", "sanitize_for_log"]
