# pylint: disable=C0116
#
#   Copyright 2024 getcarrier.io
#
#   Licensed under the Apache License, Version 2.0 (the "License");
#   you may not use this file except in compliance with the License.
#   You may obtain a copy of the License at
#
#       http://www.apache.org/licenses/LICENSE-2.0
#
#   Unless required by applicable law or agreed to in writing, software
#   distributed under the License is distributed on an "AS IS" BASIS,
#   WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#   See the License for the specific language governing permissions and
#   limitations under the License.

""" S3 API Utility Functions """

import mimetypes
from datetime import datetime, timezone
from typing import Dict, Optional, Tuple
from urllib.parse import quote, parse_qsl

from dateutil import parser as date_parser
from werkzeug.http import http_date, parse_date


def encode_key(key: str) -> str:
    """
    URL-encode an object key.

    Slashes are kept as they are, everything else outside the unreserved
    set (A-Z a-z 0-9 - _ . ~) is percent-encoded.
    """
    return quote(key, safe='/')


def encode_value(value) -> str:
    """Percent-encode a query string value (slashes included)"""
    return quote(str(value), safe='')


def build_query_string(parameters: Dict) -> str:
    """
    Canonical query string: keys sorted ascending, values percent-encoded.

    A parameter without a value is emitted as a bare key, e.g. ``?uploads``.
    """
    query = []
    for key in sorted(parameters.keys()):
        value = parameters[key]
        if value is None or value == '':
            query.append(key)
        else:
            query.append(f"{key}={encode_value(value)}")
    return '&'.join(query)


def split_uri_query(uri: str) -> Tuple[str, Dict[str, str]]:
    """
    Split an object URI with an embedded query string.

    Example: 'photos/cat.jpg?response-content-type=image/jpeg'
    Returns: ('photos/cat.jpg', {'response-content-type': 'image/jpeg'})
    """
    if '?' not in uri:
        return uri, {}
    uri, query = uri.split('?', 1)
    return uri, dict(parse_qsl(query, keep_blank_values=True))


def guess_content_type(filename: str) -> str:
    """
    Guess the content type from filename.

    Returns application/octet-stream if unknown.
    """
    content_type, _ = mimetypes.guess_type(filename)
    return content_type or 'application/octet-stream'


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_http_date(dt: datetime) -> str:
    """
    Format datetime as HTTP date (RFC 7231).

    Example: Wed, 21 Oct 2015 07:28:00 GMT
    """
    return http_date(dt)


def format_amz_date(dt: datetime) -> str:
    """ISO 8601 basic format used by signature v4, e.g. 20130524T000000Z"""
    return dt.astimezone(timezone.utc).strftime('%Y%m%dT%H%M%SZ')


def format_date_stamp(dt: datetime) -> str:
    """Date part of the v4 credential scope, e.g. 20130524"""
    return dt.astimezone(timezone.utc).strftime('%Y%m%d')


def http_date_to_timestamp(value) -> Optional[int]:
    """
    Convert an HTTP date header (Last-Modified, Date) to a unix timestamp.

    Returns None if the value cannot be parsed.
    """
    if not value:
        return None
    parsed = parse_date(str(value))
    if parsed is None:
        return None
    return int(parsed.timestamp())


def iso_date_to_timestamp(value) -> Optional[int]:
    """
    Convert an ISO 8601 date (LastModified, CreationDate in listings) to a
    unix timestamp.
    """
    if not value:
        return None
    try:
        parsed = date_parser.isoparse(str(value))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(parsed.timestamp())


def strip_etag(etag) -> str:
    """Remove exactly one pair of surrounding double quotes from an ETag"""
    etag = '' if etag is None else str(etag)
    if len(etag) >= 2 and etag[0] == '"' and etag[-1] == '"':
        return etag[1:-1]
    return etag


def is_numeric(value) -> bool:
    """True for strings that are plain base-10 integers, e.g. Content-Length"""
    if not isinstance(value, str) or not value:
        return False
    digits = value[1:] if value[0] in '+-' else value
    return digits.isdigit() and digits.isascii()


def get_range_header(range_from: Optional[int] = None, range_to: Optional[int] = None) -> Optional[str]:
    """
    Build a Range header for an inclusive [from, to] window or an open
    ended window starting at from.

    Returns None when no range was requested.
    """
    if range_from is None:
        return None
    if range_to is None:
        return f"bytes={int(range_from)}-"
    return f"bytes={int(range_from)}-{int(range_to)}"
