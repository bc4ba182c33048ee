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

""" AWS Signature Version 2 and Version 4 request signing """

import base64
import hmac
import hashlib
from typing import Dict, Optional, Tuple
from urllib.parse import quote

from ..models.enums.all import InputType
from .utils import (
    encode_value,
    format_amz_date,
    format_date_stamp,
)


ALGORITHM = 'AWS4-HMAC-SHA256'
SERVICE = 's3'
UNSIGNED_PAYLOAD = 'UNSIGNED-PAYLOAD'
EMPTY_PAYLOAD_HASH = hashlib.sha256(b'').hexdigest()

# Default lifetime of pre-signed URLs, in seconds
DEFAULT_PRESIGN_LIFETIME = 3600


#
# Signature Version 4 primitives
#

def sign(key: bytes, msg: str) -> bytes:
    """One HMAC-SHA256 step of the signing key chain"""
    return hmac.new(key, msg.encode('utf-8'), hashlib.sha256).digest()


def get_signature_key(secret_key: str, date_stamp: str, region: str, service: str = SERVICE) -> bytes:
    """
    Signing key for one day, region and service, derived from the secret key.

    The same key signs every request of that day and scope, so it only changes
    with the date stamp or the configured region.
    """
    key = ('AWS4' + secret_key).encode('utf-8')
    for scope_part in (date_stamp, region, service, 'aws4_request'):
        key = sign(key, scope_part)
    return key


def hash_payload(payload: bytes) -> str:
    """Hex SHA-256 sent as x-amz-content-sha256"""
    return hashlib.sha256(payload).hexdigest()


def get_credential_scope(date_stamp: str, region: str, service: str = SERVICE) -> str:
    return f"{date_stamp}/{region}/{service}/aws4_request"


def get_canonical_query_string(parameters: Dict) -> str:
    """
    Get canonical query string.

    - Sort query params by key name
    - URL-encode keys and values
    - Parameters without a value keep the equals sign (``uploads=``)
    """
    params = []
    for key in sorted(parameters.keys()):
        value = parameters[key]
        value = '' if value is None else str(value)
        params.append(f"{quote(key, safe='')}={quote(value, safe='')}")
    return '&'.join(params)


def get_canonical_headers(headers: Dict) -> Tuple[str, str]:
    """
    Get canonical headers and the signed headers list.

    - Lowercase header names
    - Trim and collapse whitespace in values
    - Sort by header name
    - Headers with an empty value are not sent, so they are not signed either
    """
    normalized = {}
    for name, value in headers.items():
        value = '' if value is None else str(value)
        if value == '':
            continue
        normalized[name.lower()] = ' '.join(value.split())

    names = sorted(normalized.keys())
    canonical_headers = ''.join(f"{name}:{normalized[name]}\n" for name in names)
    return canonical_headers, ';'.join(names)


def create_canonical_request(method: str, canonical_uri: str, canonical_query: str,
                             canonical_headers: str, signed_headers: str, payload_hash: str) -> str:
    """Join the outgoing request parts, one per line, in the order S3 hashes them"""
    return f"{method}\n{canonical_uri}\n{canonical_query}\n{canonical_headers}\n{signed_headers}\n{payload_hash}"


def create_string_to_sign(canonical_request: str, amz_date: str, credential_scope: str) -> str:
    return f"{ALGORITHM}\n{amz_date}\n{credential_scope}\n{hash_payload(canonical_request.encode('utf-8'))}"


def calculate_signature(string_to_sign: str, secret_key: str,
                        date_stamp: str, region: str, service: str = SERVICE) -> str:
    """Hex signature placed in the Authorization header or X-Amz-Signature"""
    signing_key = get_signature_key(secret_key, date_stamp, region, service)
    return hmac.new(signing_key, string_to_sign.encode('utf-8'), hashlib.sha256).hexdigest()


#
# Signature Version 2 primitives
#

def v2_string_to_sign(verb: str, content_md5: str, content_type: str, date: str,
                      amz_headers: Dict, resource: str) -> str:
    """
    VERB\n Content-MD5\n Content-Type\n Date\n CanonicalizedAmzHeaders CanonicalizedResource

    Amazon headers are lower-cased, sorted and folded one per line.
    """
    amz = sorted(
        f"{name.lower()}:{str(value).strip()}"
        for name, value in amz_headers.items()
        if value is not None and str(value) != ''
    )
    canonical_amz_headers = ''.join(f"{line}\n" for line in amz)
    return (
        f"{verb.upper()}\n"
        f"{content_md5 or ''}\n"
        f"{content_type or ''}\n"
        f"{date}\n"
        f"{canonical_amz_headers}{resource}"
    )


def v2_hash(secret_key: str, string_to_sign: str) -> str:
    """Base64 encoded HMAC-SHA1 of the string to sign"""
    digest = hmac.new(secret_key.encode('utf-8'), string_to_sign.encode('utf-8'), hashlib.sha1).digest()
    return base64.b64encode(digest).decode('ascii')


#
# Signature strategies
#

class Signature:
    """
    Signs one Request.

    ``pre_process_headers`` runs right before the Authorization header is
    computed and may add or rewrite headers. ``get_authorization_header`` and
    ``get_authenticated_url`` are the only outputs consumed by the Request.
    """

    def __init__(self, request):
        self.request = request

    @property
    def configuration(self):
        return self.request.configuration

    def pre_process_headers(self, headers: Dict, amz_headers: Dict) -> None:
        pass

    def get_authorization_header(self) -> str:
        raise NotImplementedError

    def get_authenticated_url(self, lifetime: Optional[int] = None, https: bool = False) -> str:
        raise NotImplementedError

    def _base_url(self, https: bool) -> str:
        scheme = 'https' if https else 'http'
        return f"{scheme}://{self.request.headers['Host']}{self.request.get_uri()}"


class SignatureV2(Signature):
    """ Legacy HMAC-SHA1 signatures """

    def _string_to_sign(self, date: str) -> str:
        request = self.request
        resource = request.get_resource()

        # The v2 resource always names the bucket, even with virtual hosting
        if request.bucket and not self.configuration.use_legacy_path_style:
            resource = '/' + request.bucket + resource

        return v2_string_to_sign(
            request.verb,
            request.headers.get('Content-MD5', ''),
            request.headers.get('Content-Type', ''),
            date,
            request.amz_headers,
            resource,
        )

    def get_authorization_header(self) -> str:
        string_to_sign = self._string_to_sign(self.request.headers.get('Date', ''))
        signature = v2_hash(self.configuration.get_secret(), string_to_sign)
        return f"AWS {self.configuration.access_key}:{signature}"

    def get_authenticated_url(self, lifetime: Optional[int] = None, https: bool = False) -> str:
        if lifetime is None:
            lifetime = DEFAULT_PRESIGN_LIFETIME
        expires = int(self.request.date.timestamp()) + int(lifetime)

        signature = v2_hash(self.configuration.get_secret(), self._string_to_sign(str(expires)))

        query = {
            'AWSAccessKeyId': self.configuration.access_key,
            'Expires': expires,
            'Signature': signature,
        }
        token = self.configuration.get_token()
        if token:
            query['x-amz-security-token'] = token

        url = self._base_url(https)
        separator = '&' if '?' in url else '?'
        return url + separator + '&'.join(f"{key}={encode_value(value)}" for key, value in query.items())


class SignatureV4(Signature):
    """ AWS Signature Version 4 (AWS4-HMAC-SHA256) """

    def pre_process_headers(self, headers: Dict, amz_headers: Dict) -> None:
        # x-amz-date replaces the Date header
        amz_headers['x-amz-date'] = format_amz_date(self.request.date)
        headers['Date'] = ''

        if amz_headers.get('x-amz-content-sha256'):
            return

        request_input = self.request.input
        if request_input is None or self.request.verb not in ('PUT', 'POST'):
            amz_headers['x-amz-content-sha256'] = EMPTY_PAYLOAD_HASH
        elif request_input.input_type == InputType.FILE:
            # Streamed from disk, not hashed up front
            amz_headers['x-amz-content-sha256'] = UNSIGNED_PAYLOAD
        else:
            amz_headers['x-amz-content-sha256'] = request_input.sha256

    def _scope(self) -> Tuple[str, str, str]:
        date_stamp = format_date_stamp(self.request.date)
        amz_date = format_amz_date(self.request.date)
        return date_stamp, amz_date, get_credential_scope(date_stamp, self.configuration.region)

    def _canonical_uri(self) -> str:
        return self.request.get_resource().split('?', 1)[0]

    def get_canonical_request(self, parameters: Dict, headers: Dict, payload_hash: str) -> str:
        canonical_headers, signed_headers = get_canonical_headers(headers)
        return create_canonical_request(
            self.request.verb,
            self._canonical_uri(),
            get_canonical_query_string(parameters),
            canonical_headers,
            signed_headers,
            payload_hash,
        )

    def get_authorization_header(self) -> str:
        request = self.request
        date_stamp, amz_date, credential_scope = self._scope()

        headers = dict(request.headers)
        headers.update(request.amz_headers)
        _, signed_headers = get_canonical_headers(headers)

        payload_hash = request.amz_headers.get('x-amz-content-sha256') or EMPTY_PAYLOAD_HASH
        canonical_request = self.get_canonical_request(request.parameters, headers, payload_hash)
        string_to_sign = create_string_to_sign(canonical_request, amz_date, credential_scope)
        signature = calculate_signature(
            string_to_sign, self.configuration.get_secret(), date_stamp, self.configuration.region
        )

        return (
            f"{ALGORITHM} "
            f"Credential={self.configuration.access_key}/{credential_scope},"
            f"SignedHeaders={signed_headers},"
            f"Signature={signature}"
        )

    def get_authenticated_url(self, lifetime: Optional[int] = None, https: bool = False) -> str:
        if lifetime is None:
            lifetime = DEFAULT_PRESIGN_LIFETIME

        request = self.request
        date_stamp, amz_date, credential_scope = self._scope()

        parameters = dict(request.parameters)
        parameters.update({
            'X-Amz-Algorithm': ALGORITHM,
            'X-Amz-Credential': f"{self.configuration.access_key}/{credential_scope}",
            'X-Amz-Date': amz_date,
            'X-Amz-Expires': str(int(lifetime)),
            'X-Amz-SignedHeaders': 'host',
        })
        token = self.configuration.get_token()
        if token:
            parameters['X-Amz-Security-Token'] = token

        # Only the host is signed; the payload is never known up front
        canonical_request = self.get_canonical_request(
            parameters, {'host': request.headers['Host']}, UNSIGNED_PAYLOAD
        )
        string_to_sign = create_string_to_sign(canonical_request, amz_date, credential_scope)
        signature = calculate_signature(
            string_to_sign, self.configuration.get_secret(), date_stamp, self.configuration.region
        )

        scheme = 'https' if https else 'http'
        return (
            f"{scheme}://{request.headers['Host']}{self._canonical_uri()}"
            f"?{get_canonical_query_string(parameters)}&X-Amz-Signature={signature}"
        )


SIGNATURES = {
    'v2': SignatureV2,
    'v4': SignatureV4,
}


def get_signature_object(request) -> Signature:
    """ The signing strategy selected by the request's configuration """
    return SIGNATURES[request.configuration.signature_method](request)
