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

""" S3 request construction and dispatch """

import logging
from datetime import datetime
from typing import Callable, Dict, Optional

from requests.structures import CaseInsensitiveDict

from ..models.enums.all import InputType
from ..models.input import Input
from .auth import get_signature_object
from .responses import Response
from .transport import HttpTransport
from .utils import (
    build_query_string,
    encode_key,
    format_http_date,
    utc_now,
)

log = logging.getLogger(__name__)


# Query parameters which address a sub-resource and are part of the v2 signed resource
SUB_RESOURCES = ('acl', 'location', 'torrent', 'logging', 'uploads', 'uploadId', 'partNumber')

# Hosts of the us-east-1 region discovery quirk
EXTERNAL_HOST = 's3-external-1.amazonaws.com'
GLOBAL_HOST = 's3.amazonaws.com'


def get_host_name(configuration, bucket: str) -> str:
    """
    Get the hostname for an operation given a configuration and a bucket name.

    Virtual hosting style (bucket.endpoint) is used unless the configuration
    asks for legacy path style access. v4 signatures always talk to the
    regional Amazon endpoint, e.g. s3.eu-west-1.amazonaws.com or
    s3.dualstack.cn-north-1.amazonaws.com.cn
    """
    endpoint = configuration.endpoint
    region = configuration.region or ''

    if endpoint == 's3.amazonaws.com' and region.startswith('cn-'):
        endpoint = 'amazonaws.com.cn'

    # Account-level requests, e.g. list all buckets
    if not bucket:
        return endpoint

    if not configuration.is_v4:
        if configuration.use_legacy_path_style:
            return endpoint
        return f"{bucket}.{endpoint}"

    regional_endpoint = f"{region}.amazonaws.com"
    if region.startswith('cn-'):
        regional_endpoint += '.cn'

    if configuration.use_dualstack_url:
        endpoint = f"s3.dualstack.{regional_endpoint}"
    else:
        endpoint = f"s3.{regional_endpoint}"

    if configuration.use_legacy_path_style:
        return endpoint

    return f"{bucket}.{endpoint}"


def should_verify_ssl(host: str) -> bool:
    """
    Amazon's wildcard certificates do not match bucket names with dots in
    them, so certificate checks are skipped for such hosts.
    """
    is_amazon_s3 = host.endswith('.amazonaws.com') or host.endswith('amazonaws.com.cn')
    too_many_dots = host.count('.') > 4
    return not (is_amazon_s3 and too_many_dots)


class Request:
    """
    One S3 request: verb, bucket, key, host, signed resource, query
    parameters, headers and optional payload / download target.
    """

    def __init__(self, verb: str, bucket: str, uri: str, configuration,
                 transport: Optional[HttpTransport] = None,
                 clock: Optional[Callable[[], datetime]] = None):
        self.verb = verb.upper()
        self.bucket = bucket or ''
        self.configuration = configuration
        self.transport = transport or HttpTransport()
        self.date = (clock or utc_now)()

        self.parameters: Dict[str, Optional[str]] = {}
        self.amz_headers: Dict[str, str] = {}
        self.headers = CaseInsensitiveDict({
            'Host': get_host_name(configuration, self.bucket),
            'Date': format_http_date(self.date),
            'Content-MD5': '',
            'Content-Type': '',
        })
        self.input: Optional[Input] = None
        self.save_to: Optional[str] = None
        self.response: Optional[Response] = None

        self.path = '/' + encode_key(uri) if uri else '/'
        self.resource = self.path
        if self.bucket and configuration.use_legacy_path_style:
            self.resource = '/' + self.bucket + self.path
            self.path = self.resource

        token = configuration.get_token()
        if token:
            self.set_amz_header('x-amz-security-token', token)

        self.signature = get_signature_object(self)

    def __repr__(self):
        return (
            f"<Request {self.verb} host={self.headers.get('Host')!r} uri={self.get_uri()!r} "
            f"configuration={self.configuration!r}>"
        )

    def set_parameter(self, key: str, value=None) -> None:
        self.parameters[key] = None if value is None else str(value)

    def set_header(self, key: str, value) -> None:
        self.headers[key] = '' if value is None else str(value)

    def set_amz_header(self, key: str, value) -> None:
        self.amz_headers[key.lower()] = '' if value is None else str(value)

    def set_input(self, request_input: Input) -> None:
        self.input = request_input

    def get_query_string(self) -> str:
        return build_query_string(self.parameters)

    def get_uri(self) -> str:
        """ Path and query string of the HTTP request """
        if not self.parameters:
            return self.path
        separator = '&' if '?' in self.path else '?'
        return self.path + separator + self.get_query_string()

    def get_resource(self) -> str:
        """ The resource the signature is computed over """
        if any(key in self.parameters for key in SUB_RESOURCES):
            separator = '&' if '?' in self.resource else '?'
            return self.resource + separator + self.get_query_string()
        return self.resource

    def get_authenticated_url(self, lifetime: Optional[int] = None, https: bool = False) -> str:
        return self.signature.get_authenticated_url(lifetime, https)

    def _get_body(self):
        if self.verb not in ('PUT', 'POST'):
            return None
        if self.input is None:
            self.input = Input()
        if self.input.input_type == InputType.FILE:
            return self.input.open()
        if self.input.input_type == InputType.DIRECTORY:
            return b''
        return self.input.read(0, self.input.size)

    def get_response(self) -> Response:
        uri = self.get_uri()

        # Region discovery of buckets in an unknown region only works against the global host
        if uri.endswith('/?location') and self.headers['Host'] == EXTERNAL_HOST:
            self.headers['Host'] = GLOBAL_HOST

        body = self._get_body()

        self.signature.pre_process_headers(self.headers, self.amz_headers)
        headers = {'Authorization': self.signature.get_authorization_header()}
        for name, value in list(self.headers.items()) + list(self.amz_headers.items()):
            if value is not None and str(value) != '':
                headers[name] = str(value)

        scheme = 'https' if self.configuration.use_ssl else 'http'
        verify = should_verify_ssl(self.headers['Host']) if self.configuration.use_ssl else False

        log.debug("%s %s://%s%s", self.verb, scheme, self.headers['Host'], uri)

        try:
            http_response = self.transport.request(
                self.verb,
                f"{scheme}://{self.headers['Host']}{uri}",
                headers=headers,
                body=body,
                save_to=self.save_to,
                verify=verify,
                read_body=self.verb not in ('HEAD', 'DELETE'),
            )
        finally:
            if hasattr(body, 'close'):
                body.close()

        self.response = Response.from_transport(http_response, request=self)
        return self.response
