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

""" S3 Object Operations Handler """

import logging
import os
from typing import Dict, Optional

from hurry.filesize import size
from requests.structures import CaseInsensitiveDict

from ...models.enums.all import Acl, InputType
from ...models.input import Input
from ..exceptions import CannotDeleteFile, CannotGetFile, CannotPutFile
from ..utils import get_range_header, http_date_to_timestamp, split_uri_query
from .base import CONTENT_LENGTH_WORKAROUND_HEADER, Handler

log = logging.getLogger(__name__)


class ObjectHandler(Handler):
    """Handler for S3 object operations"""

    def put_object(self, request_input: Input, bucket: str, uri: str, acl: str = Acl.PRIVATE,
                   request_headers: Optional[Dict[str, str]] = None) -> None:
        """
        Upload an object to a bucket, overwriting any existing one.

        S3 Operation: PUT /{bucket}/{key}

        Args:
            request_input: Payload to upload
            bucket: Bucket name; with v4 signatures it must live in the configured region
            uri: Object key
            acl: Canned ACL, private by default
            request_headers: Extra headers (Content-Type, Content-Disposition, x-amz-meta-*, ...)
        """
        request_headers = CaseInsensitiveDict(request_headers or {})

        if 'Content-Type' in request_headers:
            request_input.type = request_headers['Content-Type']

        if request_input.input_type != InputType.DIRECTORY and (
                request_input.size <= 0 or
                (request_input.input_type == InputType.DATA and not request_input.data)
        ):
            raise CannotPutFile(0, 'Missing input parameters')

        for attempt in range(2):
            request = self.new_request('PUT', bucket, uri)
            request.set_input(request_input)
            self.set_request_headers(request, request_headers)

            request.set_header('Content-Type', request_input.type)
            request.set_header('Content-Length', request_input.size)
            if request_input.md5sum:
                request.set_header('Content-MD5', request_input.md5sum)
            request.set_amz_header('x-amz-acl', getattr(acl, 'value', acl))

            log.debug("Uploading %s to %s/%s", size(request_input.size), bucket, uri)
            response = request.get_response()

            if attempt == 0 and response.has_broken_content_length():
                log.warning("Broken Content-Length echo uploading %s/%s, retrying once", bucket, uri)
                request_headers[CONTENT_LENGTH_WORKAROUND_HEADER] = '1'
                continue

            self.check_response(request, response, [200], CannotPutFile, 'put_object')
            return

    def get_object(self, bucket: str, uri: str, save_to: Optional[str] = None,
                   range_from: Optional[int] = None, range_to: Optional[int] = None) -> Optional[bytes]:
        """
        Download an object.

        S3 Operation: GET /{bucket}/{key}

        Returns:
            The object body, or None when it was streamed into save_to
        """
        request = self.new_request('GET', bucket, uri)

        if save_to:
            request.save_to = os.fspath(save_to)

        range_header = get_range_header(range_from, range_to)
        if range_header:
            request.set_header('Range', range_header)

        response = request.get_response()
        self.check_response(request, response, [200, 206], CannotGetFile, 'get_object')

        if save_to:
            return None
        return response.get_body()

    def head_object(self, bucket: str, uri: str) -> Dict:
        """
        Get object metadata without downloading the body.

        S3 Operation: HEAD /{bucket}/{key}

        Returns:
            Lower-cased response headers; date and last-modified as unix timestamps
        """
        request = self.new_request('HEAD', bucket, uri)
        response = request.get_response()
        self.check_response(request, response, [200, 206], CannotGetFile, 'head_object')

        for name in ('date', 'last-modified'):
            if response.get_header(name):
                response.headers[name] = http_date_to_timestamp(response.get_header(name))

        return dict(response.headers)

    def delete_object(self, bucket: str, uri: str) -> None:
        """
        Delete an object.

        S3 Operation: DELETE /{bucket}/{key}
        """
        request = self.new_request('DELETE', bucket, uri)
        response = request.get_response()
        self.check_response(request, response, [200, 204], CannotDeleteFile, 'delete_object')

    def get_authenticated_url(self, bucket: str, uri: str, lifetime: Optional[int] = None,
                              https: bool = False) -> str:
        """
        Pre-signed GET URL of an object.

        A query string embedded in uri (e.g. response-content-disposition) is
        kept and signed. The URL always uses path style addressing under v4.
        """
        uri, parameters = split_uri_query(uri)

        configuration = self.configuration.clone()
        configuration.set_use_legacy_path_style(True)

        request = self.new_request('GET', bucket, uri, configuration=configuration)
        for key, value in parameters.items():
            request.set_parameter(key, value)

        return request.get_authenticated_url(lifetime, https)
