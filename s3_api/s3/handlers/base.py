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

""" Shared plumbing of the S3 operation handlers """

import logging
from datetime import datetime
from typing import Callable, Dict, Iterable, Optional, Type

from ..exceptions import ResponseException
from ..request import Request
from ..responses import Response
from ..transport import HttpTransport

log = logging.getLogger(__name__)


# Marker header of the one-off retry for hosts echoing a comma-joined Content-Length
CONTENT_LENGTH_WORKAROUND_HEADER = 'workaround-broken-content-length'


class Handler:
    """Base class of the operation handlers"""

    def __init__(self, configuration, transport: Optional[HttpTransport] = None,
                 clock: Optional[Callable[[], datetime]] = None):
        """
        Initialize the handler.

        Args:
            configuration: Configuration used for every request; never mutated
            transport: HTTP transport, a default requests based one if omitted
            clock: Callable returning the current UTC datetime
        """
        self.configuration = configuration
        self.transport = transport or HttpTransport()
        self.clock = clock

    def new_request(self, verb: str, bucket: str, uri: str, configuration=None) -> Request:
        """A request against a private copy of the configuration"""
        return Request(
            verb,
            bucket,
            uri,
            configuration if configuration is not None else self.configuration.clone(),
            transport=self.transport,
            clock=self.clock,
        )

    @staticmethod
    def set_request_headers(request: Request, request_headers: Optional[Dict[str, str]]) -> None:
        """x-amz-* headers (any case) go to the Amazon headers, the rest are regular headers"""
        for name, value in (request_headers or {}).items():
            if name.lower().startswith('x-amz-'):
                request.set_amz_header(name.lower(), value)
            else:
                request.set_header(name, value)

    @staticmethod
    def check_response(request: Request, response: Response, valid_codes: Iterable[int],
                       error_class: Type[ResponseException], operation: str) -> None:
        """
        Raise error_class on an unexpected status code or an S3 error document.
        """
        if not response.has_valid_status_code(valid_codes):
            error = response.get_error() if response.is_error() else None
            raise error_class(
                code=response.status_code,
                message=f"{operation}(): Unexpected HTTP status [{response.status_code}] {request!r}",
                error=error,
                request=request,
                response=response,
            )
        if response.is_error():
            raise error_class.from_error(response.get_error(), request, response)
