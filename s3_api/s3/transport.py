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

""" HTTP transport for S3 requests """

import logging
import os
from typing import Dict, NamedTuple, Optional

import requests
from hurry.filesize import size

from .exceptions import CannotOpenFileForWrite

log = logging.getLogger(__name__)


# Streaming chunk size for downloads saved to disk
STREAM_CHUNK_SIZE = 64 * 1024


class TransportResponse(NamedTuple):
    """Raw outcome of one HTTP exchange"""
    status_code: int
    headers: Dict[str, str]
    body: bytes
    file: Optional[str] = None


class HttpTransport:
    """
    Thin wrapper around a requests session.

    Non-2xx responses are returned as data, never raised, so that the caller
    can classify every outcome the same way. Timeouts, connection pooling and
    redirects are left to requests.
    """

    def __init__(self, session: Optional[requests.Session] = None,
                 ca_cert_location: Optional[str] = None, timeout: Optional[float] = None):
        self.session = session or requests.Session()
        self.timeout = timeout
        self.ca_cert_location = None
        self.set_ca_cert_location(ca_cert_location)

    def set_ca_cert_location(self, ca_cert_location: Optional[str]) -> None:
        """ CA bundle file or directory; anything that does not exist is ignored """
        if ca_cert_location and not (os.path.isfile(ca_cert_location) or os.path.isdir(ca_cert_location)):
            log.warning("CA certificate location %s does not exist, using the default bundle", ca_cert_location)
            ca_cert_location = None
        self.ca_cert_location = ca_cert_location or None

    def request(self, method: str, url: str, headers: Optional[Dict[str, str]] = None, body=None,
                save_to: Optional[str] = None, verify: bool = True, read_body: bool = True) -> TransportResponse:
        if verify and self.ca_cert_location:
            verify = self.ca_cert_location

        response = self.session.request(
            method,
            url,
            headers=headers or {},
            data=body,
            verify=verify,
            stream=True,
            allow_redirects=True,
            timeout=self.timeout,
        )

        try:
            content = b''
            saved_to = None
            if not read_body:
                pass
            elif save_to and 200 <= response.status_code < 300:
                saved_to = self._save(response, save_to)
            else:
                content = response.content or b''
            return TransportResponse(
                status_code=response.status_code,
                headers=dict(response.headers),
                body=content,
                file=saved_to,
            )
        finally:
            response.close()

    @staticmethod
    def _save(response: requests.Response, save_to: str) -> str:
        written = 0
        try:
            with open(save_to, 'wb') as fp:
                for chunk in response.iter_content(STREAM_CHUNK_SIZE):
                    fp.write(chunk)
                    written += len(chunk)
        except OSError as exc:
            raise CannotOpenFileForWrite(save_to) from exc
        log.debug("Saved %s to %s", size(written), save_to)
        return save_to
