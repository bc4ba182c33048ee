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

""" S3 connector: the public operation surface """

import logging
from datetime import datetime
from typing import Callable, Dict, Optional

from .models.enums.all import Acl
from .models.input import Input, MIN_MULTIPART_CHUNK
from .models.pd.configuration import Configuration
from .s3.handlers import BucketHandler, MultipartHandler, ObjectHandler
from .s3.transport import HttpTransport

log = logging.getLogger(__name__)


class Connector:
    """
    Amazon S3 (and S3 compatible) client.

    Every operation works on a private clone of the configuration, so one
    Configuration instance may be shared by several connectors and threads.
    """

    def __init__(self, configuration: Configuration, transport: Optional[HttpTransport] = None,
                 clock: Optional[Callable[[], datetime]] = None):
        self.configuration = configuration
        self.transport = transport or HttpTransport()
        self.clock = clock

        self.objects = ObjectHandler(configuration, self.transport, clock)
        self.buckets = BucketHandler(configuration, self.transport, clock)
        self.multipart = MultipartHandler(configuration, self.transport, clock)

    def get_configuration(self) -> Configuration:
        return self.configuration

    #
    # Objects
    #

    def put_object(self, request_input: Input, bucket: str, uri: str, acl: str = Acl.PRIVATE,
                   request_headers: Optional[Dict[str, str]] = None) -> None:
        self.objects.put_object(request_input, bucket, uri, acl, request_headers)

    def get_object(self, bucket: str, uri: str, save_to: Optional[str] = None,
                   range_from: Optional[int] = None, range_to: Optional[int] = None) -> Optional[bytes]:
        return self.objects.get_object(bucket, uri, save_to, range_from, range_to)

    def head_object(self, bucket: str, uri: str) -> Dict:
        return self.objects.head_object(bucket, uri)

    def delete_object(self, bucket: str, uri: str) -> None:
        self.objects.delete_object(bucket, uri)

    def get_authenticated_url(self, bucket: str, uri: str, lifetime: Optional[int] = None,
                              https: bool = False) -> str:
        return self.objects.get_authenticated_url(bucket, uri, lifetime, https)

    #
    # Buckets
    #

    def get_bucket_location(self, bucket: str) -> str:
        return self.buckets.get_bucket_location(bucket)

    def get_bucket(self, bucket: str, prefix: Optional[str] = None, marker: Optional[str] = None,
                   max_keys: Optional[int] = None, delimiter: Optional[str] = '/',
                   return_common_prefixes: bool = False) -> Dict[str, Dict]:
        return self.buckets.get_bucket(bucket, prefix, marker, max_keys, delimiter, return_common_prefixes)

    def list_buckets(self) -> Dict:
        return self.buckets.list_buckets()

    #
    # Multipart uploads
    #

    def start_multipart(self, request_input: Input, bucket: str, uri: str, acl: str = Acl.PRIVATE,
                        request_headers: Optional[Dict[str, str]] = None) -> Optional[str]:
        return self.multipart.start_multipart(request_input, bucket, uri, acl, request_headers)

    def upload_multipart(self, request_input: Input, bucket: str, uri: str,
                         request_headers: Optional[Dict[str, str]] = None,
                         chunk_size: int = MIN_MULTIPART_CHUNK) -> Optional[str]:
        return self.multipart.upload_multipart(request_input, bucket, uri, request_headers, chunk_size)

    def finalize_multipart(self, request_input: Input, bucket: str, uri: str) -> None:
        self.multipart.finalize_multipart(request_input, bucket, uri)

    def upload_file(self, request_input: Input, bucket: str, uri: str, acl: str = Acl.PRIVATE,
                    request_headers: Optional[Dict[str, str]] = None,
                    chunk_size: int = MIN_MULTIPART_CHUNK) -> None:
        """
        Upload a payload in one go, or through a sequential multipart upload
        when it is larger than one chunk.
        """
        chunk_size = max(int(chunk_size), MIN_MULTIPART_CHUNK)
        if request_input.size <= chunk_size:
            self.put_object(request_input, bucket, uri, acl, request_headers)
            return

        request_input.upload_id = self.start_multipart(request_input, bucket, uri, acl, request_headers)
        request_input.etags = []
        for part_number in range(1, request_input.get_parts_count(chunk_size) + 1):
            request_input.part_number = part_number
            request_input.etags.append(
                self.upload_multipart(request_input, bucket, uri, chunk_size=chunk_size) or ''
            )

        log.info("Uploaded %s parts to %s/%s", len(request_input.etags), bucket, uri)
        self.finalize_multipart(request_input, bucket, uri)
