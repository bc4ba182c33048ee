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

""" S3 Multipart Upload Handler

Implements the client side of the S3 multipart upload lifecycle:
- CreateMultipartUpload (POST /{bucket}/{key}?uploads)
- UploadPart (PUT /{bucket}/{key}?partNumber=N&uploadId=X)
- CompleteMultipartUpload (POST /{bucket}/{key}?uploadId=X)

The session state (upload id, part number, collected ETags) lives on the
caller's Input. Parts may be uploaded concurrently; completing the upload
must wait until every part ETag has been collected.
"""

import logging
from typing import Dict, Optional

from hurry.filesize import size
from requests.structures import CaseInsensitiveDict

from ...models.enums.all import Acl
from ...models.input import Input, MIN_MULTIPART_CHUNK
from ..exceptions import CannotPutFile
from ..responses import complete_multipart_upload_body, find_text
from .base import CONTENT_LENGTH_WORKAROUND_HEADER, Handler

log = logging.getLogger(__name__)


class MultipartHandler(Handler):
    """Handler for S3 multipart upload operations"""

    def start_multipart(self, request_input: Input, bucket: str, uri: str, acl: str = Acl.PRIVATE,
                        request_headers: Optional[Dict[str, str]] = None) -> Optional[str]:
        """
        Initiate a multipart upload.

        S3 Operation: POST /{bucket}/{key}?uploads

        Returns:
            The UploadId, or None if the service did not return one
        """
        request_headers = CaseInsensitiveDict(request_headers or {})

        request = self.new_request('POST', bucket, uri)
        request.set_parameter('uploads')
        self.set_request_headers(request, request_headers)
        request.set_amz_header('x-amz-acl', getattr(acl, 'value', acl))

        if 'Content-Type' in request_headers:
            request_input.type = request_headers['Content-Type']
        request.set_header('Content-Type', request_input.type)

        response = request.get_response()
        self.check_response(request, response, [200], CannotPutFile, 'start_multipart')

        upload_id = find_text(response.get_parsed_body(), 'UploadId')
        log.info("Started multipart upload of %s/%s: %s", bucket, uri, upload_id)
        return upload_id or None

    def upload_multipart(self, request_input: Input, bucket: str, uri: str,
                         request_headers: Optional[Dict[str, str]] = None,
                         chunk_size: int = MIN_MULTIPART_CHUNK) -> Optional[str]:
        """
        Upload one part of a multipart upload.

        S3 Operation: PUT /{bucket}/{key}?partNumber=N&uploadId=X

        The part is the byte window [chunk_size * (N - 1), chunk_size * N) of
        the payload. Chunk sizes below 5 MiB are raised to 5 MiB.

        Returns:
            The ETag of the uploaded part, or None when part N lies past the
            end of the payload (no more parts)
        """
        chunk_size = max(int(chunk_size), MIN_MULTIPART_CHUNK)

        if not request_input.upload_id:
            raise CannotPutFile(0, 'upload_multipart(): No UploadID specified')
        if not request_input.part_number:
            raise CannotPutFile(0, 'upload_multipart(): No PartNumber specified')

        part_number = int(request_input.part_number)
        request_headers = CaseInsensitiveDict(request_headers or {})

        for attempt in range(2):
            part = request_input.window(part_number, chunk_size)
            if part is None:
                return None

            request = self.new_request('PUT', bucket, uri)
            request.set_parameter('partNumber', part_number)
            request.set_parameter('uploadId', request_input.upload_id)
            request.set_input(part)
            self.set_request_headers(request, request_headers)
            request.set_header('Content-Length', part.size)

            log.info(
                "Uploading part %s/%s (%s) of %s/%s",
                part_number, request_input.get_parts_count(chunk_size), size(part.size), bucket, uri,
            )
            response = request.get_response()

            if attempt == 0 and response.has_broken_content_length():
                log.warning("Broken Content-Length echo uploading part %s of %s/%s, retrying once",
                            part_number, bucket, uri)
                request_headers[CONTENT_LENGTH_WORKAROUND_HEADER] = '1'
                request_input.size = None
                continue

            self.check_response(request, response, [200], CannotPutFile, 'upload_multipart')
            return response.get_header('hash')

        return None

    def finalize_multipart(self, request_input: Input, bucket: str, uri: str) -> None:
        """
        Complete a multipart upload from the ordered part ETags.

        S3 Operation: POST /{bucket}/{key}?uploadId=X

        XML Body Example:
        <CompleteMultipartUpload>
            <Part>
                <PartNumber>1</PartNumber>
                <ETag>"etag1"</ETag>
            </Part>
        </CompleteMultipartUpload>
        """
        if not request_input.etags:
            raise CannotPutFile(0, 'finalize_multipart(): No ETags array specified')
        if not request_input.upload_id:
            raise CannotPutFile(0, 'finalize_multipart(): No UploadID specified')

        request = self.new_request('POST', bucket, uri)
        request.set_parameter('uploadId', request_input.upload_id)
        request.set_input(Input.create_from_data(complete_multipart_upload_body(request_input.etags)))
        request.set_header('Content-Type', 'application/xml')

        response = request.get_response()
        self.check_response(request, response, [200], CannotPutFile, 'finalize_multipart')
        log.info("Completed multipart upload of %s/%s (%s parts)", bucket, uri, len(request_input.etags))
