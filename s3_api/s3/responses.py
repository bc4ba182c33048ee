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

""" S3 responses: parsing, classification and XML request bodies """

from typing import Dict, Iterable, NamedTuple, Optional
from xml.etree.ElementTree import Element, SubElement, ParseError, fromstring, tostring

from .exceptions import InvalidBody
from .utils import http_date_to_timestamp, is_numeric, strip_etag


XML_CONTENT_TYPES = ('application/xml', 'text/xml')


class Error(NamedTuple):
    """Structured S3 error document"""
    code: Optional[str]
    message: Optional[str]
    bucket_name: Optional[str] = None
    resource: Optional[str] = None
    request_id: Optional[str] = None
    host_id: Optional[str] = None


def _strip_namespaces(root: Element) -> Element:
    """Drop '{namespace}' prefixes so that elements are found by bare name"""
    for element in root.iter():
        if isinstance(element.tag, str) and '}' in element.tag:
            element.tag = element.tag.split('}', 1)[1]
    return root


def find_text(element: Optional[Element], path: str) -> Optional[str]:
    if element is None:
        return None
    found = element.find(path)
    if found is None:
        return None
    return found.text or ''


class Response:
    """
    The outcome of one request/response exchange.

    Header names are lower-cased; numeric values are converted to int.
    Four synthetic fields are derived once:

    - time: Last-Modified as a unix timestamp
    - size: Content-Length
    - type: Content-Type
    - hash: ETag without its surrounding quotes
    """

    def __init__(self, status_code: int, headers: Optional[Dict] = None,
                 body: bytes = b'', file: Optional[str] = None):
        self.status_code = status_code
        self.headers: Dict = {}
        self.body = body or b''
        self.file = file
        self._parsed_body: Optional[Element] = None
        self.process_headers(headers or {})

    def __repr__(self):
        return f"<Response status={self.status_code} size={len(self.body)} file={self.file!r}>"

    @classmethod
    def from_transport(cls, http_response, request=None) -> 'Response':
        response = cls(http_response.status_code, body=http_response.body, file=http_response.file)
        response.process_headers(http_response.headers, request)
        return response

    def process_headers(self, headers: Dict, request=None) -> None:
        for name, value in headers.items():
            name = name.lower()
            self.set_header(name, value)

            if name == 'last-modified':
                self.headers['time'] = http_date_to_timestamp(value)
            elif name == 'content-length':
                self.headers['size'] = int(value) if is_numeric(str(value)) else value
            elif name == 'content-type':
                self.headers['type'] = value
            elif name == 'etag':
                self.headers['hash'] = strip_etag(value)
            elif name.startswith('x-amz-meta-') and request is not None:
                # Handy for callers inspecting the request afterwards
                request.headers[name] = self.headers[name]

    def set_header(self, name: str, value) -> None:
        name = name.lower()
        if isinstance(value, str) and is_numeric(value):
            value = int(value)
        self.headers[name] = value

    def get_header(self, name: str, default=None):
        return self.headers.get(name.lower(), default)

    def has_valid_status_code(self, valid_codes: Iterable[int]) -> bool:
        return self.status_code in tuple(valid_codes)

    def get_body(self) -> bytes:
        return self.body

    def get_parsed_body(self, reparse: bool = False) -> Optional[Element]:
        """
        The body parsed as XML, or None when there is no XML body.

        The result is memoized; pass reparse=True to parse again.
        """
        if self._parsed_body is not None and not reparse:
            return self._parsed_body
        if not self.body or self.file:
            return None

        content_type = str(self.headers.get('type') or 'text/plain').split(';', 1)[0].strip().lower()
        if content_type not in XML_CONTENT_TYPES and not self.body.lstrip().startswith(b'<?xml'):
            return None

        try:
            self._parsed_body = _strip_namespaces(fromstring(self.body))
        except ParseError as exc:
            raise InvalidBody(f"Cannot parse the response body as XML: {exc}") from exc
        return self._parsed_body

    def _service_document(self) -> Optional[Element]:
        # Object payloads may look like XML without being complete documents
        try:
            return self.get_parsed_body()
        except InvalidBody:
            return None

    def is_error(self) -> bool:
        """True when the body is an S3 error document, whatever the status code"""
        parsed_body = self._service_document()
        if parsed_body is None:
            return False
        return parsed_body.find('Code') is not None and parsed_body.find('Message') is not None

    def get_error(self) -> Optional[Error]:
        if not self.is_error():
            return None
        parsed_body = self._service_document()
        return Error(
            code=find_text(parsed_body, 'Code'),
            message=find_text(parsed_body, 'Message'),
            bucket_name=find_text(parsed_body, 'BucketName'),
            resource=find_text(parsed_body, 'Resource'),
            request_id=find_text(parsed_body, 'RequestId'),
            host_id=find_text(parsed_body, 'HostId'),
        )

    def has_broken_content_length(self) -> bool:
        """
        Some hosts echo a comma-joined Content-Length (e.g. ``5242880,5242880``)
        in the canonical request of their debug output.
        """
        parsed_body = self._service_document()
        canonical_request = find_text(parsed_body, 'CanonicalRequest')
        if not canonical_request:
            return False
        for line in canonical_request.split('\n'):
            if not line.startswith('content-length:'):
                continue
            if ',' in line.split(':', 1)[1]:
                return True
        return False


def _to_xml(root: Element) -> bytes:
    return b'<?xml version="1.0" encoding="UTF-8"?>\n' + tostring(root, encoding='utf-8')


def complete_multipart_upload_body(etags: Iterable[str]) -> bytes:
    """
    Build the CompleteMultipartUpload manifest.

    XML Example:
    <CompleteMultipartUpload>
        <Part>
            <PartNumber>1</PartNumber>
            <ETag>"etag"</ETag>
        </Part>
    </CompleteMultipartUpload>
    """
    root = Element('CompleteMultipartUpload')
    for part_number, etag in enumerate(etags, start=1):
        part = SubElement(root, 'Part')
        SubElement(part, 'PartNumber').text = str(part_number)
        SubElement(part, 'ETag').text = f'"{strip_etag(etag)}"'
    return _to_xml(root)
