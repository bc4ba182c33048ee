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

""" Request payload model """

import base64
import hashlib
import os
from typing import List, Optional

from .enums.all import InputType
from ..s3.exceptions import CannotOpenFileForRead, InvalidFilePointer
from ..s3.utils import guess_content_type


# S3 minimum multipart chunk size (5 MiB)
MIN_MULTIPART_CHUNK = 5 * 1024 * 1024

# Read buffer used when hashing files
READ_CHUNK_SIZE = 1024 * 1024


class Input:
    """
    Payload of a PUT/POST request.

    The payload is either in-memory bytes, a file on disk or an empty
    "directory" placeholder. A multipart upload session is carried by the
    same object: ``upload_id``, ``part_number`` and the ordered ``etags``.
    """

    def __init__(self, input_type: InputType = InputType.DATA, data: bytes = b'',
                 path: Optional[str] = None, content_type: Optional[str] = 'application/octet-stream'):
        self.input_type = InputType(input_type)
        self.data = data or b''
        self.path = path
        self.type = content_type
        self.md5sum: Optional[str] = None
        self._sha256: Optional[str] = None
        self._size: Optional[int] = None
        self.upload_id: Optional[str] = None
        self.part_number: Optional[int] = None
        self.etags: List[str] = []

    def __repr__(self):
        return (
            f"<Input type={self.input_type.value} size={self.size} "
            f"path={self.path!r} upload_id={self.upload_id!r} part_number={self.part_number!r}>"
        )

    @classmethod
    def create_from_data(cls, data, md5sum: bool = True) -> 'Input':
        if isinstance(data, str):
            data = data.encode('utf-8')
        result = cls(InputType.DATA, data=data)
        if md5sum:
            result.md5sum = base64.b64encode(hashlib.md5(result.data).digest()).decode('ascii')
        return result

    @classmethod
    def create_from_file(cls, path: str, md5sum: bool = True) -> 'Input':
        path = os.fspath(path)
        if not os.path.isfile(path):
            raise CannotOpenFileForRead(path)
        result = cls(InputType.FILE, path=path, content_type=guess_content_type(path))
        if md5sum:
            digest = hashlib.md5()
            for chunk in result._iter_file():
                digest.update(chunk)
            result.md5sum = base64.b64encode(digest.digest()).decode('ascii')
        return result

    @classmethod
    def create_for_directory(cls) -> 'Input':
        return cls(InputType.DIRECTORY, content_type='application/x-directory')

    @property
    def size(self) -> int:
        if self._size is not None:
            return self._size
        if self.input_type == InputType.FILE:
            try:
                return os.path.getsize(self.path)
            except OSError as exc:
                raise CannotOpenFileForRead(self.path) from exc
        return len(self.data)

    @size.setter
    def size(self, value: Optional[int]):
        """ Override the payload size; None (or a negative value) restores the real size """
        self._size = None if value is None or value < 0 else int(value)

    @property
    def sha256(self) -> str:
        """ Hex SHA-256 of the payload, computed once """
        if self._sha256 is None:
            digest = hashlib.sha256()
            if self.input_type == InputType.FILE:
                for chunk in self._iter_file():
                    digest.update(chunk)
            else:
                digest.update(self.data)
            self._sha256 = digest.hexdigest()
        return self._sha256

    def _iter_file(self):
        try:
            with open(self.path, 'rb') as fp:
                while True:
                    chunk = fp.read(READ_CHUNK_SIZE)
                    if not chunk:
                        break
                    yield chunk
        except OSError as exc:
            raise CannotOpenFileForRead(self.path) from exc

    def read(self, offset: int = 0, length: Optional[int] = None) -> bytes:
        """ Read a byte window of the payload """
        if self.input_type == InputType.DIRECTORY:
            return b''
        if self.input_type == InputType.DATA:
            end = None if length is None else offset + length
            return self.data[offset:end]
        try:
            with open(self.path, 'rb') as fp:
                fp.seek(offset)
                return fp.read() if length is None else fp.read(length)
        except OSError as exc:
            raise CannotOpenFileForRead(self.path) from exc

    def open(self):
        """ File object to stream a file payload from; the caller closes it """
        if self.input_type != InputType.FILE:
            raise InvalidFilePointer()
        try:
            return open(self.path, 'rb')
        except OSError as exc:
            raise CannotOpenFileForRead(self.path) from exc

    def get_parts_count(self, chunk_size: int) -> int:
        chunk_size = max(int(chunk_size), MIN_MULTIPART_CHUNK)
        total_size = self.size
        parts = total_size // chunk_size
        if parts * chunk_size < total_size:
            parts += 1
        return parts

    def window(self, part_number: int, chunk_size: int) -> Optional['Input']:
        """
        A new in-memory Input holding exactly the bytes of one multipart part.

        Returns None when the part lies beyond the end of the payload.
        """
        chunk_size = max(int(chunk_size), MIN_MULTIPART_CHUNK)
        total_size = self.size
        offset = chunk_size * (part_number - 1)

        if offset > total_size:
            return None

        size = chunk_size
        if part_number >= self.get_parts_count(chunk_size):
            size = total_size - offset

        if size <= 0:
            return None

        part = Input(InputType.DATA, data=self.read(offset, size), content_type=None)
        part.upload_id = self.upload_id
        part.part_number = part_number
        return part
