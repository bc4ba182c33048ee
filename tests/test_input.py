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

import base64
import hashlib

import pytest

from s3_api import CannotOpenFileForRead, Input, InputType, InvalidFilePointer


TOTAL_SIZE = 12000000
CHUNK_SIZE = 5242880


def test_create_from_data():
    request_input = Input.create_from_data('hello')
    assert request_input.input_type == InputType.DATA
    assert request_input.data == b'hello'
    assert request_input.size == 5
    assert request_input.type == 'application/octet-stream'
    assert request_input.md5sum == base64.b64encode(hashlib.md5(b'hello').digest()).decode('ascii')


def test_create_from_file(tmp_path):
    path = tmp_path / 'file.bin'
    path.write_bytes(b'0123456789')
    request_input = Input.create_from_file(str(path))
    assert request_input.input_type == InputType.FILE
    assert request_input.size == 10
    assert request_input.read(2, 3) == b'234'
    assert request_input.sha256 == hashlib.sha256(b'0123456789').hexdigest()
    with request_input.open() as fp:
        assert fp.read() == b'0123456789'


def test_missing_file(tmp_path):
    with pytest.raises(CannotOpenFileForRead):
        Input.create_from_file(str(tmp_path / 'missing.bin'))


def test_directory():
    request_input = Input.create_for_directory()
    assert request_input.size == 0
    assert request_input.read() == b''
    with pytest.raises(InvalidFilePointer):
        request_input.open()


def test_size_override_and_reset():
    request_input = Input.create_from_data(b'x' * 100)
    request_input.size = 10
    assert request_input.size == 10
    request_input.size = -1
    assert request_input.size == 100


def test_parts_boundary():
    request_input = Input.create_from_data(b'\0' * TOTAL_SIZE, md5sum=False)
    request_input.upload_id = 'upload'
    assert request_input.get_parts_count(CHUNK_SIZE) == 3

    sizes = [request_input.window(part, CHUNK_SIZE).size for part in (1, 2, 3)]
    assert sizes == [CHUNK_SIZE, CHUNK_SIZE, 1514240]
    assert request_input.window(4, CHUNK_SIZE) is None


def test_window_of_a_file(tmp_path):
    path = tmp_path / 'big.bin'
    payload = bytes(range(256)) * 30000
    path.write_bytes(payload)
    request_input = Input.create_from_file(str(path), md5sum=False)

    part = request_input.window(2, CHUNK_SIZE)
    assert part.input_type == InputType.DATA
    assert part.part_number == 2
    assert part.data == payload[CHUNK_SIZE:]


def test_small_chunks_are_raised_to_the_minimum():
    request_input = Input.create_from_data(b'\0' * TOTAL_SIZE, md5sum=False)
    assert request_input.get_parts_count(1024) == 3


def test_file_content_type_is_guessed(tmp_path):
    path = tmp_path / 'page.html'
    path.write_text('<html></html>')
    assert Input.create_from_file(str(path)).type == 'text/html'
