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

""" Signing tests, pinned by the examples of the AWS documentation """

from urllib.parse import parse_qs, urlsplit

import pytest

from s3_api import Input
from s3_api.s3.auth import (
    EMPTY_PAYLOAD_HASH,
    UNSIGNED_PAYLOAD,
    SignatureV2,
    SignatureV4,
    calculate_signature,
    create_canonical_request,
    create_string_to_sign,
    get_canonical_headers,
    get_signature_key,
    hash_payload,
    v2_hash,
    v2_string_to_sign,
)
from s3_api.s3.request import Request

from .conftest import ACCESS_KEY, NOW, SECRET_KEY, fixed_clock


V2_EXAMPLE_SIGNATURE = 'bWq2s1WEIj+Ydj0vQ697zp+IXMU='
V4_EXAMPLE_SIGNATURE = 'f0e8bdb87c964420e857bd35b5d6ed310bd44f0170aba48dd91039c6036bdb41'
V4_PRESIGNED_EXAMPLE_SIGNATURE = 'aeeed9bbccd4d02ee5c0109b86d86835f995330da4c265957d157751f604d404'


def test_signature_strategy_follows_configuration(configuration, v4_configuration):
    assert isinstance(Request('GET', 'b', 'k', configuration).signature, SignatureV2)
    assert isinstance(Request('GET', 'b', 'k', v4_configuration).signature, SignatureV4)


def test_v2_string_to_sign_folds_amz_headers():
    string_to_sign = v2_string_to_sign(
        'put', 'md5==', 'text/plain', 'Tue, 27 Mar 2007 21:15:45 +0000',
        {'X-Amz-Meta-Reviewedby': 'joe@example.com', 'x-amz-acl': ' public-read '},
        '/bucket/key',
    )
    assert string_to_sign == (
        'PUT\n'
        'md5==\n'
        'text/plain\n'
        'Tue, 27 Mar 2007 21:15:45 +0000\n'
        'x-amz-acl:public-read\n'
        'x-amz-meta-reviewedby:joe@example.com\n'
        '/bucket/key'
    )


def test_v2_documentation_example():
    string_to_sign = v2_string_to_sign(
        'GET', '', '', 'Tue, 27 Mar 2007 19:36:42 +0000', {}, '/johnsmith/photos/puppy.jpg'
    )
    assert v2_hash(SECRET_KEY, string_to_sign) == V2_EXAMPLE_SIGNATURE


def test_v2_authorization_header(configuration):
    request = Request('GET', 'johnsmith', 'photos/puppy.jpg', configuration, clock=fixed_clock)
    request.headers['Date'] = 'Tue, 27 Mar 2007 19:36:42 +0000'
    request.signature.pre_process_headers(request.headers, request.amz_headers)

    assert request.headers['Host'] == 'johnsmith.s3.amazonaws.com'
    assert request.signature.get_authorization_header() == f'AWS {ACCESS_KEY}:{V2_EXAMPLE_SIGNATURE}'


def test_v2_security_token_is_signed(configuration):
    configuration.set_token('session-token')
    request = Request('GET', 'johnsmith', 'photos/puppy.jpg', configuration, clock=fixed_clock)
    request.headers['Date'] = 'Tue, 27 Mar 2007 19:36:42 +0000'

    assert request.amz_headers['x-amz-security-token'] == 'session-token'
    assert request.signature.get_authorization_header() != f'AWS {ACCESS_KEY}:{V2_EXAMPLE_SIGNATURE}'


def test_v2_authenticated_url(configuration):
    request = Request('GET', 'johnsmith', 'photos/puppy.jpg', configuration, clock=fixed_clock)
    url = urlsplit(request.get_authenticated_url(lifetime=600, https=True))
    query = parse_qs(url.query)

    expires = int(NOW.timestamp()) + 600
    string_to_sign = v2_string_to_sign('GET', '', '', str(expires), {}, '/johnsmith/photos/puppy.jpg')

    assert url.scheme == 'https'
    assert url.netloc == 'johnsmith.s3.amazonaws.com'
    assert url.path == '/photos/puppy.jpg'
    assert query['AWSAccessKeyId'] == [ACCESS_KEY]
    assert query['Expires'] == [str(expires)]
    assert query['Signature'] == [v2_hash(SECRET_KEY, string_to_sign)]


def test_v2_authenticated_url_default_lifetime(configuration):
    request = Request('GET', 'johnsmith', 'photos/puppy.jpg', configuration, clock=fixed_clock)
    query = parse_qs(urlsplit(request.get_authenticated_url()).query)
    assert query['Expires'] == [str(int(NOW.timestamp()) + 3600)]


def _v4_example_request(v4_configuration) -> Request:
    request = Request('GET', 'examplebucket', 'test.txt', v4_configuration, clock=fixed_clock)
    request.headers['Host'] = 'examplebucket.s3.amazonaws.com'
    return request


def test_v4_documentation_example(v4_configuration):
    request = _v4_example_request(v4_configuration)
    request.set_header('Range', 'bytes=0-9')
    request.signature.pre_process_headers(request.headers, request.amz_headers)

    assert request.amz_headers['x-amz-date'] == '20130524T000000Z'
    assert request.amz_headers['x-amz-content-sha256'] == EMPTY_PAYLOAD_HASH
    assert request.headers['Date'] == ''
    assert request.signature.get_authorization_header() == (
        f'AWS4-HMAC-SHA256 Credential={ACCESS_KEY}/20130524/us-east-1/s3/aws4_request,'
        'SignedHeaders=host;range;x-amz-content-sha256;x-amz-date,'
        f'Signature={V4_EXAMPLE_SIGNATURE}'
    )


def test_v4_presigned_documentation_example(v4_configuration):
    request = _v4_example_request(v4_configuration)
    url = request.get_authenticated_url(lifetime=86400, https=True)

    assert url.startswith('https://examplebucket.s3.amazonaws.com/test.txt?')
    assert url.endswith(f'&X-Amz-Signature={V4_PRESIGNED_EXAMPLE_SIGNATURE}')
    query = parse_qs(urlsplit(url).query)
    assert query['X-Amz-Algorithm'] == ['AWS4-HMAC-SHA256']
    assert query['X-Amz-Credential'] == [f'{ACCESS_KEY}/20130524/us-east-1/s3/aws4_request']
    assert query['X-Amz-Expires'] == ['86400']
    assert query['X-Amz-SignedHeaders'] == ['host']


def test_v4_presigned_security_token(v4_configuration):
    v4_configuration.set_token('session-token')
    request = _v4_example_request(v4_configuration)
    query = parse_qs(urlsplit(request.get_authenticated_url(lifetime=86400)).query)
    assert query['X-Amz-Security-Token'] == ['session-token']
    assert query['X-Amz-Signature'] != [V4_PRESIGNED_EXAMPLE_SIGNATURE]


def test_v4_security_token_is_a_signed_header(v4_configuration):
    v4_configuration.set_token('session-token')
    request = _v4_example_request(v4_configuration)
    request.signature.pre_process_headers(request.headers, request.amz_headers)
    assert 'x-amz-security-token' in request.signature.get_authorization_header().split('SignedHeaders=')[1]


def test_v4_payload_hash_of_data_input(v4_configuration):
    request = Request('PUT', 'examplebucket', 'test.txt', v4_configuration, clock=fixed_clock)
    request.set_input(Input.create_from_data(b'Welcome to Amazon S3.'))
    request.signature.pre_process_headers(request.headers, request.amz_headers)
    assert request.amz_headers['x-amz-content-sha256'] == \
        '44ce7dd67c959e0d3524ffac1771dfbba87d2b6b4b4e99e42034a8b803f8b072'


def test_v4_payload_hash_of_file_input(v4_configuration, tmp_path):
    path = tmp_path / 'payload.bin'
    path.write_bytes(b'payload')
    request = Request('PUT', 'examplebucket', 'test.txt', v4_configuration, clock=fixed_clock)
    request.set_input(Input.create_from_file(str(path)))
    request.signature.pre_process_headers(request.headers, request.amz_headers)
    assert request.amz_headers['x-amz-content-sha256'] == UNSIGNED_PAYLOAD


def test_signing_key_documentation_example():
    key = get_signature_key('wJalrXUtnFEMI/K7MDENG+bPxRfiCYEXAMPLEKEY', '20120215', 'us-east-1', 'iam')
    assert key.hex() == 'f4780e2d9f65fa895f9c67b32ce1baf0b0d8a43505a000a1a9e090d414db404d'


def test_canonical_headers_are_trimmed_and_sorted():
    canonical, signed = get_canonical_headers({
        'X-Amz-Date': '20130524T000000Z',
        'Host': 'example.com',
        'Content-MD5': '',
        'X-Amz-Meta-Note': '  two   words ',
    })
    assert canonical == 'host:example.com\nx-amz-date:20130524T000000Z\nx-amz-meta-note:two words\n'
    assert signed == 'host;x-amz-date;x-amz-meta-note'


CANONICAL_REQUEST = create_canonical_request(
    'GET', '/test.txt', '', 'host:examplebucket.s3.amazonaws.com\n', 'host', EMPTY_PAYLOAD_HASH
)


def _signature(secret=SECRET_KEY, date='20130524', region='us-east-1', service='s3',
               canonical_request=CANONICAL_REQUEST):
    string_to_sign = create_string_to_sign(
        canonical_request, '20130524T000000Z', f'{date}/{region}/{service}/aws4_request'
    )
    return calculate_signature(string_to_sign, secret, date, region, service)


def test_v4_signature_is_deterministic():
    assert _signature() == _signature()


@pytest.mark.parametrize('changes', [
    {'secret': SECRET_KEY + 'x'},
    {'date': '20130525'},
    {'region': 'eu-west-1'},
    {'service': 'iam'},
    {'canonical_request': CANONICAL_REQUEST + ' '},
    {'canonical_request': CANONICAL_REQUEST.replace('GET', 'PUT')},
])
def test_v4_signature_depends_on_every_input(changes):
    assert _signature(**changes) != _signature()


def test_payload_hash():
    assert hash_payload(b'') == EMPTY_PAYLOAD_HASH
    assert hash_payload(b'Welcome to Amazon S3.') == \
        '44ce7dd67c959e0d3524ffac1771dfbba87d2b6b4b4e99e42034a8b803f8b072'
