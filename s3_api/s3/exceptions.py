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

""" S3 API Exceptions """

from typing import Optional, Union


class S3Exception(Exception):
    """Base class for every error raised by this package"""
    default_message = 'S3 API error'

    def __init__(self, message: str = '', code: Union[int, str] = 0):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.code = code


#
# Configuration errors: raised from the Configuration mutators, never deferred
#

class ConfigurationError(S3Exception):
    default_message = 'Invalid configuration'


class InvalidAccessKey(ConfigurationError):
    default_message = 'The Amazon S3 Access Key provided is invalid'


class InvalidSecretKey(ConfigurationError):
    default_message = 'The Amazon S3 Secret Key provided is invalid'


class InvalidRegion(ConfigurationError):
    default_message = 'The Amazon S3 region provided is invalid.'


class InvalidEndpoint(ConfigurationError):
    default_message = 'The custom S3 endpoint provided is invalid. Do NOT include the protocol (http:// or https://).'


class InvalidSignatureMethod(ConfigurationError):
    default_message = 'The Amazon S3 signature method provided is invalid. Only v2 and v4 signatures are supported.'


#
# Collaborator errors
#

class CannotOpenFileForRead(S3Exception):
    default_message = 'Cannot open the file for reading'

    def __init__(self, path: str = '', message: str = ''):
        super().__init__(message or f'Cannot open {path} for reading')
        self.path = path


class CannotOpenFileForWrite(S3Exception):
    default_message = 'Cannot open the file for writing'

    def __init__(self, path: str = '', message: str = ''):
        super().__init__(message or f'Cannot open {path} for writing')
        self.path = path


class InvalidBody(S3Exception):
    default_message = 'Invalid response body type'


class InvalidFilePointer(S3Exception):
    default_message = 'The specified file pointer is not a valid stream resource'


#
# Operation errors
#

class ResponseException(S3Exception):
    """
    An operation failed, either with an unexpected HTTP status or with a
    structured S3 error document.

    The originating request and response are kept for post-mortem inspection.
    """
    default_message = 'Unexpected response from S3'

    def __init__(self, code: Union[int, str] = 0, message: str = '', error=None,
                 request=None, response=None):
        super().__init__(message, code)
        self.error = error
        self.request = request
        self.response = response

    @classmethod
    def from_error(cls, error, request=None, response=None) -> 'ResponseException':
        return cls(
            code=error.code or '',
            message=error.message or '',
            error=error,
            request=request,
            response=response,
        )

    @property
    def status_code(self) -> Optional[int]:
        if self.response is None:
            return None
        return self.response.status_code

    def __str__(self) -> str:
        if self.error is not None:
            return f'[{self.code}] {self.message}'
        return self.message


class CannotPutFile(ResponseException):
    default_message = 'Cannot put or upload file'


class CannotGetFile(ResponseException):
    default_message = 'Cannot get or download file'


class CannotGetBucket(ResponseException):
    default_message = 'Cannot get bucket'


class CannotListBuckets(ResponseException):
    default_message = 'Cannot list buckets'


class CannotDeleteFile(ResponseException):
    default_message = 'Cannot delete file'
