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

"""
Client for the Amazon S3 REST API and S3 compatible services

Usage:
    configuration = Configuration('AKIA...', 'secret', 'v4', 'eu-west-1')
    connector = Connector(configuration)
    connector.put_object(Input.create_from_data(b'hello'), 'bucket', 'path/hello.txt')
"""

from .connector import Connector
from .models.enums.all import Acl, InputType, SignatureMethod
from .models.input import Input
from .models.pd.configuration import Configuration
from .s3.exceptions import (
    S3Exception,
    ConfigurationError,
    InvalidAccessKey,
    InvalidSecretKey,
    InvalidRegion,
    InvalidEndpoint,
    InvalidSignatureMethod,
    CannotOpenFileForRead,
    CannotOpenFileForWrite,
    InvalidBody,
    InvalidFilePointer,
    ResponseException,
    CannotPutFile,
    CannotGetFile,
    CannotGetBucket,
    CannotListBuckets,
    CannotDeleteFile,
)
from .s3.transport import HttpTransport

__all__ = [
    'Connector', 'Configuration', 'Input', 'HttpTransport',
    'Acl', 'InputType', 'SignatureMethod',
    'S3Exception', 'ConfigurationError', 'InvalidAccessKey', 'InvalidSecretKey', 'InvalidRegion',
    'InvalidEndpoint', 'InvalidSignatureMethod', 'CannotOpenFileForRead', 'CannotOpenFileForWrite',
    'InvalidBody', 'InvalidFilePointer', 'ResponseException', 'CannotPutFile', 'CannotGetFile',
    'CannotGetBucket', 'CannotListBuckets', 'CannotDeleteFile',
]
