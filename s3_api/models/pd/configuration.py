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

""" Amazon S3 connection configuration """

from typing import Optional

from pydantic import BaseModel, SecretStr, ConfigDict

from ..enums.all import SignatureMethod
from ...s3.exceptions import (
    InvalidAccessKey,
    InvalidSecretKey,
    InvalidRegion,
    InvalidEndpoint,
    InvalidSignatureMethod,
)


DEFAULT_ENDPOINT = 's3.amazonaws.com'
DEFAULT_REGION = 'us-east-1'
CHINA_ENDPOINT = 'amazonaws.com.cn'

REDACTED_FIELDS = ('access_key', 'secret_key', 'token', 'region', 'endpoint')


class Configuration(BaseModel):
    """
    Holds the Amazon S3 credentials and connection preferences.

    Every mutator validates its input and raises a ConfigurationError subclass
    immediately. Some mutators change other fields as a side effect, so the
    order of the calls matters:

    - switching to v2 signatures clears the region and, on Amazon endpoints,
      turns legacy path style access off
    - a custom (non-Amazon) endpoint forces v2 signatures
    - a ``cn-`` region on the default endpoint moves to the China partition
    """
    model_config = ConfigDict(
        json_schema_extra={
            "metadata": {
                "label": "S3 Connection",
                "section": "storage",
                "type": "s3_api",
            }
        }
    )

    access_key: str = ''
    secret_key: SecretStr = SecretStr('')
    token: Optional[SecretStr] = None
    signature_method: str = SignatureMethod.V2.value
    region: str = DEFAULT_REGION
    endpoint: str = DEFAULT_ENDPOINT
    use_ssl: bool = True
    use_dualstack_url: bool = False
    use_legacy_path_style: bool = False
    print_credentials: bool = False

    def __init__(self, access_key: str, secret_key: str, signature_method: str = 'v2',
                 region: Optional[str] = None, endpoint: Optional[str] = None, **data):
        super().__init__(**data)
        self.set_access(access_key)
        self.set_secret(secret_key)
        self.set_signature_method(signature_method)
        if region is not None:
            self.set_region(region)
        if endpoint is not None:
            self.set_endpoint(endpoint)

    @classmethod
    def from_dict(cls, data: dict) -> 'Configuration':
        """ Build a configuration from a settings mapping, through the validating mutators """
        configuration = cls(
            data.get('access_key', ''),
            data.get('secret_key', ''),
            data.get('signature_method', 'v2'),
            data.get('region'),
            data.get('endpoint'),
            print_credentials=bool(data.get('print_credentials', False)),
        )
        if data.get('token'):
            configuration.set_token(data['token'])
        if 'use_ssl' in data:
            configuration.set_ssl(bool(data['use_ssl']))
        if 'use_dualstack_url' in data:
            configuration.set_use_dualstack_url(bool(data['use_dualstack_url']))
        if 'use_legacy_path_style' in data:
            configuration.set_use_legacy_path_style(bool(data['use_legacy_path_style']))
        return configuration

    def clone(self) -> 'Configuration':
        return self.model_copy()

    def __repr_args__(self):
        for name, value in super().__repr_args__():
            if name in REDACTED_FIELDS and not self.print_credentials:
                yield name, '*******'
            elif isinstance(value, SecretStr) and self.print_credentials:
                yield name, value.get_secret_value()
            else:
                yield name, value

    def get_secret(self) -> str:
        return self.secret_key.get_secret_value()

    def get_token(self) -> str:
        if self.token is None:
            return ''
        return self.token.get_secret_value()

    @property
    def is_v4(self) -> bool:
        return self.signature_method == SignatureMethod.V4.value

    def set_access(self, access_key: str) -> None:
        if not access_key:
            raise InvalidAccessKey()
        self.access_key = access_key

    def set_secret(self, secret_key: str) -> None:
        if not secret_key:
            raise InvalidSecretKey()
        self.secret_key = SecretStr(secret_key)

    def set_token(self, token: Optional[str]) -> None:
        """ Security token, only used with temporary credentials """
        self.token = SecretStr(token) if token else None

    def set_signature_method(self, signature_method: str) -> None:
        signature_method = str(signature_method or '').strip().lower()
        if signature_method not in (SignatureMethod.V2.value, SignatureMethod.V4.value):
            raise InvalidSignatureMethod()
        if signature_method == SignatureMethod.V4.value and not self.region:
            raise InvalidRegion()

        self.signature_method = signature_method

        if signature_method == SignatureMethod.V2.value:
            self.set_region('')
            # Amazon S3 proper refuses v2 signatures with path style access
            if 'amazonaws.com' in self.endpoint:
                self.use_legacy_path_style = False

    def set_region(self, region: str) -> None:
        region = region or ''
        if not region and self.is_v4:
            raise InvalidRegion()

        # A custom endpoint is kept even for cn- regions
        if self.endpoint == DEFAULT_ENDPOINT and region.startswith('cn-'):
            self.set_endpoint(CHINA_ENDPOINT)

        self.region = region

    def set_endpoint(self, endpoint: str) -> None:
        if not endpoint or '://' in endpoint:
            raise InvalidEndpoint()

        self.endpoint = endpoint

        # Signature v4 is only implemented against Amazon endpoints
        if 'amazonaws.com' not in endpoint:
            self.set_signature_method(SignatureMethod.V2.value)

    def set_ssl(self, use_ssl: bool) -> None:
        self.use_ssl = bool(use_ssl)

    def set_use_dualstack_url(self, use_dualstack_url: bool) -> None:
        self.use_dualstack_url = bool(use_dualstack_url)

    def set_use_legacy_path_style(self, use_legacy_path_style: bool) -> None:
        self.use_legacy_path_style = bool(use_legacy_path_style)

        if 'amazonaws.com' in self.endpoint and not self.is_v4:
            self.use_legacy_path_style = False
