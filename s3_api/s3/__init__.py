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
S3 REST protocol layer

This package contains:
- auth.py: AWS Signature V2 and V4 signing
- request.py: request construction, host resolution and dispatch
- responses.py: response parsing, error classification and XML bodies
- transport.py: requests based HTTP transport
- exceptions.py: exception taxonomy
- utils.py: helper functions
- handlers/: operation handlers (bucket, object, multipart)
"""
