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

""" S3 Bucket Operations Handler """

import logging
from typing import Dict, Optional, Tuple

import requests

from ...models.pd.configuration import DEFAULT_REGION
from ..exceptions import CannotGetBucket, CannotListBuckets, S3Exception
from ..request import Request
from ..responses import find_text
from ..utils import iso_date_to_timestamp, strip_etag
from .base import Handler

log = logging.getLogger(__name__)


# Legacy alias of eu-west-1 returned by the location sub-resource
LOCATION_ALIASES = {
    'EU': 'eu-west-1',
    'eu': 'eu-west-1',
}


class BucketHandler(Handler):
    """Handler for S3 bucket level operations"""

    def _us_east_1(self):
        """ Some operations are only ever served from us-east-1 """
        configuration = self.configuration.clone()
        configuration.set_region(DEFAULT_REGION)
        return configuration

    def get_bucket_location(self, bucket: str) -> str:
        """
        Get the region a bucket lives in.

        S3 Operation: GET /{bucket}?location
        """
        request = self.new_request('GET', bucket, '', configuration=self._us_east_1())
        request.set_parameter('location')

        response = request.get_response()
        self.check_response(request, response, [200], CannotGetBucket, 'get_bucket_location')

        parsed_body = response.get_parsed_body()
        if parsed_body is not None:
            location = (parsed_body.text or '').strip()
        else:
            location = response.get_body().decode('utf-8', errors='replace').strip()

        # us-east-1 buckets report an empty location
        if not location:
            return DEFAULT_REGION
        return LOCATION_ALIASES.get(location, location)

    def _list_page(self, bucket: str, prefix: Optional[str], marker: Optional[str],
                   max_keys: Optional[int], delimiter: Optional[str]) -> Tuple[Request, object]:
        request = self.new_request('GET', bucket, '')
        if prefix:
            request.set_parameter('prefix', prefix)
        if marker:
            request.set_parameter('marker', marker)
        if max_keys:
            request.set_parameter('max-keys', max_keys)
        if delimiter:
            request.set_parameter('delimiter', delimiter)

        response = request.get_response()
        self.check_response(request, response, [200], CannotGetBucket, 'get_bucket')
        return request, response

    @staticmethod
    def _collect(parsed_body, results: Dict, return_common_prefixes: bool) -> Optional[str]:
        """ Merge one listing page into results; returns the marker of the next page """
        if parsed_body is None:
            return None

        next_marker = None
        for contents in parsed_body.findall('Contents'):
            key = find_text(contents, 'Key')
            results[key] = {
                'name': key,
                'time': iso_date_to_timestamp(find_text(contents, 'LastModified')),
                'size': int(find_text(contents, 'Size') or 0),
                'hash': strip_etag(find_text(contents, 'ETag')),
            }
            next_marker = key

        if return_common_prefixes:
            for common_prefix in parsed_body.findall('CommonPrefixes'):
                prefix = find_text(common_prefix, 'Prefix')
                results[prefix] = {'prefix': prefix}

        if find_text(parsed_body, 'NextMarker'):
            next_marker = find_text(parsed_body, 'NextMarker')

        return next_marker

    @staticmethod
    def _is_truncated(parsed_body) -> bool:
        return parsed_body is not None and find_text(parsed_body, 'IsTruncated') == 'true'

    def get_bucket(self, bucket: str, prefix: Optional[str] = None, marker: Optional[str] = None,
                   max_keys: Optional[int] = None, delimiter: Optional[str] = '/',
                   return_common_prefixes: bool = False) -> Dict[str, Dict]:
        """
        List the contents of a bucket, following truncated listings.

        S3 Operation: GET /{bucket}?prefix=&marker=&max-keys=&delimiter=

        Args:
            bucket: Bucket name
            prefix: Only keys starting with this prefix
            marker: Start listing after this key
            max_keys: Upper bound of returned entries
            delimiter: Groups keys into common prefixes
            return_common_prefixes: Also return {'prefix': ...} "directory" entries

        Returns:
            Ordered mapping of key to {'name', 'time', 'size', 'hash'}
        """
        _, response = self._list_page(bucket, prefix, marker, max_keys, delimiter)

        results: Dict[str, Dict] = {}
        parsed_body = response.get_parsed_body()
        next_marker = self._collect(parsed_body, results, return_common_prefixes)

        while self._is_truncated(parsed_body) and next_marker is not None and \
                (not max_keys or len(results) < max_keys):
            try:
                _, response = self._list_page(bucket, prefix, next_marker, None, delimiter)
                parsed_body = response.get_parsed_body()
            except (S3Exception, requests.RequestException) as exc:
                log.warning("Listing %s stopped after %s entries: %s", bucket, len(results), exc)
                break

            previous_marker = next_marker
            next_marker = self._collect(parsed_body, results, return_common_prefixes)
            if next_marker == previous_marker:
                break

        if max_keys:
            results = dict(list(results.items())[:max_keys])

        return results

    def list_buckets(self) -> Dict:
        """
        List all buckets of the account.

        S3 Operation: GET /

        Returns:
            {'owner': {'id', 'name'} or None, 'buckets': [{'name', 'time'}, ...]}
        """
        request = self.new_request('GET', '', '', configuration=self._us_east_1())
        response = request.get_response()
        self.check_response(request, response, [200], CannotListBuckets, 'list_buckets')

        result = {
            'owner': None,
            'buckets': [],
        }

        parsed_body = response.get_parsed_body()
        if parsed_body is None:
            return result

        owner = parsed_body.find('Owner')
        if owner is not None and owner.find('ID') is not None and owner.find('DisplayName') is not None:
            result['owner'] = {
                'id': find_text(owner, 'ID'),
                'name': find_text(owner, 'DisplayName'),
            }

        for bucket in parsed_body.findall('Buckets/Bucket'):
            result['buckets'].append({
                'name': find_text(bucket, 'Name'),
                'time': iso_date_to_timestamp(find_text(bucket, 'CreationDate')),
            })

        return result
