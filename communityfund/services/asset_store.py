import logging

import requests

logger = logging.getLogger(__name__)


class AssetStoreError(Exception):
    pass


class AssetStoreClient:
    """Client for the external binary asset store

    The store accepts a multipart upload and answers with JSON carrying the
    durable URL of the stored blob (``secure_url`` or ``url``).
    """

    def __init__(self, base_url, api_key=None, timeout=30):
        self.base_url = base_url.rstrip('/') if base_url else None
        self.api_key = api_key
        self.timeout = timeout

    def is_configured(self):
        return bool(self.base_url)

    def upload(self, filename, stream, content_type=None):
        if not self.is_configured():
            raise AssetStoreError('Asset store is not configured')

        headers = {}
        if self.api_key:
            headers['Authorization'] = f'Bearer {self.api_key}'

        try:
            response = requests.post(
                f'{self.base_url}/upload',
                files={'file': (filename, stream, content_type or 'application/octet-stream')},
                headers=headers,
                timeout=self.timeout
            )
            response.raise_for_status()
            result = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Asset upload failed for {filename}: {str(e)}")
            raise AssetStoreError('Upload failed')

        url = result.get('secure_url') or result.get('url')
        if not url:
            logger.error(f"Asset store response for {filename} had no URL")
            raise AssetStoreError('Upload failed')
        return url
