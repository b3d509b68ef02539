"""
PhotoRoom API client

Wraps the PhotoRoom segment endpoint used to remove image backgrounds.
- Builds the multipart/form-data request (output_format, bg_color, image_file)
- Sends it and returns the processed PNG bytes
"""

from typing import Optional

import requests

PHOTOROOM_API_URL = 'https://sdk.photoroom.com/v1/segment'

# Form values sent with every request
OUTPUT_FORMAT = 'png'
BG_COLOR = 'white'


class PhotoRoomClient:
    """Client for the PhotoRoom background removal API"""

    def __init__(
        self,
        api_key: str,
        endpoint: str = PHOTOROOM_API_URL,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ):
        self.api_key = api_key
        self.endpoint = endpoint
        self.session = session or requests.Session()
        self.timeout = timeout

    def build_segment_request(
        self, image_data: bytes, filename: str, extension: str
    ) -> requests.PreparedRequest:
        """
        Build the multipart request for the segment endpoint

        Args:
            image_data: Raw source image bytes
            filename: Original file name, sent as the image_file filename
            extension: Source extension including the dot (e.g. '.jpg')

        Returns:
            PreparedRequest with body, boundary and Content-Length set
        """
        content_type = f"image/{extension.lower().lstrip('.')}"

        # requests encodes data fields before files, in list order
        request = requests.Request(
            'POST',
            self.endpoint,
            headers={'X-Api-Key': self.api_key},
            data=[
                ('output_format', OUTPUT_FORMAT),
                ('bg_color', BG_COLOR),
            ],
            files=[
                ('image_file', (filename, image_data, content_type)),
            ],
        )
        return request.prepare()

    def remove_background(self, image_data: bytes, filename: str, extension: str) -> bytes:
        """
        Send an image to PhotoRoom and return the processed PNG

        Raises:
            requests.HTTPError: PhotoRoom answered with any non-2xx status, 3xx included
            requests.RequestException: network failure
            ValueError: response had no body
        """
        prepared = self.build_segment_request(image_data, filename, extension)

        try:
            response = self.session.send(prepared, timeout=self.timeout)
        except requests.RequestException as e:
            print(f"PhotoRoom request failed: {e}")
            raise

        if not 200 <= response.status_code < 300:
            print(
                f"PhotoRoom API error - status: {response.status_code}, "
                f"statusText: {response.reason}, data: {response.text[:1000]}"
            )
            raise requests.HTTPError(f"{response.status_code} {response.reason}", response=response)

        if not response.content:
            raise ValueError(f"PhotoRoom returned an empty body (status {response.status_code})")

        return response.content
