"""
HTTP transport for the Webex REST API.

This module wraps ``http.client`` with bearer-token authentication and JSON
encoding, and turns every unsuccessful call into a ``TransportError``.
"""

import json
import ssl
import logging
from typing import Dict, Any, Optional, Union
from urllib.parse import urlparse, urlencode
from http.client import HTTPSConnection, HTTPConnection

logger = logging.getLogger(__name__)

DEFAULT_API_URL = 'https://webexapis.com/v1'


class TransportError(Exception):
    """
    Raised when a remote request does not succeed.

    ``status`` is the HTTP status code, or None when no response arrived
    (connection refused, timeout). ``body`` is the response text if any.
    """

    def __init__(self, message: str, status: Optional[int] = None, body: Optional[str] = None):
        self.status = status
        self.body = body
        super().__init__(message)


class WebexClient:
    """
    Minimal Webex REST client.

    A new connection is opened for every request, so one client instance can
    be used from several worker threads at once. The token is never modified
    after construction.
    """

    def __init__(self, token: str, base_url: str = DEFAULT_API_URL, timeout: float = 30):
        """
        Initialize Webex client.

        Args:
            token: Webex access token (sent as a Bearer token)
            base_url: API root, e.g. https://webexapis.com/v1
            timeout: Socket timeout in seconds for every request
        """
        self.base_url = base_url
        self.timeout = timeout

        self.parsed_url = urlparse(base_url)
        self.host = self.parsed_url.netloc
        self.base_path = self.parsed_url.path.rstrip('/')

        self.auth_headers = {'Authorization': f"Bearer {token}"}
        self.ssl_context = ssl.create_default_context() if self.parsed_url.scheme == 'https' else None

    def _new_connection(self) -> Union[HTTPSConnection, HTTPConnection]:
        if self.parsed_url.scheme == 'https':
            return HTTPSConnection(self.host, context=self.ssl_context, timeout=self.timeout)
        return HTTPConnection(self.host, timeout=self.timeout)

    def request(self, method: str, path: str, body: Optional[Dict] = None,
                query: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Make HTTP request to the Webex API.

        Args:
            method: HTTP method (GET, POST)
            path: Endpoint path relative to base_url, e.g. /memberships
            body: JSON request body
            query: Query string parameters

        Returns:
            Parsed JSON response (empty dict for an empty body)

        Raises:
            TransportError: On a non-2xx status or when the request cannot complete
        """
        full_path = f"{self.base_path}/{path.lstrip('/')}"
        if query:
            full_path = f"{full_path}?{urlencode(query)}"

        request_headers = dict(self.auth_headers)
        request_headers['Accept'] = 'application/json'

        request_body = None
        if body is not None:
            request_body = json.dumps(body)
            request_headers['Content-Type'] = 'application/json'

        conn = self._new_connection()
        try:
            logger.debug(f"Making {method} request to {self.host}{full_path}")
            conn.request(method, full_path, request_body, request_headers)

            response = conn.getresponse()
            raw_data = response.read()

            logger.debug(f"Response status: {response.status} {response.reason}")

            if not 200 <= response.status < 300:
                error_body = raw_data.decode('utf-8', errors='replace')
                raise TransportError(
                    f"HTTP {response.status} - {error_body or response.reason}",
                    status=response.status,
                    body=error_body,
                )

            response_data = raw_data.decode('utf-8')
            return json.loads(response_data) if response_data else {}

        except TransportError:
            raise
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise TransportError(f"Invalid JSON response from {self.host}: {e}")
        except (ConnectionError, OSError) as e:
            raise TransportError(f"Connection error to {self.host}: {e}")
        finally:
            conn.close()

    def list_memberships(self, room_id: str, max_items: int) -> Dict[str, Any]:
        return self.request('GET', '/memberships', query={'roomId': room_id, 'max': max_items})

    def create_membership(self, room_id: str, person_id: str) -> Dict[str, Any]:
        return self.request('POST', '/memberships', body={'roomId': room_id, 'personId': person_id})

    def create_message(self, to_person_email: str, markdown: str) -> Dict[str, Any]:
        return self.request('POST', '/messages', body={'toPersonEmail': to_person_email, 'markdown': markdown})

    def get_me(self) -> Dict[str, Any]:
        """Return the person record the token belongs to."""
        return self.request('GET', '/people/me')
