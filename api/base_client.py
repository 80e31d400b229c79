"""
HTTP Client
Transport used by the engine to dispatch one request at a time
"""

import json
from contextlib import ExitStack
from typing import Optional, Dict, Any

import requests

from base.logger import Logger
from api.config import APIConfig
from test_engine.errors import HttpError, TestDefinitionError


JSON_CONTENT_TYPE = 'application/json'
FORM_CONTENT_TYPE = 'application/x-www-form-urlencoded'
MULTIPART_CONTENT_TYPE = 'multipart/form-data'


def find_header(headers: Dict[str, str], name: str) -> Optional[str]:
    """Case-insensitive header lookup"""
    for key, value in headers.items():
        if key.lower() == name.lower():
            return value
    return None


class HttpResponse:
    """Wrapper class for HTTP responses"""

    def __init__(self, response: requests.Response):
        self.response = response
        self.status_code = response.status_code
        self.headers = dict(response.headers)
        self.text = response.text
        self.elapsed = response.elapsed.total_seconds() if response.elapsed else 0.0

        # Parse JSON only when the server says it is JSON
        self.json_data = None
        content_type = response.headers.get('Content-Type', '') or ''
        if 'json' in content_type.lower() and self.text:
            try:
                self.json_data = response.json()
            except ValueError:
                self.json_data = None

    @property
    def body(self) -> Any:
        """Parsed JSON when available, raw text otherwise"""
        return self.json_data if self.json_data is not None else self.text

    def is_success(self) -> bool:
        """Check if the status code is 2xx"""
        return 200 <= self.status_code < 300

    def __repr__(self):
        return f"HttpResponse(status={self.status_code}, elapsed={self.elapsed:.3f}s)"


class HttpClient:
    """
    HTTP transport over a requests Session

    The body is encoded according to the request's Content-Type header:
    JSON (default) is sent as is, form-urlencoded and multipart bodies are
    given as JSON objects and converted to form fields and files.
    """

    def __init__(self, timeout: Optional[float] = None, verify_ssl: Optional[bool] = None):
        """
        Initialize the HTTP client

        Args:
            timeout: Request timeout in seconds. Defaults to API_TIMEOUT
            verify_ssl: Verify TLS certificates. Defaults to API_VERIFY_SSL
        """
        self.timeout = APIConfig.DEFAULT_TIMEOUT if timeout is None else timeout
        self.verify_ssl = APIConfig.VERIFY_SSL if verify_ssl is None else verify_ssl
        self.session = requests.Session()
        self.logger = Logger()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        self.session.close()

    def _log_request(self, method: str, url: str, headers: Dict[str, str], body: Optional[str]):
        """Log request details"""
        self.logger.info(f"API Request: {method} {url}")
        if headers:
            self.logger.debug(f"Request Headers: {headers}")
        if body:
            self.logger.debug(f"Request Body: {body}")

    def _log_response(self, response: HttpResponse):
        """Log response details"""
        self.logger.info(f"API Response: {response.status_code} ({response.elapsed:.3f}s)")
        if response.text:
            self.logger.debug(f"Response Body: {response.text}")

    @staticmethod
    def _load_form_json(body: str, content_type: str) -> Dict[str, Any]:
        try:
            data = json.loads(body)
        except ValueError as e:
            raise TestDefinitionError(f"Body for {content_type} must be a JSON object: {e}", field='payload')
        if not isinstance(data, dict):
            raise TestDefinitionError(f"Body for {content_type} must be a JSON object", field='payload')
        return data

    @staticmethod
    def _is_multipart(content_type: str, body: str) -> bool:
        if MULTIPART_CONTENT_TYPE in content_type:
            return True
        return not content_type and '"form-data"' in body

    def send(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        body: Optional[str] = None
    ) -> HttpResponse:
        """
        Send one request

        Args:
            method: HTTP method
            url: Fully resolved URL
            headers: Resolved headers
            body: Resolved body text (optional)

        Returns:
            HttpResponse object

        Raises:
            HttpError: On connection errors, timeouts and unencodable requests
            TestDefinitionError: When a form body cannot be encoded
        """
        headers = dict(headers or {})
        self._log_request(method, url, headers, body)

        content_type = (find_header(headers, 'Content-Type') or '').lower()
        kwargs: Dict[str, Any] = {}

        with ExitStack() as stack:
            if body and self._is_multipart(content_type, body):
                form = self._load_form_json(body, MULTIPART_CONTENT_TYPE).get('form-data', {})
                kwargs['data'] = {k: str(v) for k, v in (form.get('fields') or {}).items()}
                files = []
                for entry in form.get('files') or []:
                    try:
                        handle = stack.enter_context(open(entry['filepath'], 'rb'))
                    except KeyError as e:
                        raise TestDefinitionError(f"Multipart file entry is missing {e}", field='payload')
                    except OSError as e:
                        raise TestDefinitionError(f"Cannot open upload file: {e}", field='payload')
                    files.append((entry.get('fieldname', 'file'), handle))
                kwargs['files'] = files
                # requests writes the multipart boundary itself
                headers = {k: v for k, v in headers.items() if k.lower() != 'content-type'}
            elif body and FORM_CONTENT_TYPE in content_type:
                form = self._load_form_json(body, FORM_CONTENT_TYPE)
                kwargs['data'] = {k: str(v) for k, v in form.items()}
            elif body:
                if not content_type:
                    headers['Content-Type'] = JSON_CONTENT_TYPE
                kwargs['data'] = body.encode('utf-8')

            try:
                response = self.session.request(
                    method,
                    url,
                    headers=headers,
                    timeout=self.timeout,
                    verify=self.verify_ssl,
                    **kwargs
                )
            except requests.exceptions.RequestException as e:
                self.logger.error(f"{method} request failed: {str(e)}")
                raise HttpError(f"{method} {url} failed: {e}") from e
            except (UnicodeError, ValueError) as e:
                # headers http.client cannot encode, malformed URLs
                self.logger.error(f"{method} request could not be sent: {str(e)}")
                raise HttpError(f"{method} {url} could not be sent: {type(e).__name__}: {e}") from e

        http_response = HttpResponse(response)
        self._log_response(http_response)
        return http_response
