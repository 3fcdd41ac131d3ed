"""
HTTPClient module executing API requests with authentication and retry logic
"""

import time
import logging
import importlib.metadata
import requests
from typing import Dict, Any, List, Optional, Tuple, TYPE_CHECKING
from dataclasses import dataclass, field

from .api_errors import APIError, ErrorKind
from .result import Result
from .retry_policy import RetryPolicy, parse_retry_after

if TYPE_CHECKING:
    from .config_loader import ClientConfig

logger = logging.getLogger(__name__)

DISTRIBUTION_NAME = "paginated-api-client"


def user_agent() -> str:
    """Build the User-Agent header value from the installed distribution version"""
    try:
        version = importlib.metadata.version(DISTRIBUTION_NAME)
    except importlib.metadata.PackageNotFoundError:
        version = "0.0.0"
    return f"{DISTRIBUTION_NAME}/{version}"


@dataclass
class APIRequest:
    """Represents a single logical API request"""
    path: str
    method: str = "GET"
    params: Dict[str, Any] = field(default_factory=dict)
    json_body: Optional[Dict[str, Any]] = None
    headers: Dict[str, str] = field(default_factory=dict)


@dataclass
class RetryState:
    """Retry bookkeeping for one execute call, returned alongside its result"""
    attempts: int = 0
    retries: int = 0
    delays_ms: List[int] = field(default_factory=list)
    last_error: Optional[APIError] = None


class HTTPClient:
    """HTTP client with authentication, error classification and retries"""

    def __init__(self, base_url: str = "", timeout_ms: int = 60000,
                 connect_timeout_ms: int = 10000, max_retries: int = 2,
                 retry_policy: Optional[RetryPolicy] = None):
        self.base_url = base_url.rstrip('/')
        self.timeout_ms = timeout_ms
        self.connect_timeout_ms = connect_timeout_ms
        self.retry_policy = retry_policy or RetryPolicy(max_retries=max_retries)
        self.headers: Dict[str, str] = {
            'Content-Type': 'application/json',
            'Accept': 'application/json',
            'User-Agent': user_agent()
        }
        self.session: Optional[requests.Session] = None

    @classmethod
    def from_config(cls, config: 'ClientConfig') -> 'HTTPClient':
        """
        Build an authenticated client from resolved configuration

        Args:
            config: ClientConfig with base URL, credentials, timeouts and retry settings

        Returns:
            HTTPClient ready to issue requests
        """
        client = cls(
            base_url=config.base_url,
            timeout_ms=config.timeout_ms,
            connect_timeout_ms=config.connect_timeout_ms,
            retry_policy=RetryPolicy(
                max_retries=config.max_retries,
                base_delay_ms=config.base_delay_ms
            )
        )
        client.authenticate({'type': 'bearer_token', 'token': config.api_key})
        return client

    def authenticate(self, credentials: Dict[str, Any]) -> None:
        """
        Configure authentication headers based on credential type

        Args:
            credentials: Dictionary containing authentication information

        Raises:
            ValueError: If authentication type is not supported
        """
        auth_type = credentials.get('type')

        if auth_type == 'bearer_token':
            self.headers['Authorization'] = f"Bearer {credentials['token']}"

        elif auth_type == 'api_key':
            self.headers['X-API-Key'] = credentials['api_key']

        else:
            raise ValueError(f"Unsupported authentication type: {auth_type}")

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Result:
        return self.execute(APIRequest(path=path, method='GET', params=params or {}))

    def post(self, path: str, body: Optional[Dict[str, Any]] = None,
             params: Optional[Dict[str, Any]] = None) -> Result:
        return self.execute(APIRequest(path=path, method='POST', params=params or {},
                                       json_body=body or {}))

    def patch(self, path: str, body: Optional[Dict[str, Any]] = None) -> Result:
        return self.execute(APIRequest(path=path, method='PATCH', json_body=body or {}))

    def delete(self, path: str, params: Optional[Dict[str, Any]] = None) -> Result:
        return self.execute(APIRequest(path=path, method='DELETE', params=params or {}))

    def execute(self, request: APIRequest) -> Result:
        """
        Execute a request, retrying transient failures

        Args:
            request: APIRequest describing the call

        Returns:
            Result holding the decoded response body or a terminal APIError
        """
        result, _ = self.execute_with_state(request)
        return result

    def execute_with_state(self, request: APIRequest) -> Tuple[Result, RetryState]:
        """
        Execute a request and report the retry bookkeeping of the call

        Args:
            request: APIRequest describing the call

        Returns:
            Tuple of the Result and the RetryState accumulated while producing it
        """
        state = RetryState()

        while True:
            state.attempts += 1
            try:
                response = self._send(request)
            except requests.exceptions.RequestException as e:
                error = self._classify_transport_error(e)
            else:
                if 200 <= response.status_code < 300:
                    state.last_error = None
                    return Result.success(self._parse_body(response)), state
                error = self._classify_response(response)

            state.last_error = error
            decision = self.retry_policy.decide(error, state.retries)

            if not decision.should_retry:
                if state.retries:
                    logger.error(
                        f"{request.method} {request.path} failed after "
                        f"{state.retries} retries: {error}"
                    )
                return Result.failure(error), state

            logger.warning(
                f"Retrying {request.method} {request.path} in {decision.delay_ms}ms "
                f"(retry {state.retries + 1}/{self.retry_policy.max_retries}): {error}"
            )
            state.retries += 1
            state.delays_ms.append(decision.delay_ms)
            time.sleep(decision.delay_ms / 1000)

    def _send(self, request: APIRequest) -> requests.Response:
        if self.session is None:
            self.session = requests.Session()

        combined_headers = {**self.headers, **request.headers}

        return self.session.request(
            request.method.upper(),
            self._build_url(request.path),
            params=request.params or None,
            json=request.json_body,
            headers=combined_headers,
            timeout=(self.connect_timeout_ms / 1000, self.timeout_ms / 1000)
        )

    def _build_url(self, path: str) -> str:
        if path.startswith('http://') or path.startswith('https://'):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    @staticmethod
    def _parse_body(response: requests.Response) -> Any:
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            # Handle non-JSON responses
            return response.text

    def _classify_response(self, response: requests.Response) -> APIError:
        body = self._parse_body(response)
        return APIError.from_status(
            response.status_code,
            message=self._extract_message(body),
            code=self._extract_code(body),
            retry_after_ms=parse_retry_after(response.headers)
        )

    @staticmethod
    def _classify_transport_error(exc: requests.exceptions.RequestException) -> APIError:
        if isinstance(exc, (requests.exceptions.MissingSchema,
                            requests.exceptions.InvalidSchema,
                            requests.exceptions.InvalidURL)):
            return APIError(kind=ErrorKind.BAD_REQUEST, message=f"Invalid request URL: {exc}")
        if isinstance(exc, requests.exceptions.Timeout):
            return APIError(kind=ErrorKind.TIMEOUT, message="Request timed out")
        return APIError(kind=ErrorKind.CONNECTION, message=f"Connection error: {exc}")

    @staticmethod
    def _extract_message(body: Any) -> str:
        # Error bodies look like {"error": {"message": ..., "code": ...}}
        if isinstance(body, dict):
            error = body.get('error')
            if isinstance(error, dict) and error.get('message'):
                return str(error['message'])
            if body.get('message'):
                return str(body['message'])
            if isinstance(error, str) and error:
                return error
            return "Request failed"
        if isinstance(body, str) and body:
            return body
        return "Request failed"

    @staticmethod
    def _extract_code(body: Any) -> Optional[str]:
        if not isinstance(body, dict):
            return None
        error = body.get('error')
        if isinstance(error, dict) and error.get('code') is not None:
            return str(error['code'])
        if body.get('code') is not None:
            return str(body['code'])
        return None

    def close_connection(self) -> None:
        """
        Close HTTP session and release resources
        """
        if self.session:
            self.session.close()
            self.session = None
