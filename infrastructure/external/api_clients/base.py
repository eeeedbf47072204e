"""
REST API客户端基类

Shared HTTP plumbing of the Store API and PagHiper clients:
- optional retry of transient failures (disabled unless max_retries > 0)
- uniform TransportError carrying request/response detail
- request/response debug logging without credential headers
- timeout control, optionally sharing one pooled httpx.AsyncClient
"""
import asyncio
import json
from typing import Dict, Any, Optional, Union
from dataclasses import dataclass
from enum import Enum
import httpx
from pydantic import BaseModel
import logging
from datetime import datetime

from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    before_sleep_log,
)

from domain.notification.exceptions import RequestInfo, ResponseInfo, TransportError

logger = logging.getLogger(__name__)

# Never written to debug logs
CREDENTIAL_HEADERS = {"authorization", "x-access-token", "x-my-id"}


class HTTPMethod(Enum):
    """HTTP方法枚举"""
    GET = "GET"
    POST = "POST"


@dataclass
class APIResponse:
    """API响应封装"""
    status_code: int
    headers: Dict[str, str]
    data: Any
    raw_content: bytes
    elapsed_ms: float
    request_id: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def is_error(self) -> bool:
        return self.status_code >= 400

    def json(self) -> Any:
        if self.data is not None:
            return self.data
        return json.loads(self.raw_content)


class RetryableAPIError(Exception):
    """Transient answer (429/5xx) eligible for another attempt."""

    def __init__(self, response: APIResponse, retry_after: Optional[float] = None):
        self.response = response
        self.retry_after = retry_after
        super().__init__(f"Transient API error with status {response.status_code}")


RETRY_STATUS_CODES = {429, 500, 502, 503, 504}


class BaseAPIClient:
    """
    REST API客户端基类

    Subclasses set ``service_name`` and expose typed operations on top of
    ``get``/``post``. Every failure surfaces as ``TransportError``.
    """

    service_name = "API"

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        max_retries: int = 0,
        retry_delay: float = 0.5,
        headers: Optional[Dict[str, str]] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        verify_ssl: bool = True,
        debug: bool = False
    ):
        """
        Args:
            base_url: API基础URL
            timeout: 请求超时时间（秒）
            max_retries: 最大重试次数 (0 disables retries)
            retry_delay: 重试延迟（秒）
            headers: 默认请求头
            http_client: shared client; not closed by ``close()``
            verify_ssl: 是否验证SSL证书
            debug: 是否开启调试模式
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.verify_ssl = verify_ssl
        self.debug = debug

        self.default_headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": "paghiper-bridge/1.0"
        }
        if headers:
            self.default_headers.update(headers)

        self._client: Optional[httpx.AsyncClient] = http_client
        self._owns_client = http_client is None

    @property
    async def client(self) -> httpx.AsyncClient:
        """获取或创建HTTP客户端"""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                verify=self.verify_ssl,
                follow_redirects=True
            )
            self._owns_client = True
        return self._client

    async def close(self):
        """关闭HTTP客户端 (only when created here)"""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def _build_url(self, endpoint: str) -> str:
        endpoint = endpoint.lstrip('/')
        return f"{self.base_url}/{endpoint}"

    def _log_request(self, method: str, url: str, **kwargs):
        if self.debug:
            logger.debug(
                f"{self.service_name} request: {method} {url}",
                extra={
                    "method": method,
                    "url": url,
                    "params": kwargs.get("params"),
                    "headers": {k: v for k, v in kwargs.get("headers", {}).items()
                                if k.lower() not in CREDENTIAL_HEADERS}
                }
            )

    def _log_response(self, response: APIResponse):
        if self.debug:
            logger.debug(
                f"{self.service_name} response: {response.status_code}",
                extra={
                    "status_code": response.status_code,
                    "elapsed_ms": response.elapsed_ms,
                    "request_id": response.request_id,
                }
            )

    def _error_message(self, response: APIResponse) -> str:
        """Pick the most useful message out of an error body."""
        if isinstance(response.data, dict):
            for key in ("message", "error", "detail"):
                value = response.data.get(key)
                if isinstance(value, str) and value:
                    return value
        return f"{self.service_name} request failed with status {response.status_code}"

    def _transport_error(self, request: RequestInfo, response: APIResponse) -> TransportError:
        return TransportError(
            self._error_message(response),
            request=request,
            response=ResponseInfo(status_code=response.status_code, body=response.data),
        )

    async def _request(
        self,
        method: Union[str, HTTPMethod],
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        json_data: Optional[Union[Dict[str, Any], BaseModel]] = None,
        headers: Optional[Dict[str, str]] = None,
        **kwargs
    ) -> APIResponse:
        """
        发送HTTP请求

        Raises:
            TransportError: non-2xx answer, timeout or network failure
        """
        if isinstance(method, HTTPMethod):
            method = method.value

        url = self._build_url(endpoint)
        request_info = RequestInfo(method=method, url=url)

        request_headers = {**self.default_headers}
        if headers:
            request_headers.update(headers)

        if isinstance(json_data, BaseModel):
            json_data = json_data.model_dump(exclude_unset=True)

        self._log_request(method, url, params=params, headers=request_headers)

        async def _send_once() -> APIResponse:
            start_time = datetime.now()
            client = await self.client
            response = await client.request(
                method=method,
                url=url,
                params=params,
                json=json_data,
                headers=request_headers,
                **kwargs
            )

            elapsed = (datetime.now() - start_time).total_seconds() * 1000

            content_type = response.headers.get("content-type", "")
            response_data = None
            if "json" in content_type:
                try:
                    response_data = response.json()
                except ValueError:
                    response_data = None

            api_response = APIResponse(
                status_code=response.status_code,
                headers=dict(response.headers),
                data=response_data,
                raw_content=response.content,
                elapsed_ms=elapsed,
                request_id=response.headers.get("x-request-id")
            )
            self._log_response(api_response)

            if api_response.is_error and api_response.status_code in RETRY_STATUS_CODES:
                retry_after: Optional[float] = None
                if api_response.status_code == 429:
                    try:
                        retry_after = float(api_response.headers.get("retry-after") or 0) or None
                    except (TypeError, ValueError):
                        retry_after = None
                    if retry_after and self.max_retries > 0:
                        await asyncio.sleep(retry_after)
                raise RetryableAPIError(api_response, retry_after=retry_after)

            if api_response.is_error:
                raise self._transport_error(request_info, api_response)

            return api_response

        retrying = AsyncRetrying(
            reraise=True,
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_exponential(
                multiplier=self.retry_delay,
                min=self.retry_delay,
                max=self.retry_delay * 8
            ),
            retry=retry_if_exception_type((httpx.TimeoutException, httpx.NetworkError, RetryableAPIError)),
            before_sleep=before_sleep_log(logger, logging.WARNING)
        )

        try:
            async for attempt in retrying:
                with attempt:
                    return await _send_once()
        except httpx.TimeoutException as exc:
            raise TransportError(
                f"{self.service_name} request timeout after {self.timeout}s", request=request_info
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"{self.service_name} network error: {exc}", request=request_info) from exc
        except RetryableAPIError as exc:
            raise self._transport_error(request_info, exc.response) from exc
        raise TransportError(f"{self.service_name} request was not attempted", request=request_info)

    async def get(self, endpoint: str, **kwargs) -> APIResponse:
        """GET请求"""
        return await self._request(HTTPMethod.GET, endpoint, **kwargs)

    async def post(self, endpoint: str, **kwargs) -> APIResponse:
        """POST请求"""
        return await self._request(HTTPMethod.POST, endpoint, **kwargs)
