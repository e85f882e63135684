"""
Cloud Service Discovery.

Asks the Spark cloud directory service where a device's voodoospark
firmware is listening. The request is a plain `requests` GET run on a
worker thread so the asyncio loop keeps running while the cloud answers.

Expected answers:
- {"cmd": "VarReturn", "result": "<host>:<port>"}   -> Endpoint
- {"error": ..., "code": ..., "error_description": ...} -> CloudResponseError
"""
import asyncio
import logging
from typing import Any, Dict, Optional

import requests

from spark_io.errors import CloudResponseError, CloudUnreachableError, FirmwareHandshakeError
from spark_io.models import Endpoint

logger = logging.getLogger(__name__)

DEFAULT_CLOUD_URL = "https://api.spark.io"
FIRMWARE_MARKER = "VarReturn"


class ServiceDiscovery:
    cloud_url: str
    timeout: Optional[float]
    headers: Dict[str, str]

    def __init__(self, cloud_url: str = DEFAULT_CLOUD_URL, timeout: Optional[float] = None, user_agent: str = "spark-io/0.1"):
        self.cloud_url = cloud_url.rstrip("/")
        # None waits for the cloud indefinitely
        self.timeout = timeout
        self.headers = {"User-Agent": user_agent, "Accept": "application/json"}

    def endpoint_url(self, device_id: str) -> str:
        return f"{self.cloud_url}/v1/devices/{device_id}/endpoint"

    async def resolve(self, device_id: str, token: str) -> Endpoint:
        """
        Returns the device's host/port, or raises one of CloudUnreachableError,
        CloudResponseError, FirmwareHandshakeError.
        """
        logger.info(f"Resolving endpoint of device {device_id} via {self.cloud_url}...")
        payload = await asyncio.to_thread(self._fetch, device_id, token)
        endpoint = self._parse(payload)
        logger.info(f"Device {device_id} reachable at {endpoint}")
        return endpoint

    def _fetch(self, device_id: str, token: str) -> Dict[str, Any]:
        try:
            response = requests.get(
                self.endpoint_url(device_id),
                params={"access_token": token},
                headers=self.headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Cloud request failed: {e}")
            raise CloudUnreachableError(reason=e.__class__.__name__) from e

        if response.status_code != 200:
            logger.error(f"Cloud answered with HTTP {response.status_code}")
            raise CloudUnreachableError(response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise CloudUnreachableError(response.status_code, reason="response is not JSON") from e

    @staticmethod
    def _parse(payload: Dict[str, Any]) -> Endpoint:
        if payload.get("error"):
            raise CloudResponseError(
                code=payload.get("code"),
                description=payload.get("error_description", ""),
                error=payload.get("error"),
            )

        if payload.get("cmd") != FIRMWARE_MARKER:
            raise FirmwareHandshakeError(f"unexpected cmd {payload.get('cmd')!r}")

        try:
            return Endpoint.parse(str(payload.get("result", "")))
        except ValueError as e:
            raise FirmwareHandshakeError(str(e)) from e
