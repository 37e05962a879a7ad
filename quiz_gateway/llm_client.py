# quiz_gateway/llm_client.py
import base64
import logging
from typing import Any, Dict, List, Optional

import httpx

from quiz_gateway import config
from quiz_gateway.errors import ModelUnavailableError
from quiz_gateway.prompts import DESCRIBE_IMAGE_PROMPT
from quiz_gateway.schemas import HealthCheck

logger = logging.getLogger(__name__)

HEALTH_PROMPT = 'Say "API is working" if you can read this.'


class GeminiClient:
    """
    Thin async client for the Gemini generateContent REST endpoint.
    One instance is created per process and shared by all requests; it holds
    the API key and a pooled httpx.AsyncClient. No retries are attempted.
    """

    def __init__(
        self,
        api_key: str = config.GEMINI_API_KEY,
        model: str = config.GEMINI_MODEL_NAME,
        base_url: str = config.GEMINI_API_URL,
        timeout: float = config.GEMINI_TIMEOUT,
        temperature: float = config.GEMINI_TEMPERATURE,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.temperature = temperature
        self._http = http_client or httpx.AsyncClient(timeout=timeout)
        logger.info("GeminiClient initialized with model: %s (key %s)", model, config.api_key_fingerprint(api_key))

    async def aclose(self):
        await self._http.aclose()

    async def generate_text(self, prompt: str, json_output: bool = True) -> str:
        """Send a text-only prompt and return the raw reply text."""
        return await self._generate([{"text": prompt}], json_output)

    async def generate_text_with_image(
        self, prompt: str, image_bytes: bytes, mime_type: str, json_output: bool = False
    ) -> str:
        """Send a prompt with one inline image attachment and return the raw reply text."""
        parts = [
            {"text": prompt},
            {"inlineData": {"mimeType": mime_type, "data": base64.b64encode(image_bytes).decode("ascii")}},
        ]
        return await self._generate(parts, json_output)

    async def describe_image(self, image_bytes: bytes, mime_type: str) -> str:
        """Ask the model for a dense textual description of an image."""
        description = await self.generate_text_with_image(DESCRIBE_IMAGE_PROMPT, image_bytes, mime_type)
        logger.info("Image analyzed successfully (%d characters of description)", len(description))
        return description

    async def check_health(self) -> HealthCheck:
        """Round-trip a trivial prompt. Upstream failures are reported, not raised."""
        try:
            await self.generate_text(HEALTH_PROMPT, json_output=False)
        except ModelUnavailableError as e:
            logger.error("Gemini API connection check failed: %s", e.message)
            return HealthCheck(ok=False, message=e.message)
        return HealthCheck(ok=True, message="connected")

    async def list_models(self) -> List[Dict[str, Any]]:
        """Return every model visible to the configured key, following pagination."""
        url = f"{self.base_url}/models"
        models: List[Dict[str, Any]] = []
        params: Dict[str, str] = {}
        while True:
            data = await self._request("GET", url, params=params)
            models.extend(data.get("models", []))
            token = data.get("nextPageToken")
            if not token:
                return models
            params = {"pageToken": token}

    async def _generate(self, parts: List[Dict[str, Any]], json_output: bool) -> str:
        url = f"{self.base_url}/models/{self.model}:generateContent"
        generation_config: Dict[str, Any] = {"temperature": self.temperature}
        if json_output:
            generation_config["responseMimeType"] = "application/json"
        payload = {
            "contents": [{"role": "user", "parts": parts}],
            "generationConfig": generation_config,
        }

        logger.info("Attempting LLM call to %s with model %s", url, self.model)
        data = await self._request("POST", url, json=payload)
        return _reply_text(data)

    async def _request(self, method: str, url: str, **kwargs) -> Dict[str, Any]:
        if not self.api_key:
            raise ModelUnavailableError("GEMINI_API_KEY is not configured")

        headers = {"x-goog-api-key": self.api_key}
        try:
            resp = await self._http.request(method, url, headers=headers, **kwargs)
            resp.raise_for_status()  # Raises HTTPStatusError for 4xx/5xx responses
            return resp.json()
        except httpx.HTTPStatusError as e:
            message = _upstream_message(e.response)
            logger.error("Gemini API returned %s: %s", e.response.status_code, message)
            raise ModelUnavailableError(message) from e
        except httpx.RequestError as e:
            logger.error("Gemini API request failed: %r", e)
            raise ModelUnavailableError(f"Gemini API request failed: {e}") from e
        except ValueError as e:
            # body was not JSON
            raise ModelUnavailableError("Gemini API returned a non-JSON response") from e


def _upstream_message(response: httpx.Response) -> str:
    """Pull the human-readable message out of a Gemini error body."""
    try:
        body = response.json()
    except ValueError:
        return f"HTTP {response.status_code}: {response.text[:200]}"
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return f"[{response.status_code}] {error['message']}"
    return f"HTTP {response.status_code}"


def _reply_text(data: Dict[str, Any]) -> str:
    candidates = data.get("candidates") or []
    if not candidates:
        reason = (data.get("promptFeedback") or {}).get("blockReason")
        if reason:
            raise ModelUnavailableError(f"Gemini API blocked the prompt: {reason}")
        raise ModelUnavailableError("Gemini API returned no candidates")

    parts = (candidates[0].get("content") or {}).get("parts") or []
    text = "".join(p.get("text", "") for p in parts if isinstance(p, dict))
    if not text:
        reason = candidates[0].get("finishReason", "unknown")
        raise ModelUnavailableError(f"Gemini API returned an empty reply (finishReason: {reason})")
    return text
