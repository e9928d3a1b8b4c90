"""
Structured extraction through an LLM.

Sends an HTML document plus a JSON schema to an OpenAI-compatible chat
completions endpoint (DeepSeek by default) and returns the parsed JSON.
"""

import json
import logging
from typing import Any, Dict, Optional

import httpx

from core.errors import ExtractionServiceError, MalformedExtractionResponse

logger = logging.getLogger(__name__)


def build_prompt(schema: Dict, document: str, record_description: str = "record") -> str:
    return f"""
You are an expert data extraction bot. Your task is to extract structured data from the provided HTML content.
Extract information about each {record_description} listed on the page. When the information is not available just fill it with dash (-)
The data should strictly follow this JSON schema:
{json.dumps(schema, indent=2)}

Each element with a data-item-id attribute wraps exactly one {record_description}.
The output must be a JSON object matching the schema, with one array entry per {record_description}.

HTML content:
{document}
"""


def parse_completion_content(content: str) -> Any:
    """Parse model output, tolerating a markdown code fence around the JSON."""
    content = (content or "").strip()
    if content.startswith("```"):
        lines = content.split("\n")
        content = "\n".join(lines[1:-1]) if len(lines) > 2 else content
    try:
        return json.loads(content)
    except json.JSONDecodeError as e:
        raise MalformedExtractionResponse(f"Extraction service returned invalid JSON: {e}") from e


class ExtractionClient:
    """
    Client for the structured-extraction service.

    complete() never retries; callers decide what a failure costs.
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "https://api.deepseek.com/v1",
        model: str = "deepseek-chat",
        timeout: float = 120.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

        if not self.api_key:
            logger.warning("[extraction] No API key configured - extraction calls will fail")

    async def aclose(self):
        await self._client.aclose()

    async def complete(self, schema: Dict, document: str, record_description: str = "record") -> Any:
        """
        Extract records from document according to schema.

        Returns whatever JSON the service produced; shape checks are the
        caller's job. Raises ExtractionServiceError on transport, auth or
        status failures, MalformedExtractionResponse on unparseable output.
        """
        if not self.api_key:
            raise ExtractionServiceError("Extraction API key not set")

        payload = {
            "model": self.model,
            "messages": [
                {"role": "user", "content": build_prompt(schema, document, record_description)}
            ],
            "response_format": {"type": "json_object"},
            "temperature": 0,
        }

        try:
            response = await self._client.post(
                f"{self.base_url}/chat/completions",
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                json=payload,
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise ExtractionServiceError(
                f"Extraction service returned {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise ExtractionServiceError(f"Extraction request failed: {e}") from e
        except ValueError as e:
            raise MalformedExtractionResponse(f"Extraction service response is not JSON: {e}") from e

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise MalformedExtractionResponse(f"Unexpected completion shape: {e}") from e

        return parse_completion_content(content)
