from __future__ import annotations
import httpx
from dataclasses import dataclass
from typing import Optional
from docmigrator.core.config import settings
from docmigrator.core.errors import ConversionError


@dataclass
class ModelClient:
    """Chat-completions client for the OpenRouter API."""
    api_key: str
    model: str = settings.model
    api_base: str = settings.openrouter_api_base
    transport: Optional[httpx.BaseTransport] = None

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "X-Title": "Doc Migration Bot",
        }

    def complete(self, system: str, user: str) -> str:
        """Send one system+user exchange and return the assistant text."""
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
        }
        try:
            with httpx.Client(timeout=300, transport=self.transport) as client:
                r = client.post(f"{self.api_base}/chat/completions", headers=self._headers(), json=payload)
        except httpx.HTTPError as e:
            raise ConversionError(f"Model service request failed: {e}") from e

        if not r.is_success:
            raise ConversionError(f"Model service error {r.status_code}: {r.text}")

        try:
            content = r.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ConversionError(f"Unexpected model service response: {e}") from e
        if not content:
            raise ConversionError("Model service returned an empty completion")
        return content.strip()
