from __future__ import annotations
import httpx
from dataclasses import dataclass
from typing import Optional


@dataclass
class ImageHostClient:
    """Uploads a rendered image and returns its public URL.

    The endpoint takes a multipart ``image`` field (plus ``key`` when set) and
    answers JSON with the URL either at ``data.url`` or at ``url``.
    """
    upload_url: str
    api_key: Optional[str] = None
    transport: Optional[httpx.BaseTransport] = None

    def upload(self, image: bytes, filename: str = "diff.png", content_type: str = "image/png") -> str:
        params = {"key": self.api_key} if self.api_key else None
        with httpx.Client(timeout=60, transport=self.transport) as client:
            r = client.post(
                self.upload_url,
                params=params,
                files={"image": (filename, image, content_type)},
            )
            r.raise_for_status()
            body = r.json()
        url = (body.get("data") or {}).get("url") or body.get("url")
        if not url:
            raise ValueError(f"Image host response has no URL: {body}")
        return url
