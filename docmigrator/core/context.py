from __future__ import annotations
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

from docmigrator.core.config import Settings
from docmigrator.core.github import GitHubClient
from docmigrator.core.images import ImageHostClient
from docmigrator.core.llm import ModelClient
from docmigrator.core.slugs import SlugResolver

REQUIRED_CREDENTIALS = ("github_token", "github_repository", "openrouter_api_key")


def missing_credentials(settings: Settings) -> List[str]:
    return [name.upper() for name in REQUIRED_CREDENTIALS if not getattr(settings, name)]


@dataclass
class RunContext:
    """Everything a stage needs, built once per run and never mutated afterwards."""
    settings: Settings
    slugs: SlugResolver
    github: GitHubClient
    llm: ModelClient
    images: Optional[ImageHostClient] = None
    sleep: Callable[[float], None] = field(default=time.sleep)

    @property
    def corpus_dir(self) -> Path:
        return Path(self.settings.corpus_dir)

    @property
    def docs_dir(self) -> Path:
        return self.corpus_dir / self.settings.docs_root

    def document_path(self, slug: str) -> Path:
        return self.docs_dir / f"{slug}.mdx"

    def built_page_path(self, slug: str) -> Path:
        return self.corpus_dir / self.settings.build_output_dir / slug / "index.html"

    @classmethod
    def from_settings(cls, settings: Settings) -> "RunContext":
        missing = missing_credentials(settings)
        if missing:
            raise ValueError(f"Missing required settings: {', '.join(missing)}")
        slug_map = Path(settings.slug_map_path)
        if not slug_map.is_absolute():
            slug_map = Path(settings.corpus_dir) / slug_map
        images = None
        if settings.image_upload_url:
            images = ImageHostClient(upload_url=settings.image_upload_url, api_key=settings.image_upload_key)
        return cls(
            settings=settings,
            slugs=SlugResolver.load(slug_map),
            github=GitHubClient(
                token=settings.github_token,
                repository=settings.github_repository,
                api_base=settings.github_api_base,
            ),
            llm=ModelClient(
                api_key=settings.openrouter_api_key,
                model=settings.model,
                api_base=settings.openrouter_api_base,
            ),
            images=images,
        )
