from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_name: str = "docmigrator"
    log_level: str = "INFO"

    # Issue tracker / code host
    github_token: str | None = None
    github_repository: str | None = None  # "owner/name"
    github_api_base: str = "https://api.github.com"
    issue_label: str = "migrate-cppref-page"
    base_branch: str = "main"
    git_user_name: str = "github-actions[bot]"
    git_user_email: str = "github-actions[bot]@users.noreply.github.com"

    # Generative model
    openrouter_api_key: str | None = None
    openrouter_api_base: str = "https://openrouter.ai/api/v1"
    model: str = "google/gemini-2.5-flash"

    # Image host (optional; without it the change request says "no diff available")
    image_upload_url: str | None = None
    image_upload_key: str | None = None

    # Source site
    source_host: str = "cppreference.com"

    # Target corpus
    corpus_dir: str = "."
    docs_root: str = "src/content/docs"
    slug_map_path: str = "migrate/slug_map.json"
    component_docs_path: str = "src/content/docs/development/guide/component-docs-for-llm.mdx"
    format_command: str | None = "npm run format"
    build_command: str = "npm run build"
    build_output_dir: str = "dist"
    built_content_selector: str = "main"

    # Fetch / convert retry budget
    retry_attempts: int = 3
    retry_delay: float = 2.0

settings = Settings()
