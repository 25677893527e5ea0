from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    hunter_api_key: str = ""
    scrape_delay_ms: int = 1000
    page_timeout: float = 30.0
    contact_timeout: float = 5.0
    max_sponsor_pages: int = 5
    batch_size: int = 5
    log_level: str = "INFO"
