from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
	APP_NAME: str = 'Simple Forex'

	# Frankfurter (ECB reference rates)
	FRANKFURTER_BASE_URL: str = 'https://api.frankfurter.app'
	HTTP_TIMEOUT: float = 10
	HTTP_RETRY_ATTEMPTS: int = 3

	# Logging
	LOG_LEVEL: str = 'INFO'
	LOG_JSON: bool = False

	model_config = SettingsConfigDict(env_file='.env', case_sensitive=False, extra='ignore')


@lru_cache
def get_settings() -> Settings:
	return Settings()
