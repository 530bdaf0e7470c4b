from functools import lru_cache
from typing import Literal

import yaml
from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """환경 변수에서 애플리케이션 설정을 로드"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    environment: Literal["local", "dev", "prod"] = "local"
    version: str = "0.1.0"
    log_level: str = "INFO"
    completion_base_url: str = "http://localhost:4000"
    completion_api_key: str = "not-required"
    config_path: str = "triage.yaml"
    duckdb_path: str = "data/telemetry.duckdb"


class CompletionConfig(BaseModel):
    """생성형 완성 서비스 설정"""

    model: str = "gpt-4o-mini"
    timeout_seconds: float = 30.0
    temperature: float | None = None


class StoreConfig(BaseModel):
    """환자 문서 저장소 설정"""

    type: Literal["duckdb", "memory"] = "duckdb"
    path: str = "data/patients.duckdb"
    table: str = "patients"


class AppConfig(BaseModel):
    """애플리케이션 설정 래퍼"""

    completion: CompletionConfig = CompletionConfig()
    store: StoreConfig = StoreConfig()


@lru_cache
def get_settings() -> Settings:
    """캐시된 설정 인스턴스를 반환"""
    return Settings()


@lru_cache
def load_app_config() -> AppConfig:
    """설정 파일(YAML)에서 애플리케이션 설정 로드

    Returns:
        애플리케이션 설정 인스턴스
    """
    settings = get_settings()
    with open(settings.config_path, "r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    return AppConfig(**data)
