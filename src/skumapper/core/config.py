"""Application configuration using pydantic-settings with grouped env prefixes."""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings


class MappingConfig(BaseSettings):
    """Thresholds and budgets for the field mapping engine."""

    model_config = {"env_prefix": "SKUMAPPER_MAPPING_"}

    min_confidence: int = 60
    deadline_seconds: float = 10.0
    learning_threshold: int = 70
    historical_entry_limit: int = 100
    fuzzy_threshold: float = 0.7
    historical_threshold: float = 0.6
    session_cost_ceiling: float = 0.001  # USD per mapping run
    sample_row_limit: int = 5
    filter_stale_cache_entries: bool = True


class LLMConfig(BaseSettings):
    """External reasoning service configuration."""

    model_config = {"env_prefix": "SKUMAPPER_LLM_"}

    provider: Literal["mock", "litellm", "disabled"] = "mock"
    api_key: str = ""
    base_url: str = "http://litellm-proxy:4000/v1"
    model: str = "openai/gpt-4o-mini"
    max_tokens: int = 1500
    temperature: float = 0.1
    timeout: int = 30
    retries: int = 2
    input_price_per_1m: float = 0.150
    output_price_per_1m: float = 0.600


class DynamoDBConfig(BaseSettings):
    """DynamoDB configuration for the learning cache table."""

    model_config = {"env_prefix": "SKUMAPPER_DYNAMO_"}

    table_name: str = "skumapper-field-mapping-cache"
    table_suffix: str = ""  # "-dev", "-uat", or "" for prod
    region: str = "us-east-1"
    endpoint_url: str | None = None  # LocalStack override


class RedisConfig(BaseSettings):
    """Redis read-through cache configuration."""

    model_config = {"env_prefix": "SKUMAPPER_REDIS_"}

    enabled: bool = False
    host: str = "localhost"
    port: int = 6379
    db: int = 0
    ttl_seconds: int = 60


class AppSettings(BaseSettings):
    """Root application settings aggregating all sub-configs."""

    model_config = {"env_prefix": "SKUMAPPER_"}

    environment: Literal["dev", "uat", "prod"] = "dev"
    log_level: str = "INFO"
    learning_store: Literal["memory", "dynamodb"] = "memory"

    mapping: MappingConfig = MappingConfig()
    llm: LLMConfig = LLMConfig()
    dynamodb: DynamoDBConfig = DynamoDBConfig()
    redis: RedisConfig = RedisConfig()
