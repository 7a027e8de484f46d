"""
Configuration settings for the Insert Throughput Benchmark.

Uses Pydantic Settings to load environment variables for the database
connection, logging, and the four benchmark run options (chunk size, record
count, iterations, warm-up count).
"""
from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Database
    db_host: str = Field("localhost", alias="DB_HOST")
    db_port: int = Field(5432, alias="DB_PORT")
    db_user: str = Field("postgres", alias="DB_USER")
    db_password: str = Field("postgres", alias="DB_PASSWORD")
    db_name: str = Field("insert_benchmark", alias="DB_NAME")
    pool_min_size: int = Field(1, ge=1, alias="DB_POOL_MIN_SIZE")
    pool_max_size: int = Field(4, ge=1, alias="DB_POOL_MAX_SIZE")

    # Application
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    # Benchmark defaults
    benchmark_chunk_size: int = Field(1000, ge=1, alias="BENCHMARK_CHUNK_SIZE")
    benchmark_record_count: int = Field(100_000, ge=0, alias="BENCHMARK_RECORD_COUNT")
    benchmark_iterations: int = Field(3, ge=0, alias="BENCHMARK_ITERATIONS")
    benchmark_warmup_count: int = Field(1000, alias="BENCHMARK_WARMUP_COUNT")
    benchmark_seed: Optional[int] = Field(None, alias="BENCHMARK_SEED")
    results_dir: str = Field("benchmark-results", alias="BENCHMARK_RESULTS_DIR")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
