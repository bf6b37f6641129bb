from pathlib import Path

from pydantic import PositiveInt
from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="COOKBOOK_")

    store_path: Path = Path("receipts.txt")
    name_max_length: PositiveInt = 29
    body_max_length: PositiveInt = 999
    log_level: str = "INFO"
    title: str = "Diego's Cookbook"
