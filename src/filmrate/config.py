from dataclasses import dataclass
from pathlib import Path
import tomllib


@dataclass(frozen=True)
class AppConfig:
    database_path: str


@dataclass(frozen=True)
class RatingsConfig:
    min_value: int = 1
    max_value: int = 10


@dataclass(frozen=True)
class RecommendConfig:
    similarity_threshold: int = 1
    quality_floor: float = 6.0
    min_neighbor_weight: int = 1


@dataclass(frozen=True)
class StorageConfig:
    busy_timeout_ms: int = 5000
    max_retries: int = 3
    retry_delay_seconds: float = 0.05


@dataclass(frozen=True)
class Config:
    app: AppConfig
    ratings: RatingsConfig
    recommend: RecommendConfig
    storage: StorageConfig

    @property
    def database_path(self) -> str:
        return self.app.database_path


DEFAULT_CONFIG_PATH = Path("config.toml")


def default_config(database_path: str) -> Config:
    return Config(
        app=AppConfig(database_path=database_path),
        ratings=RatingsConfig(),
        recommend=RecommendConfig(),
        storage=StorageConfig(),
    )


def load_config(path: Path | None = None) -> Config:
    config_path = path or DEFAULT_CONFIG_PATH
    if not config_path.exists():
        raise FileNotFoundError(
            "Missing config.toml. Copy config.example.toml to config.toml and edit it."
        )

    raw = tomllib.loads(config_path.read_text(encoding="utf-8"))

    app = raw["app"]
    ratings = raw.get("ratings", {})
    recommend = raw.get("recommend", {})
    storage = raw.get("storage", {})

    cfg = Config(
        app=AppConfig(**app),
        ratings=RatingsConfig(**ratings),
        recommend=RecommendConfig(**recommend),
        storage=StorageConfig(**storage),
    )
    if cfg.ratings.min_value > cfg.ratings.max_value:
        raise ValueError("ratings.min_value must not exceed ratings.max_value")
    return cfg
