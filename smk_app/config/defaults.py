"""Default configuration parameters for the collection loader."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ApiParams:
    """Remote search API parameters."""
    base_url: str = "https://api.smk.dk/api/v1/art/search/"
    keys: str = "*"
    language: str = "en"
    timeout_seconds: float = 30.0


@dataclass(frozen=True)
class FetchParams:
    """Pagination and retry parameters."""
    page_size: int = 2000                   # Rows per request, offsets are multiples of this
    max_retries: int = 3                    # Retries per page before giving up
    backoff_base_ms: int = 1000             # Delay unit between retries
    backoff_multiplier: float = 1.0         # 1.0 = linear (base * attempt), >1 = exponential


@dataclass(frozen=True)
class CacheParams:
    """Persistent cache parameters."""
    db_path: str = "smk_cache.db"
    key: str = "smk_data_cache"
    ttl_ms: int = 7 * 24 * 60 * 60 * 1000   # 7 days
    schema_version: int = 1                 # Bump when the record shape changes


@dataclass(frozen=True)
class ConsentParams:
    """Storage consent parameters."""
    path: str = "smk_storage_consent.json"
    expiry_days: int = 365


@dataclass(frozen=True)
class SchedulerParams:
    """Update scheduling parameters."""
    debounce_ms: int = 300                  # Quiet window before consumers are refreshed
    progress_throttle_ms: int = 100         # Minimum gap between loading indicator updates


@dataclass(frozen=True)
class ActivationParams:
    """Lazy activation parameters."""
    threshold: float = 0.1                  # Readiness fraction that counts as ready
    margin: float = 0.05                    # Activate this much before the threshold


@dataclass(frozen=True)
class DefaultConfig:
    """Complete default configuration."""
    api: ApiParams
    fetch: FetchParams
    cache: CacheParams
    consent: ConsentParams
    scheduler: SchedulerParams
    activation: ActivationParams


def get_default_config() -> DefaultConfig:
    """Get the default configuration instance."""
    return DefaultConfig(
        api=ApiParams(),
        fetch=FetchParams(),
        cache=CacheParams(),
        consent=ConsentParams(),
        scheduler=SchedulerParams(),
        activation=ActivationParams(),
    )
