"""Configuration data models"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any, Union


logger = logging.getLogger("gojobs.config")

DEFAULT_RUN_HOUR = 13
DEFAULT_RUN_MINUTE = 0
DEFAULT_TIMEZONE = "Africa/Lagos"


@dataclass(frozen=True)
class ScheduleConfig:
    """
    A daily run time for the scheduled fetch

    Attributes:
        hour: Hour of day, 0-23
        minute: Minute of hour, 0-59
    """
    hour: int = DEFAULT_RUN_HOUR
    minute: int = DEFAULT_RUN_MINUTE

    def __post_init__(self):
        if not 0 <= self.hour <= 23:
            raise ValueError(f"Schedule hour must be in [0, 23], got {self.hour}")
        if not 0 <= self.minute <= 59:
            raise ValueError(f"Schedule minute must be in [0, 59], got {self.minute}")

    def __str__(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"

    @classmethod
    def parse(cls, value: Union[str, int, None]) -> 'ScheduleConfig':
        """
        Parse a "HH:MM" run time

        Invalid or missing values fall back to the default run time. An
        integer is taken as minutes after midnight: that is what YAML 1.1
        makes of an unquoted 21:00 (base-60, 1260).

        Args:
            value: Time of day in 24-hour "HH:MM" form, or minutes after midnight

        Returns:
            ScheduleConfig instance
        """
        if isinstance(value, int) and not isinstance(value, bool):
            try:
                hour, minute = divmod(value, 60)
                return cls(hour=hour, minute=minute)
            except ValueError:
                default = cls()
                logger.warning(f"Invalid scheduled time {value} (minutes after midnight), falling back to {default}")
                return default
        if not value:
            return cls()
        try:
            hour_text, minute_text = str(value).strip().split(':')
            return cls(hour=int(hour_text), minute=int(minute_text))
        except ValueError:
            default = cls()
            logger.warning(f"Invalid scheduled time '{value}', falling back to {default}")
            return default

    @classmethod
    def parse_many(cls, value: Union[str, int, List[Union[str, int]], None]) -> List['ScheduleConfig']:
        """Parse a comma-separated string or a list of "HH:MM" values"""
        if isinstance(value, int) and not isinstance(value, bool):
            value = [value]
        if not value:
            return [cls()]
        if isinstance(value, str):
            value = [part for part in value.split(',') if part.strip()]
        times = sorted({cls.parse(item) for item in value}, key=lambda t: (t.hour, t.minute))
        return times or [cls()]


@dataclass
class ApiConfig:
    """
    External jobs API settings

    Attributes:
        url: Jobs endpoint URL
        key: Shared API key, also the HMAC signing secret
        origin: Value sent as the Origin header (optional)
        timeout: Request timeout in seconds
    """
    url: str = ""
    key: str = ""
    origin: str = ""
    timeout: float = 30.0

    def __post_init__(self):
        # Keys pasted into .env files often keep their quotes
        self.key = (self.key or "").replace('"', '')
        if self.timeout <= 0:
            raise ValueError(f"API timeout must be positive, got {self.timeout}")

    @classmethod
    def from_dict(cls, data: dict) -> 'ApiConfig':
        return cls(
            url=data.get('url') or "",
            key=data.get('key') or "",
            origin=data.get('origin') or "",
            timeout=float(data.get('timeout', 30.0)),
        )


@dataclass
class CacheConfig:
    """
    Snapshot cache settings

    Attributes:
        backend: 'file' or 'redis'
        path: Cache file location for the file backend
        redis_key: Key holding the snapshot for the redis backend
        max_age_hours: Age after which the snapshot counts as expired
        lock_timeout: Seconds to wait for the cache file lock
    """
    backend: str = "file"
    path: str = ".job-cache.json"
    redis_key: str = "gojobs:snapshot"
    max_age_hours: float = 13.0
    lock_timeout: int = 30

    def __post_init__(self):
        self.backend = self.backend.lower()
        if self.backend not in ("file", "redis"):
            raise ValueError(f"Unknown cache backend '{self.backend}'. Must be one of: file, redis")
        if self.max_age_hours <= 0:
            raise ValueError(f"Cache max age must be positive, got {self.max_age_hours}")

    @classmethod
    def from_dict(cls, data: dict) -> 'CacheConfig':
        return cls(
            backend=data.get('backend', 'file'),
            path=data.get('path', '.job-cache.json'),
            redis_key=data.get('redis_key', 'gojobs:snapshot'),
            max_age_hours=float(data.get('max_age_hours', 13.0)),
            lock_timeout=int(data.get('lock_timeout', 30)),
        )


@dataclass
class SchedulerConfig:
    """
    Background refresh settings

    Attributes:
        enabled: Whether the server starts the scheduler
        times: Daily run times
        run_on_start: Fetch once immediately when the scheduler starts
    """
    enabled: bool = True
    times: List[ScheduleConfig] = field(default_factory=lambda: [ScheduleConfig()])
    run_on_start: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> 'SchedulerConfig':
        return cls(
            enabled=bool(data.get('enabled', True)),
            times=ScheduleConfig.parse_many(data.get('times')),
            run_on_start=bool(data.get('run_on_start', False)),
        )


@dataclass
class AppConfig:
    """
    Application-wide configuration

    Attributes:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        timezone: IANA timezone the schedule and log timestamps refer to
        admin_secret: Shared secret for administrative endpoints
        api: External jobs API settings
        cache: Snapshot cache settings
        scheduler: Background refresh settings
        redis_host: Redis server host
        redis_port: Redis server port
        redis_db: Redis database number
        host: Address the HTTP server binds to
        port: Port the HTTP server listens on
    """
    log_level: str = "INFO"
    timezone: str = DEFAULT_TIMEZONE
    admin_secret: str = ""
    api: ApiConfig = field(default_factory=ApiConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    host: str = "127.0.0.1"
    port: int = 8000

    def __post_init__(self):
        """Validate configuration after initialization"""
        valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.log_level.upper() not in valid_log_levels:
            raise ValueError(
                f"Invalid log level '{self.log_level}'. "
                f"Must be one of: {', '.join(valid_log_levels)}"
            )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AppConfig':
        """
        Create AppConfig from dictionary

        Args:
            data: Dictionary containing application configuration

        Returns:
            AppConfig instance
        """
        redis_data = data.get('redis') or {}
        server_data = data.get('server') or {}

        return cls(
            log_level=data.get('log_level', 'INFO'),
            timezone=data.get('timezone', DEFAULT_TIMEZONE),
            admin_secret=data.get('admin_secret') or "",
            api=ApiConfig.from_dict(data.get('api') or {}),
            cache=CacheConfig.from_dict(data.get('cache') or {}),
            scheduler=SchedulerConfig.from_dict(data.get('scheduler') or {}),
            redis_host=redis_data.get('host', 'localhost'),
            redis_port=int(redis_data.get('port', 6379)),
            redis_db=int(redis_data.get('db', 0)),
            host=server_data.get('host', '127.0.0.1'),
            port=int(server_data.get('port', 8000)),
        )
