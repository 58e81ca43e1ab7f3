class ShardcrawlerError(Exception):
    """Base error for Shardcrawler domain exceptions."""


class InvalidArgumentError(ShardcrawlerError, ValueError):
    """Raised when a generator primitive receives an impossible argument (empty pick, non-positive bound)."""


class ConfigError(ShardcrawlerError, ValueError):
    """Raised when tuning data or a persisted record cannot be interpreted."""
