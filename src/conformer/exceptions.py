"""Exception hierarchy for conformer."""


class ConformerError(Exception):
    """Base class for all conformer errors."""


class ConfigError(ConformerError, ValueError):
    """Raised when configuration is missing or invalid."""


class StagingError(ConformerError):
    """Raised when staged input cannot be read or fails its boundary schema."""


class WarehouseError(ConformerError):
    """
    Raised when the destination warehouse is unreachable or its schema is broken.

    Always fatal to the load phase. Per-record problems (foreign key
    mismatches, primary key conflicts) are counted instead of raised.
    """
