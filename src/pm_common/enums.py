"""Global enums shared by the pool domain and the API schemas."""

from enum import Enum


class Side(str, Enum):
    """Direction of a threshold stake. NEITHER is only a zero-value default."""
    LONG = "LONG"
    SHORT = "SHORT"
    NEITHER = "NEITHER"


class PoolKind(str, Enum):
    CATEGORICAL = "CATEGORICAL"
    THRESHOLD = "THRESHOLD"
