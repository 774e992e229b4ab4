import math
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Any, Dict, Optional

from rule_discovery.errors import ConfigError


class MiningAlgorithm(str, Enum):
    APRIORI = 'apriori'
    FPGROWTH = 'fpgrowth'


class GroupKey(str, Enum):
    """Transaction field used to group events for sequential mining."""
    ACTOR = 'actor_id'
    TRANSACTION = 'id'


def _coerce_enum(enum_cls, value, name: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).lower())
    except ValueError:
        valid = [member.value for member in enum_cls]
        raise ConfigError(f"{name} must be one of {valid}, got '{value}'") from None


def _check_fraction(name: str, value) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"{name} must be a number, got {value!r}")
    if math.isnan(value) or not 0.0 <= value <= 1.0:
        raise ConfigError(f"{name} must be within [0, 1], got {value}")


@dataclass
class MiningConfig:
    """
    Thresholds and algorithm parameters shared by every miner.

    Attributes:
        min_support: Minimum fraction of transactions (or groups) a pattern must appear in
        min_confidence: Minimum rule confidence
        min_lift: Minimum rule lift (1.0 drops negatively correlated rules)
        max_time_gap: Largest gap allowed between consecutive events of a sequence
                      (None = unconstrained)
        algorithm: Frequent itemset algorithm ('apriori' or 'fpgrowth')
        group_key: Field grouping events into sequences ('actor_id' or 'id')
        max_sequence_length: Longest sequence to enumerate (None = no limit)
        n_jobs: Parallel jobs for support counting (-1 uses all cores)
        verbose: Show progress bars while mining
    """
    min_support: float = 0.1
    min_confidence: float = 0.7
    min_lift: float = 1.0
    max_time_gap: Optional[timedelta] = None
    algorithm: MiningAlgorithm = MiningAlgorithm.APRIORI
    group_key: GroupKey = GroupKey.ACTOR
    max_sequence_length: Optional[int] = None
    n_jobs: int = 1
    verbose: bool = False

    def __post_init__(self):
        self.validate()

    def validate(self) -> 'MiningConfig':
        """
        Check every threshold. Enum fields given as strings are converted in place.

        Raises:
            ConfigError: On the first invalid parameter
        """
        _check_fraction('min_support', self.min_support)
        _check_fraction('min_confidence', self.min_confidence)

        if isinstance(self.min_lift, bool) or not isinstance(self.min_lift, (int, float)):
            raise ConfigError(f"min_lift must be a number, got {self.min_lift!r}")
        if not math.isfinite(self.min_lift) or self.min_lift < 0:
            raise ConfigError(f"min_lift must be a finite value >= 0, got {self.min_lift}")

        if self.max_time_gap is not None:
            if not isinstance(self.max_time_gap, timedelta):
                raise ConfigError(f"max_time_gap must be a timedelta, got {self.max_time_gap!r}")
            if self.max_time_gap < timedelta(0):
                raise ConfigError(f"max_time_gap must not be negative, got {self.max_time_gap}")

        self.algorithm = _coerce_enum(MiningAlgorithm, self.algorithm, 'algorithm')
        self.group_key = _coerce_enum(GroupKey, self.group_key, 'group_key')

        if self.max_sequence_length is not None and (
                isinstance(self.max_sequence_length, bool)
                or not isinstance(self.max_sequence_length, int)
                or self.max_sequence_length < 2):
            raise ConfigError(
                f"max_sequence_length must be an integer >= 2, got {self.max_sequence_length!r}")

        if isinstance(self.n_jobs, bool) or not isinstance(self.n_jobs, int) or self.n_jobs == 0:
            raise ConfigError(f"n_jobs must be a non-zero integer, got {self.n_jobs!r}")

        return self

    @classmethod
    def strict(cls) -> 'MiningConfig':
        return cls(min_support=0.3, min_confidence=0.8, min_lift=1.2)

    @classmethod
    def exploratory(cls) -> 'MiningConfig':
        return cls(min_support=0.01, min_confidence=0.3, min_lift=0.0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'min_support': self.min_support,
            'min_confidence': self.min_confidence,
            'min_lift': self.min_lift,
            'max_time_gap_seconds': (self.max_time_gap.total_seconds()
                                     if self.max_time_gap is not None else None),
            'algorithm': self.algorithm.value,
            'group_key': self.group_key.value,
            'max_sequence_length': self.max_sequence_length,
            'n_jobs': self.n_jobs,
            'verbose': self.verbose
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MiningConfig':
        data = dict(data)
        seconds = data.pop('max_time_gap_seconds', None)
        if seconds is not None:
            data['max_time_gap'] = timedelta(seconds=seconds)
        return cls(**data)


@dataclass
class FilterConfig:
    metric: str
    threshold: float

    def to_dict(self) -> Dict[str, Any]:
        return {'metric': self.metric, 'threshold': self.threshold}
