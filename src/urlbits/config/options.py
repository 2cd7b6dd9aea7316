"""Run options handed to the pipeline."""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from urlbits.config.settings import KAFKA_BROKERS, PIPELINE_CONFIG, RESULTS_PATH


class Mode(Enum):
    """Which view of each URI a run produces."""
    DOMAINS = "domains"
    KEYS = "keys"
    KV = "kv"
    PATHS = "paths"
    USER = "user"
    VALUES = "values"
    FULL = "full"

    @classmethod
    def from_flags(cls, **flags: bool) -> "Mode":
        """
        Resolve independent mode booleans to one mode.

        When several are set the first one in the order domains, keys, kv,
        paths, user, values wins. No flag set selects FULL.
        """
        unknown = set(flags) - {m.value for m in FLAG_PRIORITY}
        if unknown:
            raise ValueError(f"Unknown mode flags: {sorted(unknown)}")
        for mode in FLAG_PRIORITY:
            if flags.get(mode.value):
                return mode
        return cls.FULL


FLAG_PRIORITY = (Mode.DOMAINS, Mode.KEYS, Mode.KV, Mode.PATHS, Mode.USER, Mode.VALUES)


@dataclass(frozen=True)
class Options:
    mode: Mode = Mode.FULL
    validate: bool = False
    verbose: bool = False
    save: bool = False
    save_path: str = RESULTS_PATH
    concurrent: bool = PIPELINE_CONFIG['concurrent']
    queue_size: int = PIPELINE_CONFIG['queue_size']
    progress: bool = False
    kafka_topic: Optional[str] = None
    kafka_brokers: str = KAFKA_BROKERS

    def __post_init__(self):
        if not isinstance(self.mode, Mode):
            raise TypeError(f"mode must be a Mode, got {type(self.mode).__name__}")
        if self.queue_size < 0:
            raise ValueError("queue_size must be >= 0")
