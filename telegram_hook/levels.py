import enum
import logging

PANIC = 60
FATAL = logging.CRITICAL

logging.addLevelName(PANIC, "PANIC")


class Level(enum.Enum):
    """Severities the hook understands, ordered from most to least severe."""

    PANIC = PANIC
    FATAL = FATAL
    ERROR = logging.ERROR
    WARNING = logging.WARNING
    INFO = logging.INFO
    DEBUG = logging.DEBUG

    @property
    def levelno(self) -> int:
        return self.value

    @classmethod
    def from_levelno(cls, levelno: int) -> "Level":
        """Map a logging level number to the highest Level it reaches."""
        for level in cls:
            if levelno >= level.value:
                return level
        return cls.DEBUG


ELIGIBLE_LEVELS = frozenset({Level.ERROR, Level.FATAL, Level.PANIC})
