"""ANSI color helpers for terminal output."""


class Colors:
    """ANSI escape codes used by the CLI and the console reporter."""

    HEADER = '\033[95m'
    OKBLUE = '\033[94m'
    OKCYAN = '\033[96m'
    OKGREEN = '\033[92m'
    WARNING = '\033[93m'
    FAIL = '\033[91m'
    ENDC = '\033[0m'
    BOLD = '\033[1m'
    DIM = '\033[2m'

    enabled = True

    @classmethod
    def _wrap(cls, code: str, text: str) -> str:
        if not cls.enabled:
            return text
        return f"{code}{text}{cls.ENDC}"

    @classmethod
    def success(cls, text: str) -> str:
        """Green text."""
        return cls._wrap(cls.OKGREEN, text)

    @classmethod
    def error(cls, text: str) -> str:
        """Red text."""
        return cls._wrap(cls.FAIL, text)

    @classmethod
    def warning(cls, text: str) -> str:
        """Yellow text."""
        return cls._wrap(cls.WARNING, text)

    @classmethod
    def info(cls, text: str) -> str:
        """Cyan text."""
        return cls._wrap(cls.OKCYAN, text)

    @classmethod
    def bold(cls, text: str) -> str:
        return cls._wrap(cls.BOLD, text)

    @classmethod
    def dim(cls, text: str) -> str:
        return cls._wrap(cls.DIM, text)

    @classmethod
    def set_enabled(cls, enabled: bool) -> None:
        """Globally switch color output on or off (``--no-color``)."""
        cls.enabled = enabled
