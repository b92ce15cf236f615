"""Theme and color definitions for solchat."""

from dataclasses import dataclass

from rich.theme import Theme


@dataclass(frozen=True)
class SolchatColors:
    """Color palette for solchat UI."""

    PRIMARY = "#61afef"

    SUCCESS = "#98c379"
    WARNING = "#e5c07b"
    ERROR = "#e06c75"
    INFO = "#56b6c2"

    # Solana brand
    SOL = "#14f195"
    SOL_PURPLE = "#9945ff"

    MUTED = "#5c6370"


# Rich theme for console styling
solchat_theme = Theme(
    {
        "primary": f"bold {SolchatColors.PRIMARY}",
        "success": f"bold {SolchatColors.SUCCESS}",
        "warning": f"bold {SolchatColors.WARNING}",
        "error": f"bold {SolchatColors.ERROR}",
        "info": SolchatColors.INFO,
        "sol": f"bold {SolchatColors.SOL}",
        "address": SolchatColors.PRIMARY,
        "assistant": f"bold {SolchatColors.SOL_PURPLE}",
        "muted": SolchatColors.MUTED,
        "prompt": f"bold {SolchatColors.PRIMARY}",
        "command": f"bold {SolchatColors.SUCCESS}",
    }
)


class Symbols:
    """Unicode symbols for UI elements."""

    SOL = "◎"
    CROSS = "✗"
    INFO = "ℹ"
    NEXT = "➜"
