"""Rich console setup and output helpers for solchat."""

import json
from dataclasses import dataclass
from typing import Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from solchat.chat.context import AISystemResponse
from solchat.data.addresses import truncate_address
from solchat.ui.theme import SolchatColors, Symbols, solchat_theme

# Main console instance with solchat theme
console = Console(theme=solchat_theme)

# JSON output console (no styling)
json_console = Console(force_terminal=False, no_color=True)


def print_error(message: str, title: str = "Error") -> None:
    """Print an error message in a styled panel."""
    console.print(
        Panel(
            f"[error]{Symbols.CROSS} {message}[/error]",
            title=f"[error]{title}[/error]",
            border_style=SolchatColors.ERROR,
            box=box.ROUNDED,
        )
    )


def print_welcome() -> None:
    """Print the solchat welcome banner."""
    banner = (
        f"[sol]{Symbols.SOL} solchat[/sol]\n\n"
        "[muted]Conversational assistant for your Solana wallet[/muted]"
    )
    console.print(Panel(banner, border_style=SolchatColors.SOL, box=box.DOUBLE))


def format_address(address: Optional[str]) -> str:
    """Format a wallet address, truncated."""
    if not address:
        return "[muted]not connected[/muted]"
    return f"[address]{truncate_address(address)}[/address]"


@dataclass
class PlanItem:
    """A line in a proposed transaction plan."""

    label: str
    value: str
    style: str = "primary"


def intent_plan(intent: dict) -> list[PlanItem]:
    """Plan lines for a transfer or swap intent."""
    action = intent.get("action")
    if action == "transfer":
        return [
            PlanItem("Action", "Transfer"),
            PlanItem("Amount", f"{intent['amount']:g} {intent['token']}", "sol"),
            PlanItem("Recipient", truncate_address(intent["recipient"]), "address"),
        ]
    if action == "swap":
        # A swap intent carries the input amount under "price"; None means all
        amount = intent.get("price")
        source = f"{amount:g}" if amount is not None else "All"
        return [
            PlanItem("Action", "Swap"),
            PlanItem("From", f"{source} {intent['from_token']}", "sol"),
            PlanItem("To", intent["token"], "sol"),
        ]
    return [PlanItem("Action", str(action))]


def print_plan(title: str, items: list[PlanItem]) -> None:
    """Print a proposed transaction for the wallet to sign."""
    max_label_len = max(len(item.label) for item in items) if items else 0
    lines = [
        f"[muted]{item.label.ljust(max_label_len)}:[/muted] [{item.style}]{escape(item.value)}[/{item.style}]"
        for item in items
    ]
    lines.append("")
    lines.append(f"[info]{Symbols.INFO} Nothing is sent until your wallet signs it[/info]")

    console.print(
        Panel(
            "\n".join(lines),
            title=f"[primary]{title}[/primary]",
            title_align="left",
            border_style=SolchatColors.PRIMARY,
            box=box.ROUNDED,
            padding=(0, 1),
        )
    )


def print_next_steps(steps: list[str], title: str = "Try") -> None:
    """Print a suggestions footer."""
    if not steps:
        return

    lines = [f"[muted]{title}:[/muted]"]
    for step in steps:
        lines.append(f"  [success]{Symbols.NEXT}[/success] [command]{escape(step)}[/command]")

    console.print("\n".join(lines))


def print_response(response: AISystemResponse, as_json: bool = False) -> None:
    """Render one assistant turn."""
    if as_json:
        json_console.print(
            json.dumps(response.model_dump(exclude_none=True), indent=2),
            markup=False,
            highlight=False,
            soft_wrap=True,
        )
        return

    console.print(f"[assistant]solchat:[/assistant] {escape(response.message)}")
    if response.intent:
        print_plan("Proposed transaction", intent_plan(response.intent))
    if response.suggestions:
        console.print()
        print_next_steps(response.suggestions)
    console.print()
