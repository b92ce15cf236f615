"""Main CLI entry point for solchat."""

import asyncio
import logging
import os
from typing import Optional

import typer
import yaml
from rich import box
from rich.panel import Panel

from solchat import __app_name__, __version__
from solchat.chat.context import AISystemResponse, ExpertiseLevel
from solchat.chat.orchestrator import (
    DEFAULT_SESSION,
    ProcessOptions,
    SessionOrchestrator,
    create_orchestrator,
)
from solchat.config.settings import (
    create_default_config,
    get_settings,
    load_config_file,
    reset_settings_cache,
)
from solchat.data.addresses import Base58AddressDetector
from solchat.data.wallet import RpcWalletProvider, StaticWalletProvider, WalletProvider
from solchat.errors import format_error_for_display, translate_error
from solchat.security.logging import setup_secure_logging
from solchat.ui.console import console, format_address, print_error, print_response, print_welcome

# Demo wallet shown when --demo is used without --address
DEMO_ADDRESS = "Vines1vzrYbzLMRdu58ou5XTby4qAqVRLmqo36NKPTg"
DEMO_BALANCE = 10.0

app = typer.Typer(
    name=__app_name__,
    help="Conversational assistant for your Solana wallet",
    rich_markup_mode="rich",
    no_args_is_help=False,
    invoke_without_command=True,
)


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        console.print(f"[primary]{__app_name__}[/primary] version [sol]{__version__}[/sol]")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    demo: bool = typer.Option(
        False,
        "--demo",
        help="Run in demo mode (fixed prices, no network calls)",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs"),
):
    """solchat - chat with your Solana wallet."""
    if demo:
        os.environ["SOLCHAT_DEMO_MODE"] = "true"
        reset_settings_cache()

    setup_secure_logging(logging.DEBUG if verbose else logging.WARNING)

    if ctx.invoked_subcommand is None:
        print_welcome()
        console.print("[muted]Run 'solchat chat' to start, or 'solchat --help' for commands[/muted]")


def _build_wallet(address: Optional[str], balance: Optional[float]) -> WalletProvider:
    """Pick a wallet provider from the command-line options."""
    settings = get_settings()

    if address and not Base58AddressDetector().is_valid(address):
        print_error(f"'{address}' is not a valid Solana address.")
        raise typer.Exit(1)

    if address is None and settings.demo_mode:
        return StaticWalletProvider(DEMO_ADDRESS, DEMO_BALANCE if balance is None else balance)
    if address is None:
        return StaticWalletProvider()
    if balance is not None or settings.demo_mode:
        return StaticWalletProvider(address, DEMO_BALANCE if balance is None else balance)
    return RpcWalletProvider(address, settings=settings)


def _build_orchestrator(
    address: Optional[str],
    balance: Optional[float],
    session: str,
    expertise: ExpertiseLevel,
) -> SessionOrchestrator:
    wallet = _build_wallet(address, balance)
    orchestrator = create_orchestrator(wallet=wallet)
    orchestrator.set_expertise_level(expertise, session)

    state = getattr(wallet, "state", None)
    connected = address or (state.address if state is not None else None)
    if connected:
        orchestrator.initialize_with_wallet(connected, session)
    return orchestrator


_ADDRESS_OPTION = typer.Option(None, "--address", "-a", help="Wallet address to use")
_BALANCE_OPTION = typer.Option(
    None, "--balance", "-b", help="Fixed SOL balance (skips the RPC balance lookup)"
)
_SESSION_OPTION = typer.Option(DEFAULT_SESSION, "--session", "-s", help="Session id")
_EXPERTISE_OPTION = typer.Option(
    ExpertiseLevel.BEGINNER, "--expertise", "-e", help="Your crypto experience level"
)


@app.command()
def chat(
    message: Optional[str] = typer.Argument(None, help="Initial message (optional)"),
    address: Optional[str] = _ADDRESS_OPTION,
    balance: Optional[float] = _BALANCE_OPTION,
    session: str = _SESSION_OPTION,
    expertise: ExpertiseLevel = _EXPERTISE_OPTION,
):
    """Start interactive chat mode.

    [green]Examples:[/green]
        solchat chat
        solchat --demo chat "what is my balance?"
        solchat chat --address <ADDRESS> "send 0.1 SOL to <ADDRESS>"
    """
    orchestrator = _build_orchestrator(address, balance, session, expertise)
    asyncio.run(_chat_loop(orchestrator, session, message))


async def _chat_loop(
    orchestrator: SessionOrchestrator,
    session_id: str,
    initial_message: Optional[str] = None,
):
    """Main read-eval-print loop."""
    settings = get_settings()
    options = ProcessOptions(session_id=session_id)

    print_welcome()
    if settings.demo_mode:
        console.print("[warning]Running in demo mode - prices are fixed, nothing is sent[/warning]")

    try:
        wallet_state = await orchestrator.wallet.get_state()
        console.print(f"[primary]Wallet:[/primary] {format_address(wallet_state.address)}")
    except Exception as e:
        console.print(format_error_for_display(translate_error(e)))
        console.print("[muted]Continuing without wallet data[/muted]")
    console.print("[muted]Type 'quit' to exit, 'clear' to start over[/muted]\n")

    try:
        if initial_message:
            await _respond(orchestrator, initial_message, options)

        while True:
            try:
                user_input = console.input("[prompt]You:[/prompt] ").strip()
            except KeyboardInterrupt:
                console.print("\n[muted]Use 'quit' to exit[/muted]")
                continue
            except EOFError:
                break

            if not user_input:
                continue
            if user_input.lower() in ("quit", "exit", "q"):
                console.print("[muted]Goodbye![/muted]")
                break
            if user_input.lower() == "clear":
                orchestrator.initialize_with_wallet(None, session_id)
                console.clear()
                print_welcome()
                continue

            await _respond(orchestrator, user_input, options)
    finally:
        await orchestrator.close()


async def _respond(
    orchestrator: SessionOrchestrator,
    text: str,
    options: ProcessOptions,
    as_json: bool = False,
) -> AISystemResponse:
    response = await orchestrator.process_message(text, options)
    print_response(response, as_json=as_json)
    return response


@app.command()
def ask(
    message: str = typer.Argument(..., help="Message to send"),
    address: Optional[str] = _ADDRESS_OPTION,
    balance: Optional[float] = _BALANCE_OPTION,
    session: str = _SESSION_OPTION,
    expertise: ExpertiseLevel = _EXPERTISE_OPTION,
    market: bool = typer.Option(False, "--market", help="Attach market data"),
    token: bool = typer.Option(False, "--token", help="Attach token details"),
    analysis: bool = typer.Option(False, "--analysis", help="Attach a full market analysis"),
    as_json: bool = typer.Option(False, "--json", help="Print the raw response as JSON"),
):
    """Send a single message and print the reply.

    [green]Examples:[/green]
        solchat --demo ask "Tell me about JUP"
        solchat --demo ask "Send 5 SOL to <ADDRESS>" --json
    """
    orchestrator = _build_orchestrator(address, balance, session, expertise)
    options = ProcessOptions(
        session_id=session,
        include_market_data=market,
        include_token_data=token,
        full_analysis=analysis,
    )

    async def _ask():
        try:
            await _respond(orchestrator, message, options, as_json=as_json)
        finally:
            await orchestrator.close()

    asyncio.run(_ask())


@app.command()
def config(
    show: bool = typer.Option(False, "--show", help="Print the effective configuration"),
):
    """Create the config file if needed and show where it lives.

    [green]Examples:[/green]
        solchat config
        solchat config --show
    """
    try:
        path = create_default_config()
    except OSError as e:
        console.print(format_error_for_display(translate_error(e)))
        raise typer.Exit(1) from e

    console.print(f"[primary]Config file:[/primary] {path}")
    if not show:
        return

    settings = get_settings()
    effective = settings.model_dump(mode="json")
    if effective["llm"].get("api_key"):
        effective["llm"]["api_key"] = "***"

    console.print(
        Panel(
            yaml.safe_dump(effective, default_flow_style=False, sort_keys=False).strip(),
            title="[primary]Effective settings[/primary]",
            border_style="primary",
            box=box.ROUNDED,
        )
    )
    if not load_config_file():
        console.print("[muted]Config file is empty; defaults and environment apply[/muted]")


def main():
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
