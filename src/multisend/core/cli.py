"""CLI"""

import json
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape

from multisend.core.constants import NULL_ADDRESS
from multisend.core.decoder import decode_tree
from multisend.core.errors import DecoderError, TransactionServiceError
from multisend.core.extractor import (
    format_extracted_data,
    parse_sign_typed_data_json,
    validate_extracted_data,
)
from multisend.core.formatting import format_value, get_operation_name
from multisend.core.hashes import calculate_hashes, calculate_hashes_for, parse_int
from multisend.core.hexutils import is_hex
from multisend.core.models import DecodedNode, HashResult
from multisend.core.networks import format_safe_address, parse_safe_address_input
from multisend.core.settings import settings
from multisend.core.transaction_service import SafeTransactionServiceClient
from multisend.core.utils import configure_logger

multisend_cli = typer.Typer(help="Safe multiSend decoder and transaction hash calculator")

console = Console()


@multisend_cli.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Print warnings to stderr"),
):
    """Safe multiSend decoder and transaction hash calculator"""
    configure_logger(level=settings.log_level, console=verbose)


def _print_nodes(nodes: List[DecodedNode], depth: int = 0) -> None:
    indent = "    " * depth
    for index, node in enumerate(nodes, start=1):
        tx = node.transaction
        console.print(
            f"{indent}[bold]{index}.[/bold] {get_operation_name(tx.operation)} to [cyan]{tx.to}[/cyan] "
            f"value {format_value(tx.value)} ({tx.data_length} bytes)",
            soft_wrap=True,
        )
        function = node.function
        if function is not None:
            source = f" [dim]({function.source})[/dim]" if function.source else ""
            console.print(f"{indent}  [green]{escape(function.name)}[/green]{source}", soft_wrap=True)
            for key, value in function.params.items():
                if key == "transactions" and node.children:
                    continue
                console.print(f"{indent}    {escape(key)}: {escape(value)}", soft_wrap=True)
            if function.error:
                console.print(f"{indent}    [red]{escape(function.error)}[/red]", soft_wrap=True)
        _print_nodes(node.children, depth + 1)


def _print_hashes(result: HashResult) -> None:
    console.print(f"[cyan]Domain hash:[/cyan] {result.domain_hash}", soft_wrap=True)
    console.print(f"[cyan]Message hash:[/cyan] {result.message_hash}", soft_wrap=True)
    console.print(f"[cyan]Safe transaction hash:[/cyan] {result.safe_tx_hash}", soft_wrap=True)


@multisend_cli.command("decode")
def decode(data: str = typer.Argument(..., help="Hex transaction data")):
    """Decode multiSend or function call data"""
    if not is_hex(data.strip()):
        typer.echo("Error: data is not a hex string")
        raise typer.Exit(code=1)

    try:
        nodes = decode_tree(data.strip())
    except DecoderError as e:
        typer.echo(f"Error: {e}")
        raise typer.Exit(code=1)

    if not nodes:
        typer.echo("No transactions found")
        return

    console.print(f"[bold]{len(nodes)} transaction(s)[/bold]")
    _print_nodes(nodes)


@multisend_cli.command("hash")
def compute_hash(
    chain_id: int = typer.Option(..., "--chain-id", help="Chain id"),
    safe_address: str = typer.Option(..., "--safe", "-s", help="Safe address"),
    to: str = typer.Option(..., "--to", "-t", help="Transaction target"),
    value: str = typer.Option("0", "--value", help="Value in wei"),
    data: str = typer.Option("0x", "--data", "-d", help="Hex call data"),
    operation: int = typer.Option(0, "--operation", "-o", help="0 (Call) or 1 (DelegateCall)"),
    safe_tx_gas: str = typer.Option("0", "--safe-tx-gas"),
    base_gas: str = typer.Option("0", "--base-gas"),
    gas_price: str = typer.Option("0", "--gas-price"),
    gas_token: str = typer.Option(NULL_ADDRESS, "--gas-token"),
    refund_receiver: str = typer.Option(NULL_ADDRESS, "--refund-receiver"),
    nonce: str = typer.Option(..., "--nonce", "-n", help="Safe nonce"),
    version: Optional[str] = typer.Option(None, "--version", help="Safe contract version"),
):
    """Calculate the domain, message and Safe transaction hashes"""
    try:
        result = calculate_hashes(
            chain_id,
            safe_address,
            to,
            value,
            data,
            operation,
            safe_tx_gas,
            base_gas,
            gas_price,
            gas_token,
            refund_receiver,
            nonce,
            version or settings.default_safe_version,
        )
    except ValueError as e:
        typer.echo(f"Error: {e}")
        raise typer.Exit(code=1)

    _print_hashes(result)


@multisend_cli.command("fetch")
def fetch(
    safe: str = typer.Argument(..., help="Safe address, prefix:address or Safe web app URL"),
    nonce: int = typer.Option(..., "--nonce", "-n", help="Safe nonce"),
):
    """Fetch a transaction from the Safe Transaction Service and calculate its hashes"""
    parsed = parse_safe_address_input(safe)
    if parsed is None:
        typer.echo(f"Error: could not parse Safe address from {safe!r}")
        raise typer.Exit(code=1)

    try:
        params = SafeTransactionServiceClient().fetch_transaction(
            parsed.network, parsed.address, nonce
        )
        result = calculate_hashes_for(params, parsed.chain_id, parsed.address)
    except (TransactionServiceError, ValueError) as e:
        typer.echo(f"Error: {e}")
        raise typer.Exit(code=1)

    console.print(
        f"Safe [cyan]{format_safe_address(parsed.address, parsed.network)}[/cyan] "
        f"v{params.version} nonce {params.nonce}",
        soft_wrap=True,
    )
    _print_hashes(result)


@multisend_cli.command("parse-address")
def parse_address(text: str = typer.Argument(..., help="Address, prefix:address or Safe web app URL")):
    """Extract the Safe address, network and transaction hash from free-form input"""
    parsed = parse_safe_address_input(text)
    if parsed is None:
        typer.echo(f"Error: could not parse Safe address from {text!r}")
        raise typer.Exit(code=1)

    typer.echo(f"Address: {parsed.address}")
    typer.echo(f"Network: {parsed.network} (chain id {parsed.chain_id})")
    if parsed.tx_hash:
        typer.echo(f"Transaction hash: {parsed.tx_hash}")


@multisend_cli.command("typed-data")
def typed_data(path: Path = typer.Argument(..., help="JSON file with a Sign Typed Data message")):
    """Decode the transaction in a Sign Typed Data message"""
    try:
        text = path.read_text()
    except OSError as e:
        typer.echo(f"Error: {e}")
        raise typer.Exit(code=1)

    result = parse_sign_typed_data_json(text)
    if result is None:
        typer.echo("Error: invalid Sign Typed Data JSON")
        raise typer.Exit(code=1)

    try:
        operation = parse_int(result.operation, "operation", bits=8)
    except ValueError as e:
        typer.echo(f"Error: {e}")
        raise typer.Exit(code=1)

    typer.echo(f"To: {result.to}")
    typer.echo(f"Value: {format_value(result.value)}")
    typer.echo(f"Operation: {get_operation_name(operation)}")
    typer.echo(f"Nonce: {result.nonce}")
    if result.decoded_data is not None:
        typer.echo(f"Function: {result.decoded_data.name}")
        for key, value in result.decoded_data.params.items():
            typer.echo(f"  {key}: {value}")
    if result.decoded_transactions:
        typer.echo(f"Transactions: {len(result.decoded_transactions)}")
        for index, tx in enumerate(result.decoded_transactions, start=1):
            typer.echo(f"  {index}. {get_operation_name(tx.operation)} to {tx.to} ({tx.data_length} bytes)")


@multisend_cli.command("validate")
def validate(path: Path = typer.Argument(..., help="JSON file with extracted transaction fields")):
    """Validate transaction fields extracted from a screenshot or copied by hand"""
    try:
        data = json.loads(path.read_text())
    except (OSError, ValueError) as e:
        typer.echo(f"Error: {e}")
        raise typer.Exit(code=1)

    is_valid, errors = validate_extracted_data(data)
    if not is_valid:
        for error in errors:
            typer.echo(f"Error: {error}")
        raise typer.Exit(code=1)

    typer.echo(json.dumps(format_extracted_data(data), indent=2))


if __name__ == "__main__":
    multisend_cli()
