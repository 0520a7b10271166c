from __future__ import annotations

import click

from brokersock.deadline import Deadline
from brokersock.exceptions import InvalidArgumentError, TransportError
from brokersock.logging import configure_logging
from brokersock.settings import TransportSettings
from brokersock.transport import SocketTransport


def _payload(text: str | None, hex_payload: str | None) -> bytes:
    if text is not None and hex_payload is not None:
        raise click.UsageError("Use either --payload or --hex, not both.")
    if hex_payload is not None:
        try:
            return bytes.fromhex(hex_payload)
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint="--hex") from e
    return (text if text is not None else "PING").encode("utf-8")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
def cli() -> None:
    """brokersock command line interface."""


@cli.command("ping")
@click.option("--host", default=None, help="Broker host (defaults to BROKERSOCK_HOST).")
@click.option("--port", type=int, default=None, help="Broker port (defaults to BROKERSOCK_PORT).")
@click.option("--payload", "text", default=None, help="Text payload to send (default: PING).")
@click.option("--hex", "hex_payload", default=None, help="Payload given as hex digits.")
@click.option("--read", "read_len", type=int, default=0, show_default=True, help="Bytes to read back.")
@click.option("--exact/--no-exact", default=True, show_default=True, help="Fail on a short reply.")
@click.option("--recv-timeout", type=float, default=None, help="Per-wait read timeout in seconds.")
@click.option("--send-timeout", type=float, default=None, help="Per-wait write/connect timeout in seconds.")
def ping(
    host: str | None,
    port: int | None,
    text: str | None,
    hex_payload: str | None,
    read_len: int,
    exact: bool,
    recv_timeout: float | None,
    send_timeout: float | None,
) -> None:
    """Send a raw payload to a broker and print the reply.

    Examples:
        brokersock ping --host 127.0.0.1 --port 9092 --read 4
        brokersock ping --port 9092 --hex 0000000a --read 4
    """
    settings = TransportSettings()
    configure_logging(settings)

    updates: dict[str, object] = {}
    if host is not None:
        updates["host"] = host
    if port is not None:
        updates["port"] = port
    try:
        if recv_timeout is not None:
            updates["recv_deadline"] = Deadline.from_seconds(recv_timeout)
        if send_timeout is not None:
            updates["send_deadline"] = Deadline.from_seconds(send_timeout)
    except InvalidArgumentError as e:
        raise click.BadParameter(str(e)) from e
    settings = settings.model_copy(update=updates)

    data = _payload(text, hex_payload)

    try:
        with SocketTransport.from_settings(settings) as transport:
            written = transport.write(data)
            click.echo(f"sent {written} bytes to {settings.host}:{settings.port}")
            if read_len > 0:
                reply = transport.read(read_len, verify_exact_length=exact)
                click.echo(f"received {len(reply)} bytes")
                click.echo(f"text: {reply.decode('utf-8', errors='replace')}")
                click.echo(f"hex:  {reply.hex()}")
    except TransportError as e:
        raise click.ClickException(str(e)) from e


def main() -> None:
    cli.main()


if __name__ == "__main__":
    main()
