"""CLI commands for boxcar.

``serve`` runs a server with handlers imported from ``module:attr`` strings;
``call``, ``methods`` and ``help-method`` talk to a running server.
"""

from pathlib import Path

import typer
from rich.console import Console
from rich.pretty import Pretty
from rich.table import Table

from boxcar import __logo__, __version__
from boxcar.cli.shared.http_utils import load_handler, parse_handler_spec, parse_value
from boxcar.cli.shared.logging_utils import ensure_rotating_log_file, set_stderr_level
from boxcar.cli.shared.network_utils import is_port_in_use
from boxcar.client import RpcClient, SystemStub
from boxcar.utils.exceptions import BoxcarError, RegistrationError, RpcFault

app = typer.Typer(
    name="boxcar",
    help=f"{__logo__} boxcar - XML-RPC server and client",
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool):
    if value:
        console.print(f"{__logo__} boxcar v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", callback=version_callback, is_eager=True
    ),
):
    """boxcar - XML-RPC server and client."""
    pass


def _fail(message: str) -> None:
    console.print(f"[red]{message}[/red]")
    raise typer.Exit(1)


def _print_fault(exc: RpcFault) -> None:
    console.print(f"[red]Fault {exc.fault_code}[/red]: {exc.fault_string}")
    raise typer.Exit(1)


# ============================================================================
# Server
# ============================================================================


@app.command()
def serve(
    host: str = typer.Option(None, "--host", "-h", help="Bind address (default from config: 0.0.0.0)"),
    port: int = typer.Option(None, "--port", "-p", help="Listen port (default from config: 8080)"),
    handler: list[str] = typer.Option(
        None, "--handler", "-H", help="Handler as name=module:attr; classes are instantiated"
    ),
    dispatch: str = typer.Option(None, "--dispatch", help="Connection dispatch: thread | pool"),
    workers: int = typer.Option(None, "--workers", help="Worker threads for --dispatch pool"),
    config: Path = typer.Option(None, "--config", "-c", help="Config file (default ~/.boxcar/config.json)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Start an XML-RPC server and block until Ctrl-C."""
    from boxcar.api.server import RpcServer
    from boxcar.api.strategies import BoundedWorkerPool, ThreadPerConnection
    from boxcar.config.loader import load_config

    try:
        cfg = load_config(config).server
    except ValueError as e:
        _fail(str(e))
    host = host or cfg.host
    port = cfg.port if port is None else port
    dispatch = dispatch or cfg.dispatch
    workers = workers or cfg.workers
    if dispatch not in ("thread", "pool"):
        _fail(f"Unknown dispatch strategy: {dispatch} (expected thread or pool)")

    handlers = dict(cfg.handlers)
    for raw in handler or []:
        try:
            name, target = parse_handler_spec(raw)
        except ValueError as e:
            _fail(str(e))
        handlers[name] = target

    try:
        busy = is_port_in_use(host, port)
    except OSError as e:
        _fail(f"Cannot listen on {host}:{port}: {e}")
    if busy:
        console.print(
            f"[red]Port {port} is already in use.[/red] "
            f"Use [cyan]--port[/cyan] to pick another one (current: {host}:{port})."
        )
        raise typer.Exit(1)

    if verbose:
        set_stderr_level("DEBUG")
    log_path = ensure_rotating_log_file("serve", level="DEBUG" if verbose else "INFO")

    strategy = BoundedWorkerPool(workers, cfg.queue_size) if dispatch == "pool" else ThreadPerConnection()
    server = RpcServer(port, host, strategy=strategy)
    for name, target in handlers.items():
        try:
            server.add(name, load_handler(target))
        except (ImportError, AttributeError, RegistrationError) as e:
            server.close()
            _fail(f"Cannot register handler {name} ({target}): {e}")

    console.print(f"{__logo__} Starting boxcar on {host}:{port} ({dispatch} dispatch)...")
    console.print(f"[dim]Handlers: {', '.join(server) or '-'}[/dim]")
    console.print(f"[dim]Logs: {log_path}[/dim]")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        console.print("\nShutting down...")
    except OSError as e:
        _fail(f"Cannot listen on {host}:{port}: {e}")
    finally:
        server.close()


# ============================================================================
# Client
# ============================================================================


def _make_client(url: str | None, timeout: float | None, proxy: str | None = None) -> RpcClient:
    """Build a client; options left unset fall back to the ``client`` config section."""
    from boxcar.config.loader import load_config

    try:
        cfg = load_config().client
    except ValueError as e:
        _fail(str(e))
    return RpcClient(
        url or cfg.url,
        timeout=cfg.timeout if timeout is None else timeout,
        proxy=proxy or cfg.proxy,
    )


@app.command()
def call(
    url: str = typer.Argument(..., help="Server URL, e.g. http://127.0.0.1:8080/RPC2"),
    method: str = typer.Argument(..., help="Method name, object.method"),
    params: list[str] = typer.Argument(None, help="Parameters; JSON when it parses, otherwise strings"),
    timeout: float = typer.Option(None, "--timeout", "-t", help="Seconds to wait (default: no limit)"),
    proxy: str = typer.Option(None, "--proxy", help="Forward proxy URL"),
):
    """Call a remote method and print its result."""
    client = _make_client(url, timeout, proxy)
    values = [parse_value(p) for p in params or []]
    try:
        result = client.call(method, *values)
    except RpcFault as e:
        _print_fault(e)
    except BoxcarError as e:
        _fail(f"Call failed: {e}")
    console.print(Pretty(result))


@app.command()
def methods(
    url: str = typer.Argument(None, help="Server URL (default from config)"),
    timeout: float = typer.Option(None, "--timeout", "-t", help="Seconds to wait (default: no limit)"),
):
    """List the methods a server exposes."""
    system = SystemStub(_make_client(url, timeout))
    try:
        names = system.list_methods()
    except RpcFault as e:
        _print_fault(e)
    except BoxcarError as e:
        _fail(f"Call failed: {e}")

    table = Table(title=f"Methods at {system.client.url}")
    table.add_column("Method", style="cyan")
    for name in names:
        table.add_row(name)
    console.print(table)


@app.command("help-method")
def help_method(
    url: str = typer.Argument(..., help="Server URL"),
    name: str = typer.Argument(..., help="Fully qualified method name"),
    timeout: float = typer.Option(None, "--timeout", "-t", help="Seconds to wait (default: no limit)"),
):
    """Print the help text of a remote method."""
    system = SystemStub(_make_client(url, timeout))
    try:
        text = system.method_help(name)
    except RpcFault as e:
        _print_fault(e)
    except BoxcarError as e:
        _fail(f"Call failed: {e}")
    console.print(text)
