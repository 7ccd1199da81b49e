from __future__ import annotations
import asyncio, logging, signal

import click
from rich.console import Console
from rich.panel import Panel

from .adapters.notify_log import LogNotifier
from .adapters.notify_smtp import SmtpNotifier
from .adapters.rpc_httpx import HttpxRPC
from .application.block_windows import StartBlock
from .application.cancellation import CancellationToken
from .application.monitor import run_monitor
from .config import Config, build_config, load_env
from .domain.errors import ConfigError, PoagovError
from .domain.value_types import ContractKind, ContractVersion, Network
from .log import configure_logging

console = Console()
log = logging.getLogger(__name__)


def install_signal_handlers(token: CancellationToken) -> None:
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, token.cancel)
        except (NotImplementedError, RuntimeError):
            signal.signal(sig, lambda *_: token.cancel())


async def monitor(cfg: Config, token: CancellationToken) -> int:
    install_signal_handlers(token)
    notifiers = [LogNotifier(log_emails=cfg.log_emails)]
    if cfg.smtp is not None:
        notifiers.append(SmtpNotifier(cfg.smtp, cfg.recipients))
    async with HttpxRPC(cfg.endpoint) as rpc:
        return await run_monitor(
            rpc=rpc,
            contracts=cfg.contracts,
            start_block=cfg.start_block,
            poll_interval=cfg.poll_interval,
            token=token,
            notifiers=notifiers,
            network=cfg.network,
            endpoint=cfg.endpoint,
            notification_limit=cfg.notification_limit,
        )


def _one(flags: dict[str, bool], what: str) -> str:
    chosen = [name for name, on in flags.items() if on]
    if len(chosen) != 1:
        opts = ", ".join(f"--{n}" for n in flags)
        raise click.UsageError(f"pass exactly one {what}: {opts}")
    return chosen[0]


def _start_block(earliest: bool, latest: bool, start: str | None, tail: int | None) -> StartBlock:
    which = _one({"earliest": earliest, "latest": latest, "start": start is not None, "tail": tail is not None},
                 "start block option")
    if which == "earliest": return StartBlock.earliest()
    if which == "latest": return StartBlock.latest()
    if which == "tail":
        if tail < 0:
            raise click.BadParameter("must not be negative", param_hint="--tail")
        return StartBlock.tail(tail)
    return StartBlock.parse(start)


@click.command("poagov")
@click.version_option(package_name="poagov")
@click.option("--core", is_flag=True, help="Monitor POA Network's Core network")
@click.option("--sokol", is_flag=True, help="Monitor POA Network's Sokol testnet")
@click.option("--xdai", is_flag=True, help="Monitor the xDai network")
@click.option("--rpc-url", default=None, help="JSON-RPC endpoint (default: ${NETWORK}_RPC_ENDPOINT)")
@click.option("-k", "--keys", is_flag=True, help="Ballots to change keys")
@click.option("-t", "--threshold", is_flag=True, help="Ballots to change the minimum threshold")
@click.option("-p", "--proxy", is_flag=True, help="Ballots to change the proxy address")
@click.option("-e", "--emission", is_flag=True, help="Ballots to manage emission funds (v2 only)")
@click.option("--v1", is_flag=True, help="Monitor the v1 governance contracts")
@click.option("--v2", is_flag=True, help="Monitor the v2 governance contracts [default]")
@click.option("--earliest", is_flag=True, help="Start at the chain's first block")
@click.option("--latest", is_flag=True, help="Start at the last mined block")
@click.option("--start", default=None, metavar="BLOCK", help="Start at this block: decimal, 0x-hex, earliest, latest or -N")
@click.option("--tail", type=int, default=None, metavar="N", help="Start N blocks before the last mined block")
@click.option("--block-time", type=float, default=None, help="Seconds between polls (default: $AVG_BLOCK_TIME_SECS or 5)")
@click.option("-n", "--limit", "notification_limit", type=int, default=None, help="Stop after this many notifications")
@click.option("--email", is_flag=True, help="Send email notifications (SMTP settings come from the environment)")
@click.option("--log-emails", is_flag=True, help="Log the full email body of each notification")
@click.option("--log-file", "log_to_file", is_flag=True, help="Log to ./logs/poagov.log (rotated, 3 files)")
def cli(core, sokol, xdai, rpc_url, keys, threshold, proxy, emission, v1, v2,
        earliest, latest, start, tail, block_time, notification_limit, email, log_emails, log_to_file):
    """Monitor a POA Network chain for new governance ballots."""
    load_env()
    network = Network(_one({"core": core, "sokol": sokol, "xdai": xdai}, "network"))
    if v1 and v2:
        raise click.UsageError("--v1 and --v2 are mutually exclusive")
    version = ContractVersion.V1 if v1 else ContractVersion.V2
    kinds = [k for k, on in ((ContractKind.KEYS, keys), (ContractKind.THRESHOLD, threshold),
                             (ContractKind.PROXY, proxy), (ContractKind.EMISSION, emission)) if on]

    try:
        cfg = build_config(
            network=network, kinds=kinds, version=version,
            start_block=_start_block(earliest, latest, start, tail),
            rpc_url=rpc_url, block_time=block_time, notification_limit=notification_limit,
            email=email, log_emails=log_emails, log_to_file=log_to_file,
        )
    except ConfigError as e:
        raise click.ClickException(str(e)) from e

    configure_logging(to_file=cfg.log_to_file)
    console.print(Panel.fit(
        f"[bold]poagov[/] • {cfg.network.value} • {cfg.endpoint}\n"
        + "\n".join(f"  {c}" for c in cfg.contracts),
        title="monitoring governance ballots",
    ))

    token = CancellationToken()
    try:
        delivered = asyncio.run(monitor(cfg, token))
    except PoagovError as e:
        log.error("%s: %s", type(e).__name__, e)
        raise click.ClickException(f"{type(e).__name__}: {e}") from e

    reason = "cancelled" if token.cancelled else "done"
    console.print(f"[green]{reason}[/]: {delivered} notification(s)")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
