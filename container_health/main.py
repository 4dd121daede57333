"""Entry point for the container health monitor — `container-health` console script."""

from __future__ import annotations

import argparse
import logging
import sys
from contextlib import ExitStack

from rich.console import Console
from rich.panel import Panel

from container_health.cache.store import CacheUnavailable, create_cache
from container_health.config import settings
from container_health.health.models import HealthRecord, HealthStatus
from container_health.health.scheduler import PassResult, WatchScheduler
from container_health.runtime.client import DockerClient, RuntimeUnavailable
from container_health.storage.store import HealthStore, StoreUnavailable

logger = logging.getLogger(__name__)

console = Console()
err_console = Console(stderr=True)

STATUS_STYLES = {
    HealthStatus.HEALTHY: "green",
    HealthStatus.UNHEALTHY: "bold red",
    HealthStatus.STALL: "yellow",
}


def print_record(record: HealthRecord) -> None:
    console.print(str(record), style=STATUS_STYLES[record.status], markup=False)


def print_skipped(name: str) -> None:
    console.print(f"Container '{name}' not found, skipped", style="yellow", markup=False)


def print_summary(result: PassResult) -> None:
    console.print(
        f"[dim]{len(result.records)} checked | {result.cache_hits} from cache | "
        f"{len(result.skipped)} skipped[/dim]"
    )


def run_monitor(names: list[str] | None, cache_ttl: int, watch: bool) -> int:
    """Monitor the named containers (or all of them when ``names`` is None)."""
    console.print(Panel.fit(
        "🐳 Welcome to Docker Container Health Monitor!\n"
        f"Targets:  {', '.join(names) if names else 'all containers'}\n"
        f"Cache:    {settings.cache_backend} (ttl {cache_ttl}s)\n"
        f"Store:    {settings.db_path}\n"
        f"Watch:    {'every %gs' % settings.watch_interval if watch else 'off'}",
        title="container-health",
        border_style="blue",
    ))

    try:
        cache = create_cache(settings.cache_backend, settings.redis_url)
    except ValueError as e:
        err_console.print(f"[bold red]Invalid cache configuration:[/bold red] {e}")
        return 1

    with ExitStack() as stack:
        stack.callback(cache.close)
        try:
            store = stack.enter_context(HealthStore(
                settings.db_path,
                pool_size=settings.db_pool_size,
                pool_timeout=settings.db_pool_timeout,
            ))
            runtime = stack.enter_context(
                DockerClient(settings.docker_socket, timeout=settings.docker_timeout)
            )
            scheduler = WatchScheduler(
                runtime,
                cache,
                store,
                cache_ttl=cache_ttl,
                interval=settings.watch_interval,
                on_record=print_record,
                on_skip=print_skipped,
            )
            result = scheduler.run(names, watch=watch)
        except RuntimeUnavailable as e:
            logger.error("Runtime unavailable: %s", e)
            err_console.print(f"[bold red]Docker is unreachable:[/bold red] {e}")
            return 1
        except StoreUnavailable as e:
            logger.error("Store unavailable: %s", e)
            err_console.print(f"[bold red]Database unavailable:[/bold red] {e}")
            return 1
        except KeyboardInterrupt:
            console.print("\n[dim]Stopped.[/dim]")
            return 0

    print_summary(result)
    return 0


def run_wipe(include_cache: bool) -> int:
    """Delete all persisted state (latest + history)."""
    try:
        with HealthStore(settings.db_path, pool_size=1) as store:
            removed = store.wipe()
    except StoreUnavailable as e:
        err_console.print(f"[bold red]Database unavailable:[/bold red] {e}")
        return 1
    console.print(f"[green]Removed {removed} rows from {settings.db_path}[/green]")

    if include_cache:
        try:
            cache = create_cache(settings.cache_backend, settings.redis_url)
        except ValueError as e:
            err_console.print(f"[bold red]Invalid cache configuration:[/bold red] {e}")
            return 1
        try:
            console.print(f"[green]Removed {cache.wipe()} cache entries[/green]")
        except CacheUnavailable as e:
            logger.warning("Cache wipe failed: %s", e)
            err_console.print(f"[yellow]Cache wipe failed:[/yellow] {e}")
        finally:
            cache.close()
    return 0


def _positive_int(value: str) -> int:
    ttl = int(value)
    if ttl <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive number of seconds, got {value}")
    return ttl


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Docker Container Health Monitor")
    sub = parser.add_subparsers(dest="command")

    monitor = sub.add_parser("monitor", help="Monitor specific containers")
    monitor.add_argument(
        "-n", "--name", action="extend", nargs="+", required=True,
        help="Container name (repeatable)",
    )

    monitor_all = sub.add_parser("monitor-all", help="Monitor every container")

    for p in (monitor, monitor_all):
        p.add_argument(
            "--cache-ttl", type=_positive_int, default=settings.default_cache_ttl,
            help="Seconds a computed record stays cached",
        )
        p.add_argument("--watch", action="store_true", help="Repeat passes until interrupted")

    wipe = sub.add_parser("wipe", help="Delete all persisted state")
    wipe.add_argument(
        "--include-cache", action="store_true", help="Also drop cached health records",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )

    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "monitor":
        code = run_monitor(args.name, args.cache_ttl, args.watch)
    elif args.command == "monitor-all":
        code = run_monitor(None, args.cache_ttl, args.watch)
    elif args.command == "wipe":
        code = run_wipe(args.include_cache)
    else:
        parser.print_help()
        code = 1
    sys.exit(code)


if __name__ == "__main__":
    main()
