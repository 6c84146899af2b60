"""wordbuster CLI - Main entry point."""

from __future__ import annotations

import asyncio
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from wordbuster import __version__
from wordbuster.core.config import Settings, describe_validation_error
from wordbuster.core.exceptions import ConfigurationError, WordbusterError
from wordbuster.core.logging import configure_logging
from wordbuster.core.models import FilterPolicy, RunSummary
from wordbuster.modes import BucketMode, DirMode, DnsMode, EnumerationMode, FuzzMode, TftpMode, VhostMode
from wordbuster.modes.dir import DEFAULT_STATUS_CODES
from wordbuster.prober.http import parse_codes

app = typer.Typer(
    name="wordbuster",
    help="Wordlist-driven enumeration of paths, subdomains, virtual hosts, parameters, buckets and TFTP files",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()


# Options shared by every command

WORDLIST = typer.Option(..., "--wordlist", "-w", help="Path to the word list")
THREADS = typer.Option(None, "--threads", "-t", help="Number of concurrent probes [default: 10]")
DELAY = typer.Option(None, "--delay", help="Delay before each probe, in milliseconds")
OUTPUT = typer.Option(None, "--output", "-o", help="Output file (.json for a JSON array)")
QUIET = typer.Option(False, "--quiet", "-q", help="Suppress banner and configuration output")
NO_PROGRESS = typer.Option(False, "--no-progress", "-z", help="Disable the progress bar")
VERBOSE = typer.Option(False, "--verbose", "-v", help="Print probe errors")
NO_COLOR = typer.Option(False, "--no-color", help="Disable colored output")
CONFIG = typer.Option(None, "--config", help="Path to configuration file")
LOG_LEVEL = typer.Option(None, "--log-level", help="Diagnostic log level (DEBUG, INFO, WARNING, ERROR)")
LOG_FILE = typer.Option(None, "--log-file", help="Also write diagnostic logs to this file")

# HTTP options

USER_AGENT = typer.Option(None, "--useragent", "-a", help="User-Agent string [default: wordbuster/1.0]")
HTTP_TIMEOUT = typer.Option(None, "--timeout", help="HTTP timeout in seconds [default: 10]")
INSECURE = typer.Option(False, "--insecure", "-k", help="Skip TLS certificate verification")
FOLLOW_REDIRECT = typer.Option(False, "--follow-redirect", "-r", help="Follow redirects")
PROXY = typer.Option(None, "--proxy", help="Proxy URL (http://host:port or socks5://host:port)")
HEADERS = typer.Option(None, "--header", "-H", help="Extra header 'Name: value' (repeatable)")
COOKIES = typer.Option(None, "--cookies", "-c", help="Cookie header value")
USERNAME = typer.Option(None, "--username", "-U", help="Basic auth username")
PASSWORD = typer.Option(None, "--password", "-P", help="Basic auth password")
METHOD = typer.Option(None, "--method", "-m", help="HTTP method [default: GET]")

# Wildcard handling

FORCE_WILDCARD = typer.Option(False, "--wildcard", help="Continue when a wildcard response is detected")
NO_WILDCARD_CHECK = typer.Option(False, "--no-wildcard-check", help="Skip wildcard detection")


def version_callback(value: bool) -> None:
    """Display version and exit."""
    if value:
        console.print(f"wordbuster v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """wordbuster - Wordlist-driven enumeration toolkit."""
    pass


def display_legal_disclaimer(out: Console) -> None:
    """Display legal disclaimer before probing."""
    out.print(Panel.fit(
        "This tool is for [bold]AUTHORIZED SECURITY TESTING ONLY[/bold].\n"
        "Only enumerate targets you own or have written permission to test.\n"
        "Unauthorized use may violate computer crime laws.",
        title="Legal Disclaimer",
        border_style="red",
    ))


def load_settings(
    config: Optional[Path],
    threads: Optional[int],
    delay: Optional[float],
    output: Optional[Path],
    quiet: bool,
    no_progress: bool,
    verbose: bool,
    no_color: bool,
    log_level: Optional[str],
    log_file: Optional[Path] = None,
) -> Settings:
    """Load file/env settings and layer the command line on top."""
    settings = Settings.from_file_or_default(config)

    if threads is not None:
        settings.run.threads = threads
    if delay is not None:
        settings.run.delay_ms = delay
    if output is not None:
        settings.output.output_file = output
    if log_level is not None:
        settings.output.log_level = log_level.upper()
    if log_file is not None:
        settings.output.log_file = log_file

    settings.run.quiet = settings.run.quiet or quiet
    settings.run.no_progress = settings.run.no_progress or no_progress
    settings.run.verbose = settings.run.verbose or verbose
    settings.output.no_color = settings.output.no_color or no_color

    return settings


def apply_http_options(
    settings: Settings,
    user_agent: Optional[str],
    timeout: Optional[float],
    insecure: bool,
    follow_redirect: bool,
    proxy: Optional[str],
    headers: Optional[list[str]],
    cookies: Optional[str],
    username: Optional[str],
    password: Optional[str],
    method: Optional[str],
) -> None:
    http = settings.http
    if user_agent is not None:
        http.user_agent = user_agent
    if timeout is not None:
        http.timeout = timeout
    if proxy is not None:
        http.proxy = proxy
    if headers:
        http.headers = list(headers)
    if cookies is not None:
        http.cookies = cookies
    if username is not None:
        http.username = username
    if password is not None:
        http.password = password
    if method is not None:
        http.method = method.upper()
    http.insecure = http.insecure or insecure
    http.follow_redirects = http.follow_redirects or follow_redirect


def apply_wildcard_options(settings: Settings, force_wildcard: bool, no_wildcard_check: bool) -> None:
    settings.run.force_wildcard = settings.run.force_wildcard or force_wildcard
    if no_wildcard_check:
        settings.run.wildcard_check = False


def fail(out: Console, error: Exception) -> None:
    out.print(f"[red]Error: {escape(str(error))}[/red]")
    raise typer.Exit(1)


@contextmanager
def settings_errors() -> Iterator[None]:
    """Report invalid file or command-line settings once and exit before probing."""
    try:
        yield
    except ValidationError as e:
        fail(console, ConfigurationError(describe_validation_error(e)))
    except ConfigurationError as e:
        fail(console, e)


def print_summary(out: Console, summary: RunSummary) -> None:
    table = Table(title="Run Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Candidates", f"{summary.done}/{summary.total}")
    table.add_row("Found", f"[green]{summary.found}[/green]")
    table.add_row("Errors", f"[red]{summary.errored}[/red]" if summary.errored else "0")
    table.add_row("Duration", f"{summary.duration_seconds:.2f}s")
    if summary.output_file:
        table.add_row("Output", escape(summary.output_file))

    out.print(table)


def execute(
    settings: Settings,
    build_mode: Callable[[], EnumerationMode],
    wordlist: Path,
    title: str,
    details: dict[str, object],
    timeout: Optional[float] = None,
) -> None:
    """Build the mode, show the configuration, run, and report."""
    from wordbuster.core.orchestrator import ScanOrchestrator

    log_file = settings.output.log_file
    configure_logging(
        level=settings.output.log_level,
        json_format=settings.output.log_json,
        log_file=str(log_file) if log_file else None,
    )
    out = Console(no_color=settings.output.no_color, highlight=False)

    try:
        mode = build_mode()
    except WordbusterError as e:
        fail(out, e)

    run_config = settings.run_config(timeout=timeout)

    if not run_config.quiet:
        display_legal_disclaimer(out)
        lines = [
            f"[bold cyan]Target:[/bold cyan] {escape(mode.target)}",
            f"[bold cyan]Word list:[/bold cyan] {escape(str(wordlist))}",
            f"[bold cyan]Threads:[/bold cyan] {run_config.threads}",
            f"[bold cyan]Timeout:[/bold cyan] {run_config.timeout}s",
        ]
        if run_config.delay:
            lines.append(f"[bold cyan]Delay:[/bold cyan] {run_config.delay * 1000:.0f}ms")
        for label, value in details.items():
            lines.append(f"[bold cyan]{label}:[/bold cyan] {escape(str(value))}")
        if settings.output.output_file:
            lines.append(f"[bold cyan]Output:[/bold cyan] {escape(str(settings.output.output_file))}")
        out.print(Panel.fit("\n".join(lines), title=title))

    orchestrator = ScanOrchestrator(settings, console=out, run_config=run_config)
    try:
        summary = asyncio.run(orchestrator.run(mode, wordlist))
    except WordbusterError as e:
        fail(out, e)
    except KeyboardInterrupt:
        out.print("[yellow]Interrupted[/yellow]")
        raise typer.Exit(130)

    if summary.stopped_on_wildcard:
        return

    if not run_config.quiet:
        print_summary(out, summary)


@app.command("dir")
def dir_command(
    url: str = typer.Option(..., "--url", "-u", help="Target URL"),
    wordlist: Path = WORDLIST,
    extensions: Optional[str] = typer.Option(None, "--extensions", "-x", help="Comma-separated file extensions"),
    status_codes: Optional[str] = typer.Option(
        None, "--status-codes", "-s", help="Positive status codes [default: 200,204,301,302,307,308,401,403,405]"
    ),
    status_codes_blacklist: Optional[str] = typer.Option(
        None, "--status-codes-blacklist", "-b", help="Negative status codes"
    ),
    exclude_length: Optional[str] = typer.Option(None, "--exclude-length", help="Comma-separated sizes to hide"),
    add_slash: bool = typer.Option(False, "--add-slash", "-f", help="Also try every path with a trailing slash"),
    expanded: bool = typer.Option(False, "--expanded", "-e", help="Print full URLs"),
    show_length: bool = typer.Option(False, "--show-length", "-l", help="Show response size"),
    discover_backup: bool = typer.Option(False, "--discover-backup", help="Probe backup copies of found paths"),
    force_wildcard: bool = FORCE_WILDCARD,
    no_wildcard_check: bool = NO_WILDCARD_CHECK,
    user_agent: Optional[str] = USER_AGENT,
    timeout: Optional[float] = HTTP_TIMEOUT,
    insecure: bool = INSECURE,
    follow_redirect: bool = FOLLOW_REDIRECT,
    proxy: Optional[str] = PROXY,
    header: Optional[list[str]] = HEADERS,
    cookies: Optional[str] = COOKIES,
    username: Optional[str] = USERNAME,
    password: Optional[str] = PASSWORD,
    method: Optional[str] = METHOD,
    threads: Optional[int] = THREADS,
    delay: Optional[float] = DELAY,
    output: Optional[Path] = OUTPUT,
    quiet: bool = QUIET,
    no_progress: bool = NO_PROGRESS,
    verbose: bool = VERBOSE,
    no_color: bool = NO_COLOR,
    config: Optional[Path] = CONFIG,
    log_level: Optional[str] = LOG_LEVEL,
    log_file: Optional[Path] = LOG_FILE,
) -> None:
    """Brute-force directories and files on a web server."""
    with settings_errors():
        settings = load_settings(
            config, threads, delay, output, quiet, no_progress, verbose, no_color, log_level, log_file
        )
        apply_http_options(
            settings, user_agent, timeout, insecure, follow_redirect, proxy, header, cookies, username, password, method
        )
        apply_wildcard_options(settings, force_wildcard, no_wildcard_check)

    exts = extensions.split(",") if extensions else []
    policy = FilterPolicy(
        allow_status=parse_codes(status_codes) or DEFAULT_STATUS_CODES,
        deny_status=parse_codes(status_codes_blacklist),
        deny_sizes=parse_codes(exclude_length),
    )

    execute(
        settings,
        lambda: DirMode(
            url,
            settings.http,
            extensions=exts,
            policy=policy,
            add_slash=add_slash,
            expanded=expanded,
            show_length=show_length,
            discover_backup=discover_backup,
        ),
        wordlist,
        title="Directory Enumeration",
        details={
            "Method": settings.http.method,
            "Status codes": ",".join(str(c) for c in sorted(policy.allow_status)),
            "Extensions": ",".join(exts) or "none",
        },
        timeout=settings.http.timeout,
    )


@app.command("dns")
def dns_command(
    domain: str = typer.Option(..., "--domain", "-d", help="Target domain"),
    wordlist: Path = WORDLIST,
    resolver: Optional[str] = typer.Option(None, "--resolver", "-r", help="Custom resolver (IP or IP:port)"),
    show_ips: bool = typer.Option(False, "--show-ips", "-i", help="Show resolved addresses"),
    show_cname: bool = typer.Option(False, "--show-cname", help="Show CNAME targets"),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Resolution timeout in seconds [default: 5]"),
    force_wildcard: bool = FORCE_WILDCARD,
    no_wildcard_check: bool = NO_WILDCARD_CHECK,
    threads: Optional[int] = THREADS,
    delay: Optional[float] = DELAY,
    output: Optional[Path] = OUTPUT,
    quiet: bool = QUIET,
    no_progress: bool = NO_PROGRESS,
    verbose: bool = VERBOSE,
    no_color: bool = NO_COLOR,
    config: Optional[Path] = CONFIG,
    log_level: Optional[str] = LOG_LEVEL,
    log_file: Optional[Path] = LOG_FILE,
) -> None:
    """Enumerate subdomains through DNS resolution."""
    with settings_errors():
        settings = load_settings(
            config, threads, delay, output, quiet, no_progress, verbose, no_color, log_level, log_file
        )
        apply_wildcard_options(settings, force_wildcard, no_wildcard_check)
        if resolver is not None:
            settings.dns.resolver = resolver
        if timeout is not None:
            settings.dns.timeout = timeout

    execute(
        settings,
        lambda: DnsMode(domain, settings.dns, show_ips=show_ips, show_cname=show_cname),
        wordlist,
        title="DNS Enumeration",
        details={"Resolver": settings.dns.resolver or "system"},
        timeout=settings.dns.timeout,
    )


@app.command("vhost")
def vhost_command(
    url: str = typer.Option(..., "--url", "-u", help="Target URL"),
    wordlist: Path = WORDLIST,
    domain: Optional[str] = typer.Option(None, "--domain", help="Domain appended to each word"),
    append_domain: bool = typer.Option(False, "--append-domain", help="Append --domain to each word"),
    exclude_length: Optional[str] = typer.Option(None, "--exclude-length", help="Comma-separated sizes to hide"),
    user_agent: Optional[str] = USER_AGENT,
    timeout: Optional[float] = HTTP_TIMEOUT,
    insecure: bool = INSECURE,
    follow_redirect: bool = FOLLOW_REDIRECT,
    proxy: Optional[str] = PROXY,
    header: Optional[list[str]] = HEADERS,
    cookies: Optional[str] = COOKIES,
    username: Optional[str] = USERNAME,
    password: Optional[str] = PASSWORD,
    threads: Optional[int] = THREADS,
    delay: Optional[float] = DELAY,
    output: Optional[Path] = OUTPUT,
    quiet: bool = QUIET,
    no_progress: bool = NO_PROGRESS,
    verbose: bool = VERBOSE,
    no_color: bool = NO_COLOR,
    config: Optional[Path] = CONFIG,
    log_level: Optional[str] = LOG_LEVEL,
    log_file: Optional[Path] = LOG_FILE,
) -> None:
    """Discover virtual hosts by varying the Host header."""
    with settings_errors():
        settings = load_settings(
            config, threads, delay, output, quiet, no_progress, verbose, no_color, log_level, log_file
        )
        apply_http_options(
            settings, user_agent, timeout, insecure, follow_redirect, proxy, header, cookies, username, password, None
        )
        policy = FilterPolicy(deny_sizes=parse_codes(exclude_length))

    execute(
        settings,
        lambda: VhostMode(url, settings.http, domain=domain, append_domain=append_domain, policy=policy),
        wordlist,
        title="Virtual Host Enumeration",
        details={"Domain": domain or "none"},
        timeout=settings.http.timeout,
    )


@app.command("fuzz")
def fuzz_command(
    url: str = typer.Option(..., "--url", "-u", help="Target URL (FUZZ marks the injection point)"),
    wordlist: Path = WORDLIST,
    data: Optional[str] = typer.Option(None, "--data", "-d", help="Request body (FUZZ is substituted)"),
    exclude_status: Optional[str] = typer.Option(None, "--exclude-status", "-b", help="Status codes to hide"),
    exclude_length: Optional[str] = typer.Option(None, "--exclude-length", help="Comma-separated sizes to hide"),
    filter_string: Optional[str] = typer.Option(None, "--filter-string", help="Hide responses containing this text"),
    user_agent: Optional[str] = USER_AGENT,
    timeout: Optional[float] = HTTP_TIMEOUT,
    insecure: bool = INSECURE,
    follow_redirect: bool = FOLLOW_REDIRECT,
    proxy: Optional[str] = PROXY,
    header: Optional[list[str]] = HEADERS,
    cookies: Optional[str] = COOKIES,
    username: Optional[str] = USERNAME,
    password: Optional[str] = PASSWORD,
    method: Optional[str] = METHOD,
    threads: Optional[int] = THREADS,
    delay: Optional[float] = DELAY,
    output: Optional[Path] = OUTPUT,
    quiet: bool = QUIET,
    no_progress: bool = NO_PROGRESS,
    verbose: bool = VERBOSE,
    no_color: bool = NO_COLOR,
    config: Optional[Path] = CONFIG,
    log_level: Optional[str] = LOG_LEVEL,
    log_file: Optional[Path] = LOG_FILE,
) -> None:
    """Fuzz URL, body, header or cookie values with the FUZZ keyword."""
    with settings_errors():
        settings = load_settings(
            config, threads, delay, output, quiet, no_progress, verbose, no_color, log_level, log_file
        )
        apply_http_options(
            settings, user_agent, timeout, insecure, follow_redirect, proxy, header, cookies, username, password, method
        )
        policy = FilterPolicy(
            deny_status=parse_codes(exclude_status),
            deny_sizes=parse_codes(exclude_length),
            exclude_text=filter_string,
        )

    execute(
        settings,
        lambda: FuzzMode(url, settings.http, data=data, policy=policy),
        wordlist,
        title="Fuzzing",
        details={"Method": settings.http.method},
        timeout=settings.http.timeout,
    )


def run_bucket(
    provider: str,
    wordlist: Path,
    max_files: Optional[int],
    timeout: Optional[float],
    threads: Optional[int],
    delay: Optional[float],
    output: Optional[Path],
    quiet: bool,
    no_progress: bool,
    verbose: bool,
    no_color: bool,
    config: Optional[Path],
    log_level: Optional[str],
    log_file: Optional[Path] = None,
) -> None:
    with settings_errors():
        settings = load_settings(
            config, threads, delay, output, quiet, no_progress, verbose, no_color, log_level, log_file
        )
        if max_files is not None:
            settings.bucket.max_files = max_files
        if timeout is not None:
            settings.bucket.timeout = timeout

    execute(
        settings,
        lambda: BucketMode(provider, settings.bucket, http=settings.http),
        wordlist,
        title=f"{provider.upper()} Bucket Enumeration",
        details={"Max files": settings.bucket.max_files},
        timeout=settings.bucket.timeout,
    )


MAX_FILES = typer.Option(None, "--max-files", "-m", help="Object keys listed per public bucket [default: 5]")
BUCKET_TIMEOUT = typer.Option(None, "--timeout", help="HTTP timeout in seconds [default: 10]")


@app.command("s3")
def s3_command(
    wordlist: Path = WORDLIST,
    max_files: Optional[int] = MAX_FILES,
    timeout: Optional[float] = BUCKET_TIMEOUT,
    threads: Optional[int] = THREADS,
    delay: Optional[float] = DELAY,
    output: Optional[Path] = OUTPUT,
    quiet: bool = QUIET,
    no_progress: bool = NO_PROGRESS,
    verbose: bool = VERBOSE,
    no_color: bool = NO_COLOR,
    config: Optional[Path] = CONFIG,
    log_level: Optional[str] = LOG_LEVEL,
    log_file: Optional[Path] = LOG_FILE,
) -> None:
    """Enumerate AWS S3 buckets."""
    run_bucket(
        "s3", wordlist, max_files, timeout, threads, delay, output,
        quiet, no_progress, verbose, no_color, config, log_level, log_file,
    )


@app.command("gcs")
def gcs_command(
    wordlist: Path = WORDLIST,
    max_files: Optional[int] = MAX_FILES,
    timeout: Optional[float] = BUCKET_TIMEOUT,
    threads: Optional[int] = THREADS,
    delay: Optional[float] = DELAY,
    output: Optional[Path] = OUTPUT,
    quiet: bool = QUIET,
    no_progress: bool = NO_PROGRESS,
    verbose: bool = VERBOSE,
    no_color: bool = NO_COLOR,
    config: Optional[Path] = CONFIG,
    log_level: Optional[str] = LOG_LEVEL,
    log_file: Optional[Path] = LOG_FILE,
) -> None:
    """Enumerate Google Cloud Storage buckets."""
    run_bucket(
        "gcs", wordlist, max_files, timeout, threads, delay, output,
        quiet, no_progress, verbose, no_color, config, log_level, log_file,
    )


@app.command("tftp")
def tftp_command(
    server: str = typer.Option(..., "--server", "-s", help="TFTP server (host or host:port)"),
    wordlist: Path = WORDLIST,
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Reply timeout in seconds [default: 5]"),
    threads: Optional[int] = THREADS,
    delay: Optional[float] = DELAY,
    output: Optional[Path] = OUTPUT,
    quiet: bool = QUIET,
    no_progress: bool = NO_PROGRESS,
    verbose: bool = VERBOSE,
    no_color: bool = NO_COLOR,
    config: Optional[Path] = CONFIG,
    log_level: Optional[str] = LOG_LEVEL,
    log_file: Optional[Path] = LOG_FILE,
) -> None:
    """Enumerate files served by a TFTP server."""
    with settings_errors():
        settings = load_settings(
            config, threads, delay, output, quiet, no_progress, verbose, no_color, log_level, log_file
        )
        if timeout is not None:
            settings.tftp.timeout = timeout

    execute(
        settings,
        lambda: TftpMode(server, settings.tftp),
        wordlist,
        title="TFTP Enumeration",
        details={"Max concurrency": settings.tftp.max_concurrency},
        timeout=settings.tftp.timeout,
    )


if __name__ == "__main__":
    app()
