"""CLI entry point for the Linkup client.

Usage:
    linkup search -q "python 3.13 release" --output sourcedAnswer
    linkup fetch --url https://example.com
    linkup balance
"""

import json
import logging
import sys
from typing import Callable, Optional

import click

from .api.client import LinkupClient
from .api.schema import (
    VALID_DEPTHS,
    VALID_OUTPUT_TYPES,
    Depth,
    FetchRequest,
    OutputType,
    SearchRequest,
)
from .config import ClientConfig, load_config
from .errors import ConfigurationError, LinkupError

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

EXIT_ERROR = 1
EXIT_USAGE = 2


def setup_logging(level: int = logging.WARNING) -> None:
    """Configure the root logger to write to stderr.

    stdout is reserved for JSON output.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(handler)


def split_csv(value: Optional[str]) -> list[str]:
    """Split a comma-separated list, dropping blanks."""
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def print_payload(raw: bytes) -> None:
    """Print JSON indented, or verbatim if it does not parse."""
    try:
        click.echo(json.dumps(json.loads(raw), indent=2, ensure_ascii=False))
    except ValueError:
        click.echo(raw.decode("utf-8", errors="replace"))


def output_error(message: str) -> None:
    click.echo(f"error: {message}", err=True)


def client_options(default_timeout: float) -> Callable:
    """Options shared by all subcommands."""
    def decorator(f):
        f = click.option("--timeout", type=float, default=default_timeout,
                         show_default=True, help="Deadline in seconds, retries included.")(f)
        f = click.option("--base", "base_url", default=None,
                         help="Override base URL (for testing).")(f)
        f = click.option("--ua", "user_agent", default=None,
                         help="Custom User-Agent.")(f)
        f = click.option("--retries", "max_retries", type=click.IntRange(min=0),
                         default=None, help="Max retries for 429/5xx and network errors.")(f)
        return f
    return decorator


def build_config(ctx: click.Context, **overrides) -> ClientConfig:
    """Resolve config from file, env and flags; exit 2 without an API key."""
    try:
        config = load_config(ctx.obj.get("config_file"), **overrides)
    except ConfigurationError as e:
        output_error(str(e))
        ctx.exit(EXIT_USAGE)

    if not config.api_key:
        output_error("missing LINKUP_API_KEY")
        ctx.exit(EXIT_USAGE)
    return config


def run(ctx: click.Context, config: ClientConfig, call: Callable[[LinkupClient], bytes]) -> None:
    """Run one call and print its payload, mapping errors to exit codes."""
    try:
        with LinkupClient(config) as client:
            raw = call(client)
    except LinkupError as e:
        logger.debug("Request failed", exc_info=True)
        output_error(str(e))
        ctx.exit(EXIT_ERROR)
    print_payload(raw)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--config", "config_file", type=click.Path(dir_okay=False), default=None,
              help="YAML config file (default: ~/.config/linkup/config.yaml).")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.version_option(package_name="linkup-client")
@click.pass_context
def cli(ctx: click.Context, config_file: Optional[str], verbose: bool) -> None:
    """linkup CLI (unofficial).

    Reads the API key from LINKUP_API_KEY or the config file.
    """
    setup_logging(logging.DEBUG if verbose else logging.WARNING)
    ctx.ensure_object(dict)
    ctx.obj["config_file"] = config_file


@cli.command()
@click.option("-q", "--query", "q", default="", help="Query text.")
@click.option("--depth", type=click.Choice(sorted(VALID_DEPTHS)),
              default=Depth.STANDARD.value, show_default=True)
@click.option("--output", "output_type", type=click.Choice(sorted(VALID_OUTPUT_TYPES)),
              default=OutputType.SEARCH_RESULTS.value, show_default=True)
@click.option("--from", "from_date", default="", help="From date YYYY-MM-DD.")
@click.option("--to", "to_date", default="", help="To date YYYY-MM-DD.")
@click.option("--include", default="", help="Comma-separated include domains.")
@click.option("--exclude", default="", help="Comma-separated exclude domains.")
@click.option("--images", is_flag=True, help="Include images.")
@click.option("--inline", is_flag=True, help="Include inline citations.")
@click.option("--sources", is_flag=True, help="Include sources in response.")
@click.option("--schema", default="", help="Structured output schema (JSON string).")
@client_options(default_timeout=30.0)
@click.pass_context
def search(ctx, q, depth, output_type, from_date, to_date, include, exclude,
           images, inline, sources, schema, timeout, base_url, user_agent, max_retries):
    """Search the web."""
    config = build_config(ctx, base_url=base_url, user_agent=user_agent,
                          max_retries=max_retries)
    try:
        request = SearchRequest(
            q=q,
            depth=depth,
            output_type=output_type,
            include_images=images,
            from_date=from_date,
            to_date=to_date,
            exclude_domains=split_csv(exclude),
            include_domains=split_csv(include),
            include_inline_citations=inline,
            structured_output_schema=schema or None,
            include_sources=sources,
        )
    except ConfigurationError as e:
        output_error(str(e))
        ctx.exit(EXIT_USAGE)

    run(ctx, config, lambda client: client.search(request, timeout=timeout).raw_json())


@cli.command()
@click.option("--url", default="", help="URL to fetch.")
@click.option("--rawhtml", is_flag=True, help="Include raw HTML.")
@click.option("--render", is_flag=True, help="Render JavaScript.")
@click.option("--images", is_flag=True, help="Extract images.")
@client_options(default_timeout=30.0)
@click.pass_context
def fetch(ctx, url, rawhtml, render, images, timeout, base_url, user_agent, max_retries):
    """Fetch a single URL."""
    config = build_config(ctx, base_url=base_url, user_agent=user_agent,
                          max_retries=max_retries)
    request = FetchRequest(
        url=url,
        include_raw_html=rawhtml,
        render_js=render,
        extract_images=images,
    )
    run(ctx, config, lambda client: client.fetch(request, timeout=timeout).raw_json())


@cli.command()
@client_options(default_timeout=15.0)
@click.pass_context
def balance(ctx, timeout, base_url, user_agent, max_retries):
    """Show the remaining credit balance."""
    config = build_config(ctx, base_url=base_url, user_agent=user_agent,
                          max_retries=max_retries)

    def call(client: LinkupClient) -> bytes:
        return json.dumps(client.get_balance(timeout=timeout).to_dict()).encode("utf-8")

    run(ctx, config, call)


def main():
    """Main CLI entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
