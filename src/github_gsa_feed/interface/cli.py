"""Command-line interface — argument parsing and wiring of the adapters."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Sequence

import httpx

from github_gsa_feed.domain.exceptions import ConfigurationError
from github_gsa_feed.domain.ports.feed_transport import FeedTransport
from github_gsa_feed.infrastructure.config import Settings
from github_gsa_feed.infrastructure.github_rest_adapter import GitHubRestAdapter
from github_gsa_feed.infrastructure.gsa_feed_form import GsaFeedForm
from github_gsa_feed.services.harvest_feeds import HarvestFeedsUseCase

logger = logging.getLogger(__name__)

USAGE_HINT = "This app needs 3 params: GSADataSource, GitHub_Server and GSA_Server"

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_UPLOAD_FAILED = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="github-gsa-feed",
        description=(
            "Harvest owners, repositories and READMEs from a GitHub server "
            "and push them to a Google Search Appliance as feeds."
        ),
    )
    # Optional at the argparse level so a missing value gets our own message.
    parser.add_argument("datasource", nargs="?", help="GSA datasource name")
    parser.add_argument("github_url", nargs="?", help="GitHub server base address")
    parser.add_argument("gsa_url", nargs="?", help="GSA base address")
    output = parser.add_mutually_exclusive_group()
    output.add_argument(
        "--output-dir", type=Path, help="write both feed documents here instead of posting them"
    )
    output.add_argument(
        "--dry-run", action="store_true", help="print both feed documents instead of posting them"
    )
    parser.add_argument("--log-level", help="override GSA_FEED_LOG_LEVEL")
    return parser


def parse_arguments(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse *argv*; raise ``ConfigurationError`` unless all three run parameters are given."""
    args = build_parser().parse_args(argv)
    missing = [
        name for name in ("datasource", "github_url", "gsa_url")
        if not (getattr(args, name) or "").strip()
    ]
    if missing:
        raise ConfigurationError(f"Missing parameters: {', '.join(missing)}. {USAGE_HINT}")
    return args


def run(args: argparse.Namespace, settings: Settings) -> int:
    """Harvest, then deliver both documents; return the process exit status."""
    with httpx.Client(timeout=httpx.Timeout(settings.http_timeout), follow_redirects=True) as client:
        try:
            source = GitHubRestAdapter(
                client,
                args.github_url,
                per_page=settings.per_page,
                max_pages=settings.max_pages,
                readme_filename=settings.readme_filename,
                user_agent=settings.user_agent,
            )
            form: FeedTransport = GsaFeedForm(
                client, args.gsa_url, port=settings.gsa_feed_port, path=settings.gsa_feed_path
            )
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc

        result = HarvestFeedsUseCase(source, args.datasource).execute()

        if args.dry_run:
            for document in result.documents:
                document.write_to_console()
            return EXIT_OK

        if args.output_dir is not None:
            args.output_dir.mkdir(parents=True, exist_ok=True)
            for document in result.documents:
                document.write_to_file(
                    args.output_dir / f"{document.datasource}-{document.feed_type.value}.xml"
                )
            return EXIT_OK

        sent = [form.send(document) for document in result.documents]
        if not all(sent):
            logger.error("%d of %d feed documents were not accepted", sent.count(False), len(sent))
            return EXIT_UPLOAD_FAILED
        return EXIT_OK
