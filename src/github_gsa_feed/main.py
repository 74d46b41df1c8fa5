from __future__ import annotations
import logging
import sys
from typing import Sequence
from github_gsa_feed.domain.exceptions import ConfigurationError
from github_gsa_feed.infrastructure.config import get_settings
from github_gsa_feed.interface.cli import EXIT_USAGE, parse_arguments, run

logger = logging.getLogger(__name__)


def main(argv: Sequence[str] | None = None) -> int:
    """Run one harvest-and-feed cycle."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    )
    try:
        args = parse_arguments(argv)
        if args.log_level:
            logging.getLogger().setLevel(args.log_level.upper())
        return run(args, settings)
    except ConfigurationError as exc:
        logger.error("%s", exc)
        print(exc, file=sys.stderr)
        return EXIT_USAGE


if __name__ == "__main__":
    sys.exit(main())
