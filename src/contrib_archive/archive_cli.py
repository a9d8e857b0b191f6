#!/usr/bin/env python3
"""
CLI entry point for the contribution archiver.

Fetches the user's contributions and comment threads and archives every
changed version under the data directory.

Usage:
    contrib-archive
    contrib-archive --config config/archive.yaml
    contrib-archive --test-handles 12345abc,67890def -v
    contrib-archive --index-only

Environment:
    CG_COOKIE       Session cookie (required)
    CG_USER_ID      Numeric user id (required)
    DATA_DIR        Archive root (default: ./data)
    EXTRA_HANDLES   Comma-separated handles to archive even if not listed
    TEST_HANDLES    Comma-separated allow-list of handles to process
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import find_dotenv, load_dotenv

from contrib_archive.config import ArchiveConfig, SyncSettings
from contrib_archive.connectors import CodinGameClient, HttpConnector
from contrib_archive.core.exceptions import ConfigError, RequestFailed, StorageError
from contrib_archive.runner import SyncRunner
from contrib_archive.storage import ArchiveStore


logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    log_level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def build_client(settings: SyncSettings) -> CodinGameClient:
    """Build the API client from settings."""
    connector = HttpConnector(
        name="codingame",
        rate_limit_delay=settings.rate_limit_delay,
        timeout=settings.timeout,
        user_agent=settings.user_agent,
    )
    return CodinGameClient(
        connector=connector,
        session_cookie=settings.session_cookie,
        user_id=settings.user_id,
        base_url=settings.base_url,
    )


def build_store(settings: SyncSettings) -> ArchiveStore:
    """Build the archive store from settings."""
    return ArchiveStore(base_dir=settings.data_dir, pretty_print=settings.pretty_print)


def load_config(args: argparse.Namespace) -> ArchiveConfig:
    """Load configuration and apply command-line overrides."""
    config = ArchiveConfig(config_path=args.config)

    if args.data_dir:
        config.set("storage.data_dir", str(args.data_dir))
    if args.extra_handles is not None:
        config.set("sync.extra_handles", args.extra_handles)
    if args.test_handles is not None:
        config.set("sync.test_handles", args.test_handles)

    return config


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Archive contributions and their comment threads",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--config",
        type=Path,
        help="Path to configuration YAML file",
    )

    parser.add_argument(
        "--data-dir",
        type=Path,
        help="Archive root directory (overrides DATA_DIR)",
    )

    parser.add_argument(
        "--extra-handles",
        help="Comma-separated handles to archive even if not listed",
    )

    parser.add_argument(
        "--test-handles",
        help="Comma-separated allow-list of handles to process",
    )

    parser.add_argument(
        "--index-only",
        action="store_true",
        help="Only rebuild index.json from the existing snapshots",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose/debug logging",
    )

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    setup_logging(verbose=args.verbose)
    load_dotenv(find_dotenv(usecwd=True))

    try:
        config = load_config(args)
        if args.index_only:
            store = ArchiveStore(
                base_dir=Path(config.get("storage.data_dir", "data")),
                pretty_print=bool(config.get("storage.pretty_print", True)),
            )
            store.rebuild_index()
            return 0
        settings = config.build_settings()
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        return 1
    except StorageError as e:
        logger.error(f"Storage error: {e}")
        return 1

    logger.info(f"Archiving contributions of user {settings.user_id} into {settings.data_dir}")

    client = build_client(settings)
    try:
        store = build_store(settings)
        runner = SyncRunner(client=client, store=store)
        metrics = runner.sync(
            extra_handles=settings.extra_handles,
            test_handles=settings.test_handles,
        )
        logger.info(
            f"Update completed: {metrics['contributions_updated']} contribution and "
            f"{metrics['comments_updated']} comment snapshots written, "
            f"{metrics['failures']} failures"
        )
        return 0

    except RequestFailed as e:
        logger.error(f"Cannot fetch contribution lists: {e}")
        return 1
    except StorageError as e:
        logger.error(f"Storage error: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 1
    finally:
        client.close()


if __name__ == "__main__":
    sys.exit(main())
