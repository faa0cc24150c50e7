#!/usr/bin/env python3
"""
Captivate Publisher - Uploads and publishes podcast episodes to Captivate.fm
"""

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional

from captivate import CaptivateClient, CaptivateError, EpisodeDraft, DEFAULT_BASE_URL

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format="[%(asctime)s] %(levelname)s: %(filename)s:%(funcName)s(%(lineno)s): %(message)s"
)
logger = logging.getLogger(__name__)


@dataclass
class PublisherConfig:
    """Complete publisher configuration."""
    # Captivate credentials
    user_id: str = ""
    api_key: str = ""
    base_url: str = DEFAULT_BASE_URL

    # Media uploads can be large, so allow plenty of time
    api_timeout: float = 300.0


def load_config(config_path: Path) -> PublisherConfig:
    """Load configuration from JSON file."""
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        data = json.load(f)

    cv = data.get("captivate", {})

    config = PublisherConfig(
        user_id=cv.get("user_id", ""),
        api_key=cv.get("api_key", ""),
        base_url=cv.get("base_url", DEFAULT_BASE_URL),
        api_timeout=data.get("api_timeout", 300.0),
    )
    if not config.user_id or not config.api_key:
        raise ValueError(f"captivate.user_id and captivate.api_key are required in {config_path}")
    return config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Captivate Publisher - Uploads and publishes podcast episodes to Captivate.fm"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        required=True,
        help="Path to configuration file"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log HTTP requests"
    )
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("shows", help="List your shows")

    episodes = commands.add_parser("episodes", help="List the episodes of a show")
    episodes.add_argument("show_id")

    artwork = commands.add_parser("artwork", help="Upload new show artwork")
    artwork.add_argument("show_id")
    artwork.add_argument("file", type=Path)

    publish = commands.add_parser("publish", help="Upload a media file and create an episode")
    publish.add_argument("show_id")
    publish.add_argument("file", type=Path)
    publish.add_argument("--title", required=True)
    publish.add_argument("--date", required=True, help="Publish date, YYYY-MM-DD HH:MM:SS")
    publish.add_argument("--number", type=int, required=True, help="Episode number")
    publish.add_argument("--type", default="full", choices=["full", "trailer", "bonus"])
    publish.add_argument("--notes", required=True, help="Show notes (HTML allowed)")
    publish.add_argument("--summary", required=True)
    publish.add_argument("--season", type=int)
    publish.add_argument("--subtitle")
    publish.add_argument("--author")
    publish.add_argument("--status", help="e.g. Draft, Published, Scheduled")
    publish.add_argument("--explicit", action=argparse.BooleanOptionalAction, default=None)
    publish.add_argument("--itunes-block", action=argparse.BooleanOptionalAction, default=None)
    publish.add_argument("--episode-url")
    publish.add_argument("--episode-art")
    publish.add_argument("--donation-link")
    publish.add_argument("--donation-text")

    return parser


def build_draft(args: argparse.Namespace, media_id: str) -> EpisodeDraft:
    """Turn publish arguments into an episode draft for the uploaded media."""
    return EpisodeDraft(
        show_id=args.show_id,
        title=args.title,
        media_id=media_id,
        publish_date=args.date,
        episode_number=args.number,
        episode_type=args.type,
        show_notes=args.notes,
        summary=args.summary,
        subtitle=args.subtitle,
        author=args.author,
        explicit=args.explicit,
        status=args.status,
        episode_season=args.season,
        donation_link=args.donation_link,
        donation_text=args.donation_text,
        episode_url=args.episode_url,
        episode_art=args.episode_art,
        itunes_block=args.itunes_block,
    )


async def run_command(client: CaptivateClient, args: argparse.Namespace) -> Any:
    """Authenticate, then run the selected command and return its result."""
    await client.authenticate_user()

    if args.command == "shows":
        return await client.get_user_shows()

    if args.command == "episodes":
        return await client.list_episodes(args.show_id)

    if args.command == "artwork":
        logger.info(f"Uploading artwork {args.file} to show {args.show_id}")
        return await client.create_show_artwork(args.file, args.show_id)

    if args.command == "publish":
        logger.info(f"Uploading {args.file} to show {args.show_id}")
        media_id = await client.upload_episode(args.file, args.show_id)
        logger.info(f"Uploaded media {media_id}, creating episode '{args.title}'")
        return await client.create_episode(build_draft(args, media_id))

    raise ValueError(f"Unknown command: {args.command}")


async def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    if args.verbose:
        logging.getLogger("captivate").setLevel(logging.DEBUG)

    try:
        config = load_config(args.config)
        async with CaptivateClient(
            config.user_id,
            config.api_key,
            base_url=config.base_url,
            timeout=config.api_timeout,
        ) as client:
            result = await run_command(client, args)
    except CaptivateError as e:
        logger.error(f"Captivate request failed: {e}")
        return 1
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        raise

    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
