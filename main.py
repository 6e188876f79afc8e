"""
Bracket Liquidity Provision - Main Entry Point
Deploys, funds and places orders for a fleet of bracket Safes through a master Safe
"""

import sys
from loguru import logger

from provision.cli import run

# Configure logging
logger.remove()
logger.add(
    sys.stderr,
    format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
    level="INFO"
)
logger.add(
    "data/logs/provision.log",
    rotation="1 day",
    retention="7 days",
    format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} - {message}",
    level="DEBUG"
)


def main() -> int:
    """Main entry point"""
    logger.info("=" * 70)
    logger.info("Bracket Liquidity Provision")
    logger.info("=" * 70)

    return run(sys.argv[1:])


if __name__ == "__main__":
    sys.exit(main())
