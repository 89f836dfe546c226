#!/usr/bin/env python3
"""Price Chain keeper.

Refreshes a set of trading pairs from on-chain price sources (TWAP pool
oracles or round feeds), folding every accepted update into a per-pair
keccak256 hash chain and appending the audit events to a CBOR log.

Can also verify an existing audit log offline.
"""

import argparse
import asyncio
import logging
import os
import sys

from .src.AuditLog import AuditLog
from .src.ContractUtility import ContractUtility
from .src.HostEnvironment import Web3Host
from .src.PriceChain import PriceChain
from .src.PriceChainKeeper import PriceChainKeeper
from .src.sources import Web3SourceFactory, get_available_sources
from .src.UpdateGate import DEFAULT_UPDATE_INTERVAL

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def parse_pairs(pairs_str: str | None) -> dict[bytes, str]:
    """Parse a comma-separated pair list into pair keys and source addresses.

    Format: pair1=address1,pair2=address2
    Example: ETH/USD=0x5f4eC3Df9cbd43714FE2740f5E3616155c5b8419

    Pair names are kept exactly as written (no case folding).

    :param pairs_str: Comma-separated pair string.
    :returns: Dict mapping pair keys to source addresses.
    :raises ValueError: If an item has no "=" or an empty pair name.
    """
    if not pairs_str:
        return {}

    pairs = {}
    for item in pairs_str.split(","):
        item = item.strip()
        if not item:
            continue
        if "=" not in item:
            raise ValueError(f"Invalid pair '{item}'. Expected 'PAIR=0xADDRESS'")
        pair, address = item.rsplit("=", 1)
        pair = pair.strip()
        if not pair:
            raise ValueError(f"Invalid pair '{item}'. Pair name is empty")
        pairs[pair.encode("utf-8")] = address.strip()
    return pairs


def verify_log(path: str) -> int:
    """Replay an audit log and report the final chain hash of every pair.

    :param path: CBOR audit log path.
    :returns: Process exit code (0 if consistent, 1 otherwise).
    """
    events = AuditLog.load(path)
    tampered = AuditLog.first_mismatch(events)
    if tampered is not None:
        logger.error(
            f"Chain broken at {tampered.pair!r} block {tampered.block_height}: "
            f"recorded 0x{tampered.chain_hash.hex()}"
        )
        return 1

    for pair, chain_hash in AuditLog.replay(events).items():
        count = sum(1 for e in events if e.pair == pair)
        logger.info(f"{pair.decode('utf-8', 'replace')}: {count} updates, 0x{chain_hash.hex()}")
    logger.info(f"Audit log {path} is consistent ({len(events)} events)")
    return 0


def main() -> None:
    """Main entry point for the Price Chain CLI."""
    available_sources = get_available_sources()

    parser = argparse.ArgumentParser(
        description="Price Chain: rate-limited, hash-chained price records",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Available source kinds:
  {', '.join(available_sources)}

Examples:
  # Refresh two Chainlink-style feeds once a day
  python -m pricechain.main --source-kind feed \\
      --pairs ETH/USD=0x5f4eC3Df9cbd43714FE2740f5E3616155c5b8419 \\
      --audit-log audit.cbor

  # Hourly TWAP of a pool
  python -m pricechain.main --source-kind twap --update-interval 3600 \\
      --pairs WETH/USDC=0x88e6A0c2dDD26FEEb64F039a2c41296FcB3f5640

  # Verify an audit log offline
  python -m pricechain.main --verify-log audit.cbor

Environment variables (CLI args take precedence):
  NETWORK, RPC_URL, RPC_TIMEOUT, SOURCE_KIND, PAIRS, UPDATE_INTERVAL,
  REFRESH_PERIOD, AUDIT_LOG
""",
    )

    parser.add_argument(
        "--pairs",
        type=str,
        help="Comma-separated PAIR=ADDRESS items (e.g., ETH/USD=0x5f4e...)",
        default=os.environ.get("PAIRS"),
    )

    parser.add_argument(
        "--source-kind",
        dest="source_kind",
        type=str,
        help=f"Price source kind. Available: {', '.join(available_sources)}",
        default=os.environ.get("SOURCE_KIND") or "feed",
    )

    parser.add_argument(
        "--network",
        type=str,
        help="Network name (ethereum, sapphire, sapphire-testnet, localnet) or RPC URL",
        default=os.environ.get("NETWORK") or "localnet",
    )

    parser.add_argument(
        "--rpc-timeout",
        dest="rpc_timeout",
        type=float,
        help="Timeout for RPC requests in seconds (default: 10.0)",
        default=float(os.environ.get("RPC_TIMEOUT") or "10.0"),
    )

    parser.add_argument(
        "--update-interval",
        dest="update_interval",
        type=int,
        help=f"Minimum seconds between updates of a pair, also the TWAP window "
        f"(default: {DEFAULT_UPDATE_INTERVAL})",
        default=int(os.environ.get("UPDATE_INTERVAL") or DEFAULT_UPDATE_INTERVAL),
    )

    parser.add_argument(
        "--refresh-period",
        dest="refresh_period",
        type=int,
        help="Seconds between keeper passes (minimum: 1, default: 300)",
        default=int(os.environ.get("REFRESH_PERIOD") or "300"),
    )

    parser.add_argument(
        "--audit-log",
        dest="audit_log",
        type=str,
        help="CBOR file the audit events are appended to",
        default=os.environ.get("AUDIT_LOG"),
    )

    parser.add_argument(
        "--verify-log",
        dest="verify_log",
        type=str,
        help="Verify the given audit log and exit",
    )

    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single refresh pass and exit",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )

    args = parser.parse_args()

    # Configure logging level
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if args.verify_log:
        sys.exit(verify_log(args.verify_log))

    # Validate arguments
    if args.update_interval < 1:
        parser.error("--update-interval must be at least 1 second")

    if args.refresh_period < 1:
        parser.error("--refresh-period must be at least 1 second")

    if args.source_kind not in available_sources:
        parser.error(
            f"Unknown source kind: {args.source_kind}. "
            f"Available: {', '.join(available_sources)}"
        )

    try:
        pairs = parse_pairs(args.pairs)
    except ValueError as e:
        parser.error(str(e))

    if not pairs:
        parser.error("At least one PAIR=ADDRESS must be specified")

    # Log configuration
    logger.info("=" * 60)
    logger.info("Price Chain Keeper")
    logger.info("=" * 60)
    logger.info(f"Network:           {args.network}")
    logger.info(f"Source Kind:       {args.source_kind}")
    logger.info(f"Trading Pairs:     {', '.join(p.decode() for p in pairs)}")
    logger.info(f"Update Interval:   {args.update_interval}s")
    logger.info(f"Refresh Period:    {args.refresh_period}s")
    logger.info(f"Audit Log:         {args.audit_log or 'disabled'}")
    logger.info("=" * 60)

    try:
        w3 = ContractUtility(args.network, timeout=args.rpc_timeout).w3
        chain = PriceChain(
            source_factory=Web3SourceFactory(w3, args.source_kind),
            host=Web3Host(w3),
            update_interval=args.update_interval,
            listeners=[AuditLog(args.audit_log)] if args.audit_log else [],
        )
        keeper = PriceChainKeeper(chain, pairs, refresh_period=args.refresh_period)
        asyncio.run(keeper.run(once=args.once))
    except KeyboardInterrupt:
        logger.info("Shutting down...")
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
