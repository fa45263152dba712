"""Command-line entry point: core-deploy."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import find_dotenv, load_dotenv

from .chain import Web3ChainClient
from .config import load_config
from .constants import DEFAULT_CONTRACT_NAME, DEFAULT_NETWORK, NETWORK_CONFIG
from .exceptions import ConfigurationError, DeploymentError
from .factory import ContractFactory
from .orchestrator import DeploymentOrchestrator
from .paths import get_report_path
from .report import save_report

logger = logging.getLogger(__name__)

EXIT_FAILED = 1
EXIT_CONFIG = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="core-deploy",
        description="Deploy a compiled contract and verify it on-chain.",
    )
    parser.add_argument(
        "--network",
        choices=sorted(NETWORK_CONFIG),
        default=DEFAULT_NETWORK,
        help=f"Target network (default: {DEFAULT_NETWORK})",
    )
    parser.add_argument(
        "--contract",
        default=DEFAULT_CONTRACT_NAME,
        help=f"Contract name to deploy (default: {DEFAULT_CONTRACT_NAME})",
    )
    parser.add_argument("--rpc-url", help="Override the network's RPC URL")
    parser.add_argument("--artifacts", type=Path, help="Compiled artifacts directory")
    parser.add_argument("--timeout", type=float, help="Seconds to wait for confirmation")
    parser.add_argument(
        "--save",
        action="store_true",
        help="Write the report to deployments/<network>/<contract>.json",
    )
    parser.add_argument("--output", type=Path, help="Write the report to this path")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Warnings and errors only")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    level = logging.INFO
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    load_dotenv(find_dotenv(usecwd=True))

    try:
        config = load_config(
            args.network,
            contract_name=args.contract,
            rpc_url=args.rpc_url,
            artifacts_dir=args.artifacts,
            confirmation_timeout=args.timeout,
        )
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG

    logger.debug("Using %r", config)
    client = Web3ChainClient.from_config(config)
    orchestrator = DeploymentOrchestrator(
        client=client,
        factory=ContractFactory(client, config.artifacts_dir),
        contract_name=config.contract_name,
        network=config.network_label,
        currency_symbol=config.currency_symbol,
        block_explorer_url=config.block_explorer_url,
    )

    try:
        report = orchestrator.run()
    except DeploymentError as e:
        print(f"Deployment failed in state {e.state}: {e.kind}: {e}", file=sys.stderr)
        print(json.dumps(e.to_dict(), indent=2), file=sys.stderr)
        return EXIT_FAILED

    print(json.dumps(report.to_dict(), indent=2))

    output_paths = []
    if args.save:
        output_paths.append(get_report_path(config.network, config.contract_name))
    if args.output is not None:
        output_paths.append(args.output)
    for path in output_paths:
        try:
            save_report(report, path)
        except OSError as e:
            print(f"Cannot save deployment report to {path}: {e}", file=sys.stderr)
            return EXIT_FAILED
        logger.info("Saved deployment report to %s", path)

    return 0


if __name__ == "__main__":
    sys.exit(main())
