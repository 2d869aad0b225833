#!/usr/bin/env python3
"""
Create or verify a payment from the terminal and print the Result.

Keys come from EASYPAY_* environment variables (a .env file is loaded) or
from --config. With --mock no request leaves the machine: the gateway is
replaced by a scripted client that accepts the charge, reports one pending
poll, then verifies.

Usage (from repo root):
  python scripts/run_payment.py create --mobile 0900123456 --amount 500 --method telebirr --mock
  python scripts/run_payment.py verify-payment REF123 --method mpesa
  python scripts/run_payment.py verify-transaction tx-abc123
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from easypay import EasyPay, load_client_config
from easypay.integrations.clients.mocks.payments import (
    MockPaymentsClient,
    accepted_charge,
    pending_verification,
    successful_verification,
)


def setup_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stdout,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="EasyPay command line client")
    parser.add_argument("--config", type=Path, help="YAML file with client settings")
    parser.add_argument("--mock", action="store_true", help="Use the scripted mock gateway")
    parser.add_argument("--verbose", "-v", action="store_true")
    sub = parser.add_subparsers(dest="command", required=True)

    create = sub.add_parser("create", help="Create (and for inline methods, verify) a payment")
    create.add_argument("--mobile", required=True)
    create.add_argument("--amount", required=True, type=float)
    create.add_argument("--method", default=None, help="telebirr, cbebirr, ebirr, mpesa or chapa")
    create.add_argument("--tx-ref", default=None)
    create.add_argument("--email", default=None)
    create.add_argument("--first-name", default=None)
    create.add_argument("--last-name", default=None)

    verify = sub.add_parser("verify-payment", help="Poll an inline payment until it settles")
    verify.add_argument("reference")
    verify.add_argument("--method", required=True)

    lookup = sub.add_parser("verify-transaction", help="Look up a hosted checkout transaction")
    lookup.add_argument("reference")
    return parser


def mock_client(reference: str) -> MockPaymentsClient:
    return MockPaymentsClient(
        charge=[accepted_charge(reference)],
        verify=[pending_verification(reference), successful_verification(reference)],
        hosted=[{"message": "Hosted Link", "status": "success", "data": {"checkout_url": "https://checkout.example/mock"}}],
        lookup=[successful_verification(reference)],
    )


async def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    overrides = {"retry_delay": 0} if args.mock else {}
    config = load_client_config(args.config, **overrides)

    reference = getattr(args, "reference", None) or getattr(args, "tx_ref", None) or "MOCK-REF"
    client = EasyPay(config, http_client=mock_client(reference) if args.mock else None)

    if args.command == "create":
        result = await client.create_payment(
            mobile=args.mobile,
            amount=args.amount,
            payment_type=args.method,
            tx_ref=args.tx_ref,
            email=args.email,
            first_name=args.first_name,
            last_name=args.last_name,
        )
    elif args.command == "verify-payment":
        result = await client.verify_payment(args.reference, args.method)
    else:
        result = await client.verify_transaction(args.reference)

    print(json.dumps(asdict(result), indent=2, default=str))
    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
