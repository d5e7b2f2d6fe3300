#!/usr/bin/env python3
"""Smoke test against a live DeFactuur account, read-only.

Usage:
    python scripts/smoke_api.py                      # token from DEFACTUUR_API_TOKEN / .env
    python scripts/smoke_api.py --token <TOKEN> -v   # verbose mode with sample data
    python scripts/smoke_api.py --username <USER> --password <PASS>
"""

import argparse
import sys
from typing import Optional

from defactuur import DeFactuurClient, DeFactuurError
from defactuur.core.logging import get_logger, setup_logging

logger = get_logger("scripts.smoke_api")


def check_endpoint(name: str, fetch, verbose: bool) -> bool:
    try:
        records = fetch()
    except DeFactuurError as e:
        print(f"❌ {name}: {e}")
        return False

    print(f"✅ {name}: {len(records)} records")
    if verbose:
        for record in records[:3]:
            print(f"   {record.to_payload()}")
    return True


def main(argv: Optional[list] = None) -> int:
    parser = argparse.ArgumentParser(description="DeFactuur API smoke test")
    parser.add_argument("--token", help="API token (defaults to settings)")
    parser.add_argument("--username", help="Account username, to fetch a token")
    parser.add_argument("--password", help="Account password, to fetch a token")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show sample data")
    args = parser.parse_args(argv)

    setup_logging(debug=args.verbose)

    with DeFactuurClient(api_token=args.token, user_agent="smoke-api/1.0") as api:
        if args.username and args.password:
            try:
                api.api_token = api.get_api_token(args.username, args.password)
            except DeFactuurError as e:
                print(f"❌ Authentication failed: {e}")
                return 1

        if not api.api_token:
            print("❌ No API token, pass --token or set DEFACTUUR_API_TOKEN")
            return 1

        logger.info(f"Checking {api.api_url}/{api.api_version}")
        results = [
            check_endpoint("Clients", api.list_clients, args.verbose),
            check_endpoint("Invoices", api.list_invoices, args.verbose),
            check_endpoint("Unpaid invoices", lambda: api.list_invoices(["unpaid"]), args.verbose),
            check_endpoint("Products", api.list_products, args.verbose),
        ]

    return 0 if all(results) else 1


if __name__ == "__main__":
    sys.exit(main())
