#!/usr/bin/env python3
"""
Basic usage examples for the TalkBank client library.

Credentials are read from TALKBANK_PARTNER_ID and TALKBANK_SIGNING_KEY;
TALKBANK_BASE_URL overrides the test environment.
"""

import os
import sys

from talkbank import Client, DispatchTarget, TalkBankError


def main():
    """Run basic usage examples."""
    partner_id = os.environ.get("TALKBANK_PARTNER_ID")
    signing_key = os.environ.get("TALKBANK_SIGNING_KEY")
    base_url = os.environ.get("TALKBANK_BASE_URL")

    if not partner_id or not signing_key:
        print("Set TALKBANK_PARTNER_ID and TALKBANK_SIGNING_KEY")
        return 1

    print("=== TalkBank Client Usage Examples ===\n")

    with Client(partner_id, signing_key, base_url) as client:
        print(f"1. Client created for: {client.base_url}\n")

        # Inspect a signed request without sending it
        print("2. Building a signed request...")
        request = client.build_request('/transactions', query={'limit': 50, 'skip': 500})
        print(f"   {request.method} {request.url}")
        for name, value in request.headers.as_dict().items():
            print(f"   {name}: {value}")
        print()

        print("3. Client-side endpoint dispatch target...")
        request = client.build_request('/client/v1/status/abc', target=DispatchTarget.HOST_REWRITTEN)
        print(f"   {request.method} {request.url}\n")

        try:
            print("4. Requesting account balance...")
            response = client.account_balance()
            print(f"   ✓ {response.status_code}: {response.text}")
        except TalkBankError as e:
            print(f"   ✗ {e}")
            return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
