"""Build a correctly signed verify-payment body for local testing.

Prints the JSON payload, or posts it to a running checkout service with
`--post`.
"""

import argparse
import json
import os

import httpx

from guidepay.common.signatures import sign


def main() -> None:
    """Parse CLI args, sign the identifiers, print or post the payload."""

    parser = argparse.ArgumentParser(description="Sign a Razorpay order/payment pair.")
    parser.add_argument("--order-id", required=True)
    parser.add_argument("--payment-id", required=True)
    parser.add_argument("--secret", default=os.getenv("RAZORPAY_KEY_SECRET"), help="Defaults to RAZORPAY_KEY_SECRET")
    parser.add_argument("--name", default="Test Buyer")
    parser.add_argument("--email", default="buyer@example.com")
    parser.add_argument("--phone", default=None)
    parser.add_argument("--post", dest="base_url", default=None, help="Base URL, e.g. http://localhost:10000")
    args = parser.parse_args()

    if not args.secret:
        raise SystemExit("Provide --secret or set RAZORPAY_KEY_SECRET")

    payload = {
        "razorpay_order_id": args.order_id,
        "razorpay_payment_id": args.payment_id,
        "razorpay_signature": sign(args.order_id, args.payment_id, args.secret.encode("utf-8")),
        "name": args.name,
        "email": args.email,
    }
    if args.phone:
        payload["phone"] = args.phone

    if args.base_url is None:
        print(json.dumps(payload, indent=2))
        return

    resp = httpx.post(f"{args.base_url.rstrip('/')}/verify-payment", json=payload, timeout=30.0)
    print(resp.status_code, json.dumps(resp.json(), indent=2))


if __name__ == "__main__":
    main()
