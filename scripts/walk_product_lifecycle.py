#!/usr/bin/env python
"""Walk a product through lifecycle states against a running edit service.

Loads the product's edit form, then requests each state of the given path
in order, printing the form after every step. Stops at the first refused
transition.

Usage:
    # Submit a draft for review, then publish it
    python scripts/walk_product_lifecycle.py --product 42 \
        --path pending_review published \
        --cookie "connect.sid=..."

    # Only show the current edit form
    python scripts/walk_product_lifecycle.py --product 42 --token "Bearer ..."
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

import httpx

STATES = ("draft", "pending_review", "published", "archived", "rejected")


def print_form(form: dict) -> None:
    """Print the interesting parts of an edit form."""
    product = form.get("product", {})
    transitions = [t["value"] for t in form.get("available_transitions", [])]
    badges = [b["label"] for b in form.get("tag_badges", [])]

    print(f"\n{'='*60}")
    print(f"Product:     {product.get('id')} {product.get('name')}")
    print(f"State:       {form.get('state_label')} ({form.get('state_description')})")
    print(f"Visibility:  {form.get('visibility')}")
    print(f"Editable:    {form.get('can_edit')}")
    print(f"Deletable:   {form.get('can_delete')}")
    print(f"Next states: {', '.join(transitions) or '(none)'}")
    print(f"Tags:        {', '.join(badges) or '(none)'}")
    print(f"{'='*60}")


async def walk(
    base_url: str,
    product_id: int,
    path: list[str],
    headers: dict[str, str],
) -> dict:
    """Load the edit form and request each state of ``path`` in turn.

    Returns:
        Last edit form, or an error description
    """
    async with httpx.AsyncClient(base_url=base_url, timeout=30.0, headers=headers) as client:
        response = await client.get(f"/seller/products/{product_id}/edit")
        if response.status_code != 200:
            print(f"Error loading product: {response.status_code} {response.text}")
            return {"error": response.text, "status_code": response.status_code}

        form = response.json()
        print_form(form)

        for target in path:
            offered = [t["value"] for t in form.get("available_transitions", [])]
            if target not in offered:
                print(f"\n{target} is not offered from {form['product']['state']}; stopping")
                return {"error": f"transition to {target} not offered", "form": form}

            print(f"\nRequesting transition to {target}...")
            response = await client.post(
                f"/seller/products/{product_id}/state",
                json={"state": target},
            )
            if response.status_code != 200:
                print(f"Transition refused: {response.status_code} {response.text}")
                return {"error": response.text, "status_code": response.status_code}

            form = response.json()
            print_form(form)

        return form


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Walk a product through lifecycle states",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument(
        "--product",
        type=int,
        required=True,
        help="Product ID",
    )
    parser.add_argument(
        "--path",
        nargs="*",
        choices=STATES,
        default=[],
        help="States to request in order",
    )
    parser.add_argument(
        "--url",
        default="http://localhost:8000",
        help="Edit service base URL (default: http://localhost:8000)",
    )
    parser.add_argument(
        "--cookie",
        default=None,
        help="Session cookie forwarded to the catalog",
    )
    parser.add_argument(
        "--token",
        default=None,
        help="Authorization header value forwarded to the catalog",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Save the final form JSON to file",
    )

    return parser.parse_args()


async def main() -> int:
    """Main entry point."""
    args = parse_args()

    if not args.cookie and not args.token:
        print("Error: provide --cookie or --token")
        return 1

    headers: dict[str, str] = {}
    if args.cookie:
        headers["Cookie"] = args.cookie
    if args.token:
        headers["Authorization"] = args.token

    result = await walk(args.url, args.product, args.path, headers)

    if args.output:
        args.output.write_text(json.dumps(result, indent=2, default=str))
        print(f"\nResult saved to: {args.output}")

    return 1 if "error" in result else 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
