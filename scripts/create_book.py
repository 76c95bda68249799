"""
Walk the book creation wizard against a running Storybook API.

Usage:
    python scripts/create_book.py --request examples/mia.json
    python scripts/create_book.py --request examples/mia.json \
        --first-name Ana --last-name Diaz --email ana@example.com --format digital

The request file holds the wizard fields as JSON (camelCase or snake_case keys).
Checkout only happens when --email is given.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from storybook.client.book_wizard import FORMAT_PRICES, BookWizard, WizardError, WizardStep  # noqa: E402


def parse_args(argv: list) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create a personalised storybook through the API.")
    parser.add_argument("--request", required=True, help="Path to a JSON file with the book choices.")
    parser.add_argument("--base-url", default="http://localhost:8000", help="Storybook API base URL.")
    parser.add_argument("--format", default="hardcover", choices=sorted(FORMAT_PRICES), help="Book format.")
    parser.add_argument("--first-name", default=None)
    parser.add_argument("--last-name", default=None)
    parser.add_argument("--email", default=None, help="Checkout contact email; omit to stop at the preview.")
    parser.add_argument("--address", default=None)
    parser.add_argument("--city", default=None)
    parser.add_argument("--state", default=None)
    parser.add_argument("--zip", default=None)
    return parser.parse_args(argv)


def main(argv: list) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    wizard = BookWizard(base_url=args.base_url)
    wizard.update(**json.loads(Path(args.request).read_text()))

    try:
        while wizard.step < WizardStep.PREVIEW:
            print(f"Step {int(wizard.step)}: {wizard.step.name.lower()}")
            wizard.next_step()
    except WizardError as e:
        print(f"Stopped at step {wizard.step.name.lower()}: {e.detail}", file=sys.stderr)
        return 1

    book = wizard.generated_book
    print(f"\nBook {book['bookId']}: {book['title']}")
    print(f"  Cover : {book['coverImageUrl']}")
    for number, page in enumerate(book.get("pages", []), start=1):
        print(f"  Page {number}: {page['imageUrl']}")

    if not args.email:
        return 0

    try:
        order = wizard.checkout(
            first_name=args.first_name or "",
            last_name=args.last_name or "",
            email=args.email,
            book_format=args.format,
            address=args.address,
            city=args.city,
            state=args.state,
            zip=args.zip,
        )
    except WizardError as e:
        print(f"Checkout failed: {e.detail}", file=sys.stderr)
        return 1

    print(f"\nOrder {order['id']} ({order['status']}): {order['format']} {order['total']}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
