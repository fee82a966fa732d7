"""
Quick verification script for donation counters

Compares every user's totalDonations / lastDonationDate with the
donation-history file and, with --fix, writes the corrected values.
"""

import argparse
import sys

from redweb import create_app
from redweb.services.donations import reconcile_counters


def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--fix", action="store_true", help="write corrected counters back")
    args = parser.parse_args(argv)

    app = create_app()

    with app.app_context():
        print("\n" + "=" * 60)
        print("DONATION COUNTER VERIFICATION")
        print("=" * 60)

        drift = reconcile_counters(fix=args.fix)

        if not drift:
            print("\n✅ All users match the donation history")
        for row in drift:
            print(f"\n📋 {row['email']} ({row['userId']})")
            print(f"    totalDonations:   {row['storedTotal']} -> {row['expectedTotal']}")
            print(f"    lastDonationDate: {row['storedLastDonationDate']} -> {row['expectedLastDonationDate']}")

        if drift and not args.fix:
            print("\n⚠️  Run again with --fix to repair")

        print("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(main())
