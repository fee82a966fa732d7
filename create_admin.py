"""
Script to create an admin (or organizer) account in the users file
Run this from the project root: python create_admin.py --email you@example.com
"""

import argparse
import getpass
import sys

from redweb import create_app
from redweb.errors import ApiError
from redweb.services.users import create_account


def create_admin(app, email, password, role="admin", first_name="Admin", last_name="User"):
    """Create the account. Returns the stripped user, or None if the email is taken."""
    with app.app_context():
        return create_account(
            {
                "email": email,
                "password": password,
                "firstName": first_name,
                "lastName": last_name,
            },
            role,
        )


def main(argv=None):
    parser = argparse.ArgumentParser(description="Create an admin or organizer account")
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", help="prompted for when omitted")
    parser.add_argument("--role", default="admin", choices=["admin", "organizer", "user"])
    parser.add_argument("--first-name", default="Admin")
    parser.add_argument("--last-name", default="User")
    args = parser.parse_args(argv)

    password = args.password or getpass.getpass("Password: ")
    app = create_app()

    try:
        user = create_admin(app, args.email, password, args.role, args.first_name, args.last_name)
    except ApiError as e:
        print(f"❌ Error creating account: {e.message}")
        return 1

    if user is None:
        print(f"❌ User already exists: {args.email}")
        return 1

    print(f"✅ {args.role.capitalize()} account created successfully!")
    print(f"   Email: {user['email']}")
    print(f"   Id: {user['id']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
