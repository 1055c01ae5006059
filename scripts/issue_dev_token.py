#!/usr/bin/env python3
"""
Script to mint a bearer token for local development.

The API trusts whatever identity a valid token carries and creates the user
row on first use, so this stands in for a real identity provider.

Usage: python scripts/issue_dev_token.py
       python scripts/issue_dev_token.py --sub alice --email alice@example.com --first-name Alice
"""
import sys
import os
import argparse
from datetime import timedelta
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from pulseconnect.core.config import settings
from pulseconnect.core.security import create_access_token


def main():
    parser = argparse.ArgumentParser(description="Issue a development access token")
    parser.add_argument("--sub", default="local-dev-user", help="Subject (stable user identity)")
    parser.add_argument("--email", default="dev@example.com")
    parser.add_argument("--first-name", default="Local")
    parser.add_argument("--last-name", default="Developer")
    parser.add_argument("--days", type=int, default=30, help="Token lifetime in days")
    args = parser.parse_args()

    if settings.secret_key_generated:
        print("⚠️  SECRET_KEY is not set in the environment or .env; the server will not accept this token.")

    token = create_access_token(
        {
            "sub": args.sub,
            "email": args.email,
            "first_name": args.first_name,
            "last_name": args.last_name,
        },
        expires_delta=timedelta(days=args.days),
    )
    print(f"Token for {args.sub} ({settings.APP_NAME}):")
    print(token)
    print(f"\ncurl -H 'Authorization: Bearer {token}' http://localhost:{settings.PORT}/api/v1/auth/user")


if __name__ == "__main__":
    main()
