#!/usr/bin/env python3
"""
Issue a development bearer token for a user.

Production tokens come from the identity provider; this helper signs one
locally with JWT_SECRET_KEY so the API can be exercised by hand.

    python scripts/issue_token.py <user-id> [metadata-role]
"""

import sys

from outreach.api.auth import generate_token
from outreach.config import TOKEN_EXPIRY_HOURS


def main(argv):
    if not argv:
        print("usage: issue_token.py <user-id> [metadata-role]", file=sys.stderr)
        return 2

    user_id = argv[0]
    metadata = {"role": argv[1]} if len(argv) > 1 else {}
    token = generate_token(user_id, metadata)

    print("=" * 70)
    print(f"Token for {user_id} (valid {TOKEN_EXPIRY_HOURS}h, metadata={metadata})")
    print("=" * 70)
    print(token)
    print()
    print("Example:")
    print(f'  curl -H "Authorization: Bearer {token}" http://localhost:8000/api/me')
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
