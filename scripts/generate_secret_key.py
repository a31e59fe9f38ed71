#!/usr/bin/env python3
"""
Generate the HS256 signing secret shared with the identity provider.
Run this and copy the output to your .env file.
"""

import secrets

if __name__ == "__main__":
    print("=" * 60)
    print("Token Signing Secret Generator")
    print("=" * 60)

    secret_key = secrets.token_hex(32)

    print(f"\nJWT_SECRET_KEY={secret_key}")
    print("\nThe identity provider must sign session tokens with the same value.")
    print("=" * 60)
