#!/usr/bin/env python3
"""
Generate secure secrets for Scoreline
Run this script to generate the required SECRET_KEY
"""

import secrets


def generate_secrets():
    """Generate a secure random key for the application"""
    print("🔐 Generating secure secrets for Scoreline...")
    print("=" * 50)

    secret_key = secrets.token_urlsafe(32)

    print(f"SECRET_KEY={secret_key}")

    print("=" * 50)
    print("📝 Copy this value to your .env file")
    print("⚠️  Keep secrets secure and never commit them to version control!")


if __name__ == "__main__":
    generate_secrets()
