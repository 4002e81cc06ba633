"""totpkey CLI.

Usage:
    python -m totpkey status                     # Configuration summary
    python -m totpkey init-db                    # Create tables
    python -m totpkey add-tenant example.com     # Register a tenant realm
    python -m totpkey enroll alice@example.com   # Generate/reuse and store a secret
    python -m totpkey enroll alice@example.com --refresh
    python -m totpkey reset alice@example.com    # Clear the stored secret
    python -m totpkey keygen example.com         # Print a fresh secret
    python -m totpkey master-key                 # Print a new TOTP_MASTER_KEY
"""

from totpkey.cli import main

if __name__ == "__main__":
    main()
