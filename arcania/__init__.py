"""
Arcania - Credential Tool

Client-side signup/login that only ever sends derived hashes to the server,
plus a random password / passphrase / username generator.

Key Features:
- Unbiased randomness: rejection sampling over 32-bit CSPRNG draws
- Zero-knowledge auth: salts generated and passwords hashed (scrypt) locally
- Deterministic testing: any generator accepts a fixed random source

Components:
- crypto.py: Random source, bounded selection, salts, auth hashes
- generator.py: Password, passphrase and username generators
- auth.py: Signup/login client
- accounts.py: SQLite account store for the reference backend
- server.py: Flask reference backend

Usage:
    python arcania_main.py                  # Interactive menu
    python -m arcania.server --port 5000    # Reference backend
"""

__version__ = "0.1.0"
__author__ = "Arcania Team"
