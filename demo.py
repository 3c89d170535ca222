"""
Arcania - Guided Journey (single run, no user input)

Run: python demo.py

Walks through what the interactive menu (`arcania_main.py`) does and
explains what happens under the hood:
 - Password generation (and the lowercase fallback)
 - Passphrases and usernames
 - Determinism under a fixed random source
 - Signup and login against an in-process backend
 - A failed login (generic error)

All steps print the UI-style output plus a short "behind the scenes" note.
"""

import os
import tempfile
from functools import partial
from textwrap import indent

from arcania import auth, crypto, generator
from arcania.crypto import FixedSequenceSource
from arcania.generator import GenerationRequest
from arcania.server import create_app


LINE = "=" * 70


def step(title: str, menu_option: str, code_path: str):
    print(f"\n{LINE}\n{title}  (menu option {menu_option}, code: {code_path})\n{LINE}")


def explain(title: str, body: str):
    print(f"\n[Behind the scenes] {title}")
    print(indent(body.strip(), "  "))


class InProcessTransport:
    """Sends AuthClient requests to a Flask test client instead of the network."""

    def __init__(self, app):
        self.client = app.test_client()
        self.base_url = "in-process"

    def request(self, method, path, payload=None):
        resp = self.client.open(path, method=method, json=payload)
        print(f"  -> {method} {path}  <- {resp.status_code}")
        return resp.status_code, resp.get_json(silent=True) or {}


def demo_generators():
    step("Generate password", "1", "arcania/generator.py:generate_password")
    output, _ = generator.generate(GenerationRequest(kind="password", length=20))
    print(f"Generated: {output}")
    explain("Unbiased selection", """
Each character is charset[random_below(len(charset))]. random_below draws
32-bit values and throws away any draw >= (2**32 // n) * n, so every
character is exactly equally likely.
""")

    request = GenerationRequest(kind="password", length=12, uppercase=False,
                                lowercase=False, digits=False, symbols=False)
    output, effective = generator.generate(request)
    print(f"\nAll classes unticked -> {output}")
    print(f"Effective options: lowercase={effective.lowercase}")
    explain("Fallback", """
An empty selection uses lowercase letters and hands back a request with
lowercase=True so the menu can show what was really used.
""")

    step("Generate passphrase", "2", "arcania/generator.py:generate_passphrase")
    print(generator.generate_passphrase(4))
    print(generator.generate_passphrase(5, separator=".", capitalize=True))

    step("Generate username", "3", "arcania/generator.py:generate_username")
    print(generator.generate_username())

    step("Fixed random source", "-", "arcania/crypto.py:FixedSequenceSource")
    for _ in range(2):
        source = FixedSequenceSource([0, 1, 42])
        print(generator.generate_username(source))
    explain("Determinism", """
Any generator accepts a source. Replaying the same draws gives the same
output, which is how the tests pin exact results.
""")


def demo_auth():
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)
    app = create_app(db_path)
    client = auth.AuthClient(InProcessTransport(app),
                             derive=partial(crypto.derive_auth_hash, n=2**14))
    try:
        step("Sign up", "6", "arcania/auth.py:AuthClient.signup")
        client.signup("demo@example.com", "account-password", "master-password")
        print("✓ Signup successful! Please log in.")
        row = app.config["ACCOUNT_STORE"].get_account("demo@example.com")
        print(f"Stored auth hash: {row['auth_hash'].hex()[:32]}...")
        explain("Zero knowledge", """
Two salts are generated locally. The account and master passwords are run
through scrypt on the client; the server stores salts and hashes only.
""")

        step("Log in", "7", "arcania/auth.py:AuthClient.login")
        client.login("demo@example.com", "account-password")
        print(f"✓ Login successful! Welcome back, {client.logged_in_user}.")

        step("Log in with the wrong password", "7", "arcania/auth.py:AuthClient.login")
        try:
            client.login("demo@example.com", "not-my-password")
        except auth.LoginError as e:
            print(f"ERROR: {e}")
        explain("Generic errors", """
Unknown email and wrong password produce the same message, so the form
does not reveal which accounts exist.
""")
    finally:
        app.config["ACCOUNT_STORE"].close()
        for suffix in ("", "-wal", "-shm"):
            if os.path.exists(db_path + suffix):
                os.unlink(db_path + suffix)


def main():
    step("Arcania - Guided Journey", "-", "arcania_main.py")
    demo_generators()
    demo_auth()
    print(f"\n{LINE}\nDone.\n{LINE}")


if __name__ == "__main__":
    main()
