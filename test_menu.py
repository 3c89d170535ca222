"""
Arcania - Interactive Menu Self-Tests

Run with: python test_menu.py   (or: pytest)

Drives menu commands with scripted answers (no terminal needed):
- A failing command reports ERROR and the menu keeps running
- Changing the backend URL keeps the logged-in session
- A rejected generation keeps the previous result
"""

import builtins
import contextlib
import getpass
import io

import arcania_main
from arcania import auth
from arcania.crypto import FixedSequenceSource


class scripted_session:
    """Feed answers to input()/getpass(), silence clear_screen, capture output."""

    def __init__(self, answers):
        self.answers = iter(answers)
        self.output = io.StringIO()

    def _answer(self, prompt=""):
        # Extra prompts (pause) get an empty answer
        return next(self.answers, "")

    def __enter__(self):
        self._saved = (builtins.input, getpass.getpass, arcania_main.clear_screen)
        builtins.input = self._answer
        getpass.getpass = self._answer
        arcania_main.clear_screen = lambda: None
        self._redirect = contextlib.redirect_stdout(self.output)
        self._redirect.__enter__()
        return self

    def __exit__(self, *exc):
        self._redirect.__exit__(*exc)
        builtins.input, getpass.getpass, arcania_main.clear_screen = self._saved
        return False


class DownTransport:
    base_url = "http://127.0.0.1:9"

    def request(self, method, path, payload=None):
        raise auth.TransportError("connection refused")


def test_failing_command_keeps_menu_alive():
    print("Testing Per-Command Error Handling...")

    state = arcania_main.new_state()
    # Salt generation fails before any request: not an AuthError
    state['client'] = auth.AuthClient(DownTransport(), source=FixedSequenceSource([]))
    with scripted_session(["a@example.com", "account-pw", "master-pw"]) as session:
        arcania_main.run_command('6', state)
    assert "ERROR:" in session.output.getvalue()
    assert "exhausted" in session.output.getvalue()
    print("  [OK] Unexpected exception reported, not raised")

    # Backend URL without a scheme, then log in
    state = arcania_main.new_state()
    with scripted_session(["example.com", "", "a@example.com", "pw"]) as session:
        arcania_main.run_command('9', state)
        arcania_main.run_command('7', state)
    assert auth.LOGIN_UNAVAILABLE in session.output.getvalue()
    assert state['client'].logged_in_user is None
    print("  [OK] Malformed backend URL does not end the session")


def test_change_backend_keeps_login():
    print("Testing Backend URL Change...")

    state = arcania_main.new_state()
    client = state['client']
    client.logged_in_user = "alice@example.com"
    with scripted_session(["http://127.0.0.1:5001"]):
        arcania_main.run_command('9', state)
    assert state['client'] is client
    assert client.logged_in_user == "alice@example.com"
    assert client.transport.base_url == "http://127.0.0.1:5001"
    print("  [OK] Session survives the switch")


def test_failed_generation_keeps_last_output():
    print("Testing Failed Generation...")

    state = arcania_main.new_state()
    state['output'] = "previous-result"
    previous_request = state['request']
    # Length -1, then defaults for the four class questions
    with scripted_session(["-1", "", "", "", ""]) as session:
        arcania_main.run_command('1', state)
    assert "ERROR:" in session.output.getvalue()
    assert state['output'] == "previous-result"
    assert state['request'] is previous_request
    print("  [OK] Previous result still available to copy")

    with scripted_session(["4", "", "", "", ""]):
        arcania_main.run_command('1', state)
    assert len(state['output']) == 4
    print("  [OK] Successful generation replaces it")


def run_all_tests():
    print("=" * 70)
    print("Arcania - Menu Test Suite")
    print("=" * 70)
    print()

    tests = [
        test_failing_command_keeps_menu_alive,
        test_change_backend_keeps_login,
        test_failed_generation_keeps_last_output,
    ]

    failed = []

    for test in tests:
        try:
            test()
            print()
        except Exception as e:
            print(f"  [FAIL] TEST FAILED: {e}")
            failed.append((test.__name__, e))
            print()

    print("=" * 70)
    if not failed:
        print("[OK] ALL TESTS PASSED!")
    else:
        print(f"[FAIL] {len(failed)} TESTS FAILED:")
        for name, error in failed:
            print(f"  - {name}: {error}")
    print("=" * 70)

    return len(failed) == 0


if __name__ == "__main__":
    import sys
    success = run_all_tests()
    sys.exit(0 if success else 1)
