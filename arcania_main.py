"""
Arcania - Interactive Menu

Main user interface for the credential tool.
Features:
- Generate passwords, passphrases and usernames
- Regenerate with the same options
- Copy the last result to the clipboard
- Sign up / log in against the backend (hashes derived locally)
- Change the backend URL
"""

import os
import sys
import getpass
import logging
from dataclasses import replace

from arcania import auth
from arcania.generator import (
    DEFAULT_PASSWORD_LENGTH, DEFAULT_WORD_COUNT, GenerationRequest, generate
)


def clear_screen():
    try:
        os.system("cls" if os.name == "nt" else "clear")
    except OSError:
        pass

def pause():
    input("\nPress Enter to continue...")

def show_notification(message, kind="info"):
    marks = {"success": "✓", "error": "ERROR:", "info": "-"}
    print(f"\n{marks.get(kind, '-')} {message}")

def ask_int(prompt, default):
    try:
        return int(input(f"{prompt} [{default}]: ").strip() or default)
    except ValueError:
        return default

def ask_yes(prompt, default=True):
    hint = "Y/n" if default else "y/N"
    answer = input(f"{prompt} [{hint}]: ").strip().lower()
    if not answer:
        return default
    return answer in ('y', 'yes')

def run_generator(state, request):
    """Generate and print; on failure the previous output is kept."""
    try:
        output, effective = generate(request)
    except ValueError as e:
        show_notification(str(e), "error")
        return
    if effective.lowercase and not request.lowercase:
        show_notification("No character class selected - using lowercase letters.", "info")
    print(f"\nGenerated: {output}")
    state['output'], state['request'] = output, effective

def cmd_password(state):
    clear_screen()
    print("=== Generate Password ===\n")
    last = state['request'] if state['request'].kind == "password" else GenerationRequest()
    request = GenerationRequest(
        kind="password",
        length=ask_int("Length", last.length or DEFAULT_PASSWORD_LENGTH),
        uppercase=ask_yes("Include uppercase?", last.uppercase),
        lowercase=ask_yes("Include lowercase?", last.lowercase),
        digits=ask_yes("Include numbers?", last.digits),
        symbols=ask_yes("Include symbols?", last.symbols),
    )
    run_generator(state, request)
    pause()

def cmd_passphrase(state):
    clear_screen()
    print("=== Generate Passphrase ===\n")
    last = state['request'] if state['request'].kind == "passphrase" else GenerationRequest()
    # A blank answer keeps the default "-"
    separator = input("Separator [-]: ") or None
    request = GenerationRequest(
        kind="passphrase",
        word_count=ask_int("Number of words", last.word_count or DEFAULT_WORD_COUNT),
        separator=separator,
        capitalize=ask_yes("Capitalize words?", last.capitalize),
    )
    run_generator(state, request)
    pause()

def cmd_username(state):
    clear_screen()
    print("=== Generate Username ===\n")
    run_generator(state, replace(state['request'], kind="username"))
    pause()

def cmd_regenerate(state):
    clear_screen()
    print(f"=== Regenerate ({state['request'].kind}) ===\n")
    run_generator(state, state['request'])
    pause()

def cmd_copy(state):
    clear_screen()
    print("=== Copy to Clipboard ===\n")
    if not state['output']:
        print("Nothing generated yet.")
        pause()
        return
    try:
        import pyperclip
        pyperclip.copy(state['output'])
        show_notification("Copied to clipboard!", "success")
    except ImportError:
        print("(pyperclip not installed - run: pip install pyperclip)")
        print(f"Value: {state['output']}")
    except pyperclip.PyperclipException as e:
        show_notification(f"Failed to copy to clipboard ({e}). Please copy manually.", "error")
    pause()

def cmd_signup(state):
    clear_screen()
    print("=== Sign Up ===\n")
    email = input("Email: ").strip()
    if not email:
        print("Email required.")
        pause()
        return
    account_pw = getpass.getpass("Account password: ")
    master_pw = getpass.getpass("Master password: ")
    if not account_pw or not master_pw:
        print("Cancelled.")
        pause()
        return
    print("\nDeriving hashes locally...")
    try:
        state['client'].signup(email, account_pw, master_pw)
        show_notification("Signup successful! Please log in.", "success")
    except auth.AuthError as e:
        show_notification(str(e), "error")
    pause()

def cmd_login(state):
    clear_screen()
    print("=== Log In ===\n")
    email = input("Email: ").strip()
    account_pw = getpass.getpass("Account password: ")
    print("\nDeriving hash locally...")
    try:
        state['client'].login(email, account_pw)
        show_notification("Login successful! Welcome back.", "success")
    except auth.AuthError as e:
        show_notification(str(e), "error")
    pause()

def cmd_logout(state):
    clear_screen()
    print("=== Log Out ===\n")
    if state['client'].logged_in_user:
        state['client'].logout()
        print("✓ Logged out.")
    else:
        print("Not logged in.")
    pause()

def cmd_server_url(state):
    clear_screen()
    print("=== Change Backend URL ===\n")
    client = state['client']
    current = client.transport.base_url
    print(f"Backend URL [{current}]: ", end="")
    url = input().strip() or current
    # Same client, so a logged-in session survives the switch
    client.transport = auth.HttpTransport(url)
    print(f"\n✓ Backend set to {url}")
    pause()

def printMenu(state):
    client = state['client']
    print("Arcania - Interactive Menu")
    print("=" * 40)
    print(f"Backend: {client.transport.base_url}")
    print(f"User: {client.logged_in_user or '(not logged in)'}")
    if state['output']:
        print(f"Last: {state['output']}")
    print("\n 1) Generate password")
    print(" 2) Generate passphrase")
    print(" 3) Generate username")
    print(" 4) Regenerate")
    print(" 5) Copy last result")
    print(" 6) Sign up")
    print(" 7) Log in")
    print(" 8) Log out")
    print(" 9) Change backend URL")
    print(" 0) Exit")

COMMANDS = {
    '1': cmd_password,
    '2': cmd_passphrase,
    '3': cmd_username,
    '4': cmd_regenerate,
    '5': cmd_copy,
    '6': cmd_signup,
    '7': cmd_login,
    '8': cmd_logout,
    '9': cmd_server_url,
}

def new_state():
    return {
        'client': auth.AuthClient(auth.HttpTransport(auth.API_URL)),
        'request': GenerationRequest(),
        'output': None,
    }

def run_command(choice, state):
    """Run one menu command; any failure is reported and the menu keeps going."""
    command = COMMANDS.get(choice)
    if not command:
        return
    try:
        command(state)
    except Exception as e:
        show_notification(str(e), "error")
        pause()

def main_menu():
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")
    state = new_state()
    while True:
        clear_screen()
        printMenu(state)
        c = input("\n> ").strip()
        if c == '0':
            print("\nGoodbye!")
            break
        run_command(c, state)

if __name__ == "__main__":
    try:
        main_menu()
    except KeyboardInterrupt:
        print("\nExiting...")
        sys.exit(0)
