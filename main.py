#!/usr/bin/env python3
"""
PartnerHub - Interactive Menu Launcher
Run this file to access all partner management commands through a simple menu.

Usage:
    python main.py
"""

import subprocess
import sys
import os

# Ensure we're running from the project root with the venv python
PYTHON = sys.executable
HUB = [PYTHON, "partnerhub/cli/main.py"]

# Project root on PYTHONPATH so 'partnerhub' package is importable
ENV = os.environ.copy()
ENV["PYTHONPATH"] = os.path.dirname(os.path.abspath(__file__))


def run(args: list[str]):
    """Run a PartnerHub CLI command and return to menu when done."""
    print()
    subprocess.run(HUB + args, env=ENV)
    print()
    input("  Press Enter to return to menu...")


def prompt(label: str, required: bool = True) -> str:
    """Prompt user for input. Returns empty string if optional and skipped."""
    while True:
        value = input(f"  {label}: ").strip()
        if value:
            return value
        if not required:
            return ""
        print("  (required - please enter a value)")


def prompt_optional(label: str) -> str:
    return prompt(f"{label} (optional, Enter to skip)", required=False)


def clear():
    os.system("cls" if os.name == "nt" else "clear")


# =============================================================================
# COMMAND HANDLERS
# =============================================================================

def companies_list():
    args = ["companies", "list"]
    q = prompt_optional("Search name or document")
    s = prompt_optional("Filter by status (active/inactive)")
    lo = prompt_optional("Minimum commission (%)")
    hi = prompt_optional("Maximum commission (%)")
    start = prompt_optional("Registered from (YYYY-MM-DD)")
    end = prompt_optional("Registered until (YYYY-MM-DD)")
    pm = prompt_optional("Partnership manager")
    owner = prompt_optional("Account owner")
    if q: args += ["--search", q]
    if s: args += ["--status", s]
    if lo: args += ["--commission-min", lo]
    if hi: args += ["--commission-max", hi]
    if start: args += ["--from", start]
    if end: args += ["--to", end]
    if pm: args += ["--partnership-manager", pm]
    if owner: args += ["--owner", owner]
    run(args)

def companies_show():
    cid = prompt("Partner ID")
    run(["companies", "show", cid])

def companies_add():
    run(["companies", "add"])

def companies_log():
    cid = prompt("Partner ID")
    run(["companies", "log", cid])

def companies_edit():
    cid = prompt("Partner ID")
    args = ["companies", "edit", cid]
    s = prompt_optional("New status (active/inactive)")
    e = prompt_optional("New email")
    p = prompt_optional("New phone")
    c = prompt_optional("New commission rate (%)")
    b = prompt_optional("New broker count")
    n = prompt_optional("New notes")
    if s: args += ["--status", s]
    if e: args += ["--email", e]
    if p: args += ["--phone", p]
    if c: args += ["--commission", c]
    if b: args += ["--brokers", b]
    if n: args += ["--notes", n]
    run(args)

def companies_duplicate():
    cid = prompt("Partner ID")
    run(["companies", "duplicate", cid])

def companies_delete():
    cid = prompt("Partner ID")
    run(["companies", "delete", cid])

def companies_import():
    path = prompt("Path to JSON export")
    run(["companies", "import", path])

def register():
    run(["register"])

def dashboard():
    run(["dashboard"])

def managers():
    run(["managers"])

def lookup_cnpj():
    cnpj = prompt("CNPJ")
    run(["lookup", "cnpj", cnpj])

def lookup_cep():
    cep = prompt("CEP")
    run(["lookup", "cep", cep])

def map_search():
    query = prompt("Place or address")
    args = ["map", "search", query]
    radius = prompt_optional("Radius in meters (default: 2000)")
    if radius: args += ["--radius", radius]
    run(args)

def insights():
    model = input("  AI model - claude, deepseek-chat or deepseek-reasoner (default: deepseek-chat): ").strip().lower()
    args = ["insights"]
    if model in ("claude", "deepseek-chat", "deepseek-reasoner"): args += ["--model", model]
    run(args)

def export_csv():
    run(["export", "csv"])

def export_html():
    run(["export", "html"])

def export_summary():
    run(["export", "summary"])

def export_geo():
    run(["export", "geo"])

def export_dossier():
    cid = prompt("Partner ID")
    run(["export", "dossier", cid])


# =============================================================================
# MENU LAYOUT
# =============================================================================

MENU = [
    ("PARTNERS", [
        ("List partners",                companies_list),
        ("Show partner details",         companies_show),
        ("Add new partner",              companies_add),
        ("Log contact",                  companies_log),
        ("Edit partner",                 companies_edit),
        ("Duplicate partner",            companies_duplicate),
        ("Delete partner",               companies_delete),
        ("Import JSON export",           companies_import),
        ("Public self-registration",     register),
    ]),
    ("DASHBOARD", [
        ("Network overview",             dashboard),
        ("Managers and owners",          managers),
    ]),
    ("LOOKUPS", [
        ("Look up CNPJ",                 lookup_cnpj),
        ("Look up CEP",                  lookup_cep),
        ("Partners near a place",        map_search),
    ]),
    ("AI FEATURES", [
        ("Network insights",             insights),
    ]),
    ("REPORTS", [
        ("Location CSV",                 export_csv),
        ("HTML web report",              export_html),
        ("Consolidated report",          export_summary),
        ("Geographic report",            export_geo),
        ("Partner record",               export_dossier),
    ]),
]


def print_menu():
    clear()
    print("=" * 50)
    print("   PARTNERHUB - PARTNER MANAGEMENT")
    print("=" * 50)

    n = 1
    numbering = {}  # maps display number -> handler function

    for section, commands in MENU:
        print(f"\n  {section}")
        print(f"  {'-' * len(section)}")
        for label, handler in commands:
            print(f"  {n:>2}.  {label}")
            numbering[n] = handler
            n += 1

    print("\n" + "=" * 50)
    print("   0.  Exit")
    print("=" * 50)
    return numbering


def main():
    while True:
        numbering = print_menu()

        try:
            choice = input("\n  Select a command: ").strip()
        except (KeyboardInterrupt, EOFError):
            print("\n\n  Goodbye!\n")
            break

        if choice == "0" or choice.lower() in ("q", "quit", "exit"):
            print("\n  Goodbye!\n")
            break

        try:
            n = int(choice)
            if n in numbering:
                clear()
                numbering[n]()
            else:
                print(f"\n  Invalid selection: {choice}")
                input("  Press Enter to continue...")
        except ValueError:
            print(f"\n  Please enter a number.")
            input("  Press Enter to continue...")


if __name__ == "__main__":
    main()
