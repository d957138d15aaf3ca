#!/usr/bin/env python3
"""Interactively generate the .env configuration file

Usage:
    python scripts/setup_env.py

Prompts for each setting and writes .env at the project root.
"""
import os
from typing import Dict, List

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
ENV_FILE = os.path.join(PROJECT_ROOT, ".env")


# (env_key, description, default)
CONFIG_ITEMS = [
    # === Database ===
    ("DATABASE_URL", "Database connection URL", "sqlite:///data/salon.db"),

    # === Web API ===
    ("WEB_HOST", "Listen address", "0.0.0.0"),
    ("WEB_PORT", "Listen port", "8080"),

    # === Logging ===
    ("LOG_LEVEL", "Log level (DEBUG/INFO/WARNING/ERROR)", "INFO"),
    ("LOG_FILE", "Rotating log file path (empty for console only)", ""),
]

SECTION_NAMES = {
    "DATABASE": "# === Database ===",
    "WEB": "# === Web API ===",
    "LOG": "# === Logging ===",
}


def build_env_lines(values: Dict[str, str]) -> List[str]:
    """Render the .env lines, grouped by key prefix.

    Args:
        values: ``{env_key: value}``; missing keys use their default.
    """
    lines = [
        "# Salon POS configuration",
        "# Generated by scripts/setup_env.py",
    ]
    current_section = None
    for key, _desc, default in CONFIG_ITEMS:
        section = key.split("_")[0]
        if section != current_section:
            current_section = section
            lines.append("")
            lines.append(SECTION_NAMES.get(section, f"# === {section} ==="))
        lines.append(f"{key}={values.get(key, default)}")
    return lines


def main():
    print()
    print("=" * 60)
    print("  Salon POS setup")
    print("  Generates the .env configuration file")
    print("=" * 60)
    print()

    if os.path.exists(ENV_FILE):
        print(f"An .env file already exists: {ENV_FILE}")
        choice = input("Overwrite? (y/N): ").strip().lower()
        if choice != "y":
            print("Cancelled.")
            return
        print()

    values = {}
    for key, desc, default in CONFIG_ITEMS:
        default_hint = f" (default: {default})" if default else ""
        print(desc)
        value = input(f"  {key}={default_hint}: ").strip()
        values[key] = value or default
        print()

    with open(ENV_FILE, "w", encoding="utf-8") as f:
        f.write("\n".join(build_env_lines(values)) + "\n")

    print("=" * 60)
    print(f"  Configuration written to {ENV_FILE}")
    print()
    print("  Create the tables and seed data:")
    print("    python scripts/init_db.py")
    print()
    print("  Start the API:")
    print("    python app.py")
    print("=" * 60)


if __name__ == "__main__":
    main()
