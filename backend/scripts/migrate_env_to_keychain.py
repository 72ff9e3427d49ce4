#!/usr/bin/env python3
"""Move dashboard secrets out of ``.env`` and into the OS keychain.

Each non-empty credential (API keys, the Google OAuth client secret,
the hosted database URL, the seed password) is stored through
``keyring``.  ``--clean`` then strips those lines from ``.env`` while
leaving comments and non-secret settings alone.

Usage:
    python -m scripts.migrate_env_to_keychain
    python -m scripts.migrate_env_to_keychain --clean
    python -m scripts.migrate_env_to_keychain --env-file /srv/dashboard/.env
"""

import argparse
import re
import sys
from dataclasses import dataclass, field
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import dotenv_values

from services.credential_manager import CREDENTIAL_KEYS, get_credential, set_credential


@dataclass
class MigrationResult:
    stored: list[str] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    @property
    def in_keychain(self) -> list[str]:
        """Keys whose current value is now safely in the keychain."""
        return self.stored + self.unchanged


def store_credentials(values: dict[str, str | None]) -> MigrationResult:
    """Store every known credential from ``values`` that is not already stored."""
    result = MigrationResult()
    for key in sorted(CREDENTIAL_KEYS):
        value = values.get(key)
        if not value:
            result.missing.append(key)
        elif get_credential(key) == value:
            result.unchanged.append(key)
        elif set_credential(key, value):
            result.stored.append(key)
        else:
            result.failed.append(key)
    return result


def _print_group(title: str, keys: list[str], marker: str) -> None:
    if not keys:
        return
    print(f"\n  {title} ({len(keys)}):")
    for key in keys:
        print(f"    {marker} {key}")


def print_summary(result: MigrationResult) -> None:
    print()
    print("=" * 60)
    print("Keychain Migration")
    print("=" * 60)
    _print_group("Stored in keychain", result.stored, "+")
    _print_group("Already in keychain", result.unchanged, "=")
    _print_group("Not set in .env", result.missing, "-")
    _print_group("Failed", result.failed, "!")
    print()


def strip_env_keys(env_path: Path, keys: list[str]) -> int:
    """Drop ``KEY=...`` lines for ``keys`` from ``env_path``; returns lines removed."""
    pattern = re.compile(r"^(?:export\s+)?(" + "|".join(re.escape(k) for k in keys) + r")\s*=")
    lines = env_path.read_text().splitlines(keepends=True)
    kept = [line for line in lines if not pattern.match(line)]
    env_path.write_text("".join(kept))
    return len(lines) - len(kept)


def migrate(env_path: Path, *, clean: bool = False) -> MigrationResult:
    """Read ``env_path``, store its credentials, optionally strip them from the file."""
    if not env_path.exists():
        print(f"No .env file found at {env_path}")
        sys.exit(1)

    result = store_credentials(dotenv_values(env_path))
    print_summary(result)

    if clean:
        if result.in_keychain:
            removed = strip_env_keys(env_path, result.in_keychain)
            print(f"Removed {removed} credential line(s) from {env_path}")
        else:
            print("Nothing to clean from .env.")
    return result


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        description="Store dashboard credentials from .env in the OS keychain"
    )
    parser.add_argument(
        "--clean",
        action="store_true",
        help="Remove stored credentials from .env afterwards",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=Path(__file__).parent.parent / ".env",
        help="Path to .env file (default: backend/.env)",
    )

    args = parser.parse_args(argv)
    migrate(args.env_file, clean=args.clean)


if __name__ == "__main__":
    main()
