# src/agora_auth/admin/cli.py

from __future__ import annotations

import argparse
import base64
import json
import logging
import sys
from typing import Any, Sequence

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from .env import settings_from_env
from ..adapters.storage.pem import dump_private_key
from ..domain.entities import KeyRecord
from ..integrations.common.auth_factory import create_key_repository, create_rotation_use_case


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Manage the Ed25519 keys signing session tokens",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log storage operations to stderr.",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser(
        "generate",
        help="Print a new private key in PEM format, without storing it.",
    )

    rotate = commands.add_parser(
        "rotate",
        help="Store a new signing key and prune the oldest ones.",
    )
    rotate.add_argument(
        "--max-backups",
        "-n",
        type=int,
        help="Number of keys to keep (default from env AGORA_KEYS_BACKUPS).",
    )

    commands.add_parser(
        "list",
        help="List stored keys, most recent first.",
    )

    delete = commands.add_parser(
        "delete",
        help="Delete a stored key.",
    )
    delete.add_argument("name", help="Logical key name (without prefix).")

    return parser.parse_args(args=argv)


def _describe(record: KeyRecord) -> dict[str, Any]:
    public_raw = record.public_key.public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )
    return {
        "name": record.name,
        "date": record.date.isoformat(),
        "public_key": base64.urlsafe_b64encode(public_raw).decode("ascii").rstrip("="),
    }


def _run(args: argparse.Namespace) -> dict[str, Any]:
    if args.command == "generate":
        pem = dump_private_key(Ed25519PrivateKey.generate(), "generated")
        return {"pem": pem.decode("ascii")}

    settings = settings_from_env()
    if getattr(args, "max_backups", None) is not None:
        settings.max_backups = args.max_backups

    repository = create_key_repository(settings)

    if args.command == "rotate":
        record = create_rotation_use_case(settings, repository).execute()
        return {"rotated": _describe(record)}

    if args.command == "list":
        return {"keys": [_describe(record) for record in repository.list()]}

    repository.delete(args.name)
    return {"deleted": args.name}


def main(argv: Sequence[str] | None = None) -> None:
    args = _parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            stream=sys.stderr,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )

    try:
        summary = _run(args)
        json.dump({"ok": True, **summary}, sys.stdout, indent=2)
        sys.stdout.write("\n")
    except Exception as exc:  # noqa: BLE001
        json.dump({"ok": False, "error": str(exc)}, sys.stdout, indent=2)
        sys.stdout.write("\n")
        raise


if __name__ == "__main__":
    main()
