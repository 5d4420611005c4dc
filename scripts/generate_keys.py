#!/usr/bin/env python3
"""Generate the RSA key pair used to sign and verify JWTs."""

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from utils.config import DEFAULT_PRIVATE_KEY_PATH, DEFAULT_PUBLIC_KEY_PATH
from utils.keys import write_key_pair


def main():
    parser = argparse.ArgumentParser(description="Generate an RSA key pair for JWT signing")
    parser.add_argument('--public', type=str, default=DEFAULT_PUBLIC_KEY_PATH, help='public key output path')
    parser.add_argument('--private', type=str, default=DEFAULT_PRIVATE_KEY_PATH, help='private key output path')
    parser.add_argument('--force', action='store_true', help='overwrite existing key files')
    args = parser.parse_args()

    existing = [p for p in (args.public, args.private) if Path(p).exists()]
    if existing and not args.force:
        print(f"Refusing to overwrite {', '.join(existing)} (use --force)")
        sys.exit(1)

    write_key_pair(args.public, args.private)
    print(f"Wrote {args.public} and {args.private}")


if __name__ == '__main__':
    main()
