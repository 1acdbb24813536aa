"""X25519 Diffie-Hellman key agreement."""

from __future__ import annotations

import argparse

from cryptography.hazmat.primitives.asymmetric.x25519 import (
    X25519PrivateKey,
    X25519PublicKey,
)


def generate_key_pair() -> tuple[X25519PrivateKey, X25519PublicKey]:
    """Return a fresh ephemeral secret and its public key."""
    secret = X25519PrivateKey.generate()
    return secret, secret.public_key()


def shared_secret(secret: X25519PrivateKey, public_key: X25519PublicKey) -> bytes:
    """Compute the shared secret between ``secret`` and a peer's public key."""
    return secret.exchange(public_key)


def main(argv: list[str] | None = None) -> int:
    """Run a key agreement between two parties and report the outcome."""
    argparse.ArgumentParser(
        prog="dh", description="X25519 key agreement demonstration."
    ).parse_args(argv)
    alice_secret, alice_public = generate_key_pair()
    bob_secret, bob_public = generate_key_pair()

    bob_shared = shared_secret(bob_secret, alice_public)
    alice_shared = shared_secret(alice_secret, bob_public)

    rendered = bob_shared.decode("utf-8", errors="replace")
    if bob_shared == alice_shared:
        print(f"Alice and Bob share the secret {rendered}")
    else:
        print(f"Alice and Bob don't share the same secret {rendered}")
    return 0