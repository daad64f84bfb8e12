# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Multi-key walkthrough.

Builds a 2-of-3 multi key from mixed key types (two secp256k1 keys and one
Ed25519 key), derives its account address, signs a message with two of the
three keys and verifies the combined signature. The signature is then encoded,
decoded and verified again, and the example shows that one signature alone
does not meet the threshold.

Usage:
    python -m examples.multikey
"""

from anykey import ed25519, secp256k1_ecdsa
from anykey.account_address import AccountAddress
from anykey.asymmetric_crypto_wrapper import AnyPublicKey, MultiKey, MultiKeySignature


def main():
    # :!:>section_1
    key1 = secp256k1_ecdsa.PrivateKey.random()
    key2 = ed25519.PrivateKey.random()
    key3 = secp256k1_ecdsa.PrivateKey.random()
    pubkey1 = key1.public_key()
    pubkey2 = key2.public_key()
    pubkey3 = key3.public_key()

    alice_pubkey = MultiKey([pubkey1, pubkey2, pubkey3], 2)
    alice_address = AccountAddress.from_key(alice_pubkey)

    bob_key = ed25519.PrivateKey.random()
    bob_address = AccountAddress.from_key(AnyPublicKey(bob_key.public_key()))

    print("\n=== Addresses ===")
    print(f"Multikey Alice ({alice_pubkey}): {alice_address}")
    print(f"Bob: {bob_address}")  # <:!:section_1

    # :!:>section_2
    message = b"transfer 1000 from alice to bob"

    # Sign by multiple keys
    sig1 = key1.sign(message)
    sig2 = key2.sign(message)

    # Verify signatures
    assert pubkey1.verify(message, sig1)
    assert pubkey2.verify(message, sig2)

    alice_signature = MultiKeySignature.from_key_map(
        alice_pubkey, [(pubkey2, sig2), (pubkey1, sig1)]
    )
    assert alice_pubkey.verify(message, alice_signature)  # <:!:section_2

    print("\n=== Signature ===")
    print(f"Signers: {alice_signature.signer_indices()}")
    print(f"Bitmap: 0x{alice_signature.bitmap.hex()}")

    # :!:>section_3
    encoded = alice_signature.to_bytes()
    decoded = MultiKeySignature.from_bytes(encoded)
    assert decoded == alice_signature
    assert alice_pubkey.verify(message, decoded)  # <:!:section_3

    print(f"Encoded: 0x{encoded.hex()}")

    below_threshold = MultiKeySignature([key3.sign(message)], [2])
    assert not alice_pubkey.verify(message, below_threshold)
    print(f"\nOne of three verifies: {alice_pubkey.verify(message, below_threshold)}")


if __name__ == "__main__":
    main()
