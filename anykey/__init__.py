# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
anykey: keys, signatures and K-of-N multi keys that encode the same way
everywhere.

Modules:
    - **bcs**: Binary Canonical Serialization
    - **errors**: Exception hierarchy
    - **asymmetric_crypto**: Key and signature protocols, AIP-80 private keys
    - **ed25519**, **secp256k1_ecdsa**: Primitive schemes
    - **asymmetric_crypto_wrapper**: ``AnyPublicKey``, ``AnySignature``,
      ``MultiKey`` and ``MultiKeySignature``
    - **bitmap**: Signer bitmaps
    - **account_address**: Authentication keys and account addresses
"""
