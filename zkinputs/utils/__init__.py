"""
zkinputs.utils

Small byte/hex and hashing helpers shared by the decoder, the config loaders and
the encoders.

Design notes
- **Do not import submodules here.** Keeping this file import-free avoids
  ordering pitfalls when low-level modules import a single helper.
- Submodules provided by this package:
    • hexutil — 0x-hex <-> bytes conversions with length checks
    • hash    — Keccak-256 (event signature hashing) and MD5 image digests
"""

__all__ = ["hexutil", "hash"]
