"""
zkinputs — zkVM guest inputs from ledger transaction receipts.

Decodes raw (RLP) receipts, isolates the event logs a graph is interested in,
lays the matching receipts out as one byte stream with per-event offsets, and
encodes everything into the public/private input buffers a guest program reads.

This package exposes only lightweight metadata at import time. Import the
subpackages (receipts, inputs, host, adapters, cli) explicitly.
"""

# Package metadata (robust to missing version module during early bootstraps)
try:
    from .version import __version__, git_describe  # type: ignore
except Exception:  # pragma: no cover - fallback for fresh checkouts
    __version__ = "0.0.0+local"

    def git_describe() -> str:
        """Return a best-effort version string when VCS metadata isn't available."""
        return __version__

__all__ = ["__version__", "git_describe"]
