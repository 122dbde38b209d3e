"""
UniVerify — register credential documents and verify copies by content hash.

Architecture: Upload → Digest → (Registration: Archive + Record Store)
                              → (Verification: Record Store lookup)
Philosophy:  Identity is the exact bytes. Nothing else is trusted.
"""

__version__ = "1.0.0"
