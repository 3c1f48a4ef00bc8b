"""SRA commutative cryptosystem engine."""
from __future__ import annotations

from sra.errors import SRAError
from sra.sra_from_scratch import Keypair

__version__ = "0.1.0"

__all__ = ["Keypair", "SRAError", "__version__"]
