"""Àṣẹ community ledger: a fungible token with prayers, recognition and ritual registries."""

__version__ = "0.1.0"
