"""
Board manager: business rules on top of the storage layer.
"""

from manager.board import AuthResult, LostFoundBoard

__all__ = ["AuthResult", "LostFoundBoard"]
