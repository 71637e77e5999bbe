from .engine import review_section

__all__ = ["review_section"]
