from .validators import count_words, ensure_not_blank

__all__ = ["count_words", "ensure_not_blank"]
