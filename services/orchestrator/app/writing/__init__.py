from .engine import SectionDraft, build_writer_prompts, candidate_order, write_section

__all__ = ["SectionDraft", "build_writer_prompts", "candidate_order", "write_section"]
