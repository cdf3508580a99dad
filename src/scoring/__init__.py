from .integrity import IntegrityResult, compute_integrity_score, score_from_counts, PENALTIES

__all__ = ["IntegrityResult", "compute_integrity_score", "score_from_counts", "PENALTIES"]
