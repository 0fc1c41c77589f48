from .dual_image_pipeline import apply_dual_op
from .filter_pipeline import apply_filter

__all__ = ["apply_dual_op", "apply_filter"]
