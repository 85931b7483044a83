from .projection import BackProjection, back_project_depth

__all__ = ["BackProjection", "back_project_depth"]
