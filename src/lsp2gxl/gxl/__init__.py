"""
GXL exchange document rendering.
"""
from .serializer import XLINK_NS, build_gxl_tree, to_gxl, write_gxl

__all__ = ["XLINK_NS", "build_gxl_tree", "to_gxl", "write_gxl"]
