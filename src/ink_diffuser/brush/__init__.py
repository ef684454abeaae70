"""Ink simulation engine and its building blocks."""
from .configs import InkParams
from .framebuffer import Framebuffer
from .grid import InkGrid
from .ink_engine import InkEngine
from .stroke import Stroke, bresenham_line, rasterize, trace_stroke

__all__ = ["InkEngine", "InkParams", "InkGrid", "Framebuffer", "Stroke", "bresenham_line", "rasterize", "trace_stroke"]
