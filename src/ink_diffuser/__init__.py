"""
Ink Diffuser.

Copyright (c) 2026 Shuoqi Chen
SPDX-License-Identifier: MIT OR Apache-2.0
"""
from .brush.ink_engine import InkEngine
from .brush.configs import InkParams
from .brush.framebuffer import Framebuffer
from .brush.grid import InkGrid
from .brush.stroke import Stroke
from .errors import DimensionMismatch, InkError, InvalidParams, InvalidStroke, OutOfBounds
from .viewer import launch_viewer

__version__ = "1.0.0"
__author__ = "Shuoqi Chen"
__license__ = "MIT"
__all__ = [
    "InkEngine",
    "InkParams",
    "InkGrid",
    "Framebuffer",
    "Stroke",
    "InkError",
    "OutOfBounds",
    "DimensionMismatch",
    "InvalidParams",
    "InvalidStroke",
    "launch_viewer",
]
