"""
Image Edit Studio - Generate an image from a prompt, then refine it by instruction.
"""

__version__ = "0.1.0"
