"""
GLSL Quasiquote Command-Line Interface
======================================

This package provides the glslq build tool, which quotes GLSL shader
files into Python modules and expands quasiquote invocations in Python
host templates.

The tool is a Click-based CLI application with help text and
consistent error reporting.
"""

__all__ = ["glslq"]
