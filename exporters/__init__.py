"""Exporters for rendering discovered commands as declarations."""

from .declaration_exporter import render_declaration, write_declaration

__all__ = ["render_declaration", "write_declaration"]
