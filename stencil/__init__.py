"""Stencil — LLM-generated templates for the scaffolding tool."""

__version__ = "0.3.0"
