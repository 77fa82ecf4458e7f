"""Pointer interaction adapters."""

from .drag import DragAdapter, DragSession, DragState, quantize_day_delta

__all__ = ['DragAdapter', 'DragSession', 'DragState', 'quantize_day_delta']
