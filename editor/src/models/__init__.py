"""
Profile Frame Studio - Data Models

This module contains the pure data types of the compositing engine.
No Qt, no I/O.

Public API: Transform, Vec2, GestureSession, GestureState,
CaptureState, CapturedResult
"""

from .transform import Transform, Vec2, clamp_scale
from .gesture_session import GestureSession, GestureState
from .capture import CaptureState, CapturedResult

__all__ = [
    'Transform', 'Vec2', 'clamp_scale',
    'GestureSession', 'GestureState',
    'CaptureState', 'CapturedResult',
]
