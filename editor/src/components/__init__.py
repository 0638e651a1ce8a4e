"""UI components for Profile Frame Studio

Direct imports for convenience:
"""

from .preview_widget import PreviewWidget
from .adjust_toolbar import AdjustToolbar
from .result_view import ResultView

__all__ = [
    'PreviewWidget',
    'AdjustToolbar',
    'ResultView',
]
