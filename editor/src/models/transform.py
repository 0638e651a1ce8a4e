"""Transform data structures for the user's pan/zoom/rotate state."""
from dataclasses import dataclass, field, replace

from constants import SCALE_MIN, SCALE_MAX, DEFAULT_SCALE, DEFAULT_ROTATION


def clamp_scale(scale):
    """Clamp a scale factor to [SCALE_MIN, SCALE_MAX]."""
    return max(SCALE_MIN, min(SCALE_MAX, scale))


@dataclass(frozen=True)
class Vec2:
    """2D vector for coordinate pairs.

    Used for any x/y pair across the two coordinate spaces:
    - Preview pixels (center-origin, PREVIEW_DIAMETER wide)
    - Output pixels (center-origin, OUTPUT_SIZE wide)
    - Raw pointer/touch positions (viewport-local)
    """
    x: float = 0.0
    y: float = 0.0

    def __iter__(self):
        """Allow tuple unpacking: x, y = vec2"""
        return iter((self.x, self.y))

    def __add__(self, other):
        return Vec2(self.x + other.x, self.y + other.y)

    def __sub__(self, other):
        return Vec2(self.x - other.x, self.y - other.y)

    def __mul__(self, factor):
        return Vec2(self.x * factor, self.y * factor)

    def __truediv__(self, factor):
        return Vec2(self.x / factor, self.y / factor)


@dataclass(frozen=True)
class Transform:
    """User transform: scale, rotation and translation.

    Every mutator returns a new Transform; instances are never changed
    in place. Scale is clamped by every mutator, so a Transform built
    through this API always satisfies SCALE_MIN <= scale <= SCALE_MAX.
    Rotation accumulates without wrapping.

    Translation is in preview space (PREVIEW_DIAMETER units).
    """
    scale: float = DEFAULT_SCALE
    rotation: float = DEFAULT_ROTATION
    translation: Vec2 = field(default_factory=Vec2)

    def __post_init__(self):
        object.__setattr__(self, 'scale', clamp_scale(self.scale))

    @classmethod
    def identity(cls):
        return cls()

    def is_identity(self):
        return self == Transform.identity()

    def with_scale(self, scale):
        """Absolute scale (presets), clamped."""
        return replace(self, scale=clamp_scale(scale))

    def apply_zoom_delta(self, factor):
        """Multiply scale by factor, clamped."""
        return self.with_scale(self.scale * factor)

    def apply_scale_step(self, step):
        """Add step to scale, clamped (zoom buttons)."""
        return self.with_scale(self.scale + step)

    def apply_rotation_delta(self, degrees):
        return replace(self, rotation=self.rotation + degrees)

    def apply_pan(self, dx, dy):
        """Shift translation by (dx, dy) preview units."""
        return replace(self, translation=self.translation + Vec2(dx, dy))

    def with_translation(self, translation):
        return replace(self, translation=Vec2(*translation))

    def reset(self):
        return Transform.identity()

    def to_dict(self):
        return {
            'scale': self.scale,
            'rotation': self.rotation,
            'translation': {'x': self.translation.x, 'y': self.translation.y},
        }
