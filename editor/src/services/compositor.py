"""Compositor Service.

Renders the final profile picture at output resolution with Pillow:

    1. circular clip of diameter OUTPUT_SIZE centred on the canvas
    2. source drawn through the shared source->viewport matrix
       (translation rescaled by OUTPUT_SIZE / PREVIEW_DIAMETER)
    3. clip released
    4. overlay template drawn unclipped over the full canvas

Order matters: the overlay is composited after the source and is never
clipped. The preview widget uses the same matrix at PREVIEW_DIAMETER,
so the export matches what is on screen at a higher pixel density.
"""

import logging

from PIL import Image, ImageChops, ImageDraw

from constants import OUTPUT_SIZE, PREVIEW_DIAMETER, CLIP_MASK_SUPERSAMPLE
from models.capture import CapturedResult
from utils.coordinate_transforms import (
    base_fit_scale, source_to_viewport_matrix, matrix_to_affine_coefficients
)

logger = logging.getLogger(__name__)

TRANSPARENT = (0, 0, 0, 0)


class Compositor:
    """Deterministic source + overlay compositor.

    The same inputs always produce bit-identical output.
    """

    def __init__(self, output_size=OUTPUT_SIZE, preview_diameter=PREVIEW_DIAMETER,
                 supersample=CLIP_MASK_SUPERSAMPLE):
        self.output_size = output_size
        self.preview_diameter = preview_diameter
        self.supersample = supersample
        self._clip_mask = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def compose(self, source, transform, overlay):
        """Render source + overlay into a CapturedResult.

        Args:
            source: SourceImage (image and mirrored flag)
            transform: Transform in preview space
            overlay: RGBA overlay template image

        Returns:
            CapturedResult holding an OUTPUT_SIZE x OUTPUT_SIZE RGBA image
        """
        size = self.output_size
        canvas = Image.new('RGBA', (size, size), TRANSPARENT)

        # Clip -> transform -> draw source -> release clip
        source_layer = self.render_source_layer(source.image, transform, source.mirrored)
        canvas = Image.alpha_composite(canvas, self.apply_clip(source_layer))

        # Overlay on top, full canvas, unclipped
        canvas = Image.alpha_composite(canvas, self.fit_overlay(overlay))

        logger.info("Composed %dx%d result (scale=%.2f, rotation=%.1f, translation=(%.1f, %.1f))",
                    size, size, transform.scale, transform.rotation,
                    transform.translation.x, transform.translation.y)
        return CapturedResult(image=canvas, transform=transform)

    def render_source_layer(self, image, transform, mirrored=False):
        """Draw the transformed source onto a transparent output-sized layer."""
        image = self._prepare_source(image.convert('RGBA'), transform)
        matrix = source_to_viewport_matrix(
            transform, image.size, self.output_size,
            mirrored=mirrored, preview_diameter=self.preview_diameter
        )
        return image.transform(
            (self.output_size, self.output_size),
            Image.Transform.AFFINE,
            data=matrix_to_affine_coefficients(matrix),
            resample=Image.Resampling.BICUBIC,
            fillcolor=TRANSPARENT,
        )

    def apply_clip(self, layer):
        """Confine a layer to the circular clip region."""
        alpha = ImageChops.multiply(layer.getchannel('A'), self.clip_mask())
        clipped = layer.copy()
        clipped.putalpha(alpha)
        return clipped

    def clip_mask(self):
        """Antialiased circle of diameter output_size (cached)."""
        if self._clip_mask is None:
            big = self.output_size * self.supersample
            mask = Image.new('L', (big, big), 0)
            ImageDraw.Draw(mask).ellipse((0, 0, big - 1, big - 1), fill=255)
            self._clip_mask = mask.resize((self.output_size, self.output_size),
                                          Image.Resampling.LANCZOS)
        return self._clip_mask

    def fit_overlay(self, overlay):
        """Overlay as RGBA sized exactly output_size x output_size."""
        overlay = overlay.convert('RGBA')
        target = (self.output_size, self.output_size)
        if overlay.size != target:
            overlay = overlay.resize(target, Image.Resampling.LANCZOS)
        return overlay

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _prepare_source(self, image, transform):
        """Pre-shrink large sources so the affine pass never minifies.

        Bicubic affine resampling aliases when reducing; a Lanczos resize
        first keeps the export smooth. The matrix is rebuilt from the
        reduced size, so the visual result is unchanged.
        """
        width, height = image.size
        effective = transform.scale * base_fit_scale(width, height, self.output_size)
        if effective >= 1.0:
            return image
        new_size = (max(1, round(width * effective)), max(1, round(height * effective)))
        return image.resize(new_size, Image.Resampling.LANCZOS)
