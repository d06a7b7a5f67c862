# =============================================================================
# Media Sizing
# =============================================================================
# Converts the pixel sizes found in markup into terminal cells.
#
# Images are never fetched or decoded: the width/height attributes are all
# we know. The process:
#   1. Clamp the maximum width to the space left on the line
#   2. Scale the pixel size down to fit, keeping the aspect ratio
#   3. Round up to whole cells
# =============================================================================

import logging
import math
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class ImageDimensions:
    """
    Dimensions for image display.

    Attributes:
        width: Width in terminal cells.
        height: Height in terminal rows.
        pixel_width: Pixel width after scaling.
        pixel_height: Pixel height after scaling.
    """
    width: int          # Terminal cells
    height: int         # Terminal rows
    pixel_width: int
    pixel_height: int

    @property
    def has_area(self) -> bool:
        return self.width > 0 and self.height > 0


class ImageSizer:
    """
    Fits image pixel sizes into terminal cells.

    Usage:
        >>> sizer = ImageSizer(max_width=80, max_height=40)
        >>> sizer.cells(640, 480, available_width=40)
        (40, 15)
    """

    def __init__(
        self,
        max_width: int = 80,
        max_height: int = 40,
        cell_width: int = 8,
        cell_height: int = 16,
    ) -> None:
        """
        Initialize the sizer.

        Args:
            max_width: Maximum width in terminal cells.
            max_height: Maximum height in terminal rows.
            cell_width: Pixel width of a terminal cell.
            cell_height: Pixel height of a terminal cell.
        """
        self.max_width = max_width
        self.max_height = max_height
        self.cell_width = max(cell_width, 1)
        self.cell_height = max(cell_height, 1)

    def fit(self, pixel_width: int, pixel_height: int, available_width: int | None = None) -> ImageDimensions:
        """
        Scale an image to fit the terminal constraints.

        Args:
            pixel_width: Width from the markup, in pixels.
            pixel_height: Height from the markup, in pixels.
            available_width: Cells left for the image; caps max_width.

        Returns:
            The fitted dimensions. Unknown (non-positive) sizes give zero
            cells in both directions.
        """
        if pixel_width <= 0 or pixel_height <= 0:
            return ImageDimensions(0, 0, 0, 0)

        max_cells = self.max_width
        if available_width is not None:
            max_cells = min(max_cells, available_width)
        if max_cells <= 0 or self.max_height <= 0:
            logger.debug(f"No room for a {pixel_width}x{pixel_height} image")
            return ImageDimensions(0, 0, 0, 0)

        max_w = max_cells * self.cell_width
        max_h = self.max_height * self.cell_height

        # Calculate new size maintaining aspect ratio
        ratio = min(max_w / pixel_width, max_h / pixel_height)
        if ratio < 1:
            new_width = max(int(pixel_width * ratio), 1)
            new_height = max(int(pixel_height * ratio), 1)
        else:
            new_width, new_height = pixel_width, pixel_height

        return ImageDimensions(
            width=math.ceil(new_width / self.cell_width),
            height=math.ceil(new_height / self.cell_height),
            pixel_width=new_width,
            pixel_height=new_height,
        )

    def cells(self, pixel_width: int, pixel_height: int, available_width: int | None = None) -> tuple[int, int]:
        """Return (width, height) in cells; see fit()."""
        dimensions = self.fit(pixel_width, pixel_height, available_width)
        return dimensions.width, dimensions.height
