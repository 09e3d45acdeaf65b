from .config import ConfigValidationError, load_refsheet_config, validate_refsheet_config
from .conversion import (
    InvalidColor,
    color_from_hex,
    color_from_rgb,
    format_hsl_string,
    format_rgb_string,
    hex_to_rgb,
    hsl_to_rgb,
    is_valid_hex,
    normalize_hex,
    rgb_to_hex,
    rgb_to_hsl,
)
from .io import ColorExtractionError, DecodeFailure, open_image
from .models import (
    Color,
    ImageHandle,
    InspectionResult,
    PanelPlacement,
    PanelSize,
    Rect,
    RefSheetConfig,
    SampledPixel,
)
from .palette import extract_palette
from .pipeline import ColorInspectionPipeline
from .placement import PanelLayout, PanelPlacer
from .sampler import ExtractionCache, OutOfBounds, PixelSampler

__all__ = [
    "Color",
    "ColorExtractionError",
    "ColorInspectionPipeline",
    "ConfigValidationError",
    "DecodeFailure",
    "ExtractionCache",
    "ImageHandle",
    "InspectionResult",
    "InvalidColor",
    "OutOfBounds",
    "PanelLayout",
    "PanelPlacement",
    "PanelPlacer",
    "PanelSize",
    "PixelSampler",
    "Rect",
    "RefSheetConfig",
    "SampledPixel",
    "color_from_hex",
    "color_from_rgb",
    "extract_palette",
    "format_hsl_string",
    "format_rgb_string",
    "hex_to_rgb",
    "hsl_to_rgb",
    "is_valid_hex",
    "load_refsheet_config",
    "normalize_hex",
    "open_image",
    "rgb_to_hex",
    "rgb_to_hsl",
    "validate_refsheet_config",
]
