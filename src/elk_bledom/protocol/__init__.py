"""Protocol layer: variant registry, frame codec and frame decoders."""

from .framing import build_frame, parse_frame
from .variants import DeviceVariant, resolve_variant, variant_layout
