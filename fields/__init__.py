from .barcode import (
    barcode_similarity,
    is_plausible_catalog_barcode,
    is_valid_barcode_format,
    normalize_barcode,
)
from .catalog_format import detect_catalog_format
from .price import parse_price
from .text import cell_to_text, is_blank, sanitize_input
