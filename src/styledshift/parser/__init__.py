from styledshift.parser.errors import ParseError, SourceScanError
from styledshift.parser.expression import parse_expression, parse_slot
from styledshift.parser.source import SourceFile, scan_source
from styledshift.parser.template import parse_css, parse_keyframes, parse_template

__all__ = [
    "ParseError",
    "SourceScanError",
    "SourceFile",
    "parse_css",
    "parse_expression",
    "parse_keyframes",
    "parse_slot",
    "parse_template",
    "scan_source",
]
