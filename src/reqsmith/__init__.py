"""ReqSmith: ReqIF requirements documents with integrity checks and lossless round-trip."""

from reqsmith.exceptions import ReqSmithError
from reqsmith.reqif import ReqIF, ReqIFDocument, ReqIFHeader, dumps, loads

__version__ = "0.1.0"

__all__ = [
    "ReqIF",
    "ReqIFDocument",
    "ReqIFHeader",
    "ReqSmithError",
    "__version__",
    "dumps",
    "loads",
]
