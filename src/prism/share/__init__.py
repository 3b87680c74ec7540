"""Share token encoding."""

from prism.share.codec import SEPARATOR, decode, decode_for_document, encode

__all__ = ["SEPARATOR", "decode", "decode_for_document", "encode"]
