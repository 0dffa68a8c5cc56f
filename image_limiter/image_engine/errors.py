"""Failure causes inside the bounded decoder.

These never leave ``BoundedDecoder.decode``; callers only see ``None``.
"""


class DecodeError(Exception):
    reason = "decode_error"


class UnrecognizedContainerError(DecodeError):
    reason = "unrecognized_container"


class MissingMetadataError(DecodeError):
    reason = "missing_metadata"


class DecodeFailureError(DecodeError):
    reason = "decode_failure"
