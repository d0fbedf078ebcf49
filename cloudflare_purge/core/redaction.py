"""Secret masking for log lines and telemetry."""

VISIBLE_PREFIX = 4
VISIBLE_SUFFIX = 2


def redact(
    secret: str | None,
    visible_prefix: int = VISIBLE_PREFIX,
    visible_suffix: int = VISIBLE_SUFFIX,
) -> str:
    """Mask the interior of a secret, keeping a short prefix and suffix.

    Secrets too short to keep both ends are masked entirely.

    Args:
        secret: The value to mask. ``None`` or empty yields ``""``.
        visible_prefix: Characters kept at the start.
        visible_suffix: Characters kept at the end.

    Returns:
        Masked string like ``abcd******yz``.
    """
    if not secret:
        return ""
    if len(secret) <= visible_prefix + visible_suffix:
        return "*" * len(secret)
    hidden = len(secret) - visible_prefix - visible_suffix
    tail = secret[-visible_suffix:] if visible_suffix else ""
    return f"{secret[:visible_prefix]}{'*' * hidden}{tail}"
