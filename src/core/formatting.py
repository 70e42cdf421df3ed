def format_latency(seconds: float) -> str:
    """
    Render a duration in seconds with a readable unit, e.g. "123.456ms".
    """
    if seconds < 1e-3:
        return f"{seconds * 1e6:.3f}µs"
    if seconds < 1.0:
        return f"{seconds * 1e3:.3f}ms"
    return f"{seconds:.3f}s"
