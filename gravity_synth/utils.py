
def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def remap(
    value: float,
    in_min: float,
    in_max: float,
    out_min: float,
    out_max: float,
    clamped: bool = False,
) -> float:
    """
    Linearly re-map value from [in_min, in_max] onto [out_min, out_max].
    The output is not bounded unless ``clamped`` is set; inverted output
    ranges (out_min > out_max) are allowed.
    """
    if in_max == in_min:
        raise ValueError("input range must not be empty")
    mapped = out_min + (value - in_min) * (out_max - out_min) / (in_max - in_min)
    if clamped:
        low, high = min(out_min, out_max), max(out_min, out_max)
        return clamp(mapped, low, high)
    return mapped
