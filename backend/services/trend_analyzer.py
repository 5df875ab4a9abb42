LEUKOCYTE_UNIT = "/µL"


def format_count(value: float) -> str:
    """Format a reading the way pt-BR renders numbers: 13800 -> 13.800, 1.6 -> 1,6."""
    formatted = f"{value:,.3f}".rstrip("0").rstrip(".")
    return formatted.translate(str.maketrans({",": ".", ".": ","}))


def narrate_leukocytes(prev: float, curr: float) -> str:
    reading = f"{format_count(curr)}{LEUKOCYTE_UNIT}"
    if curr > prev:
        return f"Leukocytes rose ({reading}) — possible worsening."
    if curr < prev:
        return f"Leukocytes fell ({reading}) — possible improvement."
    return f"Leukocytes stable ({reading})."
