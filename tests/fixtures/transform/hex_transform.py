"""Replace #RGB and #RRGGBB colour literals with vec3 constructors."""

import re

HEX = re.compile(r"#([0-9a-fA-F]{6}|[0-9a-fA-F]{3})\b")


def _vec3(match):
    digits = match.group(1)
    if len(digits) == 3:
        digits = "".join(d * 2 for d in digits)
    channels = [int(digits[i:i + 2], 16) / 255 for i in (0, 2, 4)]
    return "vec3(" + ", ".join(f"{c:.3f}" for c in channels) + ")"


def sync(filename, src, opts):
    return HEX.sub(_vec3, src)


async def transform(filename, src, opts):
    return sync(filename, src, opts)
