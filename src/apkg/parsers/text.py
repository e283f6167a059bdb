"""
Line splitting shared by the text adapters.
"""


def split_lines(text: str) -> list[str]:
    """
    Split text on newlines only.

    Unlike str.splitlines(), characters such as '\\x0c' or '\\u2028' stay inside
    the line. A trailing '\\r' is stripped from each line, and a final newline
    does not produce an extra empty line.

    'a\\r\\nb\\n' -> ['a', 'b']
    """
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]
