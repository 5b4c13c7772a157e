"""XML text escaping shared by the record assembler and the encoder."""

from typing import Any

__all__ = ["escape_xml"]

_REPLACEMENTS = str.maketrans(
    {
        "&": "&amp;",
        "\r": "&#13;",
        "<": "&lt;",
        ">": "&gt;",
        '"': "&quot;",
        "'": "&apos;",
    }
)


def escape_xml(value: Any) -> str:
    """Escape a value for use as XML text or attribute content.

    Non-string values are converted with ``str()`` first. Carriage returns
    are written as ``&#13;`` so they survive XML line-ending normalization.

    Parameters
    ----------
    value : Any
        Value to escape.

    Returns
    -------
    str
        Escaped text.

    Examples
    --------
        >>> escape_xml("http://ovidsp.ovid.com/ovidweb.cgi?T=JS&CSC")
        'http://ovidsp.ovid.com/ovidweb.cgi?T=JS&amp;CSC'
    """
    return str(value).translate(_REPLACEMENTS)
