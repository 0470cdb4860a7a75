"""Sanitized on-disk names derived from human-entered text."""

import string

_KEEP = set(string.ascii_lowercase + string.digits)

_TRANSLITERATIONS = {
    "_": "_",
    "-": "_",
    "å": "a", "ä": "a", "à": "a", "á": "a", "â": "a", "ã": "a",
    "ö": "o", "ø": "o", "ò": "o", "ó": "o", "ô": "o", "õ": "o",
    "é": "e", "è": "e", "ê": "e", "ë": "e",
    "í": "i", "ì": "i", "î": "i", "ï": "i",
    "ú": "u", "ù": "u", "û": "u", "ü": "u",
}


def sanitize_name(text: str) -> str:
    """
    Return the lowercase, filesystem-safe form of ``text``.

    ASCII letters and digits are kept, ``_`` and ``-`` become ``_``, a small
    table of accented vowels is transliterated and every other character is
    dropped.

    >>> sanitize_name("ABC/?<-ÅÄÖ_xyz_1234-åäö%^<??<>//")
    'abc_aao_xyz_1234_aao'
    """
    output = []
    for char in text.lower():
        if char in _KEEP:
            output.append(char)
        elif char in _TRANSLITERATIONS:
            output.append(_TRANSLITERATIONS[char])
    return "".join(output)
