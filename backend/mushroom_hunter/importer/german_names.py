"""
German genus names are derived from the species' German name: the last
hyphen-separated part, pluralized ("Grüner Knollenblätter-Pilz" → genus
"Pilze"). Only the endings that occur in the checklist are handled.
"""

# (ending, characters to cut, replacement), checked in order; first match
# wins, so "keule" is in practice handled by the "-e" rule.
PLURAL_RULES = (
    ("pilz", 0, "e"),
    ("ling", 0, "e"),
    ("lorchel", 0, "n"),
    ("morchel", 0, "n"),
    ("e", 0, "n"),
    ("kopf", 4, "köpfe"),
    ("hut", 3, "hüte"),
    ("fuss", 4, "füsse"),
    ("schwamm", 7, "schwämme"),
    ("blatt", 5, "blätter"),
    ("zahn", 4, "zähne"),
    ("bovist", 6, "boviste"),
    ("keule", 5, "keulen"),
)

# Loan words ending in "e" that keep their form
INVARIANT_NAMES = frozenset({"Shiitake"})


def pluralize_genus_name(name: str) -> str:
    """
    Plural of a single-word German genus name.

    Multi-word names return "" (no sensible plural); unknown endings are
    returned unchanged.

    >>> pluralize_genus_name("Täubling")
    'Täublinge'
    >>> pluralize_genus_name("Schwamm")
    'Schwämme'
    """
    if " " in name:
        return ""

    lower = name.lower()
    for ending, cut, replacement in PLURAL_RULES:
        if not lower.endswith(ending):
            continue
        if ending == "e" and name in INVARIANT_NAMES:
            continue
        stem = name[: len(name) - cut] if cut else name
        return stem + replacement

    return name


def genus_name_from_common_name(common_name: str) -> str:
    """German genus plural from a species' German name, or "" if it has no hyphen."""
    parts = [part.strip() for part in common_name.split("-") if part.strip()]
    if len(parts) > 1:
        return pluralize_genus_name(parts[-1])
    return ""
