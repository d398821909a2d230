"""
Module path derivation from file locations.

``src/analyzer/parser.rs`` lives in module ``analyzer::parser``; crate roots
(``lib.rs``, ``main.rs``) and folder modules (``mod.rs``) add no segment.
"""

from pathlib import PurePath


SOURCE_ROOT = "src"
SOURCE_EXTENSION = ".rs"
MODULE_ROOT_NAMES = frozenset({"lib", "main", "mod"})


def derive_file_module_path(file_path: str | PurePath) -> list[str]:
    """Derive module path segments from a source file path.

    Args:
        file_path: Path of a ``.rs`` file, absolute or relative

    Returns:
        Segments between the ``src`` directory and the file, e.g.
        ``src/foo/bar.rs`` -> ``["foo", "bar"]``
    """
    path = PurePath(file_path)
    components = [part for part in path.parts if part != path.anchor]
    if not components:
        return []

    last = components[-1]
    if last.endswith(SOURCE_EXTENSION):
        components[-1] = last[: -len(SOURCE_EXTENSION)]

    if SOURCE_ROOT in components:
        components = components[components.index(SOURCE_ROOT) + 1 :]

    return [c for c in components if c not in MODULE_ROOT_NAMES]
