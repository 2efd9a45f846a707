from __future__ import annotations

import os
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Optional, Union

from errors import ConfigFileNotFoundError, ConfigParseError

PathLike = Union[str, Path]


def _localname(tag: str) -> str:
    return tag.split("}", 1)[1] if "}" in tag else tag


def _strip_ns(root: ET.Element) -> ET.Element:
    # PLCnext tooling writes a default xmlns on most documents
    for el in root.iter():
        if isinstance(el.tag, str):
            el.tag = _localname(el.tag)
    return root


def read_xml(path: PathLike, root_tag: Optional[str] = None) -> ET.Element:
    """
    Parse an XML configuration file and return its root element.

    Namespaces are removed from element tags so that readers can use plain
    paths like ``Library/ComponentIncludes/Include``.

    Raises:
        ConfigFileNotFoundError: the file does not exist.
        ConfigParseError: the file is not well-formed XML, or its root
            element is not ``root_tag``.
    """
    p = Path(path)
    if not p.is_file():
        raise ConfigFileNotFoundError(f"File not found: {p}")

    try:
        root = ET.parse(p).getroot()
    except ET.ParseError as e:
        raise ConfigParseError(f"XML Parsing Error in {p}: {e}") from e

    _strip_ns(root)
    if root_tag is not None and root.tag != root_tag:
        raise ConfigParseError(
            f"Invalid configuration file {p}: root element is '{root.tag}', "
            f"expected '{root_tag}'"
        )
    return root


def write_xml(root: ET.Element, path: PathLike) -> Path:
    """Serialize ``root`` to ``path`` (no XML declaration)."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)

    tree = ET.ElementTree(root)
    ET.indent(tree, space="  ")

    tmp = target.with_name(target.name + ".tmp")
    try:
        tree.write(tmp, encoding="utf-8", xml_declaration=False)
        os.replace(tmp, target)
    finally:
        if tmp.exists():
            tmp.unlink()
    return target
