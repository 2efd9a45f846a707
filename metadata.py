from __future__ import annotations

import logging
import os
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from datamodels import ComponentMeta, LibraryMeta, Node, PortMeta, ProgramMeta, TypeMeta
from errors import ConfigFileNotFoundError, ConfigParseError
from xml_io import PathLike, read_xml

logger = logging.getLogger("plcnext.meta")

META_ROOT = "MetaConfigurationDocument"
LIBMETA_EXTENSION = ".libmeta"


# ---------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------
def _resolve_include(referencing_file: Path, include: str) -> Path:
    # includes are relative to the file that names them; PC Worx writes backslashes
    return Path(os.path.normpath(referencing_file.parent / include.replace("\\", "/")))


def _include_paths(parent: ET.Element, collection: str) -> List[str]:
    return [inc.get("path", "") for inc in parent.findall(f"{collection}/Include")]


def _parse_dimensions(raw: Optional[str], where: str) -> Optional[int]:
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigParseError(f"Invalid dimensions '{raw}' on {where}") from e


def _port_kind(el: ET.Element) -> Optional[str]:
    kind = el.get("kind")
    if kind:
        return kind
    # newer metadata: attributes="Input|Retain"
    flags = [f.strip() for f in (el.get("attributes") or "").split("|")]
    for candidate in ("Input", "Output"):
        if candidate in flags:
            return candidate
    return None


def _parse_port(el: ET.Element, where: str) -> PortMeta:
    name = el.get("name", "")
    raw_dim = el.get("dimensions")
    if raw_dim is None:
        raw_dim = el.get("multiplicity")
    return PortMeta(
        name=name,
        type=el.get("type", ""),
        kind=_port_kind(el),
        dimensions=_parse_dimensions(raw_dim, f"{where} port '{name}'"),
    )


def _ports_to_node(node: Node, ports: List[PortMeta]) -> Node:
    for p in ports:
        if p.kind == "Input":
            node.left_array.append(p.to_port())
        elif p.kind == "Output":
            node.right_array.append(p.to_port())
    return node


# ---------------------------------------------------------------------
# Single-file readers
# ---------------------------------------------------------------------
def read_meta_config(path: PathLike) -> List[str]:
    root = read_xml(path, root_tag=META_ROOT)
    return [mi.get("path", "") for mi in root.findall("MetaIncludes/MetaInclude")]


def find_libmeta_files(meta_config_path: PathLike) -> List[Path]:
    """
    Resolve the library metadata files named by a project meta configuration.

    A MetaInclude either points straight at a ``.libmeta`` file or at a
    directory that holds one or more of them.
    """
    meta_config = Path(meta_config_path)
    found: List[Path] = []
    for inc in read_meta_config(meta_config):
        target = _resolve_include(meta_config, inc)
        if target.suffix == LIBMETA_EXTENSION:
            if not target.is_file():
                raise ConfigFileNotFoundError(f"File not found: {target} (included from {meta_config})")
            found.append(target)
            continue
        if not target.is_dir():
            raise ConfigFileNotFoundError(f"Directory not found: {target} (included from {meta_config})")
        libmetas = sorted(target.glob("*" + LIBMETA_EXTENSION))
        if not libmetas:
            logger.warning("No %s files in %s", LIBMETA_EXTENSION, target)
        found.extend(libmetas)
    return found


def read_libmeta(path: PathLike) -> List[LibraryMeta]:
    root = read_xml(path, root_tag=META_ROOT)
    libraries: List[LibraryMeta] = []
    for lib in root.findall("Library"):
        libraries.append(
            LibraryMeta(
                name=lib.get("name", ""),
                application_domain=lib.get("applicationDomain"),
                files=[f.get("path", "") for f in lib.findall("File")],
                component_includes=_include_paths(lib, "ComponentIncludes"),
                type_includes=_include_paths(lib, "TypeIncludes"),
            )
        )
    return libraries


def read_compmeta(path: PathLike) -> List[ComponentMeta]:
    root = read_xml(path, root_tag=META_ROOT)
    components: List[ComponentMeta] = []
    for comp in root.findall("Component"):
        name = comp.get("name", "")
        components.append(
            ComponentMeta(
                name=name,
                ports=[_parse_port(p, f"component '{name}'") for p in comp.findall("Ports/Port")],
                program_includes=_include_paths(comp, "ProgramIncludes"),
            )
        )
    return components


def read_progmeta(path: PathLike) -> List[ProgramMeta]:
    root = read_xml(path, root_tag=META_ROOT)
    programs: List[ProgramMeta] = []
    for prog in root.findall("Program"):
        name = prog.get("name", "")
        programs.append(
            ProgramMeta(
                name=name,
                ports=[_parse_port(p, f"program '{name}'") for p in prog.findall("Ports/Port")],
            )
        )
    return programs


def read_typemeta(path: PathLike) -> List[TypeMeta]:
    root = read_xml(path, root_tag=META_ROOT)
    types: List[TypeMeta] = []
    for t in root.findall("Types/Type"):
        name = t.get("name", "")
        fields = []
        for f in t.findall("Fields/Field"):
            pm = _parse_port(f, f"type '{name}'")
            pm.kind = None
            fields.append(pm)
        types.append(TypeMeta(name=name, fields=fields))
    return types


# ---------------------------------------------------------------------
# Project-wide listings (meta config -> libmeta -> compmeta -> progmeta)
# ---------------------------------------------------------------------
def _walk_project(
    meta_config_path: PathLike,
) -> Iterator[Tuple[LibraryMeta, ComponentMeta, List[ProgramMeta]]]:
    for libmeta_file in find_libmeta_files(meta_config_path):
        logger.debug("Reading library metadata %s", libmeta_file)
        for library in read_libmeta(libmeta_file):
            for comp_inc in library.component_includes:
                compmeta_file = _resolve_include(libmeta_file, comp_inc)
                for component in read_compmeta(compmeta_file):
                    programs: List[ProgramMeta] = []
                    for prog_inc in component.program_includes:
                        programs.extend(read_progmeta(_resolve_include(compmeta_file, prog_inc)))
                    yield library, component, programs


def get_programs(meta_config_path: PathLike) -> List[Node]:
    """
    Describe the interface of every program type in a project.

    Keys are fully qualified as ``library.component.program``.
    """
    nodes: List[Node] = []
    for library, component, programs in _walk_project(meta_config_path):
        for program in programs:
            key = f"{library.name}.{component.name}.{program.name}"
            nodes.append(_ports_to_node(Node(key=key, name=program.name), program.ports))
    logger.debug("%d program type(s) found via %s", len(nodes), meta_config_path)
    return nodes


def get_types(meta_config_path: PathLike) -> List[Node]:
    """Component types (``library.component``), each followed by its program types."""
    nodes: List[Node] = []
    for library, component, programs in _walk_project(meta_config_path):
        comp_key = f"{library.name}.{component.name}"
        nodes.append(_ports_to_node(Node(key=comp_key, name=component.name), component.ports))
        for program in programs:
            nodes.append(
                _ports_to_node(Node(key=f"{comp_key}.{program.name}", name=program.name), program.ports)
            )
    return nodes
