from __future__ import annotations

import logging
from typing import Dict, List

from datamodels import AcfSnapshot, EsmConfigElement, EsmSnapshot, ProgramInstance
from errors import ConfigParseError, DanglingReferenceError
from xml_io import PathLike, read_xml

logger = logging.getLogger("plcnext.esm")

ESM_ROOT = "EsmConfigurationDocument"
ACF_ROOT = "AcfConfigurationDocument"

ROOT_KEY = "PLCnext"
ESM_KEYS = ("ESM1", "ESM2")

# Only cyclic tasks are modelled; idle/event tasks are reported and skipped.
SUPPORTED_TASK = "CyclicTask"


def program_instance_key(component_name: str, program_name: str) -> str:
    return f"{component_name}/{program_name}"


# ---------------------------------------------------------------------
# Snapshots
# ---------------------------------------------------------------------
def read_esm_config(esm_path: PathLike) -> EsmSnapshot:
    root = read_xml(esm_path, root_tag=ESM_ROOT)

    tasks: List[Dict[str, str]] = []
    for task in root.findall("Tasks/*"):
        if task.tag != SUPPORTED_TASK:
            logger.warning("Task '%s' of kind %s is not supported, skipped", task.get("name"), task.tag)
            continue
        tasks.append(dict(task.attrib))

    return EsmSnapshot(
        schema_version=root.get("schemaVersion"),
        tasks=tasks,
        esm_task_relations=[dict(r.attrib) for r in root.findall("EsmTaskRelations/EsmTaskRelation")],
        programs=[dict(p.attrib) for p in root.findall("Programs/Program")],
        task_program_relations=[dict(r.attrib) for r in root.findall("TaskProgramRelations/TaskProgramRelation")],
    )


def read_acf_config(acf_path: PathLike) -> AcfSnapshot:
    root = read_xml(acf_path, root_tag=ACF_ROOT)
    return AcfSnapshot(
        schema_version=root.get("schemaVersion"),
        processes=[dict(p.attrib) for p in root.findall("Processes/Process")],
        libraries=[dict(lib.attrib) for lib in root.findall("Libraries/Library")],
        components=[dict(c.attrib) for c in root.findall("Components/Component")],
    )


def get_component_types(acf_path: PathLike) -> Dict[str, str]:
    """Map component instance name -> ``library.type``."""
    types: Dict[str, str] = {}
    for comp in read_acf_config(acf_path).components:
        types[comp.get("name", "")] = f"{comp.get('library', '')}.{comp.get('type', '')}"
    return types


# ---------------------------------------------------------------------
# ESM tree
# ---------------------------------------------------------------------
class _EsmTree:
    """Ordered element list with one key index per element kind."""

    def __init__(self) -> None:
        self.elements: List[EsmConfigElement] = []
        self._kinds: Dict[str, str] = {}
        self._by_kind: Dict[str, Dict[str, EsmConfigElement]] = {}

    def add(self, element: EsmConfigElement, kind: str) -> None:
        declared = self._kinds.get(element.key)
        if declared is not None:
            raise ConfigParseError(f"Duplicate ESM key '{element.key}' ({kind}, already declared as {declared})")
        self._kinds[element.key] = kind
        self._by_kind.setdefault(kind, {})[element.key] = element
        self.elements.append(element)

    def reparent(self, key: str, kind: str, parent: str, parent_kind: str, referenced_by: str) -> None:
        element = self._by_kind.get(kind, {}).get(key)
        if element is None:
            raise DanglingReferenceError(kind, key, referenced_by)
        if parent not in self._by_kind.get(parent_kind, {}):
            raise DanglingReferenceError(parent_kind, parent, referenced_by)
        element.parent = parent


def get_esm_config(esm_path: PathLike, acf_path: PathLike) -> List[EsmConfigElement]:
    """
    Build the ESM tree of a project as a flat list:
    PLCnext -> ESM1/ESM2 -> tasks -> program instances.

    Raises DanglingReferenceError when a relation names an undeclared
    ESM, task or program instance, or a key of the wrong kind.
    Raises ConfigParseError when two elements share a key.
    """
    component_types = get_component_types(acf_path)
    esm = read_esm_config(esm_path)

    tree = _EsmTree()
    tree.add(EsmConfigElement(key=ROOT_KEY, name=ROOT_KEY), "root")
    for esm_key in ESM_KEYS:
        tree.add(EsmConfigElement(key=esm_key, name=esm_key, parent=ROOT_KEY), "esm")

    for task in esm.tasks:
        name = task.get("name", "")
        tree.add(EsmConfigElement(key=name, name=name, parent=""), "task")

    for rel in esm.esm_task_relations:
        tree.reparent(rel.get("taskName", ""), "task", rel.get("esmName", ""), "esm", "EsmTaskRelation")

    for prog in esm.programs:
        comp_name = prog.get("componentName", "")
        name = prog.get("name", "")
        comp_type = component_types.get(comp_name)
        category = f"{comp_type}.{prog.get('programType', '')}" if comp_type else None
        tree.add(
            EsmConfigElement(
                key=program_instance_key(comp_name, name),
                name=name,
                parent="",
                category=category,
            ),
            "program",
        )

    for rel in esm.task_program_relations:
        tree.reparent(rel.get("programName", ""), "program", rel.get("taskName", ""), "task", "TaskProgramRelation")

    logger.debug("ESM tree with %d element(s) from %s", len(tree.elements), esm_path)
    return tree.elements


def get_program_instances(acf_path: PathLike, esm_path: PathLike) -> List[ProgramInstance]:
    """List the program instances of a project with their fully qualified program type."""
    component_types = get_component_types(acf_path)
    instances: List[ProgramInstance] = []
    for prog in read_esm_config(esm_path).programs:
        comp_name = prog.get("componentName", "")
        comp_type = component_types.get(comp_name)
        if comp_type is None:
            # e.g. Eclr programs: not declared in the ACF configuration
            logger.info("Program '%s' skipped: component '%s' not in ACF configuration", prog.get("name"), comp_name)
            continue
        instances.append(
            ProgramInstance(
                category=f"{comp_type}.{prog.get('programType', '')}",
                key=program_instance_key(comp_name, prog.get("name", "")),
                name=prog.get("name", ""),
            )
        )
    return instances
