from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional


# ---------------------------------------------------------------------
# TIC element list
# ---------------------------------------------------------------------
@dataclass
class Attribute:
    name: str
    value: str


@dataclass
class Element:
    name: str
    attributes: List[Attribute]
    element_list: Optional[ET.Element] = None

    def get(self, attr_name: str, default: Optional[str] = None) -> Optional[str]:
        for a in self.attributes:
            if a.name == attr_name:
                return a.value
        return default


# ---------------------------------------------------------------------
# Editor model: nodes with ports, ESM tree, links
# ---------------------------------------------------------------------
@dataclass
class Port:
    port_id: str
    type: str
    text: str = ""

    def __post_init__(self) -> None:
        if not self.text:
            self.text = self.port_id

    def to_dict(self) -> Dict[str, str]:
        return {"portId": self.port_id, "text": self.text, "type": self.type}


@dataclass
class Node:
    key: str
    name: str
    left_array: List[Port] = field(default_factory=list)
    right_array: List[Port] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "name": self.name,
            "leftArray": [p.to_dict() for p in self.left_array],
            "rightArray": [p.to_dict() for p in self.right_array],
        }


@dataclass
class EsmConfigElement:
    key: str
    name: str
    parent: Optional[str] = None
    category: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        d = {"key": self.key, "name": self.name}
        if self.parent is not None:
            d["parent"] = self.parent
        if self.category is not None:
            d["category"] = self.category
        return d


@dataclass
class ProgramInstance:
    category: str
    key: str
    name: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


@dataclass
class Connection:
    from_node: str
    to_node: str
    from_port: str
    to_port: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "from": self.from_node,
            "to": self.to_node,
            "fromPort": self.from_port,
            "toPort": self.to_port,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Connection":
        return cls(
            from_node=str(d["from"]),
            to_node=str(d["to"]),
            from_port=str(d.get("fromPort", "")),
            to_port=str(d.get("toPort", "")),
        )


# ---------------------------------------------------------------------
# Raw metadata snapshots (.libmeta / .compmeta / .progmeta / .typemeta)
# ---------------------------------------------------------------------
@dataclass
class PortMeta:
    name: str
    type: str
    kind: Optional[str] = None
    dimensions: Optional[int] = None

    @property
    def type_label(self) -> str:
        if self.dimensions is None or self.dimensions == 1:
            return self.type
        return f"{self.type}[{self.dimensions}]"

    def to_port(self) -> Port:
        return Port(port_id=self.name, type=self.type_label)


@dataclass
class LibraryMeta:
    name: str
    application_domain: Optional[str] = None
    files: List[str] = field(default_factory=list)
    component_includes: List[str] = field(default_factory=list)
    type_includes: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "applicationDomain": self.application_domain,
            "files": list(self.files),
            "componentIncludes": list(self.component_includes),
            "typeIncludes": list(self.type_includes),
        }


@dataclass
class ComponentMeta:
    name: str
    ports: List[PortMeta] = field(default_factory=list)
    program_includes: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "ports": [asdict(p) for p in self.ports],
            "programIncludes": list(self.program_includes),
        }


@dataclass
class ProgramMeta:
    name: str
    ports: List[PortMeta] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "ports": [asdict(p) for p in self.ports]}


@dataclass
class TypeMeta:
    name: str
    fields: List[PortMeta] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "fields": [asdict(f) for f in self.fields]}


# ---------------------------------------------------------------------
# Raw config snapshots (.esm.config / .acf.config / .gds.config)
# ---------------------------------------------------------------------
@dataclass
class EsmSnapshot:
    schema_version: Optional[str]
    tasks: List[Dict[str, str]] = field(default_factory=list)
    esm_task_relations: List[Dict[str, str]] = field(default_factory=list)
    programs: List[Dict[str, str]] = field(default_factory=list)
    task_program_relations: List[Dict[str, str]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "schemaVersion": self.schema_version,
            "tasks": self.tasks,
            "esmTaskRelations": self.esm_task_relations,
            "programs": self.programs,
            "taskProgramRelations": self.task_program_relations,
        }


@dataclass
class AcfSnapshot:
    schema_version: Optional[str]
    processes: List[Dict[str, str]] = field(default_factory=list)
    libraries: List[Dict[str, str]] = field(default_factory=list)
    components: List[Dict[str, str]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "schemaVersion": self.schema_version,
            "processes": self.processes,
            "libraries": self.libraries,
            "components": self.components,
        }


@dataclass
class GdsSnapshot:
    schema_version: Optional[str]
    connectors: List[Dict[str, str]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"schemaVersion": self.schema_version, "connectors": self.connectors}
