from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Dict, List, Optional

from datamodels import Node, Port
from errors import ConfigFileNotFoundError
from tic_elements import get_elements
from xml_io import PathLike, read_xml

logger = logging.getLogger("plcnext.io")

IO_MODULE_PREFIX = "Arp.Io.FbIo.AxlC/"
IO_MODULE_NAME_PREFIX = "AxlC/"

FRAME_ELEMENT = "IO:Frame"
PORT_ELEMENT = "IO:Port"


def _frame_direction(frame_id: str) -> str:
    # FrameId looks like "1:IN" / "1:OUT"
    return frame_id.rsplit(":", 1)[-1].strip().upper()


def find_tic_files(io_dir: PathLike) -> List[Path]:
    io_dir = Path(io_dir)
    if not io_dir.is_dir():
        raise ConfigFileNotFoundError(f"Directory not found: {io_dir}")
    tics = sorted(io_dir.rglob("*.tic"))
    if not tics:
        logger.warning("No .tic files in %s", io_dir)
    return tics


class _IoModuleCollector:
    """Accumulates IO module nodes while walking a TIC tree."""

    def __init__(self) -> None:
        self.modules: List[Node] = []
        self._by_key: Dict[str, Node] = {}

    def node_for(self, node_id: str) -> Node:
        key = IO_MODULE_PREFIX + node_id
        node = self._by_key.get(key)
        if node is None:
            node = Node(key=key, name=IO_MODULE_NAME_PREFIX + node_id)
            self._by_key[key] = node
            self.modules.append(node)
        return node

    def walk_frames(self, element_list: Optional[ET.Element]) -> None:
        for element in get_elements(element_list):
            if element.name == FRAME_ELEMENT:
                direction = _frame_direction(element.get("FrameId", ""))
                self.walk_ports(element.element_list, direction)
            self.walk_frames(element.element_list)

    def walk_ports(self, element_list: Optional[ET.Element], direction: str) -> None:
        for element in get_elements(element_list):
            if element.name == PORT_ELEMENT:
                node_id = element.get("NodeId", "")
                if node_id:
                    self.add_port(node_id, element.get("Name", ""), element.get("DataType", ""), direction)
                else:
                    logger.warning("Port %r without NodeId skipped", element.get("Name", ""))
            self.walk_ports(element.element_list, direction)

    def add_port(self, node_id: str, name: str, data_type: str, direction: str) -> None:
        node = self.node_for(node_id)
        # IN frame = data coming from the module = signal output
        if direction == "IN":
            node.right_array.append(Port(port_id=name, type=data_type))
        elif direction == "OUT":
            node.left_array.append(Port(port_id=name, type=data_type))
        else:
            logger.debug("Port %s on node %s ignored (frame direction %r)", name, node_id, direction)


def get_io_modules(tic_path: PathLike) -> List[Node]:
    """
    List the IO modules described by a TIC hardware configuration file.

    One node per distinct NodeId; ports of IN frames become outputs
    (rightArray), ports of OUT frames become inputs (leftArray).
    """
    root = read_xml(tic_path, root_tag="TIC")
    collector = _IoModuleCollector()
    collector.walk_frames(root)
    logger.debug("%d IO module(s) in %s", len(collector.modules), tic_path)
    return collector.modules
