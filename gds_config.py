from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any, Dict, Iterable, List, Tuple, Union

from datamodels import Connection, GdsSnapshot
from xml_io import PathLike, read_xml, write_xml

logger = logging.getLogger("plcnext.gds")

GDS_ROOT = "GdsConfigurationDocument"
GDS_SCHEMA_VERSION = "1.0"
PORT_SEPARATOR = ":"


def split_endpoint(value: str) -> Tuple[str, str]:
    """
    Split a ``node:port`` endpoint into (node, port).

    Splits on the first separator only; an endpoint without a separator
    is treated as a bare node with an empty port.
    """
    count = value.count(PORT_SEPARATOR)
    if count != 1:
        logger.warning("Endpoint %r has %d '%s' separators (expected 1)", value, count, PORT_SEPARATOR)
    node, _, port = value.partition(PORT_SEPARATOR)
    return node, port


def join_endpoint(node: str, port: str) -> str:
    return f"{node}{PORT_SEPARATOR}{port}"


def read_gds_config(gds_path: PathLike) -> GdsSnapshot:
    root = read_xml(gds_path, root_tag=GDS_ROOT)
    return GdsSnapshot(
        schema_version=root.get("schemaVersion"),
        connectors=[dict(c.attrib) for c in root.findall("Connectors/Connector")],
    )


def get_connections(gds_path: PathLike) -> List[Connection]:
    """List the port connections declared in a GDS configuration file, in file order."""
    connections: List[Connection] = []
    for connector in read_gds_config(gds_path).connectors:
        from_node, from_port = split_endpoint(connector.get("startPort", ""))
        to_node, to_port = split_endpoint(connector.get("endPort", ""))
        connections.append(
            Connection(from_node=from_node, to_node=to_node, from_port=from_port, to_port=to_port)
        )
    return connections


def set_connections(
    connections: Iterable[Union[Connection, Dict[str, Any]]],
    gds_path: PathLike,
) -> Path:
    """
    Write connections to a GDS configuration file, replacing its content.

    Accepts Connection objects or editor link dicts
    (``{"from", "to", "fromPort", "toPort"}``).
    """
    root = ET.Element(GDS_ROOT, {"schemaVersion": GDS_SCHEMA_VERSION})
    connectors = ET.SubElement(root, "Connectors")

    n = 0
    for link in connections:
        conn = link if isinstance(link, Connection) else Connection.from_dict(link)
        ET.SubElement(
            connectors,
            "Connector",
            {
                "startPort": join_endpoint(conn.from_node, conn.from_port),
                "endPort": join_endpoint(conn.to_node, conn.to_port),
            },
        )
        n += 1

    target = write_xml(root, gds_path)
    logger.info("%d connection(s) written to %s", n, target)
    return target
