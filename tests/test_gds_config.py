import xml.etree.ElementTree as ET

from conftest import gds_document, sample_connections, write
from datamodels import Connection
from gds_config import get_connections, read_gds_config, set_connections, split_endpoint


def _gds(project_dir):
    return project_dir / "Plc" / "Gds" / "PCWE.gds.config"


def test_reads_all_connectors_in_order(project_dir):
    connections = get_connections(_gds(project_dir))

    assert len(connections) == 65
    first = connections[0]
    assert first.from_node == "Arp.Io.FbIo.AxlC/1"
    assert first.from_port == "DI0"
    assert first.to_node == "MyComponent1/MyProgram1"
    assert first.to_port == "IP_Values0"
    assert [c.from_port for c in connections] == [f"DI{i}" for i in range(65)]


def test_round_trip(tmp_path):
    connections = [
        Connection("Arp.Plc.Eclr/MainInstance", "MyComponent1/MyProgram1", "xStart", "IP_Start"),
        Connection("MyComponent1/MyProgram1", "Arp.Io.FbIo.AxlC/1", "OP_Done", "DO1"),
        Connection("MyComponent1/MyProgram1", "Arp.Io.FbIo.AxlC/1", "OP_Done", "DO2"),
    ]
    path = set_connections(connections, tmp_path / "Gds" / "out.gds.config")

    assert get_connections(path) == connections


def test_writes_editor_link_dicts(tmp_path):
    links = [{"from": "A", "to": "B", "fromPort": "o", "toPort": "i"}]
    path = set_connections(links, tmp_path / "links.gds.config")

    root = ET.parse(path).getroot()
    assert root.tag == "GdsConfigurationDocument"
    assert root.get("schemaVersion") == "1.0"
    assert [c.attrib for c in root.findall("Connectors/Connector")] == [{"startPort": "A:o", "endPort": "B:i"}]
    assert not path.read_text(encoding="utf-8").startswith("<?xml")
    assert [c.to_dict() for c in get_connections(path)] == links


def test_write_empty_list(tmp_path):
    path = set_connections([], tmp_path / "empty.gds.config")
    assert get_connections(path) == []
    assert read_gds_config(path).connectors == []


def test_split_endpoint_fallbacks():
    assert split_endpoint("node:port") == ("node", "port")
    assert split_endpoint("node") == ("node", "")
    assert split_endpoint("a:b:c") == ("a", "b:c")
    assert split_endpoint("") == ("", "")


def test_malformed_endpoints_do_not_crash(tmp_path):
    path = write(tmp_path / "odd.gds.config", gds_document([("NoSeparator", "x:y:z")]))
    [conn] = get_connections(path)
    assert (conn.from_node, conn.from_port) == ("NoSeparator", "")
    assert (conn.to_node, conn.to_port) == ("x", "y:z")


def test_snapshot(project_dir):
    snap = read_gds_config(_gds(project_dir))
    assert snap.schema_version == "1.0"
    assert len(snap.connectors) == len(sample_connections())
    assert snap.to_dict()["connectors"][0] == {
        "startPort": "Arp.Io.FbIo.AxlC/1:DI0",
        "endPort": "MyComponent1/MyProgram1:IP_Values0",
    }
