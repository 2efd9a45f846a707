from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

import pytest

META_NS = "http://www.phoenixcontact.com/schema/metaconfig"


# ---------------------------------------------------------------------
# XML builders
# ---------------------------------------------------------------------
def tic_element(name: str, attrs: Optional[Dict[str, str]] = None, children: Optional[List[str]] = None) -> str:
    al = ""
    if attrs:
        al = "<AL>" + "".join(f'<A n="{k}"><V>{v}</V></A>' for k, v in attrs.items()) + "</AL>"
    el = ""
    if children:
        el = "<EL>" + "".join(children) + "</EL>"
    return f'<E n="{name}">{al}{el}</E>'


def tic_port(node_id: str, name: str, data_type: str = "bit") -> str:
    return tic_element("IO:Port", {"NodeId": node_id, "Name": name, "DataType": data_type})


def tic_frame(frame_id: str, ports: List[str]) -> str:
    # ports sit a couple of levels below the frame in real TIC files
    channel = tic_element("IO:Channels", children=ports)
    return tic_element("IO:Frame", {"FrameId": frame_id}, [channel])


def tic_document(*elements: str) -> str:
    return "<TIC>" + "".join(elements) + "</TIC>"


def gds_document(pairs: List[tuple]) -> str:
    connectors = "".join(f'<Connector startPort="{s}" endPort="{e}" />' for s, e in pairs)
    return (
        '<GdsConfigurationDocument schemaVersion="1.0">'
        f"<Connectors>{connectors}</Connectors>"
        "</GdsConfigurationDocument>"
    )


def write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


# ---------------------------------------------------------------------
# Sample PLCnext project
# ---------------------------------------------------------------------
LIBMETA = f"""<?xml version="1.0" encoding="utf-8"?>
<MetaConfigurationDocument xmlns="{META_NS}" schemaVersion="1.3">
  <Library name="MyLibrary" applicationDomain="CPLUSPLUS">
    <File path="libMyLibrary.so" />
    <ComponentIncludes>
      <Include path="MyComponent\\MyComponent.compmeta" />
    </ComponentIncludes>
    <TypeIncludes>
      <Include path="MyLibrary.typemeta" />
    </TypeIncludes>
  </Library>
</MetaConfigurationDocument>
"""

COMPMETA = f"""<?xml version="1.0" encoding="utf-8"?>
<MetaConfigurationDocument xmlns="{META_NS}" schemaVersion="1.3">
  <Component name="MyComponent">
    <ProgramIncludes>
      <Include path="MyProgram/MyProgram.progmeta" />
    </ProgramIncludes>
  </Component>
</MetaConfigurationDocument>
"""

PROGMETA = f"""<?xml version="1.0" encoding="utf-8"?>
<MetaConfigurationDocument xmlns="{META_NS}" schemaVersion="1.3">
  <Program name="MyProgram">
    <Ports>
      <Port name="IP_Start" type="boolean" kind="Input" multiplicity="1" />
      <Port name="IP_Values" type="int16" attributes="Input|Retain" dimensions="4" />
      <Port name="OP_Done" type="boolean" kind="Output" dimensions="" />
      <Port name="OP_Counters" type="uint32" kind="Output" multiplicity="8" />
    </Ports>
  </Program>
</MetaConfigurationDocument>
"""

TYPEMETA = f"""<?xml version="1.0" encoding="utf-8"?>
<MetaConfigurationDocument xmlns="{META_NS}" schemaVersion="1.3">
  <Types>
    <Type name="MyStruct">
      <Fields>
        <Field name="Counter" type="uint16" dimensions="" />
        <Field name="Values" type="int32" dimensions="3" />
      </Fields>
    </Type>
  </Types>
</MetaConfigurationDocument>
"""

META_CONFIG = """<?xml version="1.0" encoding="utf-8"?>
<MetaConfigurationDocument schemaVersion="1.3">
  <MetaIncludes>
    <MetaInclude path="../../Libs/MyLibrary" />
  </MetaIncludes>
</MetaConfigurationDocument>
"""

ESM_CONFIG = """<?xml version="1.0" encoding="utf-8"?>
<EsmConfigurationDocument schemaVersion="2.0">
  <Tasks>
    <CyclicTask name="Cyclic100" priority="0" cycleTime="100000000" watchdogTime="100000000" executionTimeThreshold="0" />
  </Tasks>
  <EsmTaskRelations>
    <EsmTaskRelation esmName="ESM1" taskName="Cyclic100" />
  </EsmTaskRelations>
  <Programs>
    <Program name="MyProgram1" programType="MyProgram" componentName="MyComponent1" />
  </Programs>
  <TaskProgramRelations>
    <TaskProgramRelation taskName="Cyclic100" programName="MyComponent1/MyProgram1" order="0" />
  </TaskProgramRelations>
</EsmConfigurationDocument>
"""

ACF_CONFIG = """<?xml version="1.0" encoding="utf-8"?>
<AcfConfigurationDocument schemaVersion="1.0">
  <Processes>
    <Process name="MainProcess" settingsPath="$ARP_PROJECTS_DIR$/Default/Plc/Plm/Plm.acf.settings" />
  </Processes>
  <Libraries>
    <Library name="MyLibrary" binaryPath="$ARP_PROJECTS_DIR$/PCWE/Libs/MyLibrary/libMyLibrary.so" />
  </Libraries>
  <Components>
    <Component name="MyComponent1" type="MyComponent" library="MyLibrary" process="MainProcess" />
  </Components>
</AcfConfigurationDocument>
"""


def sample_connections(n: int = 65) -> List[tuple]:
    return [
        (f"Arp.Io.FbIo.AxlC/1:DI{i}", f"MyComponent1/MyProgram1:IP_Values{i}")
        for i in range(n)
    ]


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    root = tmp_path / "PCWE"

    in_ports = [tic_port("1", f"IN{i:02d}") for i in range(1, 10)]
    out_ports = [tic_port("1", f"OUT{i:02d}") for i in range(1, 10)]
    write(
        root / "Io" / "Arp.Io.AxlC" / "045f8bb5-cb6a-4982-8374-5636a44ad191.tic",
        tic_document(tic_element("Bus", children=[tic_frame("1:IN", in_ports), tic_frame("1:OUT", out_ports)])),
    )

    write(root / "Plc" / "Meta" / "PCWE.meta.config", META_CONFIG)
    lib_dir = root / "Libs" / "MyLibrary"
    write(lib_dir / "MyLibrary.libmeta", LIBMETA)
    write(lib_dir / "MyLibrary.typemeta", TYPEMETA)
    write(lib_dir / "MyComponent" / "MyComponent.compmeta", COMPMETA)
    write(lib_dir / "MyComponent" / "MyProgram" / "MyProgram.progmeta", PROGMETA)

    write(root / "Plc" / "Esm" / "PCWE.esm.config", ESM_CONFIG)
    write(root / "Plc" / "Plm" / "PCWE.acf.config", ACF_CONFIG)
    write(root / "Plc" / "Gds" / "PCWE.gds.config", gds_document(sample_connections()))
    return root
