from __future__ import annotations

from typing import Dict, List

from datamodels import Node, Port

CATALOG_VERSION = "2018.0"


def _esm_task_ports(esm: int) -> Dict[str, str]:
    ports = {f"ESM_{esm}_TASKS_USED": "uint16"}
    ports.update({f"ESM_{esm}_TASK_{i}": "bit" for i in range(1, 17)})
    return ports


_AXLC_OUTPUTS = {
    "AXIO_DIAG_STATUS_REG_HI": "uint16",
    "AXIO_DIAG_STATUS_REG_LOW": "uint16",
    "AXIO_DIAG_PARAM_REG_HI": "uint16",
    "AXIO_DIAG_PARAM_REG_LOW": "uint16",
    "AXIO_DIAG_PARAM_2_REG_HI": "uint16",
    "AXIO_DIAG_PARAM_2_REG_LOW": "uint16",
    "AXIO_DIAG_STATUS_REG_PF": "uint16",
    "AXIO_DIAG_STATUS_REG_BUS": "uint16",
    "AXIO_DIAG_STATUS_REG_RUN": "uint16",
    "AXIO_DIAG_STATUS_REG_ACT": "uint16",
    "AXIO_DIAG_STATUS_REG_RDY": "uint16",
    "AXIO_DIAG_STATUS_REG_SYSFAIL": "uint16",
    "AXIO_DIAG_STATUS_REG_PW": "uint16",
}

_PNC_INPUTS = {"PNIO_FORCE_FAILSAFE": "bit"}
_PNC_OUTPUTS = {
    "PNIO_SYSTEM_BF": "bit",
    "PNIO_SYSTEM_SF": "bit",
    "PNIO_MAINTENANCE_DEMANDED": "bit",
    "PNIO_MAINTENANCE_REQUIRED": "bit",
    "PNIO_CONFIG_STATUS": "bit",
    "PNIO_CONFIG_STATUS_ACTIVE": "bit",
    "PNIO_CONFIG_STATUS_READY": "bit",
    "PNIO_CONFIG_STATUS_CFG_FAULT": "bit",
}

_PND_INPUTS = {"PND_S1_OUTPUTS": "uint16"}
_PND_OUTPUTS = {
    "PND_S1_PLC_RUN": "bit",
    "PND_S1_VALID_DATA_CYCLE": "bit",
    "PND_S1_OUTPUT_STATUS_GOOD": "bit",
    "PND_S1_INPUT_STATUS_GOOD": "bit",
    "PND_S1_DATA_LENGTH": "uint16",
    "PND_S1_INPUTS": "uint16",
}

_ESM_OUTPUTS = {"ESM_COUNT": "uint16", **_esm_task_ports(1), **_esm_task_ports(2)}

# Built-in objects of the PLCnext runtime. Eclr (the IEC runtime) sees every
# system signal as an input and drives the failsafe/output words.
GLOBAL_OBJECTS = {
    "Arp.Io.FbIo.AxlC/": {"name": "AxlC", "inputs": {}, "outputs": _AXLC_OUTPUTS},
    "Arp.Io.FbIo.PnC/": {"name": "PnC", "inputs": _PNC_INPUTS, "outputs": _PNC_OUTPUTS},
    "Arp.Io.FbIo.PnD/": {"name": "PnD", "inputs": _PND_INPUTS, "outputs": _PND_OUTPUTS},
    "Arp.Plc.Esm/": {"name": "Esm", "inputs": {}, "outputs": _ESM_OUTPUTS},
    "Arp.Plc.Eclr/": {
        "name": "Eclr",
        "inputs": {**_AXLC_OUTPUTS, **_PNC_OUTPUTS, **_PND_OUTPUTS, **_ESM_OUTPUTS},
        "outputs": {**_PNC_INPUTS, **_PND_INPUTS},
    },
}


def get_global_objects() -> List[Node]:
    """Global objects available on every PLCnext Technology controller."""
    nodes: List[Node] = []
    for key, obj in GLOBAL_OBJECTS.items():
        nodes.append(
            Node(
                key=key,
                name=obj["name"],
                left_array=[Port(port_id=p, type=t) for p, t in obj["inputs"].items()],
                right_array=[Port(port_id=p, type=t) for p, t in obj["outputs"].items()],
            )
        )
    return nodes
