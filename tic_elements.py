from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import List, Optional

from datamodels import Attribute, Element


def get_elements(element_list: Optional[ET.Element]) -> List[Element]:
    """
    Extract elements and their attributes from one level of a TIC element list.

    A TIC element list looks like::

        <EL>
          <E n="IO:Frame">
            <AL><A n="FrameId"><V>1:IN</V></A></AL>
            <EL>...</EL>
          </E>
        </EL>

    Child element lists are returned as-is; walking them is up to the caller.
    """
    if element_list is None:
        return []

    elements: List[Element] = []
    for e in element_list.findall("E"):
        attributes: List[Attribute] = []
        al = e.find("AL")
        if al is not None:
            for a in al.findall("A"):
                attributes.append(Attribute(name=a.get("n", ""), value=a.findtext("V", default="")))

        elements.append(
            Element(
                name=e.get("n", ""),
                attributes=attributes,
                element_list=e.find("EL"),
            )
        )
    return elements
