"""JMX test plan reader.

Reads JMeter JMX files into a tree of TestElements. In JMX files each
element is followed by a sibling hashTree holding its children, so the
reader pairs every element with the next hashTree at the same level.
"""

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any, Optional, Union

from jmeter_codegen.core.test_element import TestElement
from jmeter_codegen.exceptions import JMXParseException

logger = logging.getLogger(__name__)

ROOT_TAG = "jmeterTestPlan"
HASH_TREE_TAG = "hashTree"
ELEMENT_PROP_TAG = "elementProp"
COLLECTION_PROP_TAG = "collectionProp"
SCALAR_PROP_TAGS = frozenset(
    {"stringProp", "intProp", "longProp", "boolProp", "doubleProp", "floatProp"}
)


class JMXReader:
    """Read JMX files into TestElement trees.

    Example:
        >>> plan = JMXReader().read("load-test.jmx")
        >>> plan.test_class
        'TestPlan'
        >>> [child.test_class for child in plan.children]
        ['ThreadGroup']
    """

    def read(self, jmx_path: Union[str, Path]) -> TestElement:
        """Read the test plan of a JMX file.

        Args:
            jmx_path: Path to JMX file

        Returns:
            TestPlan element with its whole element tree

        Raises:
            JMXParseException: If file is missing, is not valid XML or
                is not a JMeter test plan
        """
        path = Path(jmx_path)
        if not path.exists():
            raise JMXParseException(f"JMX file not found: {jmx_path}")
        try:
            tree = ET.parse(path)
        except ET.ParseError as e:
            raise JMXParseException(f"Failed to parse JMX file: {e}") from e
        ret = self._read_root(tree.getroot())
        logger.debug("Read test plan %r from %s", ret.name, path)
        return ret

    def read_string(self, content: str) -> TestElement:
        """Read the test plan of JMX content.

        Raises:
            JMXParseException: If content is not valid XML or is not a
                JMeter test plan
        """
        try:
            root = ET.fromstring(content)
        except ET.ParseError as e:
            raise JMXParseException(f"Failed to parse JMX content: {e}") from e
        return self._read_root(root)

    def _read_root(self, root: ET.Element) -> TestElement:
        if root.tag != ROOT_TAG:
            raise JMXParseException(
                f"Invalid JMX file: root element is '{root.tag}', expected '{ROOT_TAG}'"
            )
        hash_tree = root.find(HASH_TREE_TAG)
        elements = self._read_hash_tree(hash_tree) if hash_tree is not None else []
        for element in elements:
            if element.test_class == "TestPlan":
                return element
        raise JMXParseException("Invalid JMX file: no TestPlan element found")

    def _read_hash_tree(self, hash_tree: ET.Element) -> list[TestElement]:
        ret: list[TestElement] = []
        current: Optional[TestElement] = None
        for node in hash_tree:
            if node.tag == HASH_TREE_TAG:
                if current is not None:
                    current.children.extend(self._read_hash_tree(node))
                current = None
            else:
                current = self._read_element(node)
                ret.append(current)
        return ret

    def _read_element(self, node: ET.Element) -> TestElement:
        ret = TestElement(
            test_class=node.get("testclass") or node.tag,
            name=node.get("testname", ""),
            gui_class=node.get("guiclass", ""),
            enabled=node.get("enabled", "true").strip().lower() != "false",
        )
        self._read_properties(node, ret)
        return ret

    def _read_properties(self, node: ET.Element, element: TestElement) -> None:
        for prop in node:
            name = prop.get("name")
            if name is None:
                continue
            value = self._read_value(prop)
            if value is not None:
                element.properties[name] = value

    def _read_value(self, prop: ET.Element) -> Any:
        if prop.tag in SCALAR_PROP_TAGS:
            return prop.text or ""
        if prop.tag == ELEMENT_PROP_TAG:
            ret = TestElement(
                test_class=prop.get("testclass") or prop.get("elementType", ""),
                name=prop.get("testname") or prop.get("name", ""),
                gui_class=prop.get("guiclass", ""),
                enabled=prop.get("enabled", "true").strip().lower() != "false",
            )
            self._read_properties(prop, ret)
            return ret
        if prop.tag == COLLECTION_PROP_TAG:
            return [value for value in (self._read_value(item) for item in prop) if value is not None]
        # objProp and other serialized java objects are not needed for conversion
        return None
