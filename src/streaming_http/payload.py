"""
XML-RPC payloads carried by the streaming transport.

The transport treats bodies as opaque text; this module builds method
calls for requests and interprets the method responses and push
documents that come back.
"""

import logging
import xml.etree.ElementTree as ET
import xmlrpc.client
from typing import Iterable, Optional, Tuple
from xml.parsers.expat import ExpatError

logger = logging.getLogger(__name__)


def build_method_call(method: str, params: Iterable[str] = ()) -> str:
    """Build a ``methodCall`` document with string parameters."""
    return xmlrpc.client.dumps(tuple(params), methodname=method)


def parse_method_call(body: str) -> Tuple[str, Tuple]:
    """
    Parse a ``methodCall`` document.
    
    Returns:
        Tuple of (method name, parameters)
    
    Raises:
        ValueError: If the body is not a method call
    """
    try:
        params, method = xmlrpc.client.loads(body)
    except (ExpatError, xmlrpc.client.ResponseError) as e:
        raise ValueError(f"Malformed method call: {e}") from e
    if method is None:
        raise ValueError("Document has no methodName")
    return method, params


def build_method_response(value: str) -> str:
    """Build a successful ``methodResponse`` carrying one string."""
    return xmlrpc.client.dumps((value,), methodresponse=True)


def build_fault_response(code: int, message: str) -> str:
    """Build a ``methodResponse`` carrying a fault."""
    return xmlrpc.client.dumps(xmlrpc.client.Fault(code, message), methodresponse=True)


def parse_string_result(body: str) -> str:
    """
    Extract the string result of a ``methodResponse``.
    
    Returns:
        The first parameter, or ``""`` for faults and malformed bodies
    """
    try:
        params, _ = xmlrpc.client.loads(body.strip())
    except xmlrpc.client.Fault as fault:
        logger.warning(f"Method response fault {fault.faultCode}: {fault.faultString}")
        return ""
    except (ExpatError, xmlrpc.client.ResponseError) as e:
        logger.warning(f"Malformed method response: {e}")
        return ""
    
    if not params or not isinstance(params[0], str):
        return ""
    return params[0]


def parse_fault(body: str) -> Optional[Tuple[int, str]]:
    """Return ``(faultCode, faultString)`` if the body is a fault response."""
    try:
        xmlrpc.client.loads(body.strip())
    except xmlrpc.client.Fault as fault:
        return fault.faultCode, fault.faultString
    except (ExpatError, xmlrpc.client.ResponseError):
        return None
    return None


def build_push_response(item_count: int) -> str:
    """Build a ``pushResponse`` document with ``item_count`` items."""
    root = ET.Element("pushResponse")
    data = ET.SubElement(root, "data")
    for i in range(item_count):
        ET.SubElement(data, "item").text = str(i)
    return ET.tostring(root, encoding="unicode")


def count_push_items(body: str) -> int:
    """Count the ``/pushResponse/data/item`` elements; 0 if malformed."""
    try:
        root = ET.fromstring(body.strip())
    except ET.ParseError:
        return 0
    if root.tag != "pushResponse":
        return 0
    return len(root.findall("./data/item"))
