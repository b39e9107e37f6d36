"""Render values, requests and responses as XML-RPC text."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Any

from loguru import logger

from boxcar.protocol import tokens
from boxcar.protocol.models import Request, Response
from boxcar.protocol.values import encode_scalar, wire_type_of
from boxcar.utils.exceptions import SerializationError

XML_DECLARATION = '<?xml version="1.0"?>'


def serialize(obj: Any, *, indent: bool = False) -> str:
    """
    Render a Request, a Response or a bare value as XML text.

    Args:
        obj: ``Request`` -> methodCall, ``Response`` -> methodResponse,
            anything else -> a single ``<value>`` fragment.
        indent: Pretty-print with 4-space indentation (for logs and str()).
    """
    if isinstance(obj, Request):
        root = request_element(obj)
    elif isinstance(obj, Response):
        root = response_element(obj)
    else:
        root = ET.Element(tokens.VALUE)
        write_value(root, obj)
    if indent:
        ET.indent(root, space="    ")
    body = ET.tostring(root, encoding="unicode")
    if root.tag == tokens.VALUE:
        return body
    joiner = "\n" if indent else ""
    return f"{XML_DECLARATION}{joiner}{body}"


def serialize_bytes(obj: Any) -> bytes:
    """Wire form of ``serialize`` as UTF-8 bytes."""
    return serialize(obj).encode("utf-8")


def request_element(request: Request) -> ET.Element:
    root = ET.Element(tokens.METHOD_CALL)
    ET.SubElement(root, tokens.METHOD_NAME).text = request.method_name
    params = ET.SubElement(root, tokens.PARAMS)
    for param in request.params:
        _param_element(params, param)
    return root


def response_element(response: Response) -> ET.Element:
    root = ET.Element(tokens.METHOD_RESPONSE)
    if response.is_fault:
        fault = ET.SubElement(root, tokens.FAULT)
        write_value(ET.SubElement(fault, tokens.VALUE), response.value)
    else:
        _param_element(ET.SubElement(root, tokens.PARAMS), response.value)
    return root


def _param_element(params: ET.Element, value: Any) -> None:
    param = ET.SubElement(params, tokens.PARAM)
    write_value(ET.SubElement(param, tokens.VALUE), value)


def write_value(value_el: ET.Element, value: Any) -> None:
    """Write the type element for ``value`` into an open ``<value>`` element."""
    if value is None:
        return
    scalar = encode_scalar(value)
    if scalar is not None:
        tag, text = scalar
        ET.SubElement(value_el, tag).text = text
        return
    kind = wire_type_of(value)
    if kind == tokens.ARRAY:
        data = ET.SubElement(ET.SubElement(value_el, tokens.ARRAY), tokens.DATA)
        for item in value:
            write_value(ET.SubElement(data, tokens.VALUE), item)
    elif kind == tokens.STRUCT:
        struct = ET.SubElement(value_el, tokens.STRUCT)
        for key, item in value.items():
            if not isinstance(key, str):
                raise SerializationError(f"struct member name must be a string, got {type(key).__name__}")
            member = ET.SubElement(struct, tokens.MEMBER)
            ET.SubElement(member, tokens.NAME).text = key
            write_value(ET.SubElement(member, tokens.VALUE), item)
    else:
        logger.debug("Skipping value of unsupported type {}", type(value).__name__)
