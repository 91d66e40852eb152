"""
mpay24 SOAP client.

Covers the two calls the gateway needs:
- CreatePaymentToken: tokenizer for the client-side card form
- TransactionStatus: status of a merchant transaction id

Usage:
    client = Mpay24Client(merchant_id="93975", password="secret", test=True)
    tokenizer = client.token("CC")
    tokenizer.location, tokenizer.token
"""

import logging
import os
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Dict, Optional

import requests

from mpay24_gateway.core.exceptions import ProcessorError

logger = logging.getLogger(__name__)

LIVE_URL = "https://www.mpay24.com/app/bin/etpproxy_v15"
TEST_URL = "https://test.mpay24.com/app/bin/etpproxy_v15"

SOAP_ENV_NS = "http://schemas.xmlsoap.org/soap/envelope/"
ETP_NS = "https://www.mpay24.com/soap/etp/1.5/ETP.wsdl"

MPAY24_TIMEOUT = float(os.getenv("MPAY24_TIMEOUT", "30"))


@dataclass
class TokenizerResponse:
    """Result of CreatePaymentToken."""
    status: str
    return_code: str
    token: str = ""
    api_key: str = ""
    location: str = ""

    def get_location(self) -> str:
        return self.location

    def get_token(self) -> str:
        return self.token


@dataclass
class TransactionStatusResponse:
    """Result of TransactionStatus; ``parameters`` holds the name/value pairs."""
    status: str
    return_code: str
    parameters: Dict[str, str] = field(default_factory=dict)

    @property
    def transaction_status(self) -> Optional[str]:
        return self.parameters.get("STATUS")


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _find_text(element: ET.Element, name: str) -> str:
    for child in element.iter():
        if _local_name(child.tag) == name:
            return (child.text or "").strip()
    return ""


class Mpay24Client:
    """Thin SOAP client over requests."""

    def __init__(
        self,
        merchant_id: str,
        password: str,
        test: bool = False,
        timeout: float = MPAY24_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.merchant_id = str(merchant_id).strip()
        self.password = password
        self.test = test
        self.timeout = timeout
        self.http = session or requests.Session()

    @property
    def endpoint(self) -> str:
        return TEST_URL if self.test else LIVE_URL

    @property
    def username(self) -> str:
        return f"u{self.merchant_id}"

    def token(self, payment_type: str = "CC", template_set: str = "DEFAULT") -> TokenizerResponse:
        """Request a payment tokenizer (CreatePaymentToken)."""
        body = self._call(
            "CreatePaymentToken",
            {
                "merchantID": self.merchant_id,
                "pType": payment_type,
                "templateSet": template_set,
            },
        )
        response = TokenizerResponse(
            status=_find_text(body, "status"),
            return_code=_find_text(body, "returnCode"),
            token=_find_text(body, "token"),
            api_key=_find_text(body, "apiKey"),
            location=_find_text(body, "location"),
        )
        if response.status != "OK":
            raise ProcessorError(
                f"mpay24 CreatePaymentToken failed: {response.return_code}",
                return_code=response.return_code,
            )
        return response

    def transaction_status(self, tid: str) -> TransactionStatusResponse:
        """Query the status of a transaction by merchant transaction id."""
        body = self._call(
            "TransactionStatus",
            {
                "merchantID": self.merchant_id,
                "tid": tid,
            },
        )
        parameters: Dict[str, str] = {}
        for element in body.iter():
            if _local_name(element.tag) == "parameter":
                name = _find_text(element, "name")
                if name:
                    parameters[name] = _find_text(element, "value")
        response = TransactionStatusResponse(
            status=_find_text(body, "status"),
            return_code=_find_text(body, "returnCode"),
            parameters=parameters,
        )
        if response.status != "OK":
            raise ProcessorError(
                f"mpay24 TransactionStatus failed for {tid}: {response.return_code}",
                return_code=response.return_code,
            )
        return response

    def _envelope(self, operation: str, fields: Dict[str, str]) -> bytes:
        envelope = ET.Element(f"{{{SOAP_ENV_NS}}}Envelope")
        body = ET.SubElement(envelope, f"{{{SOAP_ENV_NS}}}Body")
        request = ET.SubElement(body, f"{{{ETP_NS}}}{operation}")
        for name, value in fields.items():
            ET.SubElement(request, name).text = value
        return ET.tostring(envelope, encoding="utf-8", xml_declaration=True)

    def _call(self, operation: str, fields: Dict[str, str]) -> ET.Element:
        """POST a SOAP request and return the parsed Body element."""
        logger.debug(f"mpay24 {operation} ({'test' if self.test else 'live'})")
        try:
            r = self.http.post(
                self.endpoint,
                data=self._envelope(operation, fields),
                headers={"Content-Type": "text/xml; charset=utf-8", "SOAPAction": operation},
                auth=(self.username, self.password),
                timeout=self.timeout,
            )
        except requests.Timeout:
            raise ProcessorError(f"mpay24 {operation} timed out after {self.timeout}s")
        except requests.RequestException as e:
            raise ProcessorError(f"mpay24 {operation} request failed: {e}")

        if r.status_code == 401:
            raise ProcessorError("mpay24 rejected the merchant credentials", return_code="ACCESS_DENIED")

        try:
            root = ET.fromstring(r.content)
        except ET.ParseError:
            raise ProcessorError(f"mpay24 {operation} returned an unreadable response (HTTP {r.status_code})")

        body = next((el for el in root if _local_name(el.tag) == "Body"), None)
        if body is None:
            raise ProcessorError(f"mpay24 {operation} response has no SOAP body")

        fault = next((el for el in body if _local_name(el.tag) == "Fault"), None)
        if fault is not None:
            raise ProcessorError(f"mpay24 {operation} fault: {_find_text(fault, 'faultstring')}")

        if r.status_code != 200:
            raise ProcessorError(f"mpay24 {operation} returned HTTP {r.status_code}")
        return body
