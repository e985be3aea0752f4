"""
@file network.py
@description Telco network code lookup for USSD and SMS callbacks
@module at_connect.network
@author AT-Connect Team
@created 2025-01-15
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Tuple

UNKNOWN_NETWORK_NAME = "Unknown Network"
UNKNOWN_COUNTRY = "Unknown"

# MCC+MNC code -> (telco name, country)
_NETWORKS: Mapping[str, Tuple[str, str]] = MappingProxyType({
    # Ghana
    "62006": ("AirtelTigo Ghana", "Ghana"),
    "62002": ("Vodafone Ghana", "Ghana"),
    "62001": ("MTN Ghana", "Ghana"),
    # Nigeria
    "62120": ("Airtel Nigeria", "Nigeria"),
    "62130": ("MTN Nigeria", "Nigeria"),
    "62150": ("Glo Nigeria", "Nigeria"),
    "62160": ("Etisalat Nigeria", "Nigeria"),
    # Rwanda
    "63510": ("MTN Rwanda", "Rwanda"),
    "63513": ("Tigo Rwanda", "Rwanda"),
    "63514": ("Airtel Rwanda", "Rwanda"),
    # Ethiopia
    "63601": ("EthioTelecom Ethiopia", "Ethiopia"),
    # Kenya
    "63902": ("Safaricom Kenya", "Kenya"),
    "63903": ("Airtel Kenya", "Kenya"),
    "63907": ("Orange Kenya", "Kenya"),
    "63999": ("Equitel Kenya", "Kenya"),
    # Tanzania
    "64002": ("Tigo Tanzania", "Tanzania"),
    "64004": ("Vodacom Tanzania", "Tanzania"),
    "64005": ("Airtel Tanzania", "Tanzania"),
    # Uganda
    "64101": ("Airtel Uganda", "Uganda"),
    "64110": ("MTN Uganda", "Uganda"),
    "64114": ("Africell Uganda", "Uganda"),
    # Zambia
    "64501": ("Airtel Zambia", "Zambia"),
    "64502": ("MTN Zambia", "Zambia"),
    # Malawi
    "65001": ("TNM Malawi", "Malawi"),
    "65010": ("Airtel Malawi", "Malawi"),
    # South Africa
    "65501": ("Vodacom South Africa", "South Africa"),
    "65502": ("Telkom South Africa", "South Africa"),
    "65507": ("CellC South Africa", "South Africa"),
    "65510": ("MTN South Africa", "South Africa"),
    # Sandbox simulator
    "99999": ("Athena (Sandbox)", "Sandbox"),
})


@dataclass(frozen=True)
class NetworkCode:
    """
    A telco identified by the ``networkCode`` field of a gateway callback.

    Codes missing from the table still resolve, to an unknown network that
    keeps the raw code, so new telcos never break callback handling.

    Attributes:
        code: Raw network code as sent by the gateway
        name: Telco display name
        country: Country the telco operates in

    Example:
        >>> network = NetworkCode.from_code("63902")
        >>> network.name, network.country
        ('Safaricom Kenya', 'Kenya')
        >>> NetworkCode.from_code("12345").is_known
        False
    """

    code: str
    name: str
    country: str

    @classmethod
    def from_code(cls, code: str) -> "NetworkCode":
        """Resolve a network code; unrecognized codes map to the unknown network."""
        code = (code or "").strip()
        name, country = _NETWORKS.get(code, (UNKNOWN_NETWORK_NAME, UNKNOWN_COUNTRY))
        return cls(code=code, name=name, country=country)

    @property
    def is_known(self) -> bool:
        return self.code in _NETWORKS

    def __str__(self) -> str:
        return self.name


def known_network_codes() -> Tuple[str, ...]:
    """Return every network code in the lookup table, in table order."""
    return tuple(_NETWORKS)
