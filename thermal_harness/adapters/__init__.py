"""Adapter modules for the device socket and the cloud control API."""

from .cloud import CloudDeviceApi
from .device import DeviceClient, WifiCredentialMessage

__all__ = [
    "CloudDeviceApi",
    "DeviceClient",
    "WifiCredentialMessage",
]
